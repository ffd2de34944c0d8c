"""
Reading and writing PHP translation documents as data.

Laravel style translation files look like::

    <?php

    return [
        'login' => [
            'title' => 'Log in',
        ],
    ];

``parse_php_array`` reads the returned array literal without executing
anything. Only literal syntax is understood: short and long array syntax,
single and double quoted strings, ``.`` concatenation of literals, numbers,
``true``/``false``/``null`` and comments. Anything else raises
``PersistedDocumentError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from ..utils.exceptions import PersistedDocumentError
from .tree import Branch, Leaf

TokenKind = Literal["string", "number", "word", "punct", "end"]

GENERATOR_MARKER = "Generated by Localizator"

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<open_tag><\?php|<\?=|<\?)
    |(?P<close_tag>\?>)
    |(?P<block_comment>/\*.*?\*/)
    |(?P<line_comment>(?://|\#)[^\n]*)
    |(?P<single>'(?:\\.|[^'\\])*')
    |(?P<double>"(?:\\.|[^"\\])*")
    |(?P<number>-?(?:0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?))
    |(?P<word>[A-Za-z_\\][A-Za-z0-9_\\]*)
    |(?P<punct>=>|::|[\[\](),;=.])
    """,
    re.VERBOSE | re.DOTALL,
)

_DOUBLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}

_DOUBLE_ESCAPE_PATTERN = re.compile(
    r"\\(?:(?P<octal>[0-7]{1,3})|x(?P<hex>[0-9a-fA-F]{1,2})|u\{(?P<unicode>[0-9a-fA-F]+)\}|(?P<char>.))",
    re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    """A lexical token of a PHP document."""

    kind: TokenKind
    text: str
    position: int


def _unquote_single(body: str) -> str:
    """Decode a single-quoted PHP string body: only \\' and \\\\ are escapes."""
    return re.sub(r"\\([\\'])", r"\1", body)


def _unquote_double(body: str) -> str:
    """Decode a double-quoted PHP string body. Variables stay as literal text."""

    def replace(match: re.Match[str]) -> str:
        if match.group("octal") is not None:
            return chr(int(match.group("octal"), 8) & 0xFF)
        if match.group("hex") is not None:
            return chr(int(match.group("hex"), 16))
        if match.group("unicode") is not None:
            return chr(int(match.group("unicode"), 16))
        char = match.group("char")
        return _DOUBLE_ESCAPES.get(char, "\\" + char)

    return _DOUBLE_ESCAPE_PATTERN.sub(replace, body)


def tokenize(source: str) -> list[Token]:
    """
    Split a PHP document into tokens, dropping whitespace and comments.

    Raises:
        PersistedDocumentError: On a character that starts no known token
    """
    tokens: list[Token] = []
    position = 0
    while position < len(source):
        match = _TOKEN_PATTERN.match(source, position)
        if match is None:
            raise PersistedDocumentError(
                f"Unexpected character {source[position]!r} at offset {position}",
                context={"offset": position},
            )
        kind = match.lastgroup
        text = match.group()
        if kind == "single":
            tokens.append(Token("string", _unquote_single(text[1:-1]), position))
        elif kind == "double":
            tokens.append(Token("string", _unquote_double(text[1:-1]), position))
        elif kind == "number":
            tokens.append(Token("number", text, position))
        elif kind == "word":
            tokens.append(Token("word", text, position))
        elif kind == "punct":
            tokens.append(Token("punct", text, position))
        position = match.end()
    tokens.append(Token("end", "", position))
    return tokens


class _Parser:
    """Recursive descent over the token list of one document."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.index: int = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "end":
            self.index += 1
        return token

    def error(self, message: str) -> PersistedDocumentError:
        token = self.current
        found = token.text or "end of document"
        return PersistedDocumentError(
            f"{message} (found {found!r} at offset {token.position})",
            context={"offset": token.position},
        )

    def expect(self, text: str) -> None:
        if self.current.kind != "punct" or self.current.text != text:
            raise self.error(f"Expected {text!r}")
        _ = self.advance()

    def accept(self, text: str) -> bool:
        if self.current.kind == "punct" and self.current.text == text:
            _ = self.advance()
            return True
        return False

    def parse_document(self) -> dict[str, object]:
        # Skip leading statements such as declare(strict_types=1); up to 'return'
        depth = 0
        while not (depth == 0 and self.current.kind == "word" and self.current.text.lower() == "return"):
            token = self.advance()
            if token.kind == "end":
                raise self.error("Document does not return an array")
            if token.kind == "punct" and token.text in "([":
                depth += 1
            elif token.kind == "punct" and token.text in ")]":
                depth -= 1
        _ = self.advance()

        value = self.parse_value()
        if not isinstance(value, dict):
            raise self.error("Document must return an array")
        _ = self.accept(";")
        if self.current.kind != "end":
            raise self.error("Unexpected content after the returned array")
        return value  # pyright: ignore[reportUnknownVariableType]

    def parse_value(self) -> object:
        value = self.parse_atom()
        while self.accept("."):
            right = self.parse_atom()
            if isinstance(value, dict) or isinstance(right, dict):
                raise self.error("Cannot concatenate arrays")
            value = f"{_scalar_text(value)}{_scalar_text(right)}"
        return value

    def parse_atom(self) -> object:
        token = self.current
        if token.kind == "string":
            _ = self.advance()
            return token.text
        if token.kind == "number":
            _ = self.advance()
            return _parse_number(token.text)
        if token.kind == "punct" and token.text == "[":
            _ = self.advance()
            return self.parse_elements("]")
        if token.kind == "word":
            word = token.text.lower()
            if word == "array":
                _ = self.advance()
                self.expect("(")
                return self.parse_elements(")")
            if word in ("true", "false"):
                _ = self.advance()
                return word == "true"
            if word == "null":
                _ = self.advance()
                return None
        raise self.error("Expected a literal value")

    def parse_elements(self, closing: str) -> dict[str, object]:
        elements: dict[str, object] = {}
        next_index = 0
        while not self.accept(closing):
            first = self.parse_value()
            if self.accept("=>"):
                if isinstance(first, dict) or first is None:
                    raise self.error("Array keys must be strings or numbers")
                key = _array_key(first)
                value = self.parse_value()
            else:
                key = str(next_index)
                value = first
            elements[key] = value
            if key.lstrip("-").isdigit():
                next_index = max(next_index, int(key) + 1)
            if not self.accept(","):
                self.expect(closing)
                break
        return elements


def _parse_number(text: str) -> int | float:
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    if digits.lower().startswith("0x"):
        number: int | float = int(digits, 16)
    elif any(c in digits for c in ".eE"):
        number = float(digits)
    else:
        number = int(digits)
    return -number if negative else number


def _scalar_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _array_key(value: object) -> str:
    """PHP casts bools and floats used as array keys to integers."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return str(int(value))
    return str(value)


def parse_php_array(source: str) -> dict[str, object]:
    """
    Parse the array returned by a PHP translation document.

    Args:
        source: Full text of the ``.php`` document

    Returns:
        Nested dictionaries with string keys

    Raises:
        PersistedDocumentError: If the document is not a literal array return
    """
    return _Parser(tokenize(source)).parse_document()


def escape_php_string(value: str) -> str:
    """Escape a value for a single-quoted PHP string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def render_php_array(tree: Branch, indent: int = 4, level: int = 1) -> str:
    """
    Render the entries of a tree as PHP array lines.

    Args:
        tree: Tree whose children become the array entries
        indent: Spaces per indentation level
        level: Current nesting level

    Returns:
        Array body lines, each terminated by a newline
    """
    pad = " " * (indent * level)
    lines: list[str] = []
    for segment, child in tree.children.items():
        key = escape_php_string(segment)
        if isinstance(child, Leaf):
            lines.append(f"{pad}'{key}' => '{escape_php_string(child.value)}',\n")
        else:
            lines.append(f"{pad}'{key}' => [\n")
            lines.append(render_php_array(child, indent, level + 1))
            lines.append(f"{pad}],\n")
    return "".join(lines)


def render_php_document(
    tree: Branch,
    unit_name: str,
    locale: str,
    indent: int = 4,
    comments: bool = True,
) -> str:
    """
    Render a complete PHP translation document.

    Args:
        tree: Entries of the unit
        unit_name: Name of the unit (file name without extension)
        locale: Locale of the document
        indent: Spaces per indentation level
        comments: Whether to include the header comment block

    Returns:
        Document text
    """
    content = "<?php\n\n"
    if comments:
        content += "/**\n"
        content += f" * Translation file: {unit_name}\n"
        content += f" * Locale: {locale}\n"
        content += f" * {GENERATOR_MARKER}\n"
        content += " */\n\n"
    content += "return [\n"
    content += render_php_array(tree, indent, 1)
    content += "];\n"
    return content
