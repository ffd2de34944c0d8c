"""
Translation key extraction from raw source text.

This module finds calls to translation functions, directives, static
methods and template helpers by lexical pattern matching. It is not a
parser: commented-out regions are deleted textually before matching and
only quoted literal first arguments are collected.

Usage Examples:
    Extract keys from a Blade template:
        >>> from localizator.scanning.extractor import build_patterns, extract_keys
        >>> patterns = build_patterns(["__", "@lang"])
        >>> sorted(extract_keys("{{ __('auth.failed') }} @lang('nav.home')", patterns))
        ['auth.failed', 'nav.home']

Known limitation:
    Comment stripping does not know about string literals. A literal that
    contains ``//``, ``/*`` or ``<!--`` is cut at that point, which can hide
    or truncate a key on the same line.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .normalizer import normalize_key

logger = logging.getLogger(__name__)

# Applied in this order, each one independently on the previous result
COMMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"/\*.*?\*/", re.DOTALL),  # block comments
    re.compile(r"//[^\n]*"),  # line comments
    re.compile(r"\{\{--.*?--\}\}", re.DOTALL),  # directive comments
    re.compile(r"<!--.*?-->", re.DOTALL),  # markup comments
)

# Quoted literal with backslash escapes; the other quote may appear unescaped
_LITERAL = r"""(?P<quote>["'])(?P<key>(?:\\.|(?!(?P=quote))[^\\])*)(?P=quote)"""


class PatternFamily(Enum):
    """Syntactic conventions a translation helper can be called with."""

    FUNCTION = "function"  # __('key'), trans('key')
    DIRECTIVE = "directive"  # @lang('key')
    STATIC_METHOD = "static_method"  # Lang::get('key')
    TEMPLATE_VARIABLE = "template_variable"  # $t('key'), {{ $t('key') }}


def classify(name: str) -> PatternFamily:
    """Derive the pattern family from a configured helper name."""
    if name.startswith("@"):
        return PatternFamily.DIRECTIVE
    if "::" in name:
        return PatternFamily.STATIC_METHOD
    if name.startswith("$"):
        return PatternFamily.TEMPLATE_VARIABLE
    return PatternFamily.FUNCTION


@dataclass(frozen=True)
class InvocationPattern:
    """A configured translation helper and the regexes that find its calls."""

    name: str
    family: PatternFamily
    regexes: tuple[re.Pattern[str], ...] = field(compare=False, repr=False)

    @classmethod
    def from_name(cls, name: str) -> InvocationPattern:
        """
        Build the pattern for one helper name.

        Args:
            name: Helper name as configured, e.g. ``__``, ``@lang``, ``Lang::get``

        Returns:
            InvocationPattern with compiled regexes
        """
        family = classify(name)
        escaped = re.escape(name)
        # Stop 'trans' from matching inside 'untrans(' or '$trans('
        boundary = r"(?<![\w$])" if re.match(r"\w", name) else ""

        regexes = [
            re.compile(rf"{boundary}{escaped}\s*\(\s*{_LITERAL}", re.DOTALL),
        ]
        if family is PatternFamily.TEMPLATE_VARIABLE:
            regexes.append(
                re.compile(
                    rf"\{{\{{\s*{escaped}\s*\(\s*{_LITERAL}\s*(?:,.*?)?\s*\)\s*\}}\}}",
                    re.DOTALL,
                )
            )
        return cls(name=name, family=family, regexes=tuple(regexes))

    def find_raw(self, text: str) -> list[str]:
        """Return every raw literal matched by this pattern, escapes intact."""
        raw: list[str] = []
        for regex in self.regexes:
            raw.extend(match.group("key") for match in regex.finditer(text))
        return raw


def build_patterns(names: Iterable[str]) -> list[InvocationPattern]:
    """Compile one ``InvocationPattern`` per configured helper name."""
    return [InvocationPattern.from_name(name) for name in names if name]


def strip_comments(text: str) -> str:
    """
    Delete commented-out regions from source text.

    Block, line, directive (``{{-- --}}``) and markup (``<!-- -->``)
    comments are removed one convention after the other.
    """
    for pattern in COMMENT_PATTERNS:
        text = pattern.sub("", text)
    return text


def extract_keys(text: str, patterns: Iterable[InvocationPattern]) -> set[str]:
    """
    Extract the translation keys referenced in a piece of source text.

    Args:
        text: Raw file content
        patterns: Compiled invocation patterns

    Returns:
        Set of normalized keys; dynamic or empty literals are left out
    """
    content = strip_comments(text)
    keys: set[str] = set()

    for pattern in patterns:
        for raw in pattern.find_raw(content):
            key = normalize_key(raw)
            if key is not None:
                keys.add(key)

    return keys


def extract_keys_from_file(
    filepath: Path, patterns: Iterable[InvocationPattern]
) -> set[str]:
    """
    Extract translation keys from a single file.

    A file that is missing or cannot be decoded contributes nothing.

    Args:
        filepath: Path to the file to process
        patterns: Compiled invocation patterns

    Returns:
        Set of keys found in the file
    """
    try:
        content = filepath.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning(f"File not found: {filepath}")
        return set()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping {filepath} due to error: {e}")
        return set()

    keys = extract_keys(content, patterns)
    logger.debug(f"Extracted {len(keys)} keys from {filepath}")
    return keys
