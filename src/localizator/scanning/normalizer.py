"""
Cleaning and validation of raw translation key literals.

The extractor hands every quoted literal it finds to ``normalize_key``.
Literals that look dynamic (variables or interpolation inside the quotes)
are rejected quietly; they are not errors.
"""

from __future__ import annotations

import re

from ..config.schema import ValidationRulesConfig

_ESCAPE_PATTERN = re.compile(r"\\(.?)", re.DOTALL)

VARIABLE_SIGILS = ("$",)
INTERPOLATION_MARKERS = ("{{", "{$", "${")


def unescape(raw: str) -> str:
    """
    Remove backslash escapes from a literal.

    ``\\x`` becomes ``x`` for any character, so ``\\\\`` yields one
    backslash and ``\\'`` a quote. A trailing lone backslash is dropped.
    """
    return _ESCAPE_PATTERN.sub(r"\1", raw)


def is_dynamic(key: str) -> bool:
    """Whether a key looks like a variable or contains interpolation."""
    if key.startswith(VARIABLE_SIGILS):
        return True
    return any(marker in key for marker in INTERPOLATION_MARKERS)


def normalize_key(raw: str) -> str | None:
    """
    Clean a raw matched literal into a translation key.

    Args:
        raw: Literal content between the quotes, escapes still in place

    Returns:
        The cleaned key, or None when the literal is empty or dynamic
    """
    key = unescape(raw).strip()
    if not key or is_dynamic(key):
        return None
    return key


def validate_key(key: str, rules: ValidationRulesConfig) -> list[str]:
    """
    Check a key against the configured naming rules.

    This never rejects a key; the issues are meant to be reported.

    Args:
        key: Translation key to check
        rules: Validation rules from the configuration

    Returns:
        List of human-readable issues (empty when the key is fine)
    """
    issues: list[str] = []
    if len(key) > rules.max_key_length:
        issues.append(
            f"key is {len(key)} characters long (maximum {rules.max_key_length})"
        )
    if not re.match(rules.key_pattern, key):
        issues.append(f"key does not match pattern {rules.key_pattern}")
    return issues
