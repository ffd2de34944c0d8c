"""
Merging discovered keys into existing translations.

Existing values are never overwritten: new keys get a readable default
derived from the key, and pruning only ever removes keys that are no
longer found in the code.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from .tree import DELIMITER

_WORD_START = re.compile(r"(^|\s)(\S)")


def default_value(key: str) -> str:
    """
    Generate a human-readable default value for a key.

    The last segment of the key has ``_`` and ``-`` replaced by spaces and
    the first letter of every word upper-cased, e.g.
    ``auth.forgot-password`` -> ``Forgot Password``.
    """
    last = key.split(DELIMITER)[-1]
    words = last.replace("_", " ").replace("-", " ")
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), words)


def reconcile(
    discovered: Iterable[str],
    existing: Mapping[str, str],
    prune_missing: bool = False,
) -> dict[str, str]:
    """
    Merge discovered keys into the existing translations of a locale.

    Args:
        discovered: Keys found in the code
        existing: Current flat translations
        prune_missing: Drop stored keys that were not discovered

    Returns:
        New flat mapping; existing values are kept as they are
    """
    discovered_keys = set(discovered)
    translations = dict(existing)

    for key in sorted(discovered_keys):
        if key not in translations:
            translations[key] = default_value(key)

    if prune_missing:
        translations = {k: v for k, v in translations.items() if k in discovered_keys}
    return translations


def merge_existing(
    discovered: Iterable[str],
    existing: Mapping[str, str],
    prune_missing: bool = False,
) -> dict[str, str]:
    """
    Merge like ``reconcile`` but leave new keys empty instead of inventing values.

    Used to find out which keys still need a translation.
    """
    discovered_keys = set(discovered)
    translations = dict(existing)

    for key in sorted(discovered_keys):
        if key not in translations:
            translations[key] = ""

    if prune_missing:
        translations = {k: v for k, v in translations.items() if k in discovered_keys}
    return translations


def is_missing(key: str, value: str | None) -> bool:
    """A key is missing when it has no value, an empty one, or the key itself."""
    return not value or value == key


def find_missing_keys(discovered: Iterable[str], translations: Mapping[str, str]) -> list[str]:
    """Return the discovered keys without a real translation, sorted."""
    return sorted(key for key in set(discovered) if is_missing(key, translations.get(key)))


def apply_translations(
    translations: Mapping[str, str],
    machine_translations: Mapping[str, str],
) -> dict[str, str]:
    """
    Fill machine translations into keys that have no real value yet.

    A key is filled only when its current value is missing or still the
    generated default, so manual edits always win.

    Args:
        translations: Reconciled flat mapping
        machine_translations: Key -> translated text

    Returns:
        New flat mapping
    """
    result = dict(translations)
    for key, text in machine_translations.items():
        if not text:
            continue
        current = result.get(key)
        if key in result and (is_missing(key, current) or current == default_value(key)):
            result[key] = text
    return result
