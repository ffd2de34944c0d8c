"""
Loading existing translations from disk.

Two layouts are supported under the language root:

* nested files: ``<lang_path>/<locale>/<unit>.php``, one PHP array per unit;
* single document: ``<lang_path>/<locale>.json`` holding the whole locale.

Either way the result is a flat key -> value mapping. Missing or broken
files never abort a run; they simply contribute no data. Documents that
exist but cannot be read are remembered in ``unreadable`` so that a later
rewrite can keep a copy of them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..config.schema import NESTED_FILES, StoreFormat, validate_locale
from ..utils.exceptions import PersistedDocumentError
from .php_literal import parse_php_array
from .tree import flatten_tree, tree_from_plain

logger = logging.getLogger(__name__)

PHP_SUFFIX = ".php"
JSON_SUFFIX = ".json"


class TranslationStore:
    """Locates and reads the persisted translations of each locale."""

    def __init__(self, lang_path: Path, localize: StoreFormat = NESTED_FILES) -> None:
        """
        Initialize the store.

        Args:
            lang_path: Root directory holding all locales
            localize: Persisted format of the store
        """
        self.lang_path: Path = lang_path
        self.localize: StoreFormat = localize
        self.unreadable: set[Path] = set()

    def locale_dir(self, locale: str) -> Path:
        """Directory holding the unit documents of a locale."""
        return self.lang_path / validate_locale(locale)

    def json_path(self, locale: str) -> Path:
        """Path of the single JSON document of a locale."""
        return self.lang_path / f"{validate_locale(locale)}{JSON_SUFFIX}"

    def unit_path(self, locale: str, unit_name: str) -> Path:
        """Path of one unit document of a locale."""
        return self.locale_dir(locale) / f"{unit_name}{PHP_SUFFIX}"

    def load(self, locale: str) -> dict[str, str]:
        """
        Load the existing translations of a locale as a flat mapping.

        Args:
            locale: Locale identifier

        Returns:
            Flat key -> value mapping (empty when nothing usable exists)
        """
        if self.localize == NESTED_FILES:
            return self.load_nested_files(locale)
        return self.load_single_document(locale)

    def load_single_document(self, locale: str) -> dict[str, str]:
        """Read ``<locale>.json``; anything unreadable counts as no prior data."""
        file_path = self.json_path(locale)
        if not file_path.is_file():
            return {}

        try:
            decoded: object = json.loads(file_path.read_text(encoding="utf-8"))  # pyright: ignore[reportAny]
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable translation file {file_path}: {e}")
            self.unreadable.add(file_path)
            return {}

        if not isinstance(decoded, dict):
            logger.warning(
                f"Ignoring {file_path}: expected a JSON object, got {type(decoded).__name__}"
            )
            self.unreadable.add(file_path)
            return {}

        translations = flatten_tree(tree_from_plain(decoded))  # pyright: ignore[reportUnknownArgumentType]
        logger.debug(f"Loaded {len(translations)} translations from {file_path}")
        return translations

    def load_nested_files(self, locale: str) -> dict[str, str]:
        """Read every ``<unit>.php`` of the locale directory and flatten them."""
        locale_dir = self.locale_dir(locale)
        if not locale_dir.is_dir():
            return {}

        translations: dict[str, str] = {}
        for file_path in sorted(locale_dir.glob(f"*{PHP_SUFFIX}")):
            if not file_path.is_file():
                continue
            unit_name = file_path.name[: -len(PHP_SUFFIX)]
            try:
                data = parse_php_array(file_path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, PersistedDocumentError) as e:
                logger.warning(f"Ignoring unreadable translation file {file_path}: {e}")
                self.unreadable.add(file_path)
                continue
            translations.update(flatten_tree(tree_from_plain(data), unit_name))

        logger.debug(f"Loaded {len(translations)} translations from {locale_dir}")
        return translations
