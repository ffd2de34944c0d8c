"""
Per-locale generation of translation files.

For every locale, one after the other: load the existing store, reconcile
it with the discovered keys, apply machine translations and write the
documents. A failed document write is reported and the run continues;
a directory that cannot be created aborts the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ..config.schema import LocalizatorConfig, validate_locale
from .reconciler import apply_translations, find_missing_keys, merge_existing, reconcile
from .serializer import TranslationSerializer, ensure_directory
from .store import TranslationStore
from .tree import DEFAULT_UNIT, build_units, merge_units

logger = logging.getLogger(__name__)


@dataclass
class LocalePlan:
    """What a generation run would change for one locale."""

    locale: str
    new_keys: list[str] = field(default_factory=list)
    missing_keys: list[str] = field(default_factory=list)
    pruned_keys: list[str] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Whether writing would add or remove any key."""
        return bool(self.new_keys or self.pruned_keys)


class TranslationGenerator:
    """Reconciles and writes the translation stores of all locales."""

    def __init__(self, config: LocalizatorConfig) -> None:
        """
        Initialize the generator.

        Args:
            config: Configuration used for every locale of the run
        """
        self.config: LocalizatorConfig = config
        self.store: TranslationStore = TranslationStore(config.lang_path, config.localize)
        self.serializer: TranslationSerializer = TranslationSerializer(
            config.output, sort_keys=config.sort
        )

    def build_translations(
        self,
        keys: Iterable[str],
        locale: str,
        machine_translations: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Reconciled flat mapping for one locale, without writing anything."""
        existing = self.store.load(locale)
        translations = reconcile(keys, existing, self.config.remove_missing)
        if machine_translations:
            translations = apply_translations(translations, machine_translations)
        return translations

    def generate_translation_files(
        self,
        keys: Iterable[str],
        locales: Iterable[str],
        machine_translations: Mapping[str, Mapping[str, str]] | None = None,
    ) -> bool:
        """
        Generate the translation files of every locale.

        Args:
            keys: Keys discovered in the code
            locales: Locales to generate, processed in order
            machine_translations: Optional locale -> key -> translated text

        Returns:
            True when every document was written

        Raises:
            OutputDirectoryError: If a destination directory cannot be created
        """
        key_set = set(keys)
        ensure_directory(self.config.lang_path)

        success = True
        for locale in locales:
            _ = validate_locale(locale)
            translations = self.build_translations(
                key_set, locale, (machine_translations or {}).get(locale)
            )

            if self.config.uses_single_document:
                written = self.generate_json_translation_file(locale, translations)
            else:
                written = self.generate_php_translation_files(locale, translations)

            if not written:
                logger.error(f"Failed to write some translation files for '{locale}'")
            success = success and written

        return success

    def generate_json_translation_file(
        self, locale: str, translations: Mapping[str, str]
    ) -> bool:
        """Write the single JSON document of a locale."""
        file_path = self.store.json_path(locale)
        written = self.serializer.write_json(
            file_path, translations, force_backup=self.keeps_unreadable_copy(file_path)
        )
        if written:
            logger.info(f"Wrote {len(translations)} translations to {file_path}")
        return written

    def generate_php_translation_files(
        self, locale: str, translations: Mapping[str, str]
    ) -> bool:
        """Write one PHP document per unit of a locale."""
        locale_dir = self.store.locale_dir(locale)
        ensure_directory(locale_dir)

        units = merge_units(build_units(translations, self.config.nested, DEFAULT_UNIT))
        success = True
        for unit in units:
            file_path = self.store.unit_path(locale, unit.name)
            written = self.serializer.write_unit(
                file_path, unit, locale, force_backup=self.keeps_unreadable_copy(file_path)
            )
            success = success and written

        logger.info(f"Wrote {len(units)} translation files to {locale_dir}")
        return success

    def keeps_unreadable_copy(self, file_path: Path) -> bool:
        """Whether ``file_path`` existed but could not be read, so it must be backed up."""
        if file_path not in self.store.unreadable:
            return False
        logger.warning(f"Backing up unreadable translation file {file_path} before rewriting it")
        return True

    def merge_existing_translations(self, locale: str, keys: Iterable[str]) -> dict[str, str]:
        """Existing translations merged with ``keys``; new keys are left empty."""
        return merge_existing(keys, self.store.load(locale), self.config.remove_missing)

    def find_missing_translations(self, locale: str, keys: Iterable[str]) -> list[str]:
        """Keys of ``locale`` that have no real translation yet."""
        key_set = set(keys)
        return find_missing_keys(key_set, self.merge_existing_translations(locale, key_set))

    def plan(self, keys: Iterable[str], locale: str) -> LocalePlan:
        """
        Describe what generating ``locale`` would change, without writing.

        Args:
            keys: Keys discovered in the code
            locale: Locale to inspect

        Returns:
            LocalePlan listing new, missing and pruned keys and target files
        """
        key_set = set(keys)
        existing = self.store.load(locale)
        translations = reconcile(key_set, existing, self.config.remove_missing)

        plan = LocalePlan(locale=locale)
        plan.new_keys = sorted(key_set - existing.keys())
        plan.missing_keys = find_missing_keys(key_set, merge_existing(key_set, existing))
        plan.pruned_keys = sorted(existing.keys() - translations.keys())

        if self.config.uses_single_document:
            plan.files = [self.store.json_path(locale)]
        else:
            units = merge_units(build_units(translations, self.config.nested, DEFAULT_UNIT))
            plan.files = [self.store.unit_path(locale, unit.name) for unit in units]
        return plan
