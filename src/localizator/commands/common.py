"""
Helpers shared by the ``scan`` and ``generate`` commands.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..config.schema import LocalizatorConfig
from ..scanning.normalizer import validate_key
from ..services.translation_service import TranslationService, translate_missing
from ..translations.generator import TranslationGenerator
from ..translations.reconciler import default_value, is_missing

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def report_key_issues(keys: Iterable[str], config: LocalizatorConfig) -> int:
    """
    Log keys that break the configured naming rules.

    Returns:
        Number of keys with issues
    """
    count = 0
    for key in sorted(keys):
        issues = validate_key(key, config.validation)
        if issues:
            count += 1
            logger.warning(f"Translation key '{key}': {'; '.join(issues)}")
    return count


def source_texts_for(
    generator: TranslationGenerator,
    keys: Iterable[str],
    source_language: str,
) -> dict[str, str]:
    """
    Texts to translate for ``keys``.

    The source locale's stored value is used when it holds a real
    translation, otherwise the generated default of the key.
    """
    source = generator.store.load(source_language)
    texts: dict[str, str] = {}
    for key in keys:
        value = source.get(key)
        texts[key] = value if value is not None and not is_missing(key, value) else default_value(key)
    return texts


def auto_translate_locale(
    service: TranslationService,
    generator: TranslationGenerator,
    locale: str,
    missing_keys: list[str],
    source_language: str,
    batch_size: int,
    rate_limit: int,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, str]:
    """
    Machine-translate the missing keys of one locale.

    The source locale itself is never translated.

    Returns:
        Key -> translated text
    """
    if locale == source_language:
        logger.warning(f"Skipping auto-translation for source language ({source_language})")
        return {}

    logger.info(f"Auto-translating {len(missing_keys)} keys from {source_language} to {locale}...")
    texts = source_texts_for(generator, missing_keys, source_language)
    return translate_missing(
        service,
        texts,
        source_language,
        locale,
        batch_size=batch_size,
        rate_limit=rate_limit,
        sleep=sleep,
    )


def log_summary(
    keys: set[str],
    locales: list[str],
    auto_translate: bool,
    dry_run: bool | None = None,
) -> None:
    """Log the end-of-run summary."""
    logger.info("Summary:")
    logger.info(f"  Total translation keys found: {len(keys)}")
    logger.info(f"  Locales processed: {', '.join(locales)}")
    logger.info(f"  Auto-translation: {'Enabled' if auto_translate else 'Disabled'}")
    if dry_run is not None:
        logger.info(f"  Mode: {'Dry run' if dry_run else 'Live'}")
