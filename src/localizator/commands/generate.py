"""
The ``generate`` command: non-interactive generation.

Always writes. Keys are sorted, nothing is pruned, machine translations
are applied without review and existing files are backed up unless
``--force`` is given.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import NamedTuple

from ..config.manager import ConfigManager
from ..config.schema import LocalizatorConfig, validate_locale
from ..scanning.file_scanner import FileScanner
from ..services.translation_service import AITranslationService, TranslationService
from ..translations.generator import TranslationGenerator
from .common import EXIT_FAILURE, EXIT_SUCCESS, auto_translate_locale, log_summary

logger = logging.getLogger(__name__)


class GenerateArgs(NamedTuple):
    """Type-safe container for ``generate`` arguments."""

    locales: list[str]
    auto_translate: bool = False
    source_lang: str | None = None
    provider: str | None = None
    batch_size: int | None = None
    force: bool = False
    silent: bool = False


def apply_generate_overrides(
    config: LocalizatorConfig, args: GenerateArgs
) -> LocalizatorConfig:
    """
    Build the configuration of an automatic run.

    Raises:
        ConfigurationError: On an invalid override
    """
    ai: dict[str, object] = {
        "auto_translate": args.auto_translate or config.ai.auto_translate,
        "review_required": False,
    }
    if args.provider:
        ai["provider"] = args.provider
    if args.batch_size:
        ai["batch_size"] = args.batch_size

    overrides: dict[str, object] = {
        "remove_missing": False,
        "sort": True,
        "ai": ai,
    }
    if args.source_lang:
        overrides["source_language"] = args.source_lang
    if not args.force:
        overrides["output"] = {"backup": True}

    return ConfigManager.with_overrides(config, overrides)


def run_generate(
    config: LocalizatorConfig,
    args: GenerateArgs,
    service: TranslationService | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run the ``generate`` command.

    Args:
        config: Loaded configuration
        args: Parsed command-line arguments
        service: Translation backend (created from config when needed)
        sleep: Function used for rate-limit pauses

    Returns:
        Exit code (0 for success, 1 for error)

    Raises:
        ConfigurationError: On an invalid locale or override
        OutputDirectoryError: If a translation directory cannot be created
    """
    logger.info("Starting automatic translation generation...")
    config = apply_generate_overrides(config, args)

    locales = list(args.locales) or list(config.locales)
    if not locales:
        logger.error("No locales specified and no default locales configured.")
        return EXIT_FAILURE
    for locale in locales:
        _ = validate_locale(locale)

    logger.info("Scanning directories for translation functions...")
    keys = FileScanner(config).scan_directories(config.dirs)
    logger.info(f"Found {len(keys)} translation keys")

    if not keys:
        logger.warning("No translation keys found. Make sure your functions are configured correctly.")
        return EXIT_SUCCESS

    generator = TranslationGenerator(config)
    auto_translate = config.ai.auto_translate
    owns_service = service is None and auto_translate
    if owns_service:
        service = AITranslationService(config.ai, config.validation)

    machine_translations: dict[str, dict[str, str]] = {}
    try:
        for locale in locales:
            logger.info(f"Processing locale: {locale}")
            missing = generator.find_missing_translations(locale, keys)
            if not missing:
                logger.info(f"  All translations exist for {locale}")
                continue

            logger.info(f"  Found {len(missing)} missing translations for {locale}")
            if auto_translate and service is not None:
                machine_translations[locale] = auto_translate_locale(
                    service,
                    generator,
                    locale,
                    missing,
                    config.source_language,
                    config.ai.batch_size,
                    config.ai.rate_limit,
                    sleep,
                )
    finally:
        if owns_service and isinstance(service, AITranslationService):
            service.close()

    logger.info("Generating translation files...")
    if not generator.generate_translation_files(keys, locales, machine_translations):
        logger.error("Failed to generate some translation files")
        return EXIT_FAILURE

    logger.info("Translation files generated successfully!")
    log_summary(keys, locales, auto_translate)
    return EXIT_SUCCESS
