"""
The ``scan`` command: interactive scan, report and generation.

Scans the configured directories, reports missing translations per locale,
optionally machine-translates and reviews them, and writes the translation
files unless ``--dry-run`` is given.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import NamedTuple

from ..config.manager import ConfigManager
from ..config.schema import LocalizatorConfig, resolve_format, validate_locale
from ..scanning.file_scanner import FileScanner
from ..services.translation_service import (
    SUPPORTED_LANGUAGES,
    AITranslationService,
    TranslationService,
)
from ..translations.generator import TranslationGenerator
from .common import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    auto_translate_locale,
    log_summary,
    report_key_issues,
)

logger = logging.getLogger(__name__)


class ScanArgs(NamedTuple):
    """Type-safe container for ``scan`` arguments."""

    locales: list[str]
    remove_missing: bool = False
    sort: bool = False
    auto_translate: bool = False
    review: bool = False
    source_lang: str | None = None
    provider: str | None = None
    batch_size: int | None = None
    format: str | None = None
    dry_run: bool = False
    backup: bool = False
    verbose: bool = False


def apply_scan_overrides(config: LocalizatorConfig, args: ScanArgs) -> LocalizatorConfig:
    """
    Build the configuration of this run from the command-line flags.

    Flags can only switch options on; the configuration file decides otherwise.

    Raises:
        ConfigurationError: On an invalid format selector or override
    """
    ai: dict[str, object] = {
        "auto_translate": args.auto_translate or config.ai.auto_translate,
        "review_required": args.review or config.ai.review_required,
    }
    if args.provider:
        ai["provider"] = args.provider
    if args.batch_size:
        ai["batch_size"] = args.batch_size

    overrides: dict[str, object] = {
        "remove_missing": args.remove_missing or config.remove_missing,
        "sort": args.sort or config.sort,
        "ai": ai,
    }
    if args.source_lang:
        overrides["source_language"] = args.source_lang
    if args.format:
        overrides["localize"] = resolve_format(args.format)
        logger.info(f"Using {args.format} format")
    if args.backup:
        overrides["output"] = {"backup": True}
        logger.info("Backup mode enabled")

    return ConfigManager.with_overrides(config, overrides)


def ask_for_locales(
    service: TranslationService | None, prompt: Callable[[str], str]
) -> list[str]:
    """
    Ask the user which locales to generate.

    Accepts codes separated by commas or spaces, and ``en - English`` entries.
    """
    languages = service.get_supported_languages() if service else dict(SUPPORTED_LANGUAGES)
    logger.info("Supported languages:")
    for code, name in languages.items():
        logger.info(f"  {code} - {name}")

    answer = prompt("Select locales (comma-separated for multiple): ")
    locales: list[str] = []
    for entry in answer.split(","):
        for code in entry.split(" - ")[0].split():
            if code not in locales:
                locales.append(code)
    return locales


def review_translations(
    translations: dict[str, str], locale: str, prompt: Callable[[str], str]
) -> dict[str, str]:
    """
    Let the user accept, replace or drop every machine translation.

    Returns:
        The reviewed translations
    """
    logger.info(f"Reviewing translations for {locale}:")
    reviewed: dict[str, str] = {}
    for key, translation in translations.items():
        answer = prompt(f"  {key}: {translation!r} - accept? [Y/n] ").strip().lower()
        if answer in ("", "y", "yes"):
            reviewed[key] = translation
            continue
        custom = prompt("  Enter your translation (or press Enter to skip): ").strip()
        if custom:
            reviewed[key] = custom
    return reviewed


def run_scan(
    config: LocalizatorConfig,
    args: ScanArgs,
    service: TranslationService | None = None,
    prompt: Callable[[str], str] = input,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run the ``scan`` command.

    Args:
        config: Loaded configuration
        args: Parsed command-line arguments
        service: Translation backend (created from config when needed)
        prompt: Function used for interactive questions
        sleep: Function used for rate-limit pauses

    Returns:
        Exit code (0 for success, 1 for error)

    Raises:
        ConfigurationError: On an invalid format selector, locale or override
        OutputDirectoryError: If a translation directory cannot be created
    """
    logger.info("Starting Localizator scan...")
    config = apply_scan_overrides(config, args)

    locales = list(args.locales) or ask_for_locales(service, prompt)
    if not locales:
        logger.error("No locales specified. Please provide at least one locale.")
        return EXIT_FAILURE
    for locale in locales:
        _ = validate_locale(locale)

    logger.info("Scanning directories for translation functions...")
    keys = FileScanner(config).scan_directories(config.dirs)
    logger.info(f"Found {len(keys)} translation keys")

    if args.verbose:
        for key in sorted(keys):
            logger.info(f"  {key}")
    _ = report_key_issues(keys, config)

    if not keys:
        logger.warning("No translation keys found. Make sure your functions are configured correctly.")
        return EXIT_SUCCESS

    generator = TranslationGenerator(config)
    auto_translate = config.ai.auto_translate
    owns_service = service is None and auto_translate and not args.dry_run
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
            if not auto_translate:
                if args.verbose:
                    logger.info("  Missing translation keys:")
                    for key in missing:
                        logger.info(f"    - {key}")
                continue

            if args.dry_run or service is None:
                logger.info(f"  Would auto-translate {len(missing)} keys for {locale}")
                continue

            translated = auto_translate_locale(
                service,
                generator,
                locale,
                missing,
                config.source_language,
                config.ai.batch_size,
                config.ai.rate_limit,
                sleep,
            )
            if config.ai.review_required and translated:
                translated = review_translations(translated, locale, prompt)
            if args.verbose:
                for key, text in translated.items():
                    logger.info(f"    {key} ({locale}): {text}")
            machine_translations[locale] = translated
    finally:
        if owns_service and isinstance(service, AITranslationService):
            service.close()

    if args.dry_run:
        for locale in locales:
            plan = generator.plan(keys, locale)
            logger.info(
                f"Would write {len(plan.files)} files for {locale}: "
                f"{len(plan.new_keys)} new, {len(plan.pruned_keys)} removed"
            )
            for file_path in plan.files:
                logger.info(f"  {file_path}")
        logger.info("Dry run completed. No files were modified.")
    else:
        logger.info("Generating translation files...")
        if not generator.generate_translation_files(keys, locales, machine_translations):
            logger.error("Failed to generate some translation files")
            return EXIT_FAILURE
        logger.info("Translation files generated successfully!")

    log_summary(keys, locales, auto_translate, dry_run=args.dry_run)
    return EXIT_SUCCESS
