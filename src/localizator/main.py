"""
Command-line entry point for Localizator.

Usage Examples:
    Scan the project and write English and German files:
        localizator scan en de

    Show what would change without writing:
        localizator scan en --dry-run --verbose

    Regenerate the configured locales with machine translation:
        localizator generate --auto-translate

    Use a custom configuration file:
        localizator --config config/localizator.yml generate
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from .commands.generate import GenerateArgs, run_generate
from .commands.scan import ScanArgs, run_scan
from .config.manager import DEFAULT_CONFIG_FILE, ConfigManager
from .utils.exceptions import ConfigurationError, OutputDirectoryError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, silent: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: Enable verbose logging
        silent: Only log errors
    """
    level = logging.DEBUG if verbose else logging.INFO
    if silent:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for Localizator.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="localizator",
        description="Extract translation keys from source code and keep translation files in sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  localizator scan en de                 # Scan and write en + de
  localizator scan en --dry-run          # Report only
  localizator scan fr --auto-translate   # Translate missing French keys
  localizator generate                   # Regenerate the configured locales
""",
    )
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_FILE,
        help=f"Configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    _ = parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser(
        "scan", help="Scan for translation strings and generate translation files"
    )
    _ = scan.add_argument("locales", nargs="*", help="Locales to generate")
    _ = scan.add_argument(
        "--remove-missing",
        action="store_true",
        help="Remove translation keys that are no longer found in the code",
    )
    _ = scan.add_argument("--sort", action="store_true", help="Sort translation keys alphabetically")
    _add_translation_arguments(scan)
    _ = scan.add_argument(
        "--review",
        action="store_true",
        help="Review machine translations before applying them",
    )
    _ = scan.add_argument(
        "--format",
        help="Output format (php, json, nested-files, single-document); overrides the config",
    )
    _ = scan.add_argument(
        "--dry-run", action="store_true", help="Show what would be done without writing files"
    )
    _ = scan.add_argument(
        "--backup", action="store_true", help="Back up existing translation files before writing"
    )

    generate = subparsers.add_parser(
        "generate", help="Generate all translation files without any prompts"
    )
    _ = generate.add_argument(
        "locales", nargs="*", help="Locales to generate (defaults to the configured locales)"
    )
    _add_translation_arguments(generate)
    _ = generate.add_argument(
        "--force", action="store_true", help="Overwrite existing files without backup"
    )
    _ = generate.add_argument(
        "--silent", action="store_true", help="Suppress all output except errors"
    )

    return parser


def _add_translation_arguments(parser: argparse.ArgumentParser) -> None:
    _ = parser.add_argument(
        "--auto-translate",
        action="store_true",
        help="Translate missing keys with the configured provider",
    )
    _ = parser.add_argument("--source-lang", help="Source language for machine translation")
    _ = parser.add_argument(
        "--provider",
        choices=["openai", "claude", "google", "azure"],
        help="Translation provider to use",
    )
    _ = parser.add_argument(
        "--batch-size", type=int, help="Number of strings translated per request"
    )


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = create_argument_parser().parse_args(argv)
    verbose: bool = args.verbose  # pyright: ignore[reportAny]
    setup_logging(verbose, silent=getattr(args, "silent", False))

    try:
        config = ConfigManager.load_config(args.config)  # pyright: ignore[reportAny]

        if args.command == "scan":
            return run_scan(
                config,
                ScanArgs(
                    locales=args.locales,  # pyright: ignore[reportAny]
                    remove_missing=args.remove_missing,  # pyright: ignore[reportAny]
                    sort=args.sort,  # pyright: ignore[reportAny]
                    auto_translate=args.auto_translate,  # pyright: ignore[reportAny]
                    review=args.review,  # pyright: ignore[reportAny]
                    source_lang=args.source_lang,  # pyright: ignore[reportAny]
                    provider=args.provider,  # pyright: ignore[reportAny]
                    batch_size=args.batch_size,  # pyright: ignore[reportAny]
                    format=args.format,  # pyright: ignore[reportAny]
                    dry_run=args.dry_run,  # pyright: ignore[reportAny]
                    backup=args.backup,  # pyright: ignore[reportAny]
                    verbose=verbose,
                ),
            )

        return run_generate(
            config,
            GenerateArgs(
                locales=args.locales,  # pyright: ignore[reportAny]
                auto_translate=args.auto_translate,  # pyright: ignore[reportAny]
                source_lang=args.source_lang,  # pyright: ignore[reportAny]
                provider=args.provider,  # pyright: ignore[reportAny]
                batch_size=args.batch_size,  # pyright: ignore[reportAny]
                force=args.force,  # pyright: ignore[reportAny]
                silent=args.silent,  # pyright: ignore[reportAny]
            ),
        )

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except OutputDirectoryError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1
