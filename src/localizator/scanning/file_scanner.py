"""
Directory scanning for translation keys.

Enumerates the files selected by the configured glob patterns, skips
excluded directories and collects the keys of every file.
"""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..config.schema import LocalizatorConfig
from .extractor import InvocationPattern, build_patterns, extract_keys_from_file

logger = logging.getLogger(__name__)


class FileScanner:
    """Scans directories for translation keys using one configuration."""

    def __init__(self, config: LocalizatorConfig) -> None:
        """
        Initialize the scanner.

        Args:
            config: Configuration providing functions, patterns and excludes
        """
        self.patterns: list[str] = list(config.patterns)
        self.excludes: list[str] = [e.strip("/") for e in config.exclude if e.strip("/")]
        self.invocations: list[InvocationPattern] = build_patterns(config.functions)

    def is_excluded(self, relative_path: Path) -> bool:
        """Whether a path relative to a scanned directory lies in an excluded directory."""
        parts = relative_path.parts[:-1]
        for exclude in self.excludes:
            exclude_parts = tuple(Path(exclude).parts)
            size = len(exclude_parts)
            for start in range(len(parts) - size + 1):
                if parts[start : start + size] == exclude_parts:
                    return True
        return False

    def matches_pattern(self, filename: str) -> bool:
        """Whether a file name matches one of the configured glob patterns."""
        return any(fnmatch.fnmatch(filename, pattern) for pattern in self.patterns)

    def iter_files(self, directory: Path) -> Iterator[Path]:
        """
        Yield the files of ``directory`` that should be scanned, sorted.

        Args:
            directory: Root directory to walk
        """
        for filepath in sorted(directory.rglob("*")):
            if not filepath.is_file():
                continue
            relative = filepath.relative_to(directory)
            if self.is_excluded(relative) or not self.matches_pattern(filepath.name):
                continue
            yield filepath

    def scan_directories(self, directories: Iterable[Path]) -> set[str]:
        """
        Scan directories recursively for translation keys.

        Directories that do not exist are skipped.

        Args:
            directories: Directories to scan

        Returns:
            Set of unique keys found in all files
        """
        keys: set[str] = set()
        file_count = 0

        for directory in directories:
            if not directory.is_dir():
                logger.debug(f"Skipping missing directory: {directory}")
                continue

            for filepath in self.iter_files(directory):
                file_count += 1
                keys |= extract_keys_from_file(filepath, self.invocations)

        logger.info(f"Scanned {file_count} files, found {len(keys)} translation keys")
        return keys
