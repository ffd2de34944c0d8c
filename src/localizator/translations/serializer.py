"""
Writing translation documents.

Documents are written atomically (temporary file + rename) so a failed
write never leaves a half-written file behind. Writers report failure by
returning False; only a directory that cannot be created raises.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from ..config.schema import OutputConfig
from ..utils.exceptions import OutputDirectoryError
from .php_literal import render_php_document
from .tree import Branch, TranslationUnit, sort_tree

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def ensure_directory(directory: Path) -> None:
    """
    Create ``directory`` and its missing parents.

    Raises:
        OutputDirectoryError: If the directory cannot be created
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(
            f"Could not create directory '{directory}'. Please check directory permissions: {e}",
            context={"directory": str(directory)},
        ) from e


def is_safe_unit_name(name: str) -> bool:
    """Whether a unit name can be used as a file name inside the locale directory."""
    return bool(name) and not name.startswith(".") and "/" not in name and "\\" not in name


def backup_path_for(file_path: Path, now: datetime | None = None) -> Path:
    """Sibling path carrying a timestamp suffix, e.g. ``auth.php.backup_2024-01-31_12-00-00``."""
    timestamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return file_path.with_name(f"{file_path.name}.backup_{timestamp}")


def default_file_mode() -> int:
    """Mode of a newly created file under the current umask."""
    umask = os.umask(0)
    _ = os.umask(umask)
    return 0o666 & ~umask


def atomic_write(file_path: Path, content: str) -> None:
    """
    Replace ``file_path`` with ``content`` in one rename.

    An existing file keeps its permissions; a new file gets the
    umask-based default mode.

    Raises:
        OSError: If the content cannot be written
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=file_path.parent,
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_path = Path(temp_file.name)
            _ = temp_file.write(content)
            temp_file.flush()

        if file_path.is_file():
            shutil.copymode(file_path, temp_path)
        else:
            temp_path.chmod(default_file_mode())
        _ = temp_path.replace(file_path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


class TranslationSerializer:
    """Renders units and flat mappings into their persisted formats."""

    def __init__(self, output: OutputConfig, sort_keys: bool = True) -> None:
        """
        Initialize the serializer.

        Args:
            output: Indentation, comment and backup settings
            sort_keys: Sort keys at every level before writing
        """
        self.output: OutputConfig = output
        self.sort_keys: bool = sort_keys

    def create_backup(self, file_path: Path) -> Path:
        """
        Copy an existing document to a timestamped sibling.

        Raises:
            OSError: If the copy fails
        """
        backup_path = backup_path_for(file_path)
        _ = shutil.copy2(file_path, backup_path)
        logger.info(f"Backed up {file_path.name} to {backup_path.name}")
        return backup_path

    def _write(self, file_path: Path, content: str, force_backup: bool = False) -> bool:
        ensure_directory(file_path.parent)
        try:
            if (self.output.backup or force_backup) and file_path.exists():
                _ = self.create_backup(file_path)
            atomic_write(file_path, content)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            return False
        logger.debug(f"Wrote {file_path}")
        return True

    def render_unit(self, unit: TranslationUnit, locale: str) -> str:
        """Render one unit as a PHP document."""
        tree: Branch = sort_tree(unit.tree) if self.sort_keys else unit.tree
        return render_php_document(
            tree,
            unit_name=unit.name,
            locale=locale,
            indent=self.output.indent,
            comments=self.output.comments,
        )

    def render_json(self, translations: Mapping[str, str]) -> str:
        """
        Render a flat mapping as one JSON document.

        JSON has no comment syntax, so no header is written whatever the
        comments setting says.
        """
        data = dict(sorted(translations.items())) if self.sort_keys else dict(translations)
        return json.dumps(data, indent=self.output.indent, ensure_ascii=False) + "\n"

    def write_unit(
        self, file_path: Path, unit: TranslationUnit, locale: str, force_backup: bool = False
    ) -> bool:
        """
        Write one unit document.

        Args:
            file_path: Destination of the document
            unit: Unit to write
            locale: Locale named in the header comment
            force_backup: Back up an existing document even when backups are off

        Returns:
            True when the document was written

        Raises:
            OutputDirectoryError: If the destination directory cannot be created
        """
        if not is_safe_unit_name(unit.name):
            logger.error(f"Refusing to write translation unit with unsafe name {unit.name!r}")
            return False
        return self._write(file_path, self.render_unit(unit, locale), force_backup)

    def write_json(
        self, file_path: Path, translations: Mapping[str, str], force_backup: bool = False
    ) -> bool:
        """
        Write the whole flat mapping of a locale as one JSON document.

        ``force_backup`` keeps a copy of the previous document even when
        backups are off.

        Returns:
            True when the document was written

        Raises:
            OutputDirectoryError: If the destination directory cannot be created
        """
        return self._write(file_path, self.render_json(translations), force_backup)
