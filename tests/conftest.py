"""
Global test configuration fixtures for Localizator tests.

This module provides reusable pytest fixtures for building LocalizatorConfig
instances that point at temporary directories, and small sample projects
containing translation calls.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.localizator.config.schema import LocalizatorConfig, OutputConfig
from tests.utils.test_helpers import create_sample_project


@pytest.fixture
def lang_path(tmp_path: Path) -> Path:
    """
    Language root inside the temporary directory.

    Returns:
        Path: Not yet created ``lang`` directory
    """
    return tmp_path / "lang"


@pytest.fixture
def base_config(tmp_path: Path, lang_path: Path) -> LocalizatorConfig:
    """
    Create a configuration scanning ``tmp_path/src`` and writing to ``tmp_path/lang``.

    Returns:
        LocalizatorConfig: Nested-files configuration without backups
    """
    return LocalizatorConfig(
        lang_path=lang_path,
        dirs=[tmp_path / "src"],
        output=OutputConfig(backup=False),
    )


@pytest.fixture
def json_config(base_config: LocalizatorConfig) -> LocalizatorConfig:
    """
    Create a single-document (JSON) variant of ``base_config``.

    Returns:
        LocalizatorConfig: Configuration using the JSON store
    """
    return base_config.model_copy(update={"localize": "single-document"})


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    Create a small project with PHP, Blade and Vue files.

    Returns:
        Path: The ``src`` directory of the project
    """
    return create_sample_project(tmp_path / "src")
