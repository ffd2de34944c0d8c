"""
Localizator - extract translation keys from source code and keep
per-locale translation files in sync without losing manual edits.
"""

import sys

from .main import main as run_cli


def main() -> None:
    """Console script entry point."""
    sys.exit(run_cli())


__all__ = ["main"]
