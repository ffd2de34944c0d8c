"""
External services used by the commands.
"""

from .translation_service import (
    AITranslationService,
    TranslationService,
    translate_missing,
)

__all__ = ["AITranslationService", "TranslationService", "translate_missing"]
