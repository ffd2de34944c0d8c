"""
Basic exception classes for Localizator.

This module contains fundamental exception classes that are used throughout
the codebase without creating import cycles.
"""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    CONFIGURATION = "configuration"
    INPUT = "input"
    OUTPUT = "output"
    TRANSLATION = "translation"
    UNKNOWN = "unknown"


class LocalizatorError(Exception):
    """Base exception class for Localizator specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: object | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.context: object | None = context
        self.recoverable: bool = recoverable


class ConfigurationError(LocalizatorError):
    """Invalid configuration, format selector or locale."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
        )


class PersistedDocumentError(LocalizatorError):
    """An existing translation document could not be parsed."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.INPUT,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=True,
        )


class OutputDirectoryError(LocalizatorError):
    """A destination directory could not be created."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.OUTPUT,
            severity=ErrorSeverity.CRITICAL,
            context=context,
            recoverable=False,
        )


class TranslationServiceError(LocalizatorError):
    """A machine-translation provider failed or answered nonsense."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.TRANSLATION,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recoverable=True,
        )
