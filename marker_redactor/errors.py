from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification for error logging."""

    CONFIGURATION = "configuration"
    DOCUMENT = "document"
    IO = "io"


class RedactorError(Exception):
    """Base exception for all application-specific errors."""

    category: ErrorCategory = ErrorCategory.CONFIGURATION


class ConfigurationMissingError(RedactorError):
    """Raised when the output path has not been configured."""

    category = ErrorCategory.CONFIGURATION


class ConfigurationValueError(RedactorError, ValueError):
    """Raised when a settings edit carries an unknown key or invalid value."""

    category = ErrorCategory.CONFIGURATION


class NoActiveDocumentError(RedactorError):
    """Raised when a command runs without a document to act on."""

    category = ErrorCategory.DOCUMENT


class OutputWriteError(RedactorError):
    """Raised when creating the output directory or writing the file fails."""

    category = ErrorCategory.IO

    def __init__(self, path: str, message: str = "failed to write redacted output") -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class OutputConflictError(RedactorError):
    """Raised when the redacted copy would overwrite the source document."""

    category = ErrorCategory.IO
