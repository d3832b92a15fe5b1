"""Exception hierarchy for kawatte.

Every exception carries a machine-readable ``error_code``, a ``severity``
indicator, and a ``context`` dict that is passed straight into structured
log events.

Configuration errors are raised before any file is touched.  Traversal
problems are reported as warnings and never raised out of the walker.
File processing errors abort a run unless the orchestrator was asked to
keep going.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity levels for kawatte exceptions."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class KawatteError(Exception):
    """Root exception for every kawatte failure.

    Attributes:
        message:    Human-readable description.
        error_code: Machine-readable code (e.g. ``"KAWATTE_PATTERN_FILE"``).
        severity:   Impact severity.
        context:    Arbitrary key-value context for structured logging.
    """

    def __init__(
        self,
        message: str = "kawatte error",
        error_code: str = "KAWATTE_ERROR",
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.context: dict[str, Any] = context or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"error_code={self.error_code!r}, "
            f"severity={self.severity.value!r}, "
            f"message={self.message!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
        }


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(KawatteError):
    """Raised when the run cannot start because its inputs are invalid."""

    def __init__(self, message: str = "Invalid configuration", **kwargs: Any) -> None:
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "KAWATTE_CONFIG_ERROR"),
            severity=kwargs.pop("severity", Severity.CRITICAL),
            **kwargs,
        )


class PatternFileError(ConfigurationError):
    """Raised when the substitution pattern file is missing or malformed."""

    def __init__(self, message: str = "Cannot read substitution patterns", **kwargs: Any) -> None:
        super().__init__(message, error_code=kwargs.pop("error_code", "KAWATTE_PATTERN_FILE"), **kwargs)


class InvalidSubstitutionError(ConfigurationError):
    """Raised for a substitution pair that can never be applied (empty ``old``)."""

    def __init__(self, message: str = "Invalid substitution pair", **kwargs: Any) -> None:
        super().__init__(message, error_code=kwargs.pop("error_code", "KAWATTE_INVALID_SUBSTITUTION"), **kwargs)


# ---------------------------------------------------------------------------
# Runtime exceptions
# ---------------------------------------------------------------------------

class TraversalError(KawatteError):
    """A directory entry could not be read during the walk.

    The walker records these as warnings; the class exists so the warning
    carries the same ``error_code`` / ``context`` shape as everything else.
    """

    def __init__(self, message: str = "Cannot read directory entry", **kwargs: Any) -> None:
        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "KAWATTE_TRAVERSAL_ERROR"),
            severity=kwargs.pop("severity", Severity.LOW),
            **kwargs,
        )


class FileProcessingError(KawatteError):
    """Raised when reading or writing a selected file fails."""

    def __init__(
        self,
        path: str,
        operation: str,
        cause: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        context = {"path": path, "operation": operation, **kwargs.pop("context", {})}
        super().__init__(
            f"processing {path!r}: {operation}{detail}",
            error_code=kwargs.pop("error_code", "KAWATTE_FILE_ERROR"),
            severity=kwargs.pop("severity", Severity.HIGH),
            context=context,
            **kwargs,
        )


__all__ = [
    "ConfigurationError",
    "FileProcessingError",
    "InvalidSubstitutionError",
    "KawatteError",
    "PatternFileError",
    "Severity",
    "TraversalError",
]
