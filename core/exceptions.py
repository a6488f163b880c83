"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the ontology loader.

- Provides clear exception hierarchy
- Separates per-record errors from run-level errors
- Lets the driver decide abort vs. skip per error kind
- Includes context (file, stage, line) for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
LoaderException (base)
├── ConfigurationError
│   └── InvalidConfigError
├── SourceReadError
├── RowError
│   ├── MalformedRowError
│   └── UnknownNodeKindError
├── SinkWriteError
└── PipelineError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, a record was affected."""

    HIGH = "high"
    """Serious issue, the current file cannot be converted."""

    CRITICAL = "critical"
    """Critical issue, the whole run must stop."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """The offending record can be skipped."""

    NON_RECOVERABLE = "non_recoverable"
    """The current conversion cannot continue."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class LoaderException(Exception):
    """
    Base exception for all loader errors.

    All exceptions carry:
    - severity: for log level selection
    - context: for debugging (file, stage, line)
    - recoverable: for skip-or-abort decisions
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_recoverable: bool = True
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def is_recoverable(self) -> bool:
        """Check if error is recoverable."""
        return self.classification == ErrorClassification.RECOVERABLE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/reporting."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        text = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            text += f" | {ctx_str}"
        return text


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(LoaderException):
    """Error in configuration."""

    default_severity = Severity.HIGH
    default_recoverable = False
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# FILE ERRORS
# ============================================================

class SourceReadError(LoaderException):
    """Input file is missing or unreadable."""

    default_severity = Severity.HIGH
    default_recoverable = False
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        file_name: Optional[str] = None,
        file_path: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if file_name:
            context["file"] = file_name
        if file_path:
            context["path"] = str(file_path)

        super().__init__(message, context=context, **kwargs)


class SinkWriteError(LoaderException):
    """Output destination is not creatable or writable."""

    default_severity = Severity.HIGH
    default_recoverable = False
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        file_name: Optional[str] = None,
        file_path: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if file_name:
            context["file"] = file_name
        if file_path:
            context["path"] = str(file_path)

        super().__init__(message, context=context, **kwargs)


# ============================================================
# ROW ERRORS
# ============================================================

class RowError(LoaderException):
    """Base class for errors confined to a single input record."""

    default_severity = Severity.MEDIUM
    default_recoverable = True
    default_classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        path: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if line_number is not None:
            context["line"] = line_number
        if path:
            context["path"] = path

        self.line_number = line_number
        self.path = path
        super().__init__(message, context=context, **kwargs)


class MalformedRowError(RowError):
    """Wrong column count or unparseable field."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        actual: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if field:
            context["field"] = field
        if actual is not None:
            context["actual"] = str(actual)[:100]

        super().__init__(message, context=context, **kwargs)


class UnknownNodeKindError(RowError):
    """Fact-table column of a sensitive row is neither concept nor modifier."""

    def __init__(self, value: str, **kwargs):
        context = kwargs.pop("context", {})
        context["fact_table_column"] = value
        self.value = value
        super().__init__(
            f"Incorrect code in the fact table column: {value.lower()!r}",
            context=context,
            **kwargs,
        )


# ============================================================
# PIPELINE ERRORS
# ============================================================

class PipelineError(LoaderException):
    """A conversion stage failed as a whole."""

    default_severity = Severity.HIGH
    default_recoverable = False
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        file_name: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if stage:
            context["stage"] = stage
        if file_name:
            context["file"] = file_name

        self.stage = stage
        self.file_name = file_name
        super().__init__(message, context=context, **kwargs)


__all__ = [
    "Severity",
    "ErrorClassification",
    "LoaderException",
    "ConfigurationError",
    "InvalidConfigError",
    "SourceReadError",
    "SinkWriteError",
    "RowError",
    "MalformedRowError",
    "UnknownNodeKindError",
    "PipelineError",
]
