"""Unified exception hierarchy for smsgraph.

All smsgraph-specific exceptions inherit from SmsGraphError, so callers can
handle every failure of a graph build with a single except clause.

Exception Hierarchy:
    SmsGraphError (base)
    ├── ConfigurationError - Configuration and settings issues
    ├── OracleError - Topic oracle failures
    │   ├── OracleUnavailableError - Oracle server not reachable
    │   └── OracleRequestError - A single extraction call failed
    ├── ValidationError - Input validation failures
    └── GraphExportError - Writing the graph artifact failed

Only GraphExportError escapes a graph build. Oracle errors are caught by the
topic pipeline and degrade the run to a topic-less graph.

Usage:
    from smsgraph.errors import GraphExportError

    try:
        export_to_json(graph, path)
    except GraphExportError as e:
        logger.error("Export failed: %s (code: %s)", e.message, e.code)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for smsgraph errors."""

    # Configuration errors (CFG_*)
    CFG_INVALID = "CFG_INVALID"

    # Oracle errors (ORC_*)
    ORC_UNAVAILABLE = "ORC_UNAVAILABLE"
    ORC_REQUEST_FAILED = "ORC_REQUEST_FAILED"
    ORC_TIMEOUT = "ORC_TIMEOUT"
    ORC_BAD_RESPONSE = "ORC_BAD_RESPONSE"

    # Validation errors (VAL_*)
    VAL_INVALID_INPUT = "VAL_INVALID_INPUT"
    VAL_MISSING_REQUIRED = "VAL_MISSING_REQUIRED"
    VAL_TYPE_ERROR = "VAL_TYPE_ERROR"

    # Export errors (EXP_*)
    EXP_WRITE_FAILED = "EXP_WRITE_FAILED"

    # Generic errors
    UNKNOWN = "UNKNOWN"


class SmsGraphError(Exception):
    """Base exception for all smsgraph errors.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code from ErrorCode enum.
        details: Optional additional context about the error.
        cause: Optional original exception that caused this error.
    """

    default_message: str = "An error occurred"
    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize an smsgraph error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        self.cause = cause

        super().__init__(self.message)

        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return human-readable representation."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        parts = [f"{self.__class__.__name__}({self.message!r}"]
        if self.code != self.default_code:
            parts.append(f", code={self.code.value!r}")
        if self.details:
            parts.append(f", details={self.details!r}")
        if self.cause:
            parts.append(f", cause={self.cause!r}")
        parts.append(")")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for structured output.

        Returns:
            Dictionary with error, code, and detail fields.
        """
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "detail": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Configuration Errors


class ConfigurationError(SmsGraphError):
    """Raised for configuration and settings issues."""

    default_message = "Configuration error"
    default_code = ErrorCode.CFG_INVALID

    def __init__(
        self,
        message: str | None = None,
        *,
        config_key: str | None = None,
        config_path: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize a configuration error.

        Args:
            message: Human-readable error message.
            config_key: The configuration key that caused the error.
            config_path: Path to the configuration file.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        if config_path:
            details["config_path"] = config_path
        super().__init__(message, code=code, details=details, cause=cause)


# Oracle Errors


class OracleError(SmsGraphError):
    """Base class for topic oracle errors."""

    default_message = "Topic oracle error"
    default_code = ErrorCode.ORC_REQUEST_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        base_url: str | None = None,
        model_name: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize an oracle error.

        Args:
            message: Human-readable error message.
            base_url: Address of the oracle service.
            model_name: Model the request was addressed to.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        details = details or {}
        if base_url:
            details["base_url"] = base_url
        if model_name:
            details["model_name"] = model_name
        super().__init__(message, code=code, details=details, cause=cause)


class OracleUnavailableError(OracleError):
    """Raised when the oracle does not answer its availability probe."""

    default_message = "Topic oracle is not available"
    default_code = ErrorCode.ORC_UNAVAILABLE


class OracleRequestError(OracleError):
    """Raised when a single topic extraction call fails.

    Examples:
        - Connection refused or reset
        - Call exceeded its timeout
        - Non-JSON or unexpected response body
    """

    default_message = "Topic extraction request failed"
    default_code = ErrorCode.ORC_REQUEST_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        timeout_seconds: float | None = None,
        base_url: str | None = None,
        model_name: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize an oracle request error.

        Args:
            message: Human-readable error message.
            timeout_seconds: Timeout value if this was a timeout error.
            base_url: Address of the oracle service.
            model_name: Model the request was addressed to.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        details = details or {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
            code = code or ErrorCode.ORC_TIMEOUT
        super().__init__(
            message,
            base_url=base_url,
            model_name=model_name,
            code=code,
            details=details,
            cause=cause,
        )


# Validation Errors


class ValidationError(SmsGraphError):
    """Raised for input validation failures.

    Examples:
        - Message file is not a JSON array
        - A message record lacks its other-party id
        - Unknown message direction
    """

    default_message = "Validation error"
    default_code = ErrorCode.VAL_INVALID_INPUT

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        expected: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize a validation error.

        Args:
            message: Human-readable error message.
            field: Name of the field that failed validation.
            value: The invalid value (will be converted to string).
            expected: Description of expected value/format.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if expected:
            details["expected"] = expected
        super().__init__(message, code=code, details=details, cause=cause)


# Export Errors


class GraphExportError(SmsGraphError):
    """Raised when the graph artifact cannot be written.

    This is the only fatal condition of a graph build.
    """

    default_message = "Failed to write graph"
    default_code = ErrorCode.EXP_WRITE_FAILED

    def __init__(
        self,
        message: str | None = None,
        *,
        path: str | None = None,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize an export error.

        Args:
            message: Human-readable error message.
            path: Destination path of the artifact.
            code: Error code for programmatic handling.
            details: Additional context as key-value pairs.
            cause: Original exception that caused this error.
        """
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, code=code, details=details, cause=cause)


# Convenience functions for common error scenarios


def validation_required(field: str) -> ValidationError:
    """Create a ValidationError for a missing required field.

    Args:
        field: Name of the missing field.

    Returns:
        ValidationError with appropriate details.
    """
    return ValidationError(
        f"Missing required field: {field}",
        field=field,
        code=ErrorCode.VAL_MISSING_REQUIRED,
    )


def validation_type_error(field: str, value: Any, expected: str) -> ValidationError:
    """Create a ValidationError for an incorrect type.

    Args:
        field: Name of the field.
        value: The invalid value.
        expected: Description of expected type.

    Returns:
        ValidationError with type details.
    """
    return ValidationError(
        f"Invalid type for '{field}': expected {expected}, got {type(value).__name__}",
        field=field,
        value=value,
        expected=expected,
        code=ErrorCode.VAL_TYPE_ERROR,
    )


__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "SmsGraphError",
    # Configuration errors
    "ConfigurationError",
    # Oracle errors
    "OracleError",
    "OracleUnavailableError",
    "OracleRequestError",
    # Validation errors
    "ValidationError",
    # Export errors
    "GraphExportError",
    # Convenience functions
    "validation_required",
    "validation_type_error",
]
