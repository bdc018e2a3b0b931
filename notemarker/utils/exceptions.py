"""Custom exception classes for the notemarker package.

This module defines a hierarchy of exceptions for the timecode engine,
the comment import and the marker services, making it easier to handle
and report errors with appropriate context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class NotemarkerException(Exception):
    """Base exception for all notemarker-related errors.

    All custom exceptions in the notemarker package inherit from this base
    class, making it easy to catch all notemarker-specific errors.
    """

    pass


# ============================================================================
# Timecode errors
# ============================================================================

class TimecodeError(NotemarkerException):
    """Base class for timecode failures.

    Attributes:
        code: Machine-readable error code (e.g. ``INVALID_FORMAT``)
        details: Structured context for logging and UI
    """

    code = "TIMECODE_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidFormatError(TimecodeError):
    """Raised when a timecode string does not have the HH:MM:SS:FF shape."""

    code = "INVALID_FORMAT"

    def __init__(self, text: object, expected: str = "HH:MM:SS:FF") -> None:
        self.text = text
        super().__init__(
            f'Invalid timecode format: "{text}". Expected {expected}',
            {"input": text, "expected": expected},
        )


@dataclass(frozen=True)
class FieldViolation:
    """One timecode field outside its allowed range."""

    field: str
    value: int
    minimum: int
    maximum: int

    def __str__(self) -> str:
        return f"{self.field.capitalize()} {self.value} out of range ({self.minimum}-{self.maximum})"


class InvalidRangeError(TimecodeError):
    """Raised when one or more timecode fields are out of range.

    Every violated field is reported, never just the first one.

    Attributes:
        violations: List of FieldViolation, one per violated field
    """

    code = "INVALID_RANGE"

    def __init__(self, text: str, violations: list[FieldViolation], frame_rate: str) -> None:
        self.text = text
        self.violations = list(violations)
        self.frame_rate = frame_rate

        reasons = ", ".join(str(v) for v in self.violations)
        super().__init__(
            f'Invalid timecode components in "{text}": {reasons} for {frame_rate} fps',
            {
                "input": text,
                "errors": [str(v) for v in self.violations],
                "frameRate": frame_rate,
            },
        )

    @property
    def fields(self) -> list[str]:
        """Names of the violated fields, in hours-to-frames order."""
        return [v.field for v in self.violations]


class UnsupportedFrameRateError(TimecodeError):
    """Raised when a frame rate is not one of the supported profiles.

    Attributes:
        frame_rate: The rate that was requested
        supported: Keys of the supported rates
    """

    code = "INVALID_FRAME_RATE"

    def __init__(self, frame_rate: object, supported: list[str] | None = None) -> None:
        self.frame_rate = frame_rate
        self.supported = supported or []

        message = f"Unsupported frame rate: {frame_rate}"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"

        super().__init__(message, {"frameRate": frame_rate, "supportedRates": self.supported})


class CalculationError(TimecodeError):
    """Raised when timecode arithmetic fails."""

    code = "CALCULATION_ERROR"


class ProfileMismatchError(CalculationError):
    """Raised when a timecode is combined with a different frame rate profile."""

    code = "PROFILE_MISMATCH"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Timecode belongs to the {actual} profile and cannot be used with {expected}",
            {"expected": expected, "actual": actual},
        )


# ============================================================================
# Import and marker errors
# ============================================================================

class ConflictResolutionCancelled(NotemarkerException):
    """Raised when the user cancels marker conflict resolution.

    Attributes:
        resolution: The ResolutionResult at the moment of cancellation
    """

    def __init__(self, message: str = "Conflict resolution was cancelled by user", resolution: Any = None) -> None:
        self.resolution = resolution
        super().__init__(message)


class ExportFileError(NotemarkerException):
    """Raised when a comment export file cannot be read.

    Attributes:
        path: Path of the export file
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path

        error_parts = [message]
        if path:
            error_parts.append(f"for file '{path}'")

        super().__init__(" ".join(error_parts))


class MarkerFileError(NotemarkerException):
    """Raised when a marker CSV/text file is malformed.

    Attributes:
        path: Path of the marker file
        column: Optional column name where the problem was found
    """

    def __init__(self, message: str, path: str | None = None, column: str | None = None) -> None:
        self.path = path
        self.column = column

        error_parts = [message]
        if column:
            error_parts.append(f"in column '{column}'")
        if path:
            error_parts.append(f"of '{path}'")

        super().__init__(" ".join(error_parts))


class MarkerServiceError(NotemarkerException):
    """Raised by timeline collaborators when listing or creating markers fails.

    Attributes:
        operation: The collaborator operation that failed
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation

        error_parts = [message]
        if operation:
            error_parts.append(f"during {operation}")

        super().__init__(" ".join(error_parts))


class ConfigurationError(NotemarkerException):
    """Raised when configuration is invalid.

    This exception is raised when:
    - Config file is malformed
    - Frame rate is not supported
    - Session start is not a valid timecode
    - Resolution strategy is unknown

    Attributes:
        config_key: Configuration key that has an issue
        invalid_value: The invalid value (if applicable)
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        invalid_value: object = None,
    ) -> None:
        self.config_key = config_key
        self.invalid_value = invalid_value

        error_parts = [message]
        if config_key:
            error_parts.append(f"for setting '{config_key}'")
        if invalid_value is not None:
            error_parts.append(f"(value: {invalid_value!r})")

        super().__init__(" ".join(error_parts))
