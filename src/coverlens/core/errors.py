"""CoverLens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Report loading
- 4xxx: Arguments

Only hard failures are modelled here. Soft conditions of the coverage
queries (file not in report, no report loaded, unparsable method name) are
expressed as empty results, never as errors.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2003

    # Report (3xxx)
    REPORT_PARSE_ERROR = 3001
    REPORT_NOT_FOUND = 3002

    # Arguments (4xxx)
    ARGUMENT_MISSING = 4001


@dataclass(frozen=True, slots=True)
class CoverLensError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REPORT_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CoverLensError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ReportError(CoverLensError):
    """Errors materialising a coverage report from disk."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_PARSE_ERROR,
            message=f"Invalid coverage report at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def not_found(cls, path: str) -> "ReportError":
        return cls(
            code=ErrorCode.REPORT_NOT_FOUND,
            message=f"No coverage report found at {path}",
            details={"path": path},
        )


class InvalidArgumentError(CoverLensError):
    """A required argument was missing."""

    @classmethod
    def missing(cls, name: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.ARGUMENT_MISSING,
            message=f"Argument '{name}' must not be None",
            details={"argument": name},
        )
