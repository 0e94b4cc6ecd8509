"""JaivaLens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Token tree / index input
- 9xxx: Internal

Index building and querying never raise on malformed input; these errors
surface only at the edges (config loading, reading token-tree files).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Token tree (3xxx)
    TREE_FILE_NOT_FOUND = 3001
    TREE_UNREADABLE = 3002
    TREE_PARSE_ERROR = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class JaivaLensError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
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


class ConfigError(JaivaLensError):
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


class TokenTreeError(JaivaLensError):
    """Errors reading a token-tree dump produced by the external parser."""

    @classmethod
    def file_not_found(cls, path: str) -> "TokenTreeError":
        return cls(
            code=ErrorCode.TREE_FILE_NOT_FOUND,
            message=f"Token tree not found: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "TokenTreeError":
        return cls(
            code=ErrorCode.TREE_UNREADABLE,
            message=f"Cannot read token tree at {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "TokenTreeError":
        return cls(
            code=ErrorCode.TREE_PARSE_ERROR,
            message=f"Token tree at {path} is not valid JSON: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(JaivaLensError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
