"""Core module exports."""

from jaivalens.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    JaivaLensError,
    TokenTreeError,
)
from jaivalens.core.logging import configure_logging, set_request_id

__all__ = [
    # Errors
    "ErrorCode",
    "JaivaLensError",
    "ConfigError",
    "TokenTreeError",
    "InternalError",
    # Logging
    "configure_logging",
    "set_request_id",
]
