"""Config module exports."""

from jaivalens.config.loader import load_config
from jaivalens.config.models import (
    CompletionConfig,
    IndexConfig,
    JaivaLensConfig,
    LoggingConfig,
    LogOutputConfig,
)

__all__ = [
    "load_config",
    "JaivaLensConfig",
    "IndexConfig",
    "CompletionConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
