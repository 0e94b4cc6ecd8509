"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (JAIVALENS__SECTION__KEY)
3. Repo YAML (.jaivalens/config.yaml)
4. Global YAML (~/.config/jaivalens/config.yaml)
5. Built-in defaults (this file)

Examples:
    JAIVALENS__LOGGING__LEVEL=DEBUG
    JAIVALENS__INDEX__MAX_STRING_LENGTH=32
    JAIVALENS__COMPLETION__INCLUDE_KEYWORDS=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from jaivalens.config.constants import (
    DEFAULT_BUILTIN_NAMESPACES,
    DEFAULT_ERROR_BINDING,
    DEFAULT_KEYWORDS_SYMBOL,
    DEFAULT_MAX_STRING_LENGTH,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        JAIVALENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every import merge and publish.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class IndexConfig(BaseModel):
    """Index builder configuration.

    Env vars:
        JAIVALENS__INDEX__MAX_STRING_LENGTH: Hover display cap for string values
        JAIVALENS__INDEX__ERROR_BINDING: Name bound inside catch blocks
    """

    max_string_length: int = Field(
        default=DEFAULT_MAX_STRING_LENGTH,
        description="Strings longer than this are truncated with '...' in hover text.",
    )
    builtin_namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BUILTIN_NAMESPACES),
        description="Import paths rooted at these names refer to the language's own "
        "library and are skipped by the import resolver.",
    )
    error_binding: str = Field(
        default=DEFAULT_ERROR_BINDING,
        description="Identifier synthesized inside every catch block.",
    )
    keywords_symbol: str = Field(
        default=DEFAULT_KEYWORDS_SYMBOL,
        description="Library array symbol whose elements are offered as keywords.",
    )

    @field_validator("max_string_length")
    @classmethod
    def validate_max_string_length(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_string_length must be >= 1, got {v}")
        return v

    @field_validator("error_binding")
    @classmethod
    def validate_error_binding(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("error_binding must not be empty")
        return v.strip()


class CompletionConfig(BaseModel):
    """Completion configuration.

    Env vars:
        JAIVALENS__COMPLETION__INCLUDE_KEYWORDS: Offer reserved keywords
    """

    include_keywords: bool = Field(
        default=True,
        description="Prepend keyword suggestions taken from the library keyword array.",
    )


class JaivaLensConfig(BaseModel):
    """Root configuration for JaivaLens.

    All settings can be configured via:
    1. Environment variables: JAIVALENS__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
