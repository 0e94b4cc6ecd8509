"""Configuration constants.

This module contains values that should NOT be user-configurable: the
token-tree protocol's sentinels and markers. Configurable defaults live
next to them so models.py and the index share one source.
"""

# =============================================================================
# Token-tree protocol
# =============================================================================

GLOBAL_LINE = -1
"""Declaration line used by the parser for library (global) definitions."""

GLOBAL_SCOPE: tuple[int, int] = (-1, -1)
"""Scope range that is visible from every line."""

FUNCTION_REF_PREFIX = "F~"
"""Prefix marking a function name, or a parameter that is a callable reference."""

# =============================================================================
# Hover rendering
# =============================================================================

UNKNOWN_VALUE = "???"
"""Placeholder for values the hover formatter cannot render."""

TRUE_LITERAL = "yebo"
FALSE_LITERAL = "aowa"
"""The language's boolean literals."""

ELLIPSIS = "..."

# =============================================================================
# Configurable defaults
# =============================================================================

DEFAULT_MAX_STRING_LENGTH = 20
DEFAULT_BUILTIN_NAMESPACES = ("jaiva",)
DEFAULT_ERROR_BINDING = "error"
DEFAULT_KEYWORDS_SYMBOL = "reservedKeywords"
