"""Hover-text rendering for symbol records.

Every function here is total: any payload shape renders to a string, with
``???`` standing in for values that cannot be shown.

Examples:
    count <- 3
    names <-| ["a", "b"]
    greet(name, F~callback)   ->  greet(name, callback)
    [parameter] name
    [index] i <- 0
    [chaai error] error <- ("error message")
"""

from __future__ import annotations

from typing import Any

from jaivalens.config.constants import (
    DEFAULT_MAX_STRING_LENGTH,
    ELLIPSIS,
    FALSE_LITERAL,
    TRUE_LITERAL,
    UNKNOWN_VALUE,
)
from jaivalens.index.models import HoverCase, TokenKind, strip_function_prefix

GLOBAL_ANNOTATION = " (global)"
FUNCTION_REF_MARKER = " (function)"
CAUGHT_ERROR_VALUE = '("error message")'

_TRUE_STRINGS = frozenset({"true", TRUE_LITERAL})
_FALSE_STRINGS = frozenset({"false", FALSE_LITERAL})


def quote_string(value: str, max_length: int = DEFAULT_MAX_STRING_LENGTH) -> str:
    """Quote a string, truncating it past max_length with an ellipsis."""
    if len(value) > max_length:
        return f'"{value[:max_length]}{ELLIPSIS}"'
    return f'"{value}"'


def render_literal(value: Any) -> str | None:
    """Render numbers and booleans as language literals; None otherwise."""
    if isinstance(value, bool):
        return TRUE_LITERAL if value else FALSE_LITERAL
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        text = value.strip()
        if text in _TRUE_STRINGS:
            return TRUE_LITERAL
        if text in _FALSE_STRINGS:
            return FALSE_LITERAL
        try:
            return str(int(text))
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return repr(number) if number == number else None
    return None


def render_value(
    value: Any,
    *,
    as_string: bool = False,
    max_length: int = DEFAULT_MAX_STRING_LENGTH,
) -> str:
    """Render a declaration's value for display.

    Args:
        value: Raw value from the token tree.
        as_string: The declaration is a string variable, so the value is
            shown quoted rather than interpreted.
        max_length: Display cap for string values.
    """
    if as_string and isinstance(value, str):
        return quote_string(value, max_length)
    literal = render_literal(value)
    if literal is not None:
        return literal
    if isinstance(value, list | tuple):
        return "[" + ", ".join(_render_element(v, max_length) for v in value) + "]"
    return UNKNOWN_VALUE


def _render_element(value: Any, max_length: int) -> str:
    literal = render_literal(value)
    if literal is not None:
        return literal
    if isinstance(value, str):
        return quote_string(value, max_length)
    return render_value(value, max_length=max_length)


def infer_statement_type(value: Any) -> str:
    """Prefix hinting at a statement value's result type, or ''."""
    if not isinstance(value, dict) or value.get("type") != TokenKind.STATEMENT.value:
        return ""
    if value.get("statementType") in (0, "0"):
        return "(boolean?) "
    return "(number?, string?) "


def format_hover(
    case: HoverCase,
    name: str,
    value: Any = None,
    *,
    kind: TokenKind | str | None = None,
    params: list[str] | tuple[str, ...] = (),
    is_function_ref: bool = False,
    is_global: bool = False,
    max_length: int = DEFAULT_MAX_STRING_LENGTH,
) -> str:
    """Render hover text for one symbol.

    Args:
        case: Template to use.
        name: Symbol name as displayed.
        value: Declared value (variables, loop variables).
        kind: Token kind of the declaration; string variables are quoted.
        params: Declared parameter names (functions).
        is_function_ref: The parameter is itself a callable reference.
        is_global: The declaration is a library definition.
        max_length: Display cap for string values.
    """
    as_string = kind == TokenKind.STRING_VAR
    hint = infer_statement_type(value)

    if case is HoverCase.ASSIGNMENT:
        text = f"{hint}{name} <- {render_value(value, as_string=as_string, max_length=max_length)}"
    elif case is HoverCase.ARRAY_ASSIGNMENT:
        text = f"{hint}{name} <-| {render_value(value, max_length=max_length)}"
    elif case is HoverCase.FUNCTION:
        shown = ", ".join(strip_function_prefix(str(p)) for p in params)
        text = f"{name}({shown})"
    elif case is HoverCase.PARAMETER:
        return f"[parameter] {name}" + (FUNCTION_REF_MARKER if is_function_ref else "")
    elif case is HoverCase.LOOP_INDEX:
        return f"[index] {hint}{name} <- {render_value(value, max_length=max_length)}"
    elif case is HoverCase.LOOP_ELEMENT:
        return f"[element] {hint}{name} <- {render_value(value, max_length=max_length)}"
    elif case is HoverCase.CAUGHT_ERROR:
        return f"[chaai error] {name} <- {CAUGHT_ERROR_VALUE}"
    else:
        return ""

    return text + (GLOBAL_ANNOTATION if is_global else "")
