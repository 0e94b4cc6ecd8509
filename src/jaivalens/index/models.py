"""Token-tree node types and symbol records.

The token tree is produced by the external Jaiva parser (``jaiva FILE -j``)
as JSON. Nodes are decoded into a closed set of dataclasses, one per
construct kind. Decoding is total: anything malformed degrades to neutral
defaults, and an unknown ``type`` decodes to a plain ``TokenNode`` that the
index builder ignores.

Symbol records are what the index builder emits: one record per
visibility-scoped occurrence of a name.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from jaivalens.config.constants import (
    FUNCTION_REF_PREFIX,
    GLOBAL_LINE,
    GLOBAL_SCOPE,
)
from jaivalens.index.multimap import MultiMap

# ============================================================================
# ENUMS
# ============================================================================


class TokenKind(str, Enum):
    """Wire tags of the parser's token nodes."""

    VOID = "TVoidValue"
    CODE_BLOCK = "TCodeblock"
    UNKNOWN_VAR = "TUnknownVar"
    REASSIGN = "TVarReassign"
    STRING_VAR = "TStringVar"
    NUMBER_VAR = "TNumberVar"
    BOOLEAN_VAR = "TBooleanVar"
    ARRAY_VAR = "TArrayVar"
    FUNC_RETURN = "TFuncReturn"
    FUNCTION = "TFunction"
    FOR_LOOP = "TForLoop"
    WHILE_LOOP = "TWhileLoop"
    IF_STATEMENT = "TIfStatement"
    TRY_CATCH = "TTryCatchStatement"
    THROW = "TThrowError"
    FUNC_CALL = "TFuncCall"
    VAR_REF = "TVarRef"
    LOOP_CONTROL = "TLoopControl"
    STATEMENT = "TStatement"
    IMPORT = "TImport"

    @classmethod
    def value_declarations(cls) -> frozenset[TokenKind]:
        """Kinds that declare a variable holding a value."""
        return frozenset(
            {cls.UNKNOWN_VAR, cls.STRING_VAR, cls.NUMBER_VAR, cls.BOOLEAN_VAR, cls.ARRAY_VAR}
        )

    @classmethod
    def parse(cls, raw: Any) -> TokenKind | None:
        try:
            return cls(raw)
        except ValueError:
            return None


class SymbolKind(str, Enum):
    """Visibility kind tag of a symbol record."""

    VARIABLE = "var"
    FUNCTION = "func"
    PARAMETER = "param"
    OPTIONAL_PARAMETER = "param?"
    REASSIGNED = "reassigned"


class HoverCase(str, Enum):
    """Which hover template renders a record."""

    ASSIGNMENT = "assignment"
    ARRAY_ASSIGNMENT = "array_assignment"
    FUNCTION = "function"
    PARAMETER = "parameter"
    LOOP_INDEX = "index"
    LOOP_ELEMENT = "element"
    CAUGHT_ERROR = "caught_error"


# ============================================================================
# DECODING HELPERS
# ============================================================================


def _as_int(raw: Any, default: int = 0) -> int:
    if isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return default
    return default


def _as_str(raw: Any, default: str = "") -> str:
    return raw if isinstance(raw, str) else default


def _as_list(raw: Any) -> list[Any]:
    return list(raw) if isinstance(raw, list | tuple) else []


def as_flag(raw: Any) -> bool:
    """Interpret the parser's boolean-or-string flags (``true``/``"true"``)."""
    if isinstance(raw, str):
        return raw.strip().lower() == "true"
    return raw is True


def strip_function_prefix(name: str) -> str:
    """Drop the ``F~`` marker the parser puts on function names."""
    if FUNCTION_REF_PREFIX in name:
        return name[name.index("~") + 1 :]
    return name


# ============================================================================
# TOKEN NODES
# ============================================================================


@dataclass(frozen=True)
class TokenNode:
    """Fields shared by every construct. Also used as-is for unknown kinds."""

    kind: TokenKind | str
    name: str = ""
    line_number: int = 0
    tooltip: str = ""
    export: bool = False

    @property
    def is_global(self) -> bool:
        """Library definitions are declared on the sentinel line."""
        return self.line_number == GLOBAL_LINE

    def to_dict(self) -> dict[str, Any]:
        """Wire-format dict of the common fields."""
        kind = self.kind.value if isinstance(self.kind, TokenKind) else self.kind
        return {
            "type": kind,
            "name": self.name,
            "lineNumber": self.line_number,
            "toolTip": self.tooltip,
            "exportSymbol": self.export,
        }


@dataclass(frozen=True)
class CodeBlock:
    """Ordered node sequence with its own inclusive line span."""

    lines: tuple[TokenNode, ...] = ()
    line_number: int = 0
    line_end: int = 0

    @property
    def span(self) -> tuple[int, int]:
        return (self.line_number, self.line_end)


@dataclass(frozen=True)
class ValueDeclaration(TokenNode):
    """Untyped, string, number, boolean or array variable declaration."""

    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["value"] = self.value
        return data


@dataclass(frozen=True)
class Reassignment(TokenNode):
    value: Any = None


@dataclass(frozen=True)
class FunctionDeclaration(TokenNode):
    args: tuple[str, ...] = ()
    optional: tuple[bool, ...] = ()
    body: CodeBlock | None = None

    @property
    def parameters(self) -> list[Parameter]:
        """Declared parameters in declaration order."""
        params = []
        for i, raw in enumerate(self.args):
            params.append(
                Parameter(
                    name=strip_function_prefix(raw),
                    optional=self.optional[i] if i < len(self.optional) else False,
                    is_function_ref=raw.startswith(FUNCTION_REF_PREFIX),
                )
            )
        return params

    def to_dict(self) -> dict[str, Any]:
        # Bodies are never serialized; only the signature survives.
        data = super().to_dict()
        data["args"] = list(self.args)
        data["isArgOptional"] = list(self.optional)
        data["body"] = None
        return data


@dataclass(frozen=True)
class Parameter:
    name: str
    optional: bool = False
    is_function_ref: bool = False


@dataclass(frozen=True)
class LoopVariable:
    name: str = ""
    line_number: int = 0
    value: Any = None


@dataclass(frozen=True)
class ForLoop(TokenNode):
    variable: LoopVariable = field(default_factory=LoopVariable)
    array_variable: Any = None
    condition: Any = None
    increment: str | None = None
    body: CodeBlock | None = None


@dataclass(frozen=True)
class WhileLoop(TokenNode):
    condition: Any = None
    body: CodeBlock | None = None


@dataclass(frozen=True)
class IfStatement(TokenNode):
    condition: Any = None
    body: CodeBlock | None = None
    else_ifs: tuple[IfStatement, ...] = ()
    else_body: CodeBlock | None = None


@dataclass(frozen=True)
class TryCatch(TokenNode):
    try_block: CodeBlock | None = None
    catch_block: CodeBlock | None = None


@dataclass(frozen=True)
class ThrowError(TokenNode):
    message: str = ""


@dataclass(frozen=True)
class FunctionCall(TokenNode):
    function_name: Any = None
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class VariableReference(TokenNode):
    var_name: Any = None
    get_length: bool = False
    index: Any = None


@dataclass(frozen=True)
class LoopControl(TokenNode):
    loop_type: str = ""


@dataclass(frozen=True)
class Statement(TokenNode):
    lhs: Any = None
    op: str = ""
    rhs: Any = None
    statement_type: int = 0
    statement: str = ""


@dataclass(frozen=True)
class Import(TokenNode):
    symbols: tuple[str, ...] = ()
    file_path: str = ""
    file_name: str = ""


# ============================================================================
# DECODING
# ============================================================================


def decode_block(data: Any) -> CodeBlock | None:
    """Decode a ``TCodeblock`` object; anything else decodes to None."""
    if not isinstance(data, dict):
        return None
    return CodeBlock(
        lines=tuple(decode_tree(data.get("lines"))),
        line_number=_as_int(data.get("lineNumber")),
        line_end=_as_int(data.get("lineEnd")),
    )


def decode_tree(data: Any) -> list[TokenNode]:
    """Decode a token-tree list, skipping entries that are not objects."""
    nodes = []
    for item in _as_list(data):
        node = decode_node(item)
        if node is not None:
            nodes.append(node)
    return nodes


def decode_node(data: Any) -> TokenNode | None:
    """Decode one node. Returns None only when data is not an object."""
    if not isinstance(data, dict):
        return None

    raw_kind = data.get("type")
    kind = TokenKind.parse(raw_kind)
    common: dict[str, Any] = {
        "kind": kind if kind is not None else _as_str(raw_kind, "<missing>"),
        "name": _as_str(data.get("name")),
        "line_number": _as_int(data.get("lineNumber")),
        "tooltip": _as_str(data.get("toolTip")),
        "export": as_flag(data.get("exportSymbol")),
    }

    if kind in TokenKind.value_declarations():
        return ValueDeclaration(**common, value=data.get("value"))
    if kind is TokenKind.REASSIGN:
        return Reassignment(**common, value=data.get("value"))
    if kind is TokenKind.FUNCTION:
        return FunctionDeclaration(
            **common,
            args=tuple(_as_str(a) for a in _as_list(data.get("args"))),
            optional=tuple(as_flag(o) for o in _as_list(data.get("isArgOptional"))),
            body=decode_block(data.get("body")),
        )
    if kind is TokenKind.FOR_LOOP:
        raw_var = data.get("variable")
        var_data = raw_var if isinstance(raw_var, dict) else {}
        increment = data.get("increment")
        return ForLoop(
            **common,
            variable=LoopVariable(
                name=_as_str(var_data.get("name")),
                line_number=_as_int(var_data.get("lineNumber"), common["line_number"]),
                value=var_data.get("value"),
            ),
            array_variable=data.get("arrayVariable"),
            condition=data.get("condition"),
            increment=increment if isinstance(increment, str) else None,
            body=decode_block(data.get("body")),
        )
    if kind is TokenKind.WHILE_LOOP:
        return WhileLoop(
            **common, condition=data.get("condition"), body=decode_block(data.get("body"))
        )
    if kind is TokenKind.IF_STATEMENT:
        else_ifs = tuple(n for n in decode_tree(data.get("elseIfs")) if isinstance(n, IfStatement))
        return IfStatement(
            **common,
            condition=data.get("condition"),
            body=decode_block(data.get("body")),
            else_ifs=else_ifs,
            else_body=decode_block(data.get("elseBody")),
        )
    if kind is TokenKind.TRY_CATCH:
        return TryCatch(
            **common,
            try_block=decode_block(data.get("try")),
            catch_block=decode_block(data.get("catch")),
        )
    if kind is TokenKind.THROW:
        return ThrowError(**common, message=_as_str(data.get("errorMessage")))
    if kind is TokenKind.FUNC_CALL:
        return FunctionCall(
            **common,
            function_name=data.get("functionName"),
            args=tuple(_as_list(data.get("args"))),
        )
    if kind is TokenKind.VAR_REF:
        return VariableReference(
            **common,
            var_name=data.get("varName"),
            get_length=as_flag(data.get("getLength")),
            index=data.get("index"),
        )
    if kind is TokenKind.LOOP_CONTROL:
        return LoopControl(**common, loop_type=_as_str(data.get("loopType")))
    if kind is TokenKind.STATEMENT:
        return Statement(
            **common,
            lhs=data.get("lhs"),
            op=_as_str(data.get("op")),
            rhs=data.get("rhs"),
            statement_type=_as_int(data.get("statementType")),
            statement=_as_str(data.get("statement")),
        )
    if kind is TokenKind.IMPORT:
        return Import(
            **common,
            symbols=tuple(s for s in _as_list(data.get("symbols")) if isinstance(s, str)),
            file_path=_as_str(data.get("filePath")),
            file_name=_as_str(data.get("fileName")),
        )
    return TokenNode(**common)


# ============================================================================
# SYMBOL RECORDS
# ============================================================================


@dataclass(frozen=True)
class SymbolRecord:
    """One visibility-scoped occurrence of a name.

    ``scope`` is the inclusive line range in which the name is visible;
    ``GLOBAL_SCOPE`` means visible everywhere.
    """

    name: str
    node: TokenNode
    scope: tuple[int, int]
    declaration_line: int
    hover: str
    kind: SymbolKind = SymbolKind.VARIABLE
    display: HoverCase = HoverCase.ASSIGNMENT
    is_parameter: bool = False
    param_is_function_ref: bool = False

    @property
    def is_global(self) -> bool:
        return self.scope == GLOBAL_SCOPE

    @property
    def width(self) -> int:
        return self.scope[1] - self.scope[0]

    @property
    def exported(self) -> bool:
        return self.node.export

    def with_kind(self, kind: SymbolKind) -> SymbolRecord:
        return replace(self, kind=kind)

    def as_global(self) -> SymbolRecord:
        return replace(self, scope=GLOBAL_SCOPE)


SymbolIndex = MultiMap[str, SymbolRecord]
"""Per-file index: name -> records in discovery order."""
