"""Index builder: walks a token tree into a flat, range-tagged symbol index.

Each declaration becomes a SymbolRecord tagged with the line range of the
block it was declared in (or the global sentinel at top level). Nested
blocks are walked with their own range into the same flat index, so a
single name can carry many records with different ranges. Visibility is
decided at query time by jaivalens.index.scope.

Construction is the only time an index is mutated: reassignments flip the
kind tag of an existing record in place. Once ``build`` returns, the index
is handed to the registry and treated as read-only.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import structlog

from jaivalens.config.constants import (
    DEFAULT_BUILTIN_NAMESPACES,
    DEFAULT_ERROR_BINDING,
    DEFAULT_MAX_STRING_LENGTH,
    GLOBAL_SCOPE,
)
from jaivalens.index.hover import format_hover
from jaivalens.index.models import (
    CodeBlock,
    ForLoop,
    FunctionDeclaration,
    HoverCase,
    IfStatement,
    Import,
    Reassignment,
    SymbolIndex,
    SymbolKind,
    SymbolRecord,
    TokenKind,
    TokenNode,
    TryCatch,
    ValueDeclaration,
    WhileLoop,
    strip_function_prefix,
)
from jaivalens.index.multimap import MultiMap

if TYPE_CHECKING:
    from jaivalens.config.models import IndexConfig

log = structlog.get_logger(__name__)

CAUGHT_ERROR_TOOLTIP = "The error message that was caught (hopefully a string)"


@dataclass(frozen=True)
class ImportResolver:
    """Turns an import's file path into the key of the cross-file table.

    Paths rooted at one of ``builtin_namespaces`` name the language's own
    library and resolve to None, as do relative paths with no importing file
    to anchor them.
    """

    builtin_namespaces: tuple[str, ...] = DEFAULT_BUILTIN_NAMESPACES

    def is_builtin(self, file_path: str) -> bool:
        parts = PurePosixPath(file_path.strip().replace("\\", "/")).parts
        return bool(parts) and parts[0] in self.builtin_namespaces

    def resolve(self, file_path: str, importer: str | None) -> str | None:
        raw = file_path.strip()
        if not raw or self.is_builtin(raw):
            return None
        if os.path.isabs(raw):
            return raw
        if importer is None:
            return None
        return os.path.abspath(os.path.join(os.path.dirname(importer), raw))


def exported_symbols(index: SymbolIndex, allow: Sequence[str] = ()) -> SymbolIndex:
    """Project a published index onto what an import may see.

    Keeps exported, non-parameter records, restricted to ``allow`` when it is
    non-empty, reduced to the first record per name with its scope forced to
    global. The source index is not modified.
    """

    def importable(record: SymbolRecord) -> bool:
        return record.exported and not record.is_parameter

    candidates = index.filter(
        lambda name, records: (not allow or name in allow) and any(map(importable, records))
    )
    merged: SymbolIndex = MultiMap()
    for name, records in candidates.items():
        first = next(r for r in records if importable(r))
        merged.set(name, first.as_global())
    return merged


class IndexBuilder:
    """Builds one file's symbol index.

    Args:
        file_path: Absolute path of the file being indexed. Anchors relative
            imports; without it relative imports contribute nothing.
        table: Already-published indexes keyed by absolute path, consulted
            for imports. Only read, never written.
        resolver: Import path resolver.
        max_string_length: Display cap for string values in hover text.
        error_binding: Name synthesized inside every catch block.

    After ``build``, ``imported_paths`` lists the table keys every resolved
    import looked up, published or not.
    """

    def __init__(
        self,
        *,
        file_path: str | None = None,
        table: Mapping[str, SymbolIndex] | None = None,
        resolver: ImportResolver | None = None,
        max_string_length: int = DEFAULT_MAX_STRING_LENGTH,
        error_binding: str = DEFAULT_ERROR_BINDING,
    ) -> None:
        self.file_path = file_path
        self.table: Mapping[str, SymbolIndex] = table if table is not None else {}
        self.resolver = resolver or ImportResolver()
        self.max_string_length = max_string_length
        self.error_binding = error_binding
        self.imported_paths: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: IndexConfig,
        *,
        file_path: str | None = None,
        table: Mapping[str, SymbolIndex] | None = None,
    ) -> IndexBuilder:
        return cls(
            file_path=file_path,
            table=table,
            resolver=ImportResolver(tuple(config.builtin_namespaces)),
            max_string_length=config.max_string_length,
            error_binding=config.error_binding,
        )

    def build(self, nodes: Iterable[TokenNode], block: CodeBlock | None = None) -> SymbolIndex:
        """Walk nodes into a fresh index.

        Args:
            nodes: Node sequence to walk.
            block: Enclosing block whose span scopes the records emitted for
                nodes; None means top level (global scope).
        """
        self.imported_paths = []
        out: SymbolIndex = MultiMap()
        scope = block.span if block is not None else GLOBAL_SCOPE
        self._walk(nodes, scope, out)
        log.debug(
            "index.build.done",
            path=self.file_path,
            names=len(out),
            records=sum(len(records) for records in out.values()),
        )
        return out

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _walk(self, nodes: Iterable[TokenNode], scope: tuple[int, int], out: SymbolIndex) -> None:
        for node in nodes:
            if isinstance(node, ValueDeclaration):
                self._visit_value(node, scope, out)
            elif isinstance(node, FunctionDeclaration):
                self._visit_function(node, scope, out)
            elif isinstance(node, ForLoop):
                self._visit_for(node, out)
            elif isinstance(node, WhileLoop):
                self._walk_block(node.body, out)
            elif isinstance(node, IfStatement):
                self._visit_if(node, out)
            elif isinstance(node, TryCatch):
                self._visit_try(node, out)
            elif isinstance(node, Reassignment):
                self._visit_reassign(node, scope, out)
            elif isinstance(node, Import):
                self._visit_import(node, out)
            # Anything else (calls, references, throws, unknown kinds) declares nothing.

    def _walk_block(self, block: CodeBlock | None, out: SymbolIndex) -> None:
        if block is not None:
            self._walk(block.lines, block.span, out)

    def _visit_value(
        self, node: ValueDeclaration, scope: tuple[int, int], out: SymbolIndex
    ) -> None:
        case = HoverCase.ARRAY_ASSIGNMENT if node.kind is TokenKind.ARRAY_VAR else HoverCase.ASSIGNMENT
        out.add(
            node.name,
            SymbolRecord(
                name=node.name,
                node=node,
                scope=scope,
                declaration_line=node.line_number,
                hover=format_hover(
                    case,
                    node.name,
                    node.value,
                    kind=node.kind,
                    is_global=node.is_global,
                    max_length=self.max_string_length,
                ),
                kind=SymbolKind.VARIABLE,
                display=case,
            ),
        )

    def _visit_function(
        self, node: FunctionDeclaration, scope: tuple[int, int], out: SymbolIndex
    ) -> None:
        name = strip_function_prefix(node.name)
        out.add(
            name,
            SymbolRecord(
                name=name,
                node=node,
                scope=scope,
                declaration_line=node.line_number,
                hover=format_hover(
                    HoverCase.FUNCTION, name, params=node.args, is_global=node.is_global
                ),
                kind=SymbolKind.FUNCTION,
                display=HoverCase.FUNCTION,
            ),
        )
        # Library functions have no user-visible body to scope parameters to.
        if node.is_global or node.body is None:
            return
        for param in node.parameters:
            out.add(
                param.name,
                SymbolRecord(
                    name=param.name,
                    node=node,
                    scope=node.body.span,
                    declaration_line=node.line_number,
                    hover=format_hover(
                        HoverCase.PARAMETER, param.name, is_function_ref=param.is_function_ref
                    ),
                    kind=SymbolKind.OPTIONAL_PARAMETER if param.optional else SymbolKind.PARAMETER,
                    display=HoverCase.PARAMETER,
                    is_parameter=True,
                    param_is_function_ref=param.is_function_ref,
                ),
            )
        self._walk_block(node.body, out)

    def _visit_for(self, node: ForLoop, out: SymbolIndex) -> None:
        self._walk_block(node.body, out)
        variable = node.variable
        if not variable.name:
            return
        # A bodiless loop spans only its own line.
        end = node.body.line_end if node.body is not None else node.line_number
        case = HoverCase.LOOP_INDEX if node.array_variable is None else HoverCase.LOOP_ELEMENT
        out.add(
            variable.name,
            SymbolRecord(
                name=variable.name,
                node=node,
                scope=(node.line_number, end),
                declaration_line=variable.line_number,
                hover=format_hover(
                    case,
                    variable.name,
                    variable.value,
                    kind=TokenKind.NUMBER_VAR,
                    max_length=self.max_string_length,
                ),
                kind=SymbolKind.VARIABLE,
                display=case,
            ),
        )

    def _visit_if(self, node: IfStatement, out: SymbolIndex) -> None:
        self._walk_block(node.body, out)
        for branch in node.else_ifs:
            self._walk_block(branch.body, out)
        self._walk_block(node.else_body, out)

    def _visit_try(self, node: TryCatch, out: SymbolIndex) -> None:
        self._walk_block(node.try_block, out)
        catch = node.catch_block
        if catch is None:
            return
        self._walk_block(catch, out)
        binding = ValueDeclaration(
            kind=TokenKind.STRING_VAR,
            name=self.error_binding,
            line_number=node.line_number,
            tooltip=CAUGHT_ERROR_TOOLTIP,
            export=False,
        )
        out.add(
            self.error_binding,
            SymbolRecord(
                name=self.error_binding,
                node=binding,
                scope=catch.span,
                declaration_line=catch.line_number,
                hover=format_hover(HoverCase.CAUGHT_ERROR, self.error_binding),
                kind=SymbolKind.VARIABLE,
                display=HoverCase.CAUGHT_ERROR,
            ),
        )

    def _visit_reassign(
        self, node: Reassignment, scope: tuple[int, int], out: SymbolIndex
    ) -> None:
        matches = [r for r in out.get(node.name) if r.scope == scope]
        if not matches:
            # TODO: decide with product whether an unmatched reassignment should
            # declare a new record or raise a diagnostic; it is dropped for now.
            log.debug("index.reassign.unmatched", name=node.name, line=node.line_number)
            return
        target = matches[0]
        out.replace_where(node.name, lambda r: r is target, target.with_kind(SymbolKind.REASSIGNED))

    def _visit_import(self, node: Import, out: SymbolIndex) -> None:
        target = self.resolver.resolve(node.file_path, self.file_path)
        if target is None:
            log.debug("index.import.skipped", path=node.file_path, importer=self.file_path)
            return
        self.imported_paths.append(target)
        published = self.table.get(target)
        if published is None:
            log.debug("index.import.unresolved", path=target, importer=self.file_path)
            return
        merged = exported_symbols(published, node.symbols)
        out.add_all(merged)
        log.debug("index.import.merged", path=target, names=len(merged))


def build_index(
    nodes: Iterable[TokenNode],
    *,
    file_path: str | None = None,
    table: Mapping[str, SymbolIndex] | None = None,
    config: IndexConfig | None = None,
) -> SymbolIndex:
    """Build a file's index with the given (or default) index config."""
    if config is None:
        builder = IndexBuilder(file_path=file_path, table=table)
    else:
        builder = IndexBuilder.from_config(config, file_path=file_path, table=table)
    return builder.build(nodes)
