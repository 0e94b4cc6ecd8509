"""Shared fixtures for index tests.

Token trees are written in the parser's JSON wire format so the tests
exercise decoding as well as indexing.
"""

from __future__ import annotations

from typing import Any

import pytest

from jaivalens.index.builder import IndexBuilder
from jaivalens.index.models import SymbolIndex, decode_tree


class Tree:
    """Builders for wire-format token-tree nodes."""

    @staticmethod
    def block(lines: list[dict[str, Any]], start: int, end: int) -> dict[str, Any]:
        return {"type": "TCodeblock", "lines": lines, "lineNumber": start, "lineEnd": end}

    @staticmethod
    def var(
        name: str,
        line: int,
        value: Any = None,
        *,
        kind: str = "TNumberVar",
        export: bool = False,
    ) -> dict[str, Any]:
        return {
            "type": kind,
            "name": name,
            "lineNumber": line,
            "value": value,
            "toolTip": "",
            "exportSymbol": export,
        }

    @staticmethod
    def string(name: str, line: int, value: str, *, export: bool = False) -> dict[str, Any]:
        return Tree.var(name, line, value, kind="TStringVar", export=export)

    @staticmethod
    def reassign(name: str, line: int, value: Any = None) -> dict[str, Any]:
        return {"type": "TVarReassign", "name": name, "lineNumber": line, "value": value}

    @staticmethod
    def function(
        name: str,
        line: int,
        args: list[str],
        body: dict[str, Any] | None,
        *,
        optional: list[bool] | None = None,
        export: bool = False,
    ) -> dict[str, Any]:
        return {
            "type": "TFunction",
            "name": f"F~{name}",
            "lineNumber": line,
            "args": args,
            "isArgOptional": optional if optional is not None else [False] * len(args),
            "body": body,
            "exportSymbol": export,
        }

    @staticmethod
    def for_loop(
        var_name: str,
        line: int,
        body: dict[str, Any] | None,
        *,
        array: Any = None,
        value: Any = 0,
    ) -> dict[str, Any]:
        return {
            "type": "TForLoop",
            "lineNumber": line,
            "variable": {"type": "TNumberVar", "name": var_name, "lineNumber": line, "value": value},
            "arrayVariable": array,
            "body": body,
        }

    @staticmethod
    def if_(
        line: int,
        body: dict[str, Any],
        *,
        else_ifs: list[dict[str, Any]] | None = None,
        else_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return {
            "type": "TIfStatement",
            "lineNumber": line,
            "condition": None,
            "body": body,
            "elseIfs": else_ifs or [],
            "elseBody": else_body,
        }

    @staticmethod
    def try_(line: int, try_block: dict[str, Any], catch: dict[str, Any] | None) -> dict[str, Any]:
        return {"type": "TTryCatchStatement", "lineNumber": line, "try": try_block, "catch": catch}

    @staticmethod
    def import_(path: str, line: int = 1, symbols: list[str] | None = None) -> dict[str, Any]:
        return {
            "type": "TImport",
            "lineNumber": line,
            "filePath": path,
            "fileName": path.rsplit("/", 1)[-1],
            "symbols": symbols or [],
        }


@pytest.fixture
def tree() -> type[Tree]:
    """Wire-format node builders."""
    return Tree


@pytest.fixture
def build():
    """Decode a wire-format tree and index it as a file with no imports."""

    def _build(nodes: list[dict[str, Any]], **kwargs: Any) -> SymbolIndex:
        return IndexBuilder(**kwargs).build(decode_tree(nodes))

    return _build
