"""Serialization of the cross-file index table.

Format (JSON object keyed by absolute file path)::

    {
      "/abs/lib/arrays.jiv": {
        "push": [
          {"name": "push", "token": {...}, "range": [-1, -1], "lineNumber": -1,
           "hoverMsg": "push(array, value)", "kind": "func", "display": "function"}
        ]
      }
    }

Only exported, non-parameter records are written. Every written record is
normalized to the global scope and line, and function bodies are dropped
(signatures survive). Loading drops names left with no records, so a
dump/load cycle is lossless for everything that was written.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import structlog

from jaivalens.config.constants import GLOBAL_LINE, GLOBAL_SCOPE
from jaivalens.index.models import (
    FunctionDeclaration,
    HoverCase,
    SymbolIndex,
    SymbolKind,
    SymbolRecord,
    TokenNode,
    decode_node,
)
from jaivalens.index.multimap import MultiMap

log = structlog.get_logger(__name__)


def _normalize(record: SymbolRecord) -> SymbolRecord:
    node: TokenNode = replace(record.node, line_number=GLOBAL_LINE)
    if isinstance(node, FunctionDeclaration):
        node = replace(node, body=None)
    return replace(record, node=node, scope=GLOBAL_SCOPE, declaration_line=GLOBAL_LINE)


def record_to_dict(record: SymbolRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "token": record.node.to_dict(),
        "range": list(record.scope),
        "lineNumber": record.declaration_line,
        "hoverMsg": record.hover,
        "kind": record.kind.value,
        "display": record.display.value,
    }


def record_from_dict(data: Any) -> SymbolRecord | None:
    """Decode one persisted record; None for anything malformed."""
    if not isinstance(data, dict):
        return None
    node = decode_node(data.get("token"))
    name = data.get("name")
    if node is None or not isinstance(name, str) or not name:
        return None
    try:
        kind = SymbolKind(data.get("kind"))
    except ValueError:
        kind = SymbolKind.FUNCTION if isinstance(node, FunctionDeclaration) else SymbolKind.VARIABLE
    try:
        display = HoverCase(data.get("display"))
    except ValueError:
        display = HoverCase.FUNCTION if isinstance(node, FunctionDeclaration) else HoverCase.ASSIGNMENT
    hover = data.get("hoverMsg")
    return SymbolRecord(
        name=name,
        node=node,
        scope=GLOBAL_SCOPE,
        declaration_line=GLOBAL_LINE,
        hover=hover if isinstance(hover, str) else "",
        kind=kind,
        display=display,
    )


def persistable(index: SymbolIndex) -> SymbolIndex:
    """The normalized subset of index that the persisted format retains."""
    out: SymbolIndex = MultiMap()
    for name, records in index.items():
        kept = [_normalize(r) for r in records if r.exported and not r.is_parameter]
        if kept:
            out.set(name, *kept)
    return out


def dump_table(table: Mapping[str, SymbolIndex], *, indent: int | None = None) -> str:
    """Serialize a path -> index table."""
    payload = {
        path: {
            name: [record_to_dict(r) for r in records]
            for name, records in persistable(index).items()
        }
        for path, index in table.items()
    }
    return json.dumps(payload, indent=indent)


def load_table(text: str) -> dict[str, SymbolIndex]:
    """Deserialize a table written by dump_table.

    Malformed entries are skipped; invalid JSON yields an empty table.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        log.warning("persist.load_failed", error=str(e))
        return {}
    if not isinstance(payload, dict):
        log.warning("persist.load_failed", error="top level is not an object")
        return {}

    table: dict[str, SymbolIndex] = {}
    for path, entries in payload.items():
        if not isinstance(entries, dict):
            continue
        index: SymbolIndex = MultiMap()
        for name, raw_records in entries.items():
            if not isinstance(raw_records, list):
                continue
            records = [r for r in map(record_from_dict, raw_records) if r is not None]
            index.set(name, *records)
        table[path] = index.without_empty_keys()
    return table
