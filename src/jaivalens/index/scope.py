"""Scope resolution over a flat, range-tagged symbol index.

There is no scope chain. Each record carries the inclusive line range it is
visible in, and visibility at a line is a predicate over that range plus
the record's declaration line (no forward references).
"""

from __future__ import annotations

from collections.abc import Iterable

from jaivalens.config.constants import GLOBAL_SCOPE
from jaivalens.index.models import SymbolIndex, SymbolRecord


def is_visible(record: SymbolRecord, line: int) -> bool:
    """Whether record is visible at line.

    Global records are visible from anywhere, including lines 0 and below.
    Otherwise the line must fall inside the scope and not precede the
    declaration.
    """
    if record.scope == GLOBAL_SCOPE:
        return True
    start, end = record.scope
    return start <= line <= end and line >= record.declaration_line


def find_visible(records: Iterable[SymbolRecord], line: int) -> SymbolRecord | None:
    """Return the first record, in list order, visible at line.

    First match wins; no preference is given to the narrowest scope.
    """
    for record in records:
        if is_visible(record, line):
            return record
    return None


def resolve(index: SymbolIndex, name: str, line: int) -> SymbolRecord | None:
    """Resolve name at line in a file's index."""
    return find_visible(index.get(name), line)


def hover_text(index: SymbolIndex, name: str, line: int) -> str | None:
    """Rendered hover text for name at line, or None when nothing is visible."""
    record = resolve(index, name, line)
    return record.hover if record is not None else None
