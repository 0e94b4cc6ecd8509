"""Completion suggestions for a line of a file.

For every name in the index, the first record visible at the query line
(same predicate as hover) is a candidate. Candidates are ordered by
scope width, narrowest first. The global sentinel has width 0, so global
and imported names lead, followed by locals from the tightest block out.
Functions insert as a call template with one snippet placeholder per
declared parameter; everything else inserts its name.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from jaivalens.config.constants import DEFAULT_KEYWORDS_SYMBOL
from jaivalens.index.models import FunctionDeclaration, SymbolIndex, SymbolRecord, ValueDeclaration
from jaivalens.index.scope import find_visible


class CompletionKind(str, Enum):
    FUNCTION = "function"
    VARIABLE = "variable"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class CompletionItem:
    """One suggestion. ``insert_text`` uses ``${n:name}`` snippet placeholders."""

    label: str
    kind: CompletionKind
    detail: str
    insert_text: str

    def to_dict(self) -> dict[str, str]:
        return {
            "label": self.label,
            "kind": self.kind.value,
            "detail": self.detail,
            "insertText": self.insert_text,
        }


def _escape_snippet(text: str) -> str:
    return text.replace("\\", "\\\\").replace("$", "\\$").replace("}", "\\}")


def parameter_placeholders(node: FunctionDeclaration) -> str:
    """``${1:a}, ${2:b}`` for a function declared with parameters a and b."""
    return ", ".join(
        f"${{{i}:{_escape_snippet(param.name)}}}" for i, param in enumerate(node.parameters, start=1)
    )


def visible_records(index: SymbolIndex, line: int) -> list[SymbolRecord]:
    """Records visible at line, one per name, by ascending scope width.

    Ties keep index order.
    """
    visible = []
    for _name, records in index.items():
        record = find_visible(records, line)
        if record is not None:
            visible.append(record)
    return sorted(visible, key=lambda record: record.width)


def to_completion(record: SymbolRecord) -> CompletionItem:
    """Turn a visible record into a suggestion.

    Parameter records point at their function's node but insert as plain
    identifiers, never as a call template.
    """
    node = record.node
    if isinstance(node, FunctionDeclaration) and not record.is_parameter:
        return CompletionItem(
            label=record.name,
            kind=CompletionKind.FUNCTION,
            detail=f"Inserts {record.name} function",
            insert_text=f"{_escape_snippet(record.name)}({parameter_placeholders(node)})",
        )
    return CompletionItem(
        label=record.name,
        kind=CompletionKind.VARIABLE,
        detail=f"Inserts {record.name} variable/parameter",
        insert_text=_escape_snippet(record.name),
    )


def keyword_completions(
    index: SymbolIndex, keywords_symbol: str = DEFAULT_KEYWORDS_SYMBOL
) -> list[CompletionItem]:
    """Keyword suggestions from the library's reserved-keyword array, if indexed."""
    records = index.get(keywords_symbol)
    if not records or not isinstance(records[0].node, ValueDeclaration):
        return []
    value = records[0].node.value
    if not isinstance(value, list):
        return []
    return [
        CompletionItem(
            label=keyword,
            kind=CompletionKind.KEYWORD,
            detail="Inserts keyword",
            insert_text=keyword,
        )
        for keyword in value
        if isinstance(keyword, str) and keyword
    ]


def complete(
    index: SymbolIndex,
    line: int,
    *,
    extra: Iterable[CompletionItem] = (),
) -> list[CompletionItem]:
    """All suggestions for line: ``extra`` first, then symbol suggestions.

    Args:
        index: The file's published symbol index.
        line: 1-based query line.
        extra: Suggestions from other sources (keywords, snippets).
    """
    items = list(extra)
    items.extend(to_completion(record) for record in visible_records(index, line))
    return items
