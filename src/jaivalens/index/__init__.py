"""Symbol index for Jaiva token trees.

Builds a flat, range-tagged symbol table per file and answers hover
("what is NAME at line L?") and completion ("what is visible at line L?")
queries against it.
"""

from jaivalens.index.builder import ImportResolver, IndexBuilder, build_index, exported_symbols
from jaivalens.index.completion import CompletionItem, CompletionKind, complete, keyword_completions
from jaivalens.index.hover import format_hover, render_value
from jaivalens.index.models import (
    SymbolIndex,
    SymbolKind,
    SymbolRecord,
    TokenKind,
    TokenNode,
    decode_tree,
)
from jaivalens.index.multimap import MultiMap
from jaivalens.index.persist import dump_table, load_table
from jaivalens.index.registry import IndexTable, load_token_tree_file
from jaivalens.index.scope import find_visible, hover_text, is_visible, resolve

__all__ = [
    # Container
    "MultiMap",
    # Models
    "SymbolIndex",
    "SymbolKind",
    "SymbolRecord",
    "TokenKind",
    "TokenNode",
    "decode_tree",
    # Building
    "ImportResolver",
    "IndexBuilder",
    "build_index",
    "exported_symbols",
    # Queries
    "find_visible",
    "hover_text",
    "is_visible",
    "resolve",
    "CompletionItem",
    "CompletionKind",
    "complete",
    "keyword_completions",
    # Rendering
    "format_hover",
    "render_value",
    # Table
    "IndexTable",
    "load_token_tree_file",
    "dump_table",
    "load_table",
]
