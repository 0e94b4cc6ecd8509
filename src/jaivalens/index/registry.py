"""Per-file index table with rebuild-and-swap publishing.

The table maps an absolute file path to that file's published symbol
index. Registering a file builds a fresh index (reading other files'
published indexes for imports) and then replaces the previous entry in a
single assignment, so readers only ever see a complete index. Published
indexes are never mutated.

Ordering between files (indexing a dependency before its dependents) is the
caller's job: an import of a file that has not been registered yet merges
nothing.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from jaivalens.config.models import JaivaLensConfig
from jaivalens.core.errors import InternalError, TokenTreeError
from jaivalens.index.builder import IndexBuilder
from jaivalens.index.completion import CompletionItem, complete, keyword_completions
from jaivalens.index.models import SymbolIndex, TokenNode, decode_tree
from jaivalens.index.multimap import MultiMap
from jaivalens.index.scope import hover_text

log = structlog.get_logger(__name__)


def load_token_tree_file(path: Path) -> Any:
    """Read a token-tree JSON dump written by the external parser.

    Raises:
        TokenTreeError: If the file is missing, unreadable or not JSON.
    """
    if not path.exists():
        raise TokenTreeError.file_not_found(str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TokenTreeError.unreadable(str(path), str(e)) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise TokenTreeError.parse_error(str(path), str(e)) from e


@dataclass
class FileEntry:
    """A registered file: its decoded tree and the index built from it.

    ``imports`` maps every table key the build looked up to the index
    published there at the time (None when nothing was).
    """

    path: str
    tokens: list[TokenNode]
    index: SymbolIndex
    imports: dict[str, SymbolIndex | None] = field(default_factory=dict)


@dataclass
class IndexTable(Mapping[str, SymbolIndex]):
    """Cross-file table of published indexes, keyed by absolute path.

    Behaves as a read-only mapping of path -> index, which is what the
    index builder consults for imports. Library symbols (loaded from a
    persisted table) live alongside user files under their own paths.
    """

    config: JaivaLensConfig = field(default_factory=JaivaLensConfig)
    _files: dict[str, FileEntry] = field(default_factory=dict)
    _library: dict[str, SymbolIndex] = field(default_factory=dict)

    # Mapping protocol -------------------------------------------------

    def __getitem__(self, path: str) -> SymbolIndex:
        entry = self._files.get(path)
        if entry is not None:
            return entry.index
        return self._library[path]

    def __iter__(self) -> Iterator[str]:
        yield from self._files
        yield from (p for p in self._library if p not in self._files)

    def __len__(self) -> int:
        return len(self._files) + sum(1 for p in self._library if p not in self._files)

    # Publishing -------------------------------------------------------

    def load_library(self, table: Mapping[str, SymbolIndex]) -> None:
        """Publish precomputed library indexes (e.g. from persist.load_table)."""
        self._library = {**self._library, **table}
        log.debug("registry.library_loaded", files=len(table))

    def register(self, path: str | os.PathLike[str], tree: Any) -> SymbolIndex:
        """Build and publish the index for path from a raw token tree.

        A tree equal to the one already registered keeps the published index,
        unless a file it imports has been republished since. A malformed
        tree, or a build that fails, publishes an empty index for this file
        only.
        """
        key = os.path.abspath(os.fspath(path))
        tokens = decode_tree(tree)
        if not tokens and tree not in (None, []):
            log.warning("registry.decode_failed", path=key, tree_type=type(tree).__name__)

        previous = self._files.get(key)
        if previous is not None and previous.tokens == tokens and self._imports_current(previous):
            log.debug("registry.unchanged", path=key)
            return previous.index

        builder = IndexBuilder.from_config(self.config.index, file_path=key, table=self)
        try:
            index = builder.build(tokens)
        except Exception as e:
            error = InternalError.unexpected("index build failed", path=key, cause=repr(e))
            log.exception("registry.build_failed", **error.to_dict())
            index = MultiMap()
        imports = {target: self.get(target) for target in builder.imported_paths}
        self._files[key] = FileEntry(path=key, tokens=tokens, index=index, imports=imports)
        log.debug("registry.publish", path=key, names=len(index), imports=len(imports))
        return index

    def _imports_current(self, entry: FileEntry) -> bool:
        return all(self.get(target) is seen for target, seen in entry.imports.items())

    def register_text(self, path: str | os.PathLike[str], text: str) -> SymbolIndex:
        """Register from the parser's JSON output; invalid JSON indexes as empty."""
        try:
            tree = json.loads(text)
        except json.JSONDecodeError as e:
            log.warning("registry.decode_failed", path=os.fspath(path), error=str(e))
            tree = []
        return self.register(path, tree)

    def forget(self, path: str | os.PathLike[str]) -> bool:
        """Drop a file's published index. Returns whether it was registered."""
        return self._files.pop(os.path.abspath(os.fspath(path)), None) is not None

    # Queries ----------------------------------------------------------

    def index_for(self, path: str | os.PathLike[str]) -> SymbolIndex:
        """Published index for path, or an empty index."""
        return self.get(os.path.abspath(os.fspath(path)), MultiMap())

    def hover(self, path: str | os.PathLike[str], name: str, line: int) -> str | None:
        """Hover text for name at line of path, or None."""
        return hover_text(self.index_for(path), name, line)

    def completions(self, path: str | os.PathLike[str], line: int) -> list[CompletionItem]:
        """Suggestions for line of path, keyword suggestions first when enabled."""
        index = self.index_for(path)
        extra: list[CompletionItem] = []
        if self.config.completion.include_keywords:
            for library_index in self._library.values():
                extra.extend(keyword_completions(library_index, self.config.index.keywords_symbol))
            extra.extend(keyword_completions(index, self.config.index.keywords_symbol))
        return complete(index, line, extra=_dedupe(extra))


def _dedupe(items: list[CompletionItem]) -> list[CompletionItem]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item.label not in seen:
            seen.add(item.label)
            out.append(item)
    return out
