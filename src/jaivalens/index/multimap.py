"""Ordered multi-value map.

A MultiMap associates each key with an ordered list of values. Values are
never deduplicated and insertion order is preserved exactly, both for keys
and for the values under a key. It backs the per-file symbol index, where
one name maps to every visibility-scoped occurrence of that name.

Example:
    >>> m: MultiMap[str, int] = MultiMap()
    >>> m.add("a", 1, 2)
    >>> m.add("a", 3)
    >>> m.get("a")
    [1, 2, 3]
    >>> m.get("missing")
    []
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class MultiMap(Generic[K, V]):
    """Mapping from a key to an ordered list of values."""

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[K, list[V]] = {}

    @classmethod
    def from_mapping(cls, data: Mapping[K, Sequence[V]]) -> MultiMap[K, V]:
        """Build a map whose keys replace, in mapping order, any earlier entry."""
        m: MultiMap[K, V] = cls()
        for key, values in data.items():
            m.set(key, *values)
        return m

    def add(self, key: K, *values: V) -> None:
        """Append values under key, creating the entry if needed."""
        self._data.setdefault(key, []).extend(values)

    def set(self, key: K, *values: V) -> None:
        """Replace the whole value list for key."""
        self._data[key] = list(values)

    def get(self, key: K) -> list[V]:
        """Return the value list for key, or an empty list."""
        return self._data.get(key, [])

    def has(self, key: K) -> bool:
        return key in self._data

    def delete(self, key: K) -> bool:
        """Remove key and all its values. Returns whether the key existed."""
        return self._data.pop(key, None) is not None

    def remove(self, key: K, value: V) -> bool:
        """Remove the first occurrence of value under key.

        The key itself is dropped once its last value is removed.
        """
        values = self._data.get(key)
        if not values:
            return False
        for i, existing in enumerate(values):
            if existing is value or existing == value:
                del values[i]
                if not values:
                    del self._data[key]
                return True
        return False

    def clear(self) -> None:
        self._data.clear()

    def filter(self, predicate: Callable[[K, list[V]], bool]) -> MultiMap[K, V]:
        """Return a new map holding the entries whose full value list passes.

        The source map is left untouched.
        """
        m: MultiMap[K, V] = MultiMap()
        for key, values in self._data.items():
            if predicate(key, list(values)):
                m.add(key, *values)
        return m

    def replace_where(self, key: K, predicate: Callable[[V], bool], replacement: V) -> bool:
        """Replace the first value under key that satisfies predicate.

        List length and order are preserved. Returns False (and changes
        nothing) when no value matches.
        """
        values = self._data.get(key)
        if not values:
            return False
        for i, value in enumerate(values):
            if predicate(value):
                values[i] = replacement
                return True
        return False

    def add_all(self, *maps: MultiMap[K, V]) -> None:
        """Union other maps into this one, appending their values map by map."""
        for other in maps:
            for key, values in other.items():
                self.add(key, *values)

    def without_empty_keys(self) -> MultiMap[K, V]:
        """Return a copy without keys whose value list is empty."""
        return self.filter(lambda _key, values: len(values) > 0)

    def copy(self) -> MultiMap[K, V]:
        m: MultiMap[K, V] = MultiMap()
        m.add_all(self)
        return m

    def keys(self) -> Iterator[K]:
        return iter(self._data.keys())

    def values(self) -> Iterator[list[V]]:
        for values in self._data.values():
            yield list(values)

    def items(self) -> Iterator[tuple[K, list[V]]]:
        for key, values in self._data.items():
            yield key, list(values)

    def size(self) -> int:
        """Number of keys."""
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data.keys()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiMap):
            return NotImplemented
        return list(self._data.items()) == list(other._data.items())

    def __repr__(self) -> str:
        return f"MultiMap({self._data!r})"
