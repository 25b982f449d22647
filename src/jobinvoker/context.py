"""Merged execution context handed to a job for one run."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

__all__ = ["ContextStore"]


class ContextStore(MutableMapping[str, Any]):
    """Insertion-ordered key/value store that only grows.

    Keys may be added or overwritten, never removed. Overwrites are silent:
    the last write wins. The store remembers which source wrote each key
    last so that a merged context can be explained after the fact.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None, origin: str | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._origins: dict[str, str | None] = {}
        if initial:
            for key, value in initial.items():
                self.put(key, value, origin=origin)

    def put(self, key: str, value: Any, origin: str | None = None) -> None:
        """Set ``key`` to ``value`` and record where the value came from."""
        if not isinstance(key, str):
            raise TypeError(f"Context keys must be strings, got {type(key).__name__}")
        self._data[key] = value
        self._origins[key] = origin

    def origin(self, key: str) -> str | None:
        """Return the source that last wrote ``key`` (None for direct writes).

        Raises:
            KeyError: If ``key`` is not in the store
        """
        if key not in self._data:
            raise KeyError(key)
        return self._origins[key]

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        raise TypeError("ContextStore keys cannot be removed once set")

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ContextStore({self._data!r})"
