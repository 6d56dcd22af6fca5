"""Ordered set of instruments still accumulating toward window closure."""

from __future__ import annotations

from typing import Generic, Hashable, Iterator, TypeVar

T = TypeVar("T", bound=Hashable)


class MonitoredSet(Generic[T]):
    """Two views over the same elements.

    - ``_ordered`` preserves insertion order and allows tail-to-head
      iteration while items are being removed.
    - ``_members`` answers "already monitored?" in O(1).

    Both views are only ever mutated together.
    """

    __slots__ = ("_ordered", "_members")

    def __init__(self) -> None:
        self._ordered: list[T] = []
        self._members: set[T] = set()

    def add(self, item: T) -> bool:
        """Add ``item``; return False if it was already monitored."""
        if item in self._members:
            return False
        self._ordered.append(item)
        self._members.add(item)
        return True

    def discard(self, item: T) -> bool:
        """Remove ``item`` from both views; return False if it was absent."""
        if item not in self._members:
            return False
        self._members.remove(item)
        self._ordered.remove(item)
        return True

    def iter_reverse(self) -> Iterator[T]:
        """Iterate tail to head.

        The current tail element may be discarded by the caller during
        iteration; earlier elements are unaffected.
        """
        for i in range(len(self._ordered) - 1, -1, -1):
            if i < len(self._ordered):
                yield self._ordered[i]

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._ordered))
