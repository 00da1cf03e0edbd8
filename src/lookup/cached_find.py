"""
Memoizing finders: resolve a record by id, scanning once per distinct id.

Two cache layouts are provided so they can be benchmarked against each other:

    CachedFinder     -- slot array: a list of len(items) indexed directly by
                        id. Ids outside it fall back to scanning every time.
    CachedFinderMap  -- a dict keyed by id.

Both own their cache. A finder is built for one run and discarded with it;
nothing is shared between strategies or between runs.

Complexity (N lookups over M items)
-----------------------------------
Cold: O(N*M) worst case. Once all M items are cached each lookup is O(1),
so a run over N children with few distinct parents costs O(N + M^2).
"""

from __future__ import annotations

from typing import Dict, Generic, List, Optional, Sequence

from core.records import NotFoundError, T


class CachedFinder(Generic[T]):
    """Linear-scan finder memoizing hits in a list indexed by id.

    The slot list is sized once to ``len(items)``, which covers dense ids
    ``0..M-1``. Ids outside that range (negative, sparse or huge) are still
    resolved by scanning but are never stored.
    """

    def __init__(self, items: Sequence[T]) -> None:
        self._items = items
        self._slots: List[Optional[T]] = [None] * len(items)
        self._cached = 0

    def __call__(self, item_id: int) -> T:
        return self.find(item_id)

    @property
    def cache_size(self) -> int:
        return self._cached

    def find(self, item_id: int) -> T:
        """Return the first item whose id equals *item_id*.

        Raises
        ------
        NotFoundError
            If no item carries *item_id*.
        """
        if 0 <= item_id < len(self._slots):
            cached = self._slots[item_id]
            if cached is not None:
                return cached

        for item in self._items:
            if item.id == item_id:
                self._store(item)
                return item

        raise NotFoundError(item_id)

    def _store(self, item: T) -> None:
        if not 0 <= item.id < len(self._slots) or self._slots[item.id] is not None:
            return
        self._slots[item.id] = item
        self._cached += 1


class CachedFinderMap(Generic[T]):
    """Linear-scan finder memoizing hits in a dict keyed by id."""

    def __init__(self, items: Sequence[T]) -> None:
        self._items = items
        self._cache: Dict[int, T] = {}

    def __call__(self, item_id: int) -> T:
        return self.find(item_id)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def find(self, item_id: int) -> T:
        cached = self._cache.get(item_id)
        if cached is not None:
            return cached

        for item in self._items:
            if item.id == item_id:
                self._cache[item.id] = item
                return item

        raise NotFoundError(item_id)
