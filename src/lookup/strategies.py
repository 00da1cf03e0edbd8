"""
strategies.py - Candidate implementations of "resolve each child's parent"

Every strategy has the same shape::

    setup(parents, children) -> resolve
    resolve() -> List[Relationship]

``setup`` runs once per benchmark case and may precompute indices (the dict
joins). ``resolve`` is the timed callable: it returns one ``(child, parent)``
pair per child, in child order, and raises :class:`NotFoundError` as soon as
a child's ``parent_id`` has no matching parent. Per-run caches are created
inside ``resolve`` so every invocation starts cold and returns the same list.

Strategies never mutate ``parents`` or ``children``.

    Strategy                   Cost over N children, M parents
    --------                   -------------------------------
    find                       O(N*M)   first match via next()
    for of                     O(N*M)   full scan, keep last match
    for                        O(N*M)   full scan by index
    for of cached              O(N + M^2)   slot-array cache
    for of cached - in check   O(N + M^2)   dict cache, membership test
    for cached                 O(N + M^2)   slot-array cache, index scan
    for cached - in check      O(N + M^2)   dict cache, membership test, index scan
    for of cached map          O(N + M^2)   dict cache, .get()
    dict join                  O(N + M) parents indexed once in setup
    objects                    O(N + M) parents and children both dicts;
                                        children sharing an id collapse to
                                        the last one (one pair per distinct id)
    cache func - for           O(N + M^2)   CachedFinder per run
    cache map func - for       O(N + M^2)   CachedFinderMap per run
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.records import (
    Child,
    NotFoundError,
    Parent,
    Relationship,
    define_arrays,
    index_by_id,
)
from lookup.cached_find import CachedFinder, CachedFinderMap

logger = logging.getLogger(__name__)

Resolver = Callable[[], List[Relationship]]
SetupFn = Callable[[Sequence[Parent], Sequence[Child]], Resolver]
BenchmarkCase = Tuple[str, Callable[[], Resolver]]


# ---------------------------------------------------------------------------
# Linear scans
# ---------------------------------------------------------------------------

def setup_find(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        relationships: List[Relationship] = []
        for child in children:
            parent = next((p for p in parents if p.id == child.parent_id), None)
            if parent is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, parent))
        return relationships

    return resolve


def setup_for_of(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        relationships: List[Relationship] = []
        for child in children:
            found: Optional[Parent] = None
            for parent in parents:
                if parent.id == child.parent_id:
                    found = parent

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


def setup_for(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        relationships: List[Relationship] = []
        for child in children:
            found: Optional[Parent] = None
            for i in range(len(parents)):
                if parents[i].id == child.parent_id:
                    found = parents[i]

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


# ---------------------------------------------------------------------------
# Per-run caches
# ---------------------------------------------------------------------------

def _slot(cache: List[Optional[Parent]], parent_id: int) -> Optional[Parent]:
    if 0 <= parent_id < len(cache):
        return cache[parent_id]
    return None


def _remember(cache: List[Optional[Parent]], parent: Parent) -> None:
    # slots are fixed at len(parents); ids outside that range stay uncached
    if 0 <= parent.id < len(cache):
        cache[parent.id] = parent


def setup_for_of_cached(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        cache: List[Optional[Parent]] = [None] * len(parents)
        relationships: List[Relationship] = []

        for child in children:
            found = _slot(cache, child.parent_id)
            if found is None:
                for parent in parents:
                    if parent.id == child.parent_id:
                        found = parent
                        _remember(cache, found)

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


def setup_for_of_cached_in_check(
    parents: Sequence[Parent], children: Sequence[Child]
) -> Resolver:
    def resolve() -> List[Relationship]:
        cache: Dict[int, Parent] = {}
        relationships: List[Relationship] = []

        for child in children:
            if child.parent_id in cache:
                relationships.append((child, cache[child.parent_id]))
                continue

            found: Optional[Parent] = None
            for parent in parents:
                if parent.id == child.parent_id:
                    found = parent
                    cache[found.id] = found

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


def setup_for_cached(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        cache: List[Optional[Parent]] = [None] * len(parents)
        relationships: List[Relationship] = []

        for child in children:
            found = _slot(cache, child.parent_id)
            if found is None:
                for i in range(len(parents)):
                    if parents[i].id == child.parent_id:
                        found = parents[i]
                        _remember(cache, found)

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


def setup_for_cached_in_check(
    parents: Sequence[Parent], children: Sequence[Child]
) -> Resolver:
    def resolve() -> List[Relationship]:
        cache: Dict[int, Parent] = {}
        relationships: List[Relationship] = []

        for child in children:
            if child.parent_id in cache:
                relationships.append((child, cache[child.parent_id]))
                continue

            found: Optional[Parent] = None
            for i in range(len(parents)):
                if parents[i].id == child.parent_id:
                    found = parents[i]
                    cache[found.id] = found

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


def setup_for_of_cached_map(
    parents: Sequence[Parent], children: Sequence[Child]
) -> Resolver:
    def resolve() -> List[Relationship]:
        cache: Dict[int, Parent] = {}
        relationships: List[Relationship] = []

        for child in children:
            found = cache.get(child.parent_id)
            if found is None:
                for parent in parents:
                    if parent.id == child.parent_id:
                        found = parent
                        cache[found.id] = found

            if found is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, found))
        return relationships

    return resolve


# ---------------------------------------------------------------------------
# Dict joins
# ---------------------------------------------------------------------------

def setup_dict_join(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    parents_by_id = index_by_id(parents)

    def resolve() -> List[Relationship]:
        relationships: List[Relationship] = []
        for child in children:
            parent = parents_by_id.get(child.parent_id)
            if parent is None:
                raise NotFoundError(child.parent_id, child)
            relationships.append((child, parent))
        return relationships

    return resolve


def setup_objects(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    parents_by_id = index_by_id(parents)
    children_by_id = index_by_id(children)
    if len(children_by_id) != len(children):
        logger.warning(
            "objects: %d children share ids with others; the id-keyed join "
            "returns %d relationships, one per distinct child id",
            len(children) - len(children_by_id), len(children_by_id),
        )

    def resolve() -> List[Relationship]:
        relationships: List[Relationship] = []
        for child in children_by_id.values():
            if child.parent_id in parents_by_id:
                relationships.append((child, parents_by_id[child.parent_id]))
            else:
                raise NotFoundError(child.parent_id, child)
        return relationships

    return resolve


# ---------------------------------------------------------------------------
# Memoizing finder objects
# ---------------------------------------------------------------------------

def setup_cache_func(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        cached_find = CachedFinder(parents)
        relationships: List[Relationship] = []
        for child in children:
            relationships.append((child, cached_find(child.parent_id)))
        return relationships

    return resolve


def setup_cache_map_func(parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
    def resolve() -> List[Relationship]:
        cached_find = CachedFinderMap(parents)
        relationships: List[Relationship] = []
        for child in children:
            relationships.append((child, cached_find(child.parent_id)))
        return relationships

    return resolve


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LookupStrategy:
    """A named strategy and how to build its timed callable."""
    name: str
    setup: SetupFn
    description: str = ""

    def bind(self, parents: Sequence[Parent], children: Sequence[Child]) -> Resolver:
        return self.setup(parents, children)


STRATEGIES: Tuple[LookupStrategy, ...] = (
    LookupStrategy("find", setup_find, "first match via next() over a generator"),
    LookupStrategy("for of", setup_for_of, "scan every parent, keep last match"),
    LookupStrategy("for", setup_for, "index-based scan, keep last match"),
    LookupStrategy("for of cached", setup_for_of_cached, "per-run slot-array cache"),
    LookupStrategy(
        "for of cached - in check",
        setup_for_of_cached_in_check,
        "per-run dict cache guarded by a membership test",
    ),
    LookupStrategy("for cached", setup_for_cached, "slot-array cache, index-based scan"),
    LookupStrategy(
        "for cached - in check",
        setup_for_cached_in_check,
        "dict cache guarded by a membership test, index-based scan",
    ),
    LookupStrategy("for of cached map", setup_for_of_cached_map, "per-run dict cache via .get()"),
    LookupStrategy("dict join", setup_dict_join, "parents indexed by id once in setup"),
    LookupStrategy("objects", setup_objects, "parents and children both id-keyed dicts"),
    LookupStrategy("cache func - for", setup_cache_func, "CachedFinder built per run"),
    LookupStrategy("cache map func - for", setup_cache_map_func, "CachedFinderMap built per run"),
)

_BY_NAME: Dict[str, LookupStrategy] = {s.name: s for s in STRATEGIES}


def strategy_names() -> List[str]:
    return [s.name for s in STRATEGIES]


def get_strategy(name: str) -> LookupStrategy:
    """Return the registered strategy called *name*."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(
            f"Unknown strategy {name!r}; known strategies: {', '.join(strategy_names())}"
        ) from None


def select_strategies(names: Optional[Iterable[str]] = None) -> List[LookupStrategy]:
    """Registered strategies in registry order, restricted to *names* if given."""
    wanted = list(names or [])
    if not wanted:
        return list(STRATEGIES)
    for name in wanted:
        get_strategy(name)
    return [s for s in STRATEGIES if s.name in wanted]


def benchmark_cases(
    num_parents: int,
    num_children: int,
    names: Optional[Iterable[str]] = None,
) -> List[BenchmarkCase]:
    """
    Named ``(name, setup_fn)`` pairs for the benchmark runner.

    ``setup_fn()`` takes no arguments: it generates a fresh dataset and
    returns the strategy's timed callable, so no two cases share records
    or caches.
    """
    cases: List[BenchmarkCase] = []
    for strategy in select_strategies(names):
        def case_setup(strategy: LookupStrategy = strategy) -> Resolver:
            dataset = define_arrays(num_parents, num_children)
            logger.debug(
                "Setting up %r with %d parents, %d children",
                strategy.name, dataset.num_parents, dataset.num_children,
            )
            return strategy.bind(dataset.parents, dataset.children)

        cases.append((strategy.name, case_setup))
    return cases
