"""
===============================================================================
FIND THE THING - Lookup Strategy Test Suite
===============================================================================
Every strategy must produce the same relationships, in child order, for any
valid dataset; must fail with NotFoundError on an orphan child without
returning partial output; must be idempotent across repeated invocations;
and must leave its inputs untouched.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from core.constants import NUM_CHILDREN, NUM_PARENTS
from core.records import Child, NotFoundError, Parent, define_arrays
from lookup.strategies import (
    STRATEGIES,
    benchmark_cases,
    get_strategy,
    select_strategies,
    strategy_names,
)


STRATEGY_IDS = [s.name for s in STRATEGIES]


def reference_join(parents, children):
    """Obvious nested-loop join used as the oracle."""
    return [(c, next(p for p in parents if p.id == c.parent_id)) for c in children]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def small_dataset():
    """Three parents, seven children."""
    return define_arrays(3, 7)


@pytest.fixture(params=STRATEGIES, ids=STRATEGY_IDS)
def strategy(request):
    return request.param


# =============================================================================
# Correctness
# =============================================================================

class TestRelationships:

    def test_worked_example(self, strategy):
        parents = [Parent(id=0), Parent(id=1)]
        children = [Child(id=0, parent_id=1), Child(id=1, parent_id=0)]

        result = strategy.bind(parents, children)()

        assert result == [
            (Child(id=0, parent_id=1), Parent(id=1)),
            (Child(id=1, parent_id=0), Parent(id=0)),
        ]

    def test_length_and_pairing(self, strategy, small_dataset):
        result = strategy.bind(small_dataset.parents, small_dataset.children)()

        assert len(result) == len(small_dataset.children)
        for i, (child, parent) in enumerate(result):
            assert child is small_dataset.children[i]
            assert parent.id == child.parent_id
            assert parent is small_dataset.parents[child.parent_id]

    def test_matches_reference(self, strategy):
        dataset = define_arrays(NUM_PARENTS, NUM_CHILDREN)
        result = strategy.bind(dataset.parents, dataset.children)()
        assert result == reference_join(dataset.parents, dataset.children)

    def test_empty_children(self, strategy):
        dataset = define_arrays(3, 0)
        assert strategy.bind(dataset.parents, dataset.children)() == []

    def test_non_dense_parent_ids(self, strategy):
        parents = [Parent(id=40), Parent(id=7), Parent(id=19)]
        children = [Child(id=i, parent_id=pid) for i, pid in enumerate([7, 40, 19, 7])]

        result = strategy.bind(parents, children)()

        assert result == reference_join(parents, children)

    def test_huge_parent_id(self, strategy):
        parents = [Parent(id=0), Parent(id=10**12)]
        children = [Child(id=i, parent_id=pid) for i, pid in enumerate([10**12, 0, 10**12])]

        result = strategy.bind(parents, children)()

        assert result == reference_join(parents, children)

    def test_parents_order_independent(self, strategy):
        parents = [Parent(id=2), Parent(id=0), Parent(id=1)]
        children = define_arrays(3, 7).children
        assert strategy.bind(parents, children)() == reference_join(parents, children)


class TestCrossStrategyEquivalence:
    """All strategies return pairwise-equal sequences for a fixed dataset."""

    @pytest.mark.parametrize("num_parents,num_children", [(3, 7), (NUM_PARENTS, NUM_CHILDREN)])
    def test_all_strategies_agree(self, num_parents, num_children):
        dataset = define_arrays(num_parents, num_children)
        outputs = {
            s.name: s.bind(dataset.parents, dataset.children)()
            for s in STRATEGIES
        }
        baseline = outputs["find"]
        for name, output in outputs.items():
            assert len(output) == len(baseline), name
            for i, (got, expected) in enumerate(zip(output, baseline)):
                assert got == expected, f"{name} differs at index {i}"


# =============================================================================
# Failure and state
# =============================================================================

class TestOrphanChild:

    @pytest.mark.parametrize("orphan_parent_id", [3, 99, -1])
    def test_orphan_raises_not_found(self, strategy, orphan_parent_id):
        parents = list(define_arrays(3, 0).parents)
        children = list(define_arrays(3, 4).children)
        children.append(Child(id=4, parent_id=orphan_parent_id))

        resolve = strategy.bind(parents, children)
        with pytest.raises(NotFoundError) as excinfo:
            resolve()

        assert excinfo.value.item_id == orphan_parent_id

    def test_orphan_first_child(self, strategy):
        resolve = strategy.bind([Parent(id=0)], [Child(id=0, parent_id=1), Child(id=1, parent_id=0)])
        with pytest.raises(NotFoundError):
            resolve()

    def test_no_parents_with_children(self, strategy):
        with pytest.raises(NotFoundError):
            strategy.bind([], [Child(id=0, parent_id=0)])()


class TestState:

    def test_idempotent(self, strategy, small_dataset):
        resolve = strategy.bind(small_dataset.parents, small_dataset.children)
        first = resolve()
        second = resolve()
        assert first == second
        assert first is not second

    def test_inputs_not_mutated(self, strategy):
        dataset = define_arrays(4, 11)
        parents = list(dataset.parents)
        children = list(dataset.children)

        strategy.bind(parents, children)()

        assert parents == list(dataset.parents)
        assert children == list(dataset.children)

    def test_failed_run_does_not_poison_next(self, strategy):
        parents = [Parent(id=0), Parent(id=1)]
        children = [Child(id=0, parent_id=1), Child(id=1, parent_id=5)]
        resolve = strategy.bind(parents, children)
        for _ in range(2):
            with pytest.raises(NotFoundError):
                resolve()


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:

    def test_names_unique(self):
        names = strategy_names()
        assert len(names) == len(set(names))

    def test_expected_strategies_registered(self):
        names = set(strategy_names())
        for expected in ["find", "for of", "for", "for of cached", "for of cached - in check",
                         "for cached", "for cached - in check", "for of cached map",
                         "dict join", "objects", "cache func - for", "cache map func - for"]:
            assert expected in names

    def test_get_strategy(self):
        assert get_strategy("dict join").name == "dict join"

    def test_get_unknown_strategy(self):
        with pytest.raises(KeyError, match="known strategies"):
            get_strategy("binary search")

    def test_select_all_by_default(self):
        assert select_strategies() == list(STRATEGIES)
        assert select_strategies([]) == list(STRATEGIES)

    def test_select_keeps_registry_order(self):
        selected = select_strategies(["objects", "find"])
        assert [s.name for s in selected] == ["find", "objects"]

    def test_select_unknown_raises(self):
        with pytest.raises(KeyError):
            select_strategies(["find", "nope"])


class TestBenchmarkCases:

    def test_case_per_strategy(self):
        cases = benchmark_cases(3, 7)
        assert [name for name, _ in cases] == strategy_names()

    def test_setup_returns_working_callable(self):
        dataset = define_arrays(3, 7)
        expected = reference_join(dataset.parents, dataset.children)
        for name, setup in benchmark_cases(3, 7):
            resolve = setup()
            assert resolve() == expected, name

    def test_each_setup_generates_fresh_dataset(self):
        (_, setup_a), (_, setup_b) = benchmark_cases(2, 4, ["find", "for"])
        out_a = setup_a()()
        out_b = setup_b()()
        assert out_a == out_b
        assert out_a[0][0] is not out_b[0][0]

    def test_zero_children_cases(self):
        for _, setup in benchmark_cases(3, 0):
            assert setup()() == []


class TestDuplicateChildIds:

    def test_objects_collapses_shared_ids(self, caplog):
        children = [Child(id=0, parent_id=1), Child(id=0, parent_id=0)]
        parents = [Parent(id=0), Parent(id=1)]

        with caplog.at_level("WARNING", logger="lookup.strategies"):
            resolve = get_strategy("objects").bind(parents, children)

        assert resolve() == [(Child(id=0, parent_id=0), Parent(id=0))]
        assert "share ids" in caplog.text

    def test_objects_quiet_for_unique_ids(self, caplog, small_dataset):
        with caplog.at_level("WARNING", logger="lookup.strategies"):
            get_strategy("objects").bind(small_dataset.parents, small_dataset.children)
        assert caplog.text == ""

    def test_sequence_strategies_keep_every_child(self):
        children = [Child(id=0, parent_id=1), Child(id=0, parent_id=0)]
        parents = [Parent(id=0), Parent(id=1)]
        for strategy in STRATEGIES:
            if strategy.name == "objects":
                continue
            assert strategy.bind(parents, children)() == reference_join(parents, children)
