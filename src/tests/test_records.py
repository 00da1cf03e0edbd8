"""
===============================================================================
FIND THE THING - Dataset Generator Test Suite
===============================================================================
Tests for the parent/child records and the deterministic dataset generator:
sizes, dense parent ids, round-robin child distribution, degenerate sizes
and the id-keyed dict projections.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import dataclasses
import math

import numpy as np
import pytest

from core.constants import NUM_CHILDREN, NUM_PARENTS
from core.records import (
    Child, Dataset, NotFoundError, Parent, define_arrays, define_dicts, index_by_id,
)


# =============================================================================
# Ordered sequences
# =============================================================================

class TestDefineArrays:

    def test_default_sizes(self):
        dataset = define_arrays(NUM_PARENTS, NUM_CHILDREN)
        assert dataset.num_parents == 10
        assert dataset.num_children == 5000

    def test_parent_ids_are_dense_range(self):
        dataset = define_arrays(4, 9)
        assert [p.id for p in dataset.parents] == [0, 1, 2, 3]

    def test_child_ids_and_parent_ids(self):
        dataset = define_arrays(3, 7)
        assert [c.id for c in dataset.children] == list(range(7))
        assert [c.parent_id for c in dataset.children] == [0, 1, 2, 0, 1, 2, 0]

    @pytest.mark.parametrize("num_parents,num_children", [
        (1, 1), (3, 7), (10, 5000), (7, 3), (5, 0), (13, 100),
    ])
    def test_round_robin_distribution(self, num_parents, num_children):
        """Every parent receives floor(N/P) or ceil(N/P) children."""
        dataset = define_arrays(num_parents, num_children)
        parent_ids = np.array([c.parent_id for c in dataset.children], dtype=int)

        assert np.all((parent_ids >= 0) & (parent_ids < num_parents))
        counts = np.bincount(parent_ids, minlength=num_parents)
        lo = math.floor(num_children / num_parents)
        hi = math.ceil(num_children / num_parents)
        assert np.all((counts == lo) | (counts == hi))
        assert counts.sum() == num_children

    def test_zero_children_is_empty(self):
        dataset = define_arrays(3, 0)
        assert dataset.children == ()
        assert len(dataset.parents) == 3

    def test_zero_parents_fails_fast(self):
        with pytest.raises(ZeroDivisionError):
            define_arrays(0, 5)

    def test_zero_parents_and_children_is_empty(self):
        assert define_arrays(0, 0) == Dataset(parents=(), children=())

    def test_negative_sizes_rejected(self):
        with pytest.raises(ValueError):
            define_arrays(-1, 5)
        with pytest.raises(ValueError):
            define_arrays(3, -2)

    def test_deterministic(self):
        assert define_arrays(4, 50) == define_arrays(4, 50)

    def test_fresh_sequences_each_call(self):
        a = define_arrays(3, 7)
        b = define_arrays(3, 7)
        assert a.children is not b.children

    def test_records_are_immutable(self):
        child = Child(id=1, parent_id=0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            child.parent_id = 3


# =============================================================================
# Dict projections
# =============================================================================

class TestDefineDicts:

    def test_keys_match_ids(self):
        parents_by_id, children_by_id = define_dicts(3, 7)
        assert list(parents_by_id) == [0, 1, 2]
        assert list(children_by_id) == list(range(7))
        assert all(p.id == k for k, p in parents_by_id.items())
        assert children_by_id[5] == Child(id=5, parent_id=2)

    def test_values_match_arrays(self):
        dataset = define_arrays(3, 7)
        parents_by_id, children_by_id = define_dicts(3, 7)
        assert tuple(parents_by_id.values()) == dataset.parents
        assert tuple(children_by_id.values()) == dataset.children

    def test_index_by_id_last_duplicate_wins(self):
        first, second = Parent(id=1), Parent(id=1)
        index = index_by_id([Parent(id=0), first, second])
        assert len(index) == 2
        assert index[1] is second


# =============================================================================
# NotFoundError
# =============================================================================

class TestNotFoundError:

    def test_is_lookup_error(self):
        assert issubclass(NotFoundError, LookupError)

    def test_message_with_child(self):
        err = NotFoundError(42, Child(id=7, parent_id=42))
        assert err.item_id == 42
        assert err.child == Child(id=7, parent_id=42)
        assert "child 7" in str(err)
        assert "42" in str(err)

    def test_message_without_child(self):
        err = NotFoundError(3)
        assert err.child is None
        assert "id=3" in str(err)
