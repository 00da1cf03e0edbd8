"""
Parent / child records and the synthetic dataset generator.

Structures
----------
Parent        -- A record identified by ``id``.
Child         -- A record pointing at its parent through ``parent_id``.
Relationship  -- The ``(child, parent)`` pair every lookup strategy produces.
Dataset       -- Ordered parents and children generated together.
NotFoundError -- Raised when a child's parent cannot be resolved.

Generation is deterministic: parent ids are the dense range
``[0, num_parents)`` and child ``i`` points at parent ``i % num_parents``,
so every parent receives ``floor(N/P)`` or ``ceil(N/P)`` children.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple, TypeVar


@dataclass(frozen=True)
class Parent:
    """A parent record."""
    id: int


@dataclass(frozen=True)
class Child:
    """A child record; ``parent_id`` references a :class:`Parent` id."""
    id: int
    parent_id: int


Relationship = Tuple[Child, Parent]

T = TypeVar("T", Parent, Child)


class NotFoundError(LookupError):
    """No record exists for the requested id.

    Attributes
    ----------
    item_id : int
        The id that could not be resolved.
    child : Child or None
        The child whose parent was being resolved, when known.
    """

    def __init__(self, item_id: int, child: Optional[Child] = None) -> None:
        self.item_id = item_id
        self.child = child
        if child is not None:
            message = f"Parent not found for child {child.id} (parent_id={item_id})"
        else:
            message = f"Item not found (id={item_id})"
        super().__init__(message)


@dataclass(frozen=True)
class Dataset:
    """Parents and children generated for one strategy setup."""
    parents: Tuple[Parent, ...]
    children: Tuple[Child, ...]

    @property
    def num_parents(self) -> int:
        return len(self.parents)

    @property
    def num_children(self) -> int:
        return len(self.children)


def define_arrays(num_parents: int, num_children: int) -> Dataset:
    """Build the ordered parent and child sequences.

    Parameters
    ----------
    num_parents : int
        Number of parents. Must be positive whenever ``num_children > 0``;
        zero parents with children fails with :class:`ZeroDivisionError`.
    num_children : int
        Number of children, may be zero.

    Returns
    -------
    Dataset
    """
    if num_parents < 0 or num_children < 0:
        raise ValueError(
            f"Dataset sizes must be non-negative "
            f"(num_parents={num_parents}, num_children={num_children})"
        )

    parents = tuple(Parent(id=i) for i in range(num_parents))
    # len(parents) == 0 raises ZeroDivisionError here, before any lookup runs
    children = tuple(
        Child(id=i, parent_id=parents[i % len(parents)].id)
        for i in range(num_children)
    )
    return Dataset(parents=parents, children=children)


def index_by_id(items: Iterable[T]) -> Dict[int, T]:
    """Fold records into an id-keyed dict. Later duplicates win."""
    index: Dict[int, T] = {}
    for item in items:
        index[item.id] = item
    return index


def define_dicts(
    num_parents: int, num_children: int
) -> Tuple[Dict[int, Parent], Dict[int, Child]]:
    """Id-keyed projections of :func:`define_arrays`.

    Insertion order follows the generated sequences, so iterating the child
    dict visits children in id order.
    """
    dataset = define_arrays(num_parents, num_children)
    return index_by_id(dataset.parents), index_by_id(dataset.children)
