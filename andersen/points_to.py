"""
points_to.py — Points-To Store
==============================

Per-variable, monotonically growing sets of abstract objects.  The store
is a plain data holder; the solver decides what flows where and uses the
delta returned by :meth:`PointsToStore.add_objects` to know which
variables need to be revisited.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Set

from .statements import AbstractObject


class PointsToStore:
    """Points-to sets indexed by dense variable id."""

    def __init__(self) -> None:
        self._sets: List[Set[AbstractObject]] = []
        self._names: List[str] = []
        self._insertions = 0

    # -- Allocation ----------------------------------------------------------

    def allocate(self, name: str) -> int:
        """Create an empty set for a new variable and return its id."""
        self._sets.append(set())
        self._names.append(name)
        return len(self._sets) - 1

    # -- Query ---------------------------------------------------------------

    def points_to(self, var_id: int) -> FrozenSet[AbstractObject]:
        """Return the set of objects *var_id* may point to."""
        return frozenset(self._sets[var_id])

    def is_empty(self, var_id: int) -> bool:
        return not self._sets[var_id]

    @property
    def insertions(self) -> int:
        """Total number of (variable, object) facts ever added."""
        return self._insertions

    def as_dict(self) -> Dict[str, FrozenSet[str]]:
        """Points-to sets keyed by variable name, objects by name."""
        return {
            name: frozenset(obj.name for obj in objs)
            for name, objs in zip(self._names, self._sets)
        }

    # -- Mutation ------------------------------------------------------------

    def add_objects(self, var_id: int, objects: Iterable[AbstractObject]) -> Set[AbstractObject]:
        """
        Add *objects* to the set of *var_id*.

        Returns the objects that were not already present; an empty
        result means nothing changed.
        """
        target = self._sets[var_id]
        added = {obj for obj in objects if obj not in target}
        if added:
            target |= added
            self._insertions += len(added)
        return added

    def __len__(self) -> int:
        return len(self._sets)

    def __repr__(self) -> str:
        return f"PointsToStore(variables={len(self._sets)}, facts={self._insertions})"
