"""
constraint_graph.py — Constraint Graph
======================================

Nodes are program variables; edges encode the constraints:

  - Base   ``p = &a``  is applied eagerly: obj(a) goes straight into pts(p).
  - Simple ``p = q``   becomes a standing copy edge q → p.
  - Load   ``p = *q``  and Store ``*p = q`` are *latent*.  They are kept in
    an index keyed by the pivot (the dereferenced variable) and only turn
    into copy edges when the solver sees a concrete object in the pivot's
    points-to set.

The graph owns the :class:`~andersen.points_to.PointsToStore` of its run,
so two graphs never share state.
"""

from __future__ import annotations

import enum
import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .points_to import PointsToStore
from .statements import AbstractObject, Constraint, ConstraintKind, Variable

logger = logging.getLogger(__name__)


class EdgeOrigin(enum.Enum):
    """Where a copy edge came from."""
    STATIC  = "copy"       # written as ``p = q``
    DERIVED = "derived"    # materialized from a load or store


class ConstraintGraph:
    """Variables, copy edges and the pivot index of complex constraints."""

    def __init__(self) -> None:
        self._variables: List[Variable] = []
        self._ids: Dict[str, int] = {}
        self._objects: Dict[int, AbstractObject] = {}
        self._store = PointsToStore()
        # Adjacency: source id → {target id: origin}
        self._copy_edges: Dict[int, Dict[int, EdgeOrigin]] = defaultdict(dict)
        # Pivot index: pivot id → destinations of ``dst = *pivot``
        self._loads: Dict[int, List[int]] = defaultdict(list)
        # Pivot index: pivot id → sources of ``*pivot = src``
        self._stores: Dict[int, List[int]] = defaultdict(list)
        self._constraints: List[Constraint] = []

    @classmethod
    def from_constraints(cls, constraints: Iterable[Constraint]) -> "ConstraintGraph":
        """Build a graph in a single pass over *constraints*."""
        graph = cls()
        for constraint in constraints:
            graph.add_constraint(constraint)
        logger.debug("Built %r", graph)
        return graph

    # -- Construction --------------------------------------------------------

    def add_variable(self, name: str) -> int:
        """Return the id of *name*, allocating a new variable on first sight."""
        var_id = self._ids.get(name)
        if var_id is not None:
            return var_id
        var_id = self._store.allocate(name)
        self._ids[name] = var_id
        self._variables.append(Variable(id=var_id, name=name))
        return var_id

    def object_for(self, var_id: int) -> AbstractObject:
        """The abstract object standing for the storage of *var_id*."""
        obj = self._objects.get(var_id)
        if obj is None:
            obj = AbstractObject(var_id=var_id, name=self._variables[var_id].name)
            self._objects[var_id] = obj
        return obj

    def add_constraint(self, constraint: Constraint) -> None:
        left = self.add_variable(constraint.left)
        right = self.add_variable(constraint.right)
        self._constraints.append(constraint)

        if constraint.kind is ConstraintKind.BASE:
            self._store.add_objects(left, (self.object_for(right),))
        elif constraint.kind is ConstraintKind.SIMPLE:
            self.add_copy_edge(right, left, EdgeOrigin.STATIC)
        elif constraint.kind is ConstraintKind.LOAD:
            self._loads[self._ids[constraint.pivot]].append(left)
        elif constraint.kind is ConstraintKind.STORE:
            self._stores[self._ids[constraint.pivot]].append(right)

    def add_copy_edge(self, source: int, target: int, origin: EdgeOrigin = EdgeOrigin.DERIVED) -> bool:
        """
        Record the obligation pts(source) ⊆ pts(target).

        Returns True if the edge was new.
        """
        targets = self._copy_edges[source]
        if target in targets:
            return False
        targets[target] = origin
        return True

    # -- Query ---------------------------------------------------------------

    @property
    def store(self) -> PointsToStore:
        return self._store

    @property
    def variables(self) -> List[Variable]:
        return list(self._variables)

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constraints)

    @property
    def num_objects(self) -> int:
        return len(self._objects)

    def variable(self, var_id: int) -> Variable:
        return self._variables[var_id]

    def id_of(self, name: str) -> Optional[int]:
        return self._ids.get(name)

    def successors(self, var_id: int) -> List[int]:
        """Targets of the copy edges leaving *var_id*."""
        return list(self._copy_edges.get(var_id, ()))

    def loads_on(self, pivot: int) -> List[int]:
        return self._loads.get(pivot, [])

    def stores_on(self, pivot: int) -> List[int]:
        return self._stores.get(pivot, [])

    def copy_edges(self) -> Iterator[Tuple[int, int, EdgeOrigin]]:
        for source, targets in self._copy_edges.items():
            for target, origin in targets.items():
                yield source, target, origin

    @property
    def num_copy_edges(self) -> int:
        return sum(len(targets) for targets in self._copy_edges.values())

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return (f"ConstraintGraph(variables={len(self._variables)}, "
                f"objects={len(self._objects)}, copy_edges={self.num_copy_edges}, "
                f"loads={sum(map(len, self._loads.values()))}, "
                f"stores={sum(map(len, self._stores.values()))})")
