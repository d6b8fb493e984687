"""
solver.py — Worklist Fixpoint Solver
====================================

Inclusion-based propagation over a :class:`ConstraintGraph`:

  1. Seed the worklist with every variable whose set is non-empty after
     the base constraints were applied.
  2. Pop a variable ``v``.
  3. Copy edges ``v → p``:            pts(p) ⊇ pts(v)
  4. Loads ``p = *v``, ∀o ∈ pts(v):   add edge ``o → p``; pts(p) ⊇ pts(o)
  5. Stores ``*v = q``, ∀o ∈ pts(v):  add edge ``q → o``; pts(o) ⊇ pts(q)
  6. A variable whose set grew is pushed again (at most once pending).

Edges added in steps 4 and 5 stay in the graph, so later growth of the
source set keeps flowing through step 3.

The pop order (FIFO or LIFO) changes the number of iterations but never
the final sets: set union is monotone and confluent.  Every push follows
a net insertion, and there are at most V × O insertions for V variables
and O abstract objects, which gives the iteration bound V + V × O.
"""

from __future__ import annotations

import enum
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, FrozenSet, Iterable, List, Optional, Set

from .constraint_graph import ConstraintGraph
from .errors import ErrorCodes, SolverInvariantError, SourceSpan
from .statements import AbstractObject, Constraint, ConstraintKind

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 1. Configuration and result
# ---------------------------------------------------------------------------

class WorklistStrategy(enum.Enum):
    """Order in which pending variables are popped."""
    FIFO = "fifo"
    LIFO = "lifo"


@dataclass
class SolverConfig:
    """
    Knobs for one solver run.

    Parameters
    ----------
    strategy : WorklistStrategy
        Pop order.  Affects iteration counts only.
    max_iterations : int, optional
        Override of the derived bound ``V + V × O``.
    verify : bool
        Re-check every constraint against the final sets.
    """

    strategy: WorklistStrategy = WorklistStrategy.FIFO
    max_iterations: Optional[int] = None
    verify: bool = True


@dataclass
class SolverResult:
    """Statistics of a finished run."""

    iterations: int
    insertions: int
    materialized_edges: int
    elapsed_seconds: float
    converged: bool = True

    def __repr__(self) -> str:
        return (f"SolverResult(iterations={self.iterations}, "
                f"insertions={self.insertions}, "
                f"materialized_edges={self.materialized_edges}, "
                f"elapsed={self.elapsed_seconds:.4f}s)")


# ---------------------------------------------------------------------------
# 2. Solver
# ---------------------------------------------------------------------------

class FixpointSolver:
    """
    Runs the worklist to a fixpoint over *graph*.

    The solver owns the worklist; the points-to sets belong to the
    graph's store and are only mutated from here.
    """

    def __init__(self, graph: ConstraintGraph, config: Optional[SolverConfig] = None) -> None:
        self.graph = graph
        self.config = config or SolverConfig()
        self._store = graph.store
        self._worklist: Deque[int] = deque()
        self._pending: Set[int] = set()
        self._materialized = 0
        self._fact_bound = 0

    # -- Bounds --------------------------------------------------------------

    def fact_bound(self) -> int:
        """Maximum number of (variable, object) facts: V × O."""
        return len(self.graph) * self.graph.num_objects

    def iteration_bound(self) -> int:
        if self.config.max_iterations is not None:
            return self.config.max_iterations
        return len(self.graph) + self.fact_bound()

    # -- Worklist ------------------------------------------------------------

    def _push(self, var_id: int) -> None:
        if var_id not in self._pending:
            self._pending.add(var_id)
            self._worklist.append(var_id)

    def _pop(self) -> int:
        if self.config.strategy is WorklistStrategy.LIFO:
            var_id = self._worklist.pop()
        else:
            var_id = self._worklist.popleft()
        self._pending.discard(var_id)
        return var_id

    def _flow(self, objects: Iterable[AbstractObject], target: int) -> None:
        """pts(target) ⊇ objects; schedule *target* if it grew."""
        if self._store.add_objects(target, objects):
            if self._store.insertions > self._fact_bound:
                raise SolverInvariantError(
                    f"{self._store.insertions} points-to facts exceed the bound "
                    f"of {self._fact_bound}",
                )
            self._push(target)

    def _materialize(self, source: int, target: int) -> None:
        if self.graph.add_copy_edge(source, target):
            self._materialized += 1
            logger.debug("Materialized edge %s -> %s",
                         self.graph.variable(source).name,
                         self.graph.variable(target).name)

    # -- Main loop -----------------------------------------------------------

    def solve(self) -> SolverResult:
        """Propagate until no set changes."""
        t0 = time.monotonic()
        graph = self.graph
        store = self._store
        bound = self.iteration_bound()
        self._fact_bound = self.fact_bound()
        start_facts = store.insertions

        for variable in graph.variables:
            if not store.is_empty(variable.id):
                self._push(variable.id)

        logger.debug("Solving %r: %d seed(s), iteration bound %d",
                     graph, len(self._worklist), bound)

        iterations = 0
        while self._worklist:
            v = self._pop()
            iterations += 1
            if iterations > bound:
                raise SolverInvariantError(
                    f"worklist did not converge within {bound} iterations",
                    code=ErrorCodes.ITERATION_BOUND_EXCEEDED,
                )

            pts_v = store.points_to(v)

            for p in graph.successors(v):
                self._flow(pts_v, p)

            loads = graph.loads_on(v)
            stores = graph.stores_on(v)
            if not (loads or stores):
                continue

            for obj in pts_v:
                o = obj.var_id
                for p in loads:
                    self._materialize(o, p)
                    self._flow(store.points_to(o), p)
                for q in stores:
                    self._materialize(q, o)
                    self._flow(store.points_to(q), o)

        if self.config.verify:
            violated = check_fixpoint(graph)
            if violated:
                first = violated[0]
                raise SolverInvariantError(
                    f"final points-to sets violate '{first}' "
                    f"({len(violated)} constraint(s) unsatisfied)",
                    code=ErrorCodes.FIXPOINT_VIOLATED,
                    span=SourceSpan(line=first.line, column=first.column),
                )

        result = SolverResult(
            iterations=iterations,
            insertions=store.insertions - start_facts,
            materialized_edges=self._materialized,
            elapsed_seconds=time.monotonic() - t0,
        )
        logger.info("Fixpoint reached: %r", result)
        return result


# ---------------------------------------------------------------------------
# 3. Fixpoint check
# ---------------------------------------------------------------------------

def check_fixpoint(graph: ConstraintGraph) -> List[Constraint]:
    """Return the constraints whose subset relation does not hold on *graph*."""
    store = graph.store

    def pts(name: str) -> FrozenSet[AbstractObject]:
        return store.points_to(graph.id_of(name))

    violated: List[Constraint] = []
    for c in graph.constraints:
        if c.kind is ConstraintKind.BASE:
            ok = graph.object_for(graph.id_of(c.right)) in pts(c.left)
        elif c.kind is ConstraintKind.SIMPLE:
            ok = pts(c.right) <= pts(c.left)
        elif c.kind is ConstraintKind.LOAD:
            target = pts(c.left)
            ok = all(store.points_to(o.var_id) <= target for o in pts(c.right))
        else:
            source = pts(c.right)
            ok = all(source <= store.points_to(o.var_id) for o in pts(c.left))
        if not ok:
            violated.append(c)
    return violated


def solve(graph: ConstraintGraph, config: Optional[SolverConfig] = None) -> SolverResult:
    """Convenience wrapper: ``FixpointSolver(graph, config).solve()``."""
    return FixpointSolver(graph, config).solve()
