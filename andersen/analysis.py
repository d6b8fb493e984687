"""
analysis.py — Points-To Analysis Facade
=======================================

Integrates the front-end, the constraint graph, the solver and the
exporter behind one object that owns all state of a single run.

Usage::

    from andersen.analysis import PointsToAnalysis

    pta = PointsToAnalysis.from_source('''
        p = &a; q = &b
        *p = q
        t = *p
    ''')
    pta.run()

    pta.points_to("t")          # frozenset({'b'})
    pta.may_alias("p", "s")
    dot = pta.to_dot()

Independent instances share nothing, so several programs can be
analyzed side by side.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional, Union

from .constraint_graph import ConstraintGraph
from .export import ExportedGraph, GraphExporter, format_graph, to_dot
from .grammar import parse_file, parse_statements
from .solver import FixpointSolver, SolverConfig, SolverResult
from .statements import Constraint

logger = logging.getLogger(__name__)


class PointsToAnalysis:
    """
    Top-level facade for one analysis run.

    The graph is built eagerly from *constraints*; :meth:`run` solves it.
    Queries made before :meth:`run` see only the base facts.
    """

    def __init__(self, constraints: Iterable[Constraint], config: Optional[SolverConfig] = None) -> None:
        self.config = config or SolverConfig()
        self.graph = ConstraintGraph.from_constraints(constraints)
        self.result: Optional[SolverResult] = None

    @classmethod
    def from_source(cls, text: str, config: Optional[SolverConfig] = None,
                    filename: str = "") -> "PointsToAnalysis":
        return cls(parse_statements(text, filename=filename), config)

    @classmethod
    def from_file(cls, path: Union[str, Path], config: Optional[SolverConfig] = None) -> "PointsToAnalysis":
        logger.info("Reading %s", path)
        return cls(parse_file(path), config)

    # -- Solving -------------------------------------------------------------

    def run(self) -> SolverResult:
        self.result = FixpointSolver(self.graph, self.config).solve()
        return self.result

    @property
    def solved(self) -> bool:
        return self.result is not None

    # -- Queries -------------------------------------------------------------

    def points_to(self, name: str) -> FrozenSet[str]:
        """Names of the objects *name* may point to; empty for unknown names."""
        var_id = self.graph.id_of(name)
        if var_id is None:
            return frozenset()
        return frozenset(obj.name for obj in self.graph.store.points_to(var_id))

    def points_to_sets(self) -> Dict[str, FrozenSet[str]]:
        return self.graph.store.as_dict()

    def may_alias(self, a: str, b: str) -> bool:
        """True if the points-to sets of *a* and *b* intersect."""
        return bool(self.points_to(a) & self.points_to(b))

    def must_alias(self, a: str, b: str) -> bool:
        """True if both point to the same single object."""
        pts_a = self.points_to(a)
        return len(pts_a) == 1 and pts_a == self.points_to(b)

    # -- Export --------------------------------------------------------------

    def export(self, include_constraints: bool = False) -> ExportedGraph:
        return GraphExporter(self.graph).export(include_constraints=include_constraints)

    def to_dot(self, include_constraints: bool = False, title: Optional[str] = None) -> str:
        return to_dot(self.export(include_constraints), title=title)

    def format(self, fmt: str = "dot", include_constraints: bool = False) -> str:
        return format_graph(self.export(include_constraints), fmt)

    def __repr__(self) -> str:
        state = repr(self.result) if self.result else "unsolved"
        return f"PointsToAnalysis({self.graph!r}, {state})"


def analyze(text: str, config: Optional[SolverConfig] = None) -> Dict[str, FrozenSet[str]]:
    """Parse and solve *text*; return the points-to sets by variable name."""
    pta = PointsToAnalysis.from_source(text, config)
    pta.run()
    return pta.points_to_sets()
