"""andersen — Inclusion-based points-to analysis.

Reads a small pointer language (``p = &a``, ``p = q``, ``p = *q``,
``*p = q``), solves the Andersen-style subset constraints with a
worklist fixpoint and exports the resulting points-to graph.

Submodules
----------
errors
    ``AndersenError`` hierarchy, ``PTA-NNNN`` codes and ``SourceSpan``.
statements
    ``ConstraintKind``, ``Constraint``, ``Variable``, ``AbstractObject``.
grammar
    Parsimonious PEG front-end: ``parse_statements`` / ``parse_file``.
points_to
    ``PointsToStore``: per-variable, monotonically growing sets.
constraint_graph
    ``ConstraintGraph``: copy edges plus the pivot index of loads/stores.
solver
    ``FixpointSolver``, ``SolverConfig``, ``WorklistStrategy``.
export
    ``GraphExporter`` and the DOT / JSON / text writers.
analysis
    ``PointsToAnalysis`` facade and ``analyze()``.
main
    Command-line interface.

Usage
-----
Command-line::

    andersen program.txt pointsto.gv
    python -m andersen program.txt pointsto.json --format json

Programmatic::

    from andersen import analyze

    analyze("p = &a; q = p")["q"]      # frozenset({'a'})
"""

from __future__ import annotations

__version__: str = "0.1.0"

from .analysis import PointsToAnalysis, analyze
from .constraint_graph import ConstraintGraph, EdgeOrigin
from .errors import (
    AndersenError,
    ErrorCodes,
    SolverInvariantError,
    SourceSpan,
    StatementSyntaxError,
)
from .export import ExportedGraph, GraphExporter, to_dot, to_json, to_text
from .grammar import parse_file, parse_statements
from .points_to import PointsToStore
from .solver import FixpointSolver, SolverConfig, SolverResult, WorklistStrategy, check_fixpoint
from .statements import AbstractObject, Constraint, ConstraintKind, Variable

__all__: list[str] = [
    "__version__",
    "AbstractObject",
    "AndersenError",
    "Constraint",
    "ConstraintGraph",
    "ConstraintKind",
    "EdgeOrigin",
    "ErrorCodes",
    "ExportedGraph",
    "FixpointSolver",
    "GraphExporter",
    "PointsToAnalysis",
    "PointsToStore",
    "SolverConfig",
    "SolverInvariantError",
    "SolverResult",
    "SourceSpan",
    "StatementSyntaxError",
    "Variable",
    "WorklistStrategy",
    "analyze",
    "check_fixpoint",
    "parse_file",
    "parse_statements",
    "to_dot",
    "to_json",
    "to_text",
]
