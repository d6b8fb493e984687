"""
export.py — Graph Exporter
==========================

Converts a solved :class:`ConstraintGraph` into a node/edge description
and writes it out as DOT, JSON or plain text.

Nodes are the program variables, labelled with their final points-to
set.  Every (variable, object) fact becomes one ``points-to`` edge,
directed pointer → pointee.  Optionally the copy edges of the constraint
graph are included as well: ``copy`` for ``p = q`` statements and
``derived`` for edges the solver materialized from loads and stores.

Everything is sorted by name, so equal points-to sets always produce
byte-identical output.
"""

from __future__ import annotations

import json
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .constraint_graph import ConstraintGraph

logger = logging.getLogger(__name__)

POINTS_TO = "points-to"

# Edge kind → extra DOT attributes
_EDGE_STYLES: Dict[str, str] = {
    POINTS_TO: "",
    "copy":    ', style=dashed, color=gray40, label="copy"',
    "derived": ', style=dashed, color=blue, fontcolor=blue, label="derived"',
}


# ---------------------------------------------------------------------------
# 1. Exported model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExportedNode:
    name: str
    points_to: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.name}\n{{{','.join(self.points_to)}}}"


@dataclass(frozen=True, order=True)
class ExportedEdge:
    source: str
    target: str
    kind: str = POINTS_TO


@dataclass
class ExportedGraph:
    """Sorted nodes and edges, detached from the analysis state."""

    nodes: List[ExportedNode] = field(default_factory=list)
    edges: List[ExportedEdge] = field(default_factory=list)

    def points_to_edges(self) -> List[ExportedEdge]:
        return [e for e in self.edges if e.kind == POINTS_TO]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {"name": n.name, "points_to": list(n.points_to)}
                for n in self.nodes
            ],
            "edges": [
                {"source": e.source, "target": e.target, "kind": e.kind}
                for e in self.edges
            ],
        }


# ---------------------------------------------------------------------------
# 2. Exporter
# ---------------------------------------------------------------------------

class GraphExporter:
    """Reads the final state of *graph*; never mutates it."""

    def __init__(self, graph: ConstraintGraph) -> None:
        self.graph = graph

    def export(self, include_constraints: bool = False) -> ExportedGraph:
        graph = self.graph
        store = graph.store

        nodes: List[ExportedNode] = []
        edges: List[ExportedEdge] = []
        for variable in sorted(graph.variables, key=lambda v: v.name):
            targets = tuple(sorted(obj.name for obj in store.points_to(variable.id)))
            nodes.append(ExportedNode(name=variable.name, points_to=targets))
            edges.extend(ExportedEdge(variable.name, t) for t in targets)

        if include_constraints:
            for source, target, origin in graph.copy_edges():
                edges.append(ExportedEdge(
                    graph.variable(source).name,
                    graph.variable(target).name,
                    origin.value,
                ))

        edges.sort()
        logger.debug("Exported %d node(s), %d edge(s)", len(nodes), len(edges))
        return ExportedGraph(nodes=nodes, edges=edges)


# ---------------------------------------------------------------------------
# 3. Writers
# ---------------------------------------------------------------------------

def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def to_dot(exported: ExportedGraph, title: Optional[str] = None) -> str:
    """Return a Graphviz DOT representation of *exported*."""
    lines = ["digraph PointsTo {"]
    if title:
        lines.append(f"  label={_quote(title)};")
    lines.append("  node [shape=box, fontname=monospace, fontsize=10];")
    for n in exported.nodes:
        lines.append(f"  {_quote(n.name)} [label={_quote(n.label)}];")
    for e in exported.edges:
        style = _EDGE_STYLES.get(e.kind, "")
        attrs = f" [{style.lstrip(', ')}]" if style else ""
        lines.append(f"  {_quote(e.source)} -> {_quote(e.target)}{attrs};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def to_json(exported: ExportedGraph) -> str:
    return json.dumps(exported.to_dict(), indent=2, sort_keys=True) + "\n"


def to_text(exported: ExportedGraph) -> str:
    """One ``name -> {a, b}`` line per variable."""
    return "".join(
        f"{n.name} -> {{{', '.join(n.points_to)}}}\n" for n in exported.nodes
    )


WRITERS = {
    "dot": to_dot,
    "json": to_json,
    "text": to_text,
}


def format_graph(exported: ExportedGraph, fmt: str = "dot") -> str:
    try:
        writer = WRITERS[fmt]
    except KeyError:
        raise ValueError(f"unknown output format {fmt!r}; choose from {sorted(WRITERS)}") from None
    return writer(exported)


# ---------------------------------------------------------------------------
# 4. Rendering (optional ``viz`` extra)
# ---------------------------------------------------------------------------

def render(dot_source: str, path: Union[str, Path], fmt: str = "svg") -> Path:
    """
    Render *dot_source* as *fmt* and store the image at exactly *path*.

    Graphviz writes its intermediate source file next to the image, so
    rendering happens in a scratch directory and only the image is moved
    to *path*.  Nothing else in the destination directory is touched.

    Requires the ``graphviz`` package (``pip install andersen[viz]``) and
    a Graphviz installation on ``PATH``.
    """
    import graphviz

    target = Path(path)
    with tempfile.TemporaryDirectory(prefix="andersen-") as scratch:
        rendered = graphviz.Source(dot_source).render(
            filename="graph",
            directory=scratch,
            format=fmt,
            cleanup=True,
        )
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(rendered, str(target))
    logger.info("Rendered %s", target)
    return target
