# tests/test_constraint_graph.py
"""
Tests for constraint graph construction.
"""

from andersen.constraint_graph import ConstraintGraph, EdgeOrigin
from andersen.grammar import parse_statements
from tests.conftest import README_PROGRAM


def _graph(text):
    return ConstraintGraph.from_constraints(parse_statements(text))


def _names(graph, ids):
    return sorted(graph.variable(i).name for i in ids)


class TestVariables:

    def test_add_variable_idempotent(self):
        g = ConstraintGraph()
        first = g.add_variable("p")
        assert g.add_variable("p") == first
        assert len(g) == 1

    def test_ids_follow_first_appearance(self):
        g = _graph("q = p; p = &a")
        assert [v.name for v in g.variables] == ["q", "p", "a"]
        assert g.id_of("a") == 2
        assert g.id_of("nope") is None

    def test_undefined_names_are_declared(self):
        g = _graph("p = *q")
        assert "q" in g
        assert g.store.is_empty(g.id_of("q"))


class TestConstraints:

    def test_base_applied_eagerly(self):
        g = _graph("p = &a")
        pts = g.store.points_to(g.id_of("p"))
        assert {o.name for o in pts} == {"a"}

    def test_repeated_address_of_reuses_object(self):
        g = _graph("p = &a; q = &a")
        (obj_p,) = g.store.points_to(g.id_of("p"))
        (obj_q,) = g.store.points_to(g.id_of("q"))
        assert obj_p is obj_q
        assert g.num_objects == 1

    def test_copy_edge_direction(self):
        g = _graph("p = q")
        assert _names(g, g.successors(g.id_of("q"))) == ["p"]
        assert g.successors(g.id_of("p")) == []
        assert list(g.copy_edges()) == [(g.id_of("q"), g.id_of("p"), EdgeOrigin.STATIC)]

    def test_complex_constraints_indexed_by_pivot(self):
        g = _graph("t = *p; *u = x")
        assert _names(g, g.loads_on(g.id_of("p"))) == ["t"]
        assert _names(g, g.stores_on(g.id_of("u"))) == ["x"]
        assert g.loads_on(g.id_of("t")) == []
        assert g.num_copy_edges == 0

    def test_add_copy_edge_reports_novelty(self):
        g = _graph("p = q")
        p, q = g.id_of("p"), g.id_of("q")
        assert g.add_copy_edge(q, p) is False
        assert g.add_copy_edge(p, q) is True
        assert g.add_copy_edge(p, q) is False
        origins = {(s, t): o for s, t, o in g.copy_edges()}
        assert origins[(p, q)] is EdgeOrigin.DERIVED
        assert origins[(q, p)] is EdgeOrigin.STATIC

    def test_constraints_kept_in_order(self):
        g = _graph(README_PROGRAM)
        assert [str(c) for c in g.constraints] == [
            "p = &a", "q = &b", "r = &c", "s = p", "*p = q", "t = *p",
        ]

    def test_separate_graphs_share_nothing(self):
        g1 = _graph("p = &a")
        g2 = _graph("p = &b")
        assert g1.store is not g2.store
        assert g1.store.as_dict()["p"] == frozenset({"a"})
        assert g2.store.as_dict()["p"] == frozenset({"b"})
