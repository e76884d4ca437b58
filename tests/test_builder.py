"""Tests for deriving relationship views from the edge set."""

from conftest import person
from family_legacy.graph.builder import build_graph
from family_legacy.graph.nodes import MarriageRef
from family_legacy.models import Edge


def family():
    members = [person(m) for m in ("gran", "grandad", "mum", "dad", "kid", "aunt")]
    edges = [
        Edge.spouse("gran", "grandad"),
        Edge.parent("gran", "mum"),
        Edge.parent("grandad", "mum"),
        Edge.parent("gran", "aunt"),
        Edge.spouse("mum", "dad"),
        Edge.parent("mum", "kid"),
        Edge.parent("dad", "kid"),
    ]
    return members, edges


class TestRelations:
    """Parents, children and spouses come from edges only."""

    def test_parent_child_round_trip(self):
        """Every parent edge shows up on both ends."""
        members, edges = family()
        graph = build_graph(members, edges)
        for edge in graph.parent_edges():
            assert edge.to_id in graph.children_of(edge.from_id)
            assert edge.from_id in graph.parents_of(edge.to_id)

    def test_spouses_symmetric(self):
        members, edges = family()
        graph = build_graph(members, edges)
        assert graph.spouses_of("mum") == ("dad",)
        assert graph.spouses_of("dad") == ("mum",)

    def test_children_in_edge_order(self):
        members, edges = family()
        graph = build_graph(members, edges)
        assert graph.children_of("gran") == ("mum", "aunt")

    def test_more_than_two_parents(self):
        members = [person(m) for m in ("a", "b", "c", "kid")]
        edges = [Edge.parent(p, "kid") for p in ("a", "b", "c")]
        graph = build_graph(members, edges)
        assert graph.parents_of("kid") == ("a", "b", "c")

    def test_is_ancestor(self):
        members, edges = family()
        graph = build_graph(members, edges)
        assert graph.is_ancestor("gran", "kid")
        assert not graph.is_ancestor("kid", "gran")
        assert not graph.is_ancestor("dad", "aunt")


class TestSpousePairs:
    """Junctions exist only for couples sharing a child."""

    def test_couple_with_child(self):
        members, edges = family()
        graph = build_graph(members, edges)
        couples = {p.ref for p in graph.couples}
        assert couples == {MarriageRef("gran", "grandad"), MarriageRef("mum", "dad")}

    def test_shared_children_only(self):
        """A child of one spouse alone is not a shared child."""
        members, edges = family()
        graph = build_graph(members, edges)
        assert graph.pair("grandad", "gran").children == ("mum",)

    def test_childless_couple(self):
        graph = build_graph([person("a"), person("b")], [Edge.spouse("a", "b")])
        assert graph.couples == []
        assert not graph.pair("a", "b").has_children

    def test_marriage_ref_is_order_free(self):
        assert MarriageRef("b", "a") == MarriageRef("a", "b")
        assert MarriageRef("b", "a").spouses == ("a", "b")


class TestInvalidEdges:
    """Bad edges are skipped, never fatal."""

    def test_dangling_edges_skipped(self):
        graph = build_graph([person("a")], [Edge.parent("a", "ghost"), Edge.spouse("ghost", "a")])
        assert graph.edges == []
        assert len(graph.dangling) == 2
        assert graph.children_of("a") == ()

    def test_self_loop_skipped(self):
        graph = build_graph([person("a")], [Edge.spouse("a", "a")])
        assert graph.spouses_of("a") == ()

    def test_duplicates_collapsed(self):
        graph = build_graph(
            [person("a"), person("b")],
            [Edge.spouse("a", "b"), Edge.spouse("b", "a"), Edge.parent("a", "b"), Edge.parent("a", "b")],
        )
        assert len(graph.edges) == 2
        assert graph.spouses_of("a") == ("b",)
        assert graph.children_of("a") == ("b",)
