"""Assemble the renderable diagram from a built graph and its layout."""

from family_legacy.graph.builder import FamilyGraph
from family_legacy.graph.layout import Layout
from family_legacy.graph.nodes import (
    Diagram, DiagramEdge, DiagramNode, MarriageRef, PersonRef, VisualEdgeKind,
)
from family_legacy.models import Edge


def build_diagram(graph: FamilyGraph, layout: Layout) -> Diagram:
    """Member nodes, marriage junctions and visual edges.

    Two parent edges from a couple to the same child collapse into one edge
    leaving the couple's junction. Each parent edge is collapsed at most once,
    trying couples in sorted order; leftovers stay direct parent edges.
    """
    nodes = [
        DiagramNode(
            ref=PersonRef(mid),
            position=layout.positions[mid],
            member=member,
            rank=layout.ranks.get(mid),
        )
        for mid, member in graph.members.items()
    ]
    edges: list[DiagramEdge] = []
    collapsed: set[tuple] = set()
    lone = [pair.edge for pair in graph.spouse_pairs if not pair.has_children]

    for pair in sorted(graph.couples, key=lambda p: p.ref.spouses):
        ref = pair.ref
        a, b = ref.spouses
        child_edges = []
        for child in pair.children:
            pa, pb = Edge.parent(a, child), Edge.parent(b, child)
            if pa.key in collapsed or pb.key in collapsed:
                continue
            collapsed.update((pa.key, pb.key))
            child_edges.append(DiagramEdge(
                source=ref, target=PersonRef(child),
                kind=VisualEdgeKind.MARRIAGE_CHILD, underlying=(pa, pb),
            ))
        # every shared child already hangs off an earlier couple
        if not child_edges:
            lone.append(pair.edge)
            continue

        nodes.append(DiagramNode(ref=ref, position=layout.junctions[ref]))
        left, right = _left_right(a, b, layout)
        edges.append(DiagramEdge(
            source=PersonRef(left), target=ref, kind=VisualEdgeKind.MARRIAGE_LINK,
            underlying=(pair.edge,), source_handle="right", target_handle="left",
        ))
        edges.append(DiagramEdge(
            source=PersonRef(right), target=ref, kind=VisualEdgeKind.MARRIAGE_LINK,
            underlying=(pair.edge,), source_handle="left", target_handle="right",
        ))
        edges.extend(child_edges)

    for spouse_edge in lone:
        left, right = _left_right(spouse_edge.from_id, spouse_edge.to_id, layout)
        edges.append(DiagramEdge(
            source=PersonRef(left), target=PersonRef(right), kind=VisualEdgeKind.SPOUSE,
            underlying=(spouse_edge,), source_handle="right", target_handle="left",
        ))

    for edge in graph.parent_edges():
        if edge.key in collapsed:
            continue
        edges.append(DiagramEdge(
            source=PersonRef(edge.from_id), target=PersonRef(edge.to_id),
            kind=VisualEdgeKind.PARENT_CHILD, underlying=(edge,),
        ))

    return Diagram(nodes=nodes, edges=edges)


def _left_right(a: str, b: str, layout: Layout) -> tuple[str, str]:
    return (a, b) if layout.positions[a].x <= layout.positions[b].x else (b, a)
