"""
Layered tree layout.

Members are ranked by generation over the parent -> child subgraph only and
laid out top to bottom. Spouse edges never influence ranks of members that
have parents or children; they are used afterwards to keep couples side by
side. Saved (dragged) positions always win over computed ones.
"""

import logging
from dataclasses import dataclass, field
from statistics import mean
from typing import Optional

import networkx as nx

from family_legacy.config import LayoutSettings, settings
from family_legacy.graph.builder import FamilyGraph
from family_legacy.graph.nodes import MarriageRef
from family_legacy.models import Position

logger = logging.getLogger(__name__)

# Slack for float coordinates coming back from dragged nodes.
EPSILON = 1e-6


@dataclass
class Layout:
    """Positions for every member plus derived junction centres."""
    positions: dict[str, Position]
    ranks: dict[str, int]
    junctions: dict[MarriageRef, Position] = field(default_factory=dict)
    broken_edges: list[tuple[str, str]] = field(default_factory=list)

    def position_of(self, member_id: str) -> Optional[Position]:
        return self.positions.get(member_id)


class LayoutEngine:
    """Assign coordinates to a family graph."""

    def __init__(self, config: Optional[LayoutSettings] = None):
        self.config = config or settings.layout

    @property
    def pitch(self) -> float:
        """Horizontal distance between neighbours in a rank."""
        return self.config.node_width + self.config.node_sep

    @property
    def row_height(self) -> float:
        return self.config.node_height + self.config.rank_sep

    def layout(self, graph: FamilyGraph) -> Layout:
        """Compute a layout, keeping saved member positions untouched."""
        dag, broken = self._acyclic(graph.parent_digraph())
        ranks = self._rank(dag, graph)
        layers = self._order(dag, ranks, graph)
        computed = self._place(dag, layers)
        positions = self._merge(graph, computed)

        junctions = {}
        for pair in graph.couples:
            a, b = pair.ref.spouses
            junctions[pair.ref] = self.junction_center(positions[a], positions[b])

        return Layout(
            positions=positions,
            ranks=ranks,
            junctions=junctions,
            broken_edges=broken,
        )

    def junction_center(self, a: Position, b: Position) -> Position:
        """Centre of the marriage dot between two spouse boxes."""
        return Position(
            x=(a.x + b.x) / 2 + self.config.node_width / 2,
            y=(a.y + b.y) / 2 + self.config.node_height / 2,
        )

    # ─────────────────────────────────────────
    # Ranking
    # ─────────────────────────────────────────

    def _acyclic(self, g: nx.DiGraph) -> tuple[nx.DiGraph, list[tuple[str, str]]]:
        """Drop edges until the parent graph has no cycles."""
        dag = g.copy()
        removed = []
        while True:
            try:
                cycle = nx.find_cycle(dag)
            except nx.NetworkXNoCycle:
                break
            u, v = cycle[-1][0], cycle[-1][1]
            dag.remove_edge(u, v)
            removed.append((u, v))
        if removed:
            logger.warning("Ignoring %d parent edge(s) that form a cycle: %s", len(removed), removed)
        return dag, removed

    def _rank(self, dag: nx.DiGraph, graph: FamilyGraph) -> dict[str, int]:
        """Longest-path ranks, with childless-ancestor sources pulled down."""
        ranks: dict[str, int] = {}
        for node in nx.topological_sort(dag):
            ranks[node] = max((ranks[p] + 1 for p in dag.predecessors(node)), default=0)

        # a parentless member sits directly above its highest child
        for node in dag.nodes:
            if dag.in_degree(node) == 0 and dag.out_degree(node) > 0:
                ranks[node] = min(ranks[c] for c in dag.successors(node)) - 1

        # unconnected members join a spouse's rank
        for node in graph.members:
            if dag.degree(node) != 0:
                continue
            for spouse in graph.spouses_of(node):
                if dag.degree(spouse) > 0:
                    ranks[node] = ranks[spouse]
                    break
        return ranks

    # ─────────────────────────────────────────
    # Ordering within ranks
    # ─────────────────────────────────────────

    def _order(self, dag: nx.DiGraph, ranks: dict[str, int], graph: FamilyGraph) -> list[list[str]]:
        depth = max(ranks.values(), default=-1) + 1
        layers: list[list[str]] = [[] for _ in range(depth)]
        for member_id in graph.members:
            layers[ranks[member_id]].append(member_id)

        for sweep in range(self.config.ordering_passes):
            if sweep % 2 == 0:
                for r in range(1, depth):
                    self._sort_by_barycenter(layers, r, layers[r - 1], dag.predecessors)
            else:
                for r in range(depth - 2, -1, -1):
                    self._sort_by_barycenter(layers, r, layers[r + 1], dag.successors)

        return [self._keep_spouses_adjacent(layer, graph) for layer in layers]

    def _sort_by_barycenter(self, layers, r, fixed_layer, neighbours):
        index = {n: i for i, n in enumerate(fixed_layer)}
        current = {n: i for i, n in enumerate(layers[r])}

        def barycenter(node):
            linked = [index[n] for n in neighbours(node) if n in index]
            return mean(linked) if linked else current[node]

        layers[r] = sorted(layers[r], key=lambda n: (barycenter(n), current[n]))

    def _keep_spouses_adjacent(self, layer: list[str], graph: FamilyGraph) -> list[str]:
        in_layer = set(layer)
        placed = set()
        ordered = []
        for node in layer:
            if node in placed:
                continue
            ordered.append(node)
            placed.add(node)
            for spouse in graph.spouses_of(node):
                if spouse in in_layer and spouse not in placed:
                    ordered.append(spouse)
                    placed.add(spouse)
        return ordered

    # ─────────────────────────────────────────
    # Coordinates
    # ─────────────────────────────────────────

    def _place(self, dag: nx.DiGraph, layers: list[list[str]]) -> dict[str, Position]:
        """Centre children under their parents, left to right with min separation."""
        placed: dict[str, Position] = {}
        for rank, layer in enumerate(layers):
            y = rank * self.row_height
            previous_x = None
            for node in layer:
                parent_xs = [placed[p].x for p in dag.predecessors(node) if p in placed]
                x = mean(parent_xs) if parent_xs else (
                    0.0 if previous_x is None else previous_x + self.pitch
                )
                if previous_x is not None:
                    x = max(x, previous_x + self.pitch)
                placed[node] = Position(x=x, y=y)
                previous_x = x
        return placed

    def _merge(self, graph: FamilyGraph, computed: dict[str, Position]) -> dict[str, Position]:
        """Saved positions win; computed ones are shifted next to their saved relatives."""
        fixed = {mid: m.position for mid, m in graph.members.items() if m.position is not None}
        positions = dict(fixed)
        free = [mid for mid in graph.members if mid not in fixed]
        if not free:
            return positions
        if not fixed:
            positions.update({mid: computed[mid] for mid in free})
            return positions

        for component in nx.connected_components(graph.kinship_graph()):
            anchors = [n for n in component if n in fixed]
            dx = mean(fixed[n].x - computed[n].x for n in anchors) if anchors else 0.0
            dy = mean(fixed[n].y - computed[n].y for n in anchors) if anchors else 0.0
            for node in component:
                if node not in fixed:
                    positions[node] = computed[node].offset(dx, dy)

        settled = dict(fixed)
        for node in sorted(free, key=lambda n: (positions[n].y, positions[n].x)):
            settled[node] = self._free_spot(positions[node], settled)
        return settled

    def _free_spot(self, start: Position, occupied: dict[str, Position]) -> Position:
        """Move right until the box overlaps nothing already placed."""
        spot = start
        while True:
            blocker = next((p for p in occupied.values() if self._overlaps(spot, p)), None)
            if blocker is None:
                return spot
            spot = Position(x=blocker.x + self.pitch, y=spot.y)

    def _overlaps(self, a: Position, b: Position) -> bool:
        return (abs(a.x - b.x) < self.pitch - EPSILON
                and abs(a.y - b.y) < self.config.node_height - EPSILON)
