"""Derive parents/children/spouses views from the stored edge set."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import networkx as nx

from family_legacy.graph.nodes import MarriageRef
from family_legacy.models import Edge, Member, RelationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberRelations:
    """Read-only relationship view for one member."""
    parents: tuple[str, ...] = ()
    children: tuple[str, ...] = ()
    spouses: tuple[str, ...] = ()


@dataclass(frozen=True)
class SpousePair:
    """A married couple and the children they share."""
    ref: MarriageRef
    edge: Edge
    children: tuple[str, ...] = ()

    @property
    def has_children(self) -> bool:
        return bool(self.children)


@dataclass
class FamilyGraph:
    """Output of the graph builder.

    `edges` holds only valid, de-duplicated edges; `dangling` holds the ones
    that were skipped because an end is missing or the edge is a self-loop.
    """
    members: dict[str, Member]
    edges: list[Edge]
    relations: dict[str, MemberRelations]
    spouse_pairs: list[SpousePair]
    dangling: list[Edge] = field(default_factory=list)

    def parents_of(self, member_id: str) -> tuple[str, ...]:
        return self.relations.get(member_id, MemberRelations()).parents

    def children_of(self, member_id: str) -> tuple[str, ...]:
        return self.relations.get(member_id, MemberRelations()).children

    def spouses_of(self, member_id: str) -> tuple[str, ...]:
        return self.relations.get(member_id, MemberRelations()).spouses

    @property
    def couples(self) -> list[SpousePair]:
        """Spouse pairs with at least one shared child (these get a junction)."""
        return [p for p in self.spouse_pairs if p.has_children]

    def pair(self, a: str, b: str) -> Optional[SpousePair]:
        ref = MarriageRef(a, b)
        for p in self.spouse_pairs:
            if p.ref == ref:
                return p
        return None

    def parent_edges(self) -> list[Edge]:
        return [e for e in self.edges if e.kind == RelationKind.PARENT]

    def parent_digraph(self) -> nx.DiGraph:
        """Parent -> child subgraph over every member."""
        g = nx.DiGraph()
        g.add_nodes_from(self.members)
        g.add_edges_from((e.from_id, e.to_id) for e in self.parent_edges())
        return g

    def kinship_graph(self) -> nx.Graph:
        """Undirected graph joining members by any relationship."""
        g = nx.Graph()
        g.add_nodes_from(self.members)
        g.add_edges_from((e.from_id, e.to_id) for e in self.edges)
        return g

    def is_ancestor(self, ancestor_id: str, member_id: str) -> bool:
        g = self.parent_digraph()
        if ancestor_id not in g or member_id not in g:
            return False
        return nx.has_path(g, ancestor_id, member_id)


def build_graph(members: Iterable[Member], edges: Iterable[Edge]) -> FamilyGraph:
    """Build relationship views from members and raw edges."""
    by_id = {m.id: m for m in members}

    valid: list[Edge] = []
    dangling: list[Edge] = []
    seen = set()
    for edge in edges:
        if edge.is_self_loop or edge.from_id not in by_id or edge.to_id not in by_id:
            dangling.append(edge)
            continue
        if edge.key in seen:
            continue
        seen.add(edge.key)
        valid.append(edge)

    if dangling:
        logger.warning("Skipped %d dangling relationship(s)", len(dangling))

    parents: dict[str, list[str]] = {mid: [] for mid in by_id}
    children: dict[str, list[str]] = {mid: [] for mid in by_id}
    spouses: dict[str, list[str]] = {mid: [] for mid in by_id}

    spouse_edges: list[Edge] = []
    for edge in valid:
        if edge.kind == RelationKind.PARENT:
            children[edge.from_id].append(edge.to_id)
            parents[edge.to_id].append(edge.from_id)
        else:
            spouses[edge.from_id].append(edge.to_id)
            spouses[edge.to_id].append(edge.from_id)
            spouse_edges.append(edge)

    relations = {
        mid: MemberRelations(
            parents=tuple(parents[mid]),
            children=tuple(children[mid]),
            spouses=tuple(spouses[mid]),
        )
        for mid in by_id
    }

    pairs = []
    for edge in spouse_edges:
        shared = tuple(
            c for c in children[edge.from_id]
            if edge.to_id in parents[c]
        )
        pairs.append(SpousePair(ref=MarriageRef(edge.from_id, edge.to_id), edge=edge, children=shared))

    return FamilyGraph(
        members=by_id,
        edges=valid,
        relations=relations,
        spouse_pairs=pairs,
        dangling=dangling,
    )
