"""Explicit in-memory state container for one tree session."""

from typing import Iterable, Optional

from family_legacy.graph.builder import FamilyGraph, MemberRelations, build_graph
from family_legacy.graph.diagram import build_diagram
from family_legacy.graph.layout import Layout, LayoutEngine
from family_legacy.graph.nodes import Diagram
from family_legacy.models import Edge, Member, Position


class TreeState:
    """Members plus the authoritative local edge list.

    Relationship views, layout and diagram are derived on demand and cached
    until the next mutation. Nothing here talks to persistence.
    """

    def __init__(self, members: Iterable[Member] = (), edges: Iterable[Edge] = (),
                 engine: Optional[LayoutEngine] = None):
        self.engine = engine or LayoutEngine()
        self.version = 0
        self._members: dict[str, Member] = {}
        self._edges: list[Edge] = []
        self._graph: Optional[FamilyGraph] = None
        self._layout: Optional[Layout] = None
        self._diagram: Optional[Diagram] = None
        self.replace(members, edges)

    def _touch(self):
        self.version += 1
        self._graph = None
        self._layout = None
        self._diagram = None

    def replace(self, members: Iterable[Member], edges: Iterable[Edge]) -> None:
        """Swap in a full snapshot (initial load or reconcile)."""
        self._members = {m.id: m for m in members}
        self._edges = []
        for edge in edges:
            if not self.has_edge(edge):
                self._edges.append(edge)
        self._touch()

    # ─────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────

    @property
    def members(self) -> list[Member]:
        return list(self._members.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def member(self, member_id: str) -> Optional[Member]:
        return self._members.get(member_id)

    def has_member(self, member_id: str) -> bool:
        return member_id in self._members

    def has_edge(self, edge: Edge) -> bool:
        return any(e.same_as(edge) for e in self._edges)

    def edges_of(self, member_id: str) -> list[Edge]:
        return [e for e in self._edges if e.touches(member_id)]

    @property
    def graph(self) -> FamilyGraph:
        if self._graph is None:
            self._graph = build_graph(self._members.values(), self._edges)
        return self._graph

    @property
    def layout(self) -> Layout:
        if self._layout is None:
            self._layout = self.engine.layout(self.graph)
        return self._layout

    @property
    def diagram(self) -> Diagram:
        if self._diagram is None:
            self._diagram = build_diagram(self.graph, self.layout)
        return self._diagram

    def relations(self, member_id: str) -> MemberRelations:
        return self.graph.relations.get(member_id, MemberRelations())

    # ─────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────

    def add_member(self, member: Member, index: Optional[int] = None) -> None:
        if member.id in self._members:
            raise ValueError(f"Member already present: {member.id}")
        items = list(self._members.items())
        if index is None or index >= len(items):
            items.append((member.id, member))
        else:
            items.insert(index, (member.id, member))
        self._members = dict(items)
        self._touch()

    def put_member(self, member: Member) -> Optional[Member]:
        """Replace a member in place. Returns the previous version."""
        previous = self._members.get(member.id)
        self._members[member.id] = member
        self._touch()
        return previous

    def remove_member(self, member_id: str) -> tuple[Optional[Member], int, list[Edge]]:
        """Remove a member and its edges. Returns (member, index, removed edges)."""
        if member_id not in self._members:
            return None, -1, []
        index = list(self._members).index(member_id)
        member = self._members.pop(member_id)
        removed = self.edges_of(member_id)
        self._edges = [e for e in self._edges if not e.touches(member_id)]
        self._touch()
        return member, index, removed

    def add_edge(self, edge: Edge) -> bool:
        """Add an edge unless an equivalent one is present."""
        if self.has_edge(edge):
            return False
        self._edges.append(edge)
        self._touch()
        return True

    def remove_edge(self, edge: Edge) -> list[Edge]:
        removed = [e for e in self._edges if e.same_as(edge)]
        if removed:
            self._edges = [e for e in self._edges if not e.same_as(edge)]
            self._touch()
        return removed

    def set_position(self, member_id: str, position: Optional[Position]) -> Optional[Position]:
        """Set or clear a saved position. Returns the previous one."""
        member = self._members[member_id]
        previous = member.position
        self._members[member_id] = member.model_copy(update={"position": position})
        self._touch()
        return previous
