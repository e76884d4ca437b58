"""Diagram node references and view-model types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from family_legacy.models import Edge, Member, Position


@dataclass(frozen=True)
class PersonRef:
    """Diagram node for one member."""
    member_id: str

    @property
    def dom_id(self) -> str:
        return f"person-{self.member_id}"


@dataclass(frozen=True)
class MarriageRef:
    """Diagram node for a couple; the pair is always stored sorted."""
    spouse_a: str
    spouse_b: str

    def __post_init__(self):
        if self.spouse_a > self.spouse_b:
            a, b = self.spouse_b, self.spouse_a
            object.__setattr__(self, "spouse_a", a)
            object.__setattr__(self, "spouse_b", b)

    @property
    def spouses(self) -> tuple[str, str]:
        return (self.spouse_a, self.spouse_b)

    @property
    def dom_id(self) -> str:
        return f"marriage-{self.spouse_a}-{self.spouse_b}"


NodeRef = Union[PersonRef, MarriageRef]


class VisualEdgeKind(str, Enum):
    """How a visual edge maps onto stored relationships."""
    PARENT_CHILD = "parent-child"
    MARRIAGE_CHILD = "marriage-child"
    SPOUSE = "spouse"
    MARRIAGE_LINK = "marriage-link"


@dataclass(frozen=True)
class DiagramNode:
    ref: NodeRef
    position: Position
    member: Optional[Member] = None
    rank: Optional[int] = None

    @property
    def is_marriage(self) -> bool:
        return isinstance(self.ref, MarriageRef)


@dataclass(frozen=True)
class DiagramEdge:
    """Visual edge plus the stored edges it stands for."""
    source: NodeRef
    target: NodeRef
    kind: VisualEdgeKind
    underlying: tuple[Edge, ...]
    source_handle: str = "bottom"
    target_handle: str = "top"

    @property
    def dom_id(self) -> str:
        return f"{self.kind.value}:{self.source.dom_id}:{self.target.dom_id}"


@dataclass
class Diagram:
    """Renderable nodes and edges with lookups by DOM id."""
    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)

    def __post_init__(self):
        self._nodes = {n.ref.dom_id: n for n in self.nodes}
        self._edges = {e.dom_id: e for e in self.edges}

    def node(self, dom_id: str) -> Optional[DiagramNode]:
        return self._nodes.get(dom_id)

    def edge(self, dom_id: str) -> Optional[DiagramEdge]:
        return self._edges.get(dom_id)

    def node_for(self, ref: NodeRef) -> Optional[DiagramNode]:
        return self._nodes.get(ref.dom_id)

    def edges_of_kind(self, kind: VisualEdgeKind) -> list[DiagramEdge]:
        return [e for e in self.edges if e.kind == kind]
