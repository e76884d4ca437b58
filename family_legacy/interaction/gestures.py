"""
Pointer gesture state machines.

ConnectGesture turns a drag from a node handle into one semantic outcome:

    idle --start()--> dragging --release(target)--> idle

`release` always returns the machine to idle, whatever the target was.
EdgeDeletion handles modifier-click on an edge followed by confirmation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from family_legacy.graph.nodes import DiagramEdge, MarriageRef, NodeRef, PersonRef
from family_legacy.models import Edge, Position

logger = logging.getLogger(__name__)


class HandleRole(str, Enum):
    """Connection handles on a node."""
    TOP = "top"        # receives a parent
    BOTTOM = "bottom"  # emits a child
    LEFT = "left"      # spouse side
    RIGHT = "right"    # spouse side

    @property
    def is_side(self) -> bool:
        return self in (HandleRole.LEFT, HandleRole.RIGHT)


class GesturePhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


# ─────────────────────────────────────────
# Release targets
# ─────────────────────────────────────────

@dataclass(frozen=True)
class ReleasedOnNode:
    node: NodeRef
    handle: Optional[HandleRole] = None  # None = dropped on the node body


@dataclass(frozen=True)
class ReleasedOnCanvas:
    position: Position


@dataclass(frozen=True)
class ReleasedElsewhere:
    """Dropped over UI chrome or cancelled."""


ReleaseTarget = Union[ReleasedOnNode, ReleasedOnCanvas, ReleasedElsewhere]


# ─────────────────────────────────────────
# Outcomes
# ─────────────────────────────────────────

@dataclass(frozen=True)
class AddRelationships:
    edges: tuple[Edge, ...]


@dataclass(frozen=True)
class AddMemberRequest:
    """Ask the user for a new member's details, then seed these relationships."""
    parents: tuple[str, ...] = ()
    children: tuple[str, ...] = ()
    spouses: tuple[str, ...] = ()
    position: Optional[Position] = None  # pinned position, else laid out


@dataclass(frozen=True)
class DeleteRelationships:
    edges: tuple[Edge, ...]


Outcome = Union[AddRelationships, AddMemberRequest]


@dataclass(frozen=True)
class _Drag:
    node: NodeRef
    handle: HandleRole


class ConnectGesture:
    """Drag-to-connect state machine."""

    def __init__(self):
        self._drag: Optional[_Drag] = None

    @property
    def phase(self) -> GesturePhase:
        return GesturePhase.DRAGGING if self._drag else GesturePhase.IDLE

    @property
    def origin(self) -> Optional[tuple[NodeRef, HandleRole]]:
        return (self._drag.node, self._drag.handle) if self._drag else None

    def start(self, node: NodeRef, handle: HandleRole) -> bool:
        """Begin dragging from a handle. Junctions only expose their bottom handle."""
        if isinstance(node, MarriageRef) and handle != HandleRole.BOTTOM:
            logger.debug("Ignoring drag from junction handle %s", handle.value)
            self._drag = None
            return False
        self._drag = _Drag(node, HandleRole(handle))
        return True

    def cancel(self) -> None:
        self._drag = None

    def release(self, target: ReleaseTarget) -> Optional[Outcome]:
        """Finish the drag and resolve what it means."""
        drag, self._drag = self._drag, None
        if drag is None:
            return None
        if isinstance(target, ReleasedOnCanvas):
            return self._on_canvas(drag, target.position)
        if isinstance(target, ReleasedOnNode):
            return self._on_node(drag, target)
        return None

    def _on_canvas(self, drag: _Drag, at: Position) -> AddMemberRequest:
        node, handle = drag.node, drag.handle
        if isinstance(node, MarriageRef):
            return AddMemberRequest(parents=node.spouses, position=at)
        if handle == HandleRole.BOTTOM:
            return AddMemberRequest(parents=(node.member_id,))
        if handle == HandleRole.TOP:
            return AddMemberRequest(children=(node.member_id,))
        return AddMemberRequest(spouses=(node.member_id,))

    def _on_node(self, drag: _Drag, target: ReleasedOnNode) -> Optional[AddRelationships]:
        if target.node == drag.node or not isinstance(target.node, PersonRef):
            return None
        child = target.node.member_id

        if isinstance(drag.node, MarriageRef):
            if child in drag.node.spouses:
                return None
            return AddRelationships(tuple(Edge.parent(s, child) for s in drag.node.spouses))

        source = drag.node.member_id
        target_handle = target.handle or drag.handle
        if drag.handle.is_side and target_handle.is_side:
            return AddRelationships((Edge.spouse(source, child),))
        if drag.handle == HandleRole.TOP:
            # dragging up from the parent slot makes the target the parent
            return AddRelationships((Edge.parent(child, source),))
        return AddRelationships((Edge.parent(source, child),))


class EdgeDeletion:
    """Modifier-click on an edge asks for confirmation before deleting."""

    def __init__(self):
        self.pending: Optional[DiagramEdge] = None

    def click(self, edge: DiagramEdge, modifier: bool) -> bool:
        """Returns True when a confirmation should be shown."""
        if not modifier:
            return False
        self.pending = edge
        return True

    def confirm(self) -> Optional[DeleteRelationships]:
        edge, self.pending = self.pending, None
        if edge is None:
            return None
        return DeleteRelationships(edge.underlying)

    def dismiss(self) -> None:
        self.pending = None
