"""Translate canvas gestures into tree session commands."""

import logging
from typing import Callable, Optional

from family_legacy.errors import FamilyTreeError
from family_legacy.graph.nodes import DiagramEdge, NodeRef, PersonRef
from family_legacy.interaction.gestures import (
    AddMemberRequest, AddRelationships, ConnectGesture, EdgeDeletion,
    HandleRole, Outcome, ReleaseTarget,
)
from family_legacy.models import Edge, Member
from family_legacy.state.session import TreeSession

logger = logging.getLogger(__name__)


class InteractionController:
    """
    Owns the gesture state machines for one canvas.

    Usage:
        controller = InteractionController(session, on_member_request=open_dialog)
        controller.connect_start(PersonRef(a_id), HandleRole.BOTTOM)
        controller.connect_end(ReleasedOnCanvas(Position(x=40, y=300)))
        # open_dialog(request) collects the names, then:
        controller.complete_member_request(member)
    """

    def __init__(
        self,
        session: TreeSession,
        on_member_request: Optional[Callable[[AddMemberRequest], None]] = None,
        on_confirm_delete: Optional[Callable[[DiagramEdge], None]] = None,
    ):
        self.session = session
        self.on_member_request = on_member_request
        self.on_confirm_delete = on_confirm_delete
        self.gesture = ConnectGesture()
        self.deletion = EdgeDeletion()
        self.pending_request: Optional[AddMemberRequest] = None

    # ─────────────────────────────────────────
    # Connect gestures
    # ─────────────────────────────────────────

    def connect_start(self, node: NodeRef, handle: HandleRole) -> bool:
        return self.gesture.start(node, HandleRole(handle))

    def connect_cancel(self) -> None:
        self.gesture.cancel()

    def connect_end(self, target: ReleaseTarget) -> Optional[Outcome]:
        """Resolve the drag and apply it. The gesture is idle afterwards."""
        outcome = self.gesture.release(target)

        if isinstance(outcome, AddRelationships):
            try:
                self.session.connect(outcome.edges)
            except FamilyTreeError as e:
                self.session.notify(str(e), level="warning")
        elif isinstance(outcome, AddMemberRequest):
            self.pending_request = outcome
            if self.on_member_request:
                self.on_member_request(outcome)
        return outcome

    def complete_member_request(self, member: Member,
                                request: Optional[AddMemberRequest] = None) -> Member:
        """Create the member a canvas drop asked for."""
        request = request or self.pending_request or AddMemberRequest()
        self.pending_request = None
        return self.session.add_member(
            member,
            parents=request.parents,
            children=request.children,
            spouses=request.spouses,
            position=request.position,
        )

    def abandon_member_request(self) -> None:
        self.pending_request = None

    # ─────────────────────────────────────────
    # Node drags
    # ─────────────────────────────────────────

    def node_moved(self, node: NodeRef, x: float, y: float) -> None:
        """Persist where a member was dropped; junctions follow their spouses."""
        if isinstance(node, PersonRef):
            self.session.move_member(node.member_id, x, y)

    # ─────────────────────────────────────────
    # Edge deletion
    # ─────────────────────────────────────────

    def edge_clicked(self, edge: DiagramEdge, modifier: bool) -> bool:
        if not self.deletion.click(edge, modifier):
            return False
        if self.on_confirm_delete:
            self.on_confirm_delete(edge)
        return True

    def confirm_delete(self) -> list[Edge]:
        outcome = self.deletion.confirm()
        if outcome is None:
            return []
        return self.session.disconnect(outcome.edges)

    def dismiss_delete(self) -> None:
        self.deletion.dismiss()
