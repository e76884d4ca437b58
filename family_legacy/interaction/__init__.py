"""Interaction package - canvas gestures to tree commands."""

from family_legacy.interaction.controller import InteractionController
from family_legacy.interaction.gestures import (
    AddMemberRequest, AddRelationships, ConnectGesture, DeleteRelationships, EdgeDeletion,
    GesturePhase, HandleRole, ReleasedElsewhere, ReleasedOnCanvas, ReleasedOnNode,
)

__all__ = [
    "InteractionController",
    "AddMemberRequest",
    "AddRelationships",
    "ConnectGesture",
    "DeleteRelationships",
    "EdgeDeletion",
    "GesturePhase",
    "HandleRole",
    "ReleasedElsewhere",
    "ReleasedOnCanvas",
    "ReleasedOnNode",
]
