"""Persistence facade combining member and relationship stores."""

import sqlite3
import logging
import functools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from family_legacy.errors import PersistenceError
from family_legacy.graph.member_store import MemberStore
from family_legacy.graph.relationship_store import RelationshipStore
from family_legacy.models import Edge, MediaItem, Member

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Coarse change notifications."""
    MEMBER_CHANGED = "member-changed"
    MEMBER_ADDED = "member-added"
    MEMBER_REMOVED = "member-removed"
    EDGE_SET_CHANGED = "edge-set-changed"


@dataclass(frozen=True)
class ChangeEvent:
    """Something in the store changed; listeners re-derive the whole graph."""
    kind: ChangeKind
    member_id: Optional[str] = None


Listener = Callable[[ChangeEvent], None]


def _store_call(action: str):
    """Wrap sqlite errors from a store call into PersistenceError."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except sqlite3.Error as e:
                logger.error("Failed to %s: %s", action, e)
                raise PersistenceError(f"Failed to {action}: {e}") from e
        return wrapper
    return decorator


class FamilyRepository:
    """
    Main interface for family tree persistence.

    Combines member and relationship storage and publishes change events.

    Usage:
        repo = FamilyRepository(db_path="data/family.db")
        grandpa = repo.create_member(Member(first_name="Grandpa", last_name="Smith"))
        grandma = repo.create_member(Member(first_name="Grandma", last_name="Smith"))
        repo.create_edge(grandpa.id, grandma.id, "spouse")
    """

    def __init__(self, db_path: Optional[str] = None):
        self.members = MemberStore(db_path)
        self.relationships = RelationshipStore(self.members.db_path)
        self._listeners: list[Listener] = []

    @property
    def db_path(self) -> str:
        return self.members.db_path

    # ─────────────────────────────────────────
    # Change notifications
    # ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: ChangeKind, member_id: Optional[str] = None):
        event = ChangeEvent(kind, member_id)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed for %s", event)

    # ─────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────

    @_store_call("list members")
    def list_members(self) -> list[Member]:
        return self.members.get_all()

    @_store_call("list relationships")
    def list_edges(self) -> list[Edge]:
        return self.relationships.get_all()

    @_store_call("load member")
    def get_member(self, member_id: str) -> Optional[Member]:
        return self.members.get_member(member_id)

    # ─────────────────────────────────────────
    # Member writes
    # ─────────────────────────────────────────

    @_store_call("create member")
    def create_member(self, member: Member) -> Member:
        self.members.add_member(member)
        logger.info("Created member %s (%s)", member.full_name, member.id)
        self._emit(ChangeKind.MEMBER_ADDED, member.id)
        return member

    @_store_call("update member")
    def update_member(self, member_id: str, **changes) -> None:
        if self.members.update_member(member_id, **changes):
            self._emit(ChangeKind.MEMBER_CHANGED, member_id)

    @_store_call("delete member")
    def delete_member(self, member_id: str) -> None:
        """Delete a member together with its relationships and media."""
        removed_edges = self.relationships.remove_for_member(member_id)
        if self.members.delete_member(member_id):
            logger.info("Deleted member %s (%d relationships)", member_id, removed_edges)
            self._emit(ChangeKind.MEMBER_REMOVED, member_id)
        elif removed_edges:
            self._emit(ChangeKind.EDGE_SET_CHANGED)

    @_store_call("save position")
    def set_member_position(self, member_id: str, x: float, y: float) -> None:
        if self.members.set_position(member_id, x, y):
            self._emit(ChangeKind.MEMBER_CHANGED, member_id)

    @_store_call("add media")
    def add_media(self, member_id: str, item: MediaItem) -> None:
        self.members.add_media(member_id, item)
        self._emit(ChangeKind.MEMBER_CHANGED, member_id)

    # ─────────────────────────────────────────
    # Relationship writes
    # ─────────────────────────────────────────

    @_store_call("create relationship")
    def create_edge(self, from_id: str, to_id: str, kind: str) -> bool:
        """Store a relationship. A no-op (returns False) if an equivalent one exists."""
        edge = Edge.normalize(from_id, to_id, kind)
        inserted = self.relationships.add(edge)
        if inserted:
            logger.info("Added %s relationship %s -> %s", edge.kind.value, edge.from_id, edge.to_id)
            self._emit(ChangeKind.EDGE_SET_CHANGED)
        return inserted

    @_store_call("delete relationship")
    def delete_edge(self, from_id: str, to_id: str, kind: str) -> int:
        edge = Edge.normalize(from_id, to_id, kind)
        removed = self.relationships.remove(edge)
        if removed:
            logger.info("Removed %s relationship %s -> %s", edge.kind.value, edge.from_id, edge.to_id)
            self._emit(ChangeKind.EDGE_SET_CHANGED)
        return removed
