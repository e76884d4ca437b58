"""
Tree session - the single owner of one client's tree state.

Every command validates first, then mutates the local TreeState immediately
and hands the matching store write to the PersistenceWriter. When a write
fails, exactly the mutation it belongs to is reverted and a Notice is raised.
Once all writes have landed the session reloads from the store.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import networkx as nx
from pydantic import ValidationError

from family_legacy.errors import (
    InvalidRelationshipError, MemberNotFoundError, MemberValidationError, PersistenceError,
)
from family_legacy.graph.builder import MemberRelations
from family_legacy.graph.layout import LayoutEngine
from family_legacy.graph.nodes import Diagram
from family_legacy.graph.repository import ChangeEvent, FamilyRepository
from family_legacy.models import Edge, MediaItem, Member, Position, RelationKind
from family_legacy.state.tree_state import TreeState
from family_legacy.state.writer import PersistenceWriter

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "first_name", "last_name", "maiden_name", "birth_date",
    "death_date", "gender", "bio",
}


@dataclass(frozen=True)
class Notice:
    """Non-fatal message for the UI (levels match ui.notify types)."""
    message: str
    level: str = "negative"


class TreeSession:
    """Optimistic command layer over a FamilyRepository."""

    def __init__(
        self,
        repository: FamilyRepository,
        engine: Optional[LayoutEngine] = None,
        writer: Optional[PersistenceWriter] = None,
        on_change: Optional[Callable[[], None]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self.repository = repository
        self.state = TreeState(engine=engine)
        self.writer = writer or PersistenceWriter()
        self.on_change = on_change
        self.on_notice = on_notice
        self.notices: list[Notice] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ─────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────

    def open(self) -> "TreeSession":
        """Load the tree and start listening for out-of-band changes."""
        self.writer.attach()
        self.reload()
        if self._unsubscribe is None:
            self._unsubscribe = self.repository.subscribe(self.handle_change)
        return self

    def close(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def reload(self) -> None:
        """Replace local state with the store's confirmed state."""
        try:
            members = self.repository.list_members()
            edges = self.repository.list_edges()
        except PersistenceError as e:
            self.notify(f"Could not load the family tree: {e}")
            return
        self.state.replace(members, edges)
        self._changed()

    def handle_change(self, event: ChangeEvent) -> None:
        """Store listener; may be called from the writer thread."""
        self.writer.call_soon(self._on_store_change, event)

    def _on_store_change(self, event: ChangeEvent) -> None:
        # pending writes reload on drain; reloading now would drop them
        if self.writer.idle:
            logger.debug("Reloading after %s", event.kind.value)
            self.reload()

    # ─────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────

    @property
    def members(self) -> list[Member]:
        return self.state.members

    @property
    def diagram(self) -> Diagram:
        return self.state.diagram

    def member(self, member_id: str) -> Member:
        member = self.state.member(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    def relations(self, member_id: str) -> MemberRelations:
        return self.state.relations(member_id)

    # ─────────────────────────────────────────
    # Members
    # ─────────────────────────────────────────

    @staticmethod
    def new_member(**fields) -> Member:
        """Build a Member, turning pydantic errors into MemberValidationError."""
        try:
            return Member(**fields)
        except ValidationError as e:
            raise MemberValidationError(_describe(e)) from e

    def add_member(
        self,
        member: Member,
        parents: Iterable[str] = (),
        children: Iterable[str] = (),
        spouses: Iterable[str] = (),
        position: Optional[Position] = None,
    ) -> Member:
        """Add a member seeded with relationships to existing members."""
        if self.state.has_member(member.id):
            raise MemberValidationError(f"Member already exists: {member.id}")
        if position is not None:
            member = member.model_copy(update={"position": position})

        edges = [Edge.parent(p, member.id) for p in parents]
        edges += [Edge.parent(member.id, c) for c in children]
        edges += [Edge.spouse(member.id, s) for s in spouses]
        self._validate_edges(edges, new_member=member.id)

        self.state.add_member(member)
        for edge in edges:
            self.state.add_edge(edge)
        self._changed()

        def job():
            self.repository.create_member(member)
            try:
                for edge in edges:
                    self.repository.create_edge(edge.from_id, edge.to_id, edge.kind)
            except PersistenceError:
                try:
                    self.repository.delete_member(member.id)
                except PersistenceError:
                    logger.warning("Could not remove partially saved member %s", member.id)
                raise

        def revert(error):
            self.state.remove_member(member.id)
            self._failed(f"Could not save {member.full_name}; the change was undone.")

        self.writer.submit(f"member {member.id}", job, self._saved, revert)
        return member

    def update_member(self, member_id: str, **changes) -> Member:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise MemberValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
        current = self.member(member_id)
        updated = self.new_member(**{**current.model_dump(), **changes})
        stored = {key: getattr(updated, key) for key in changes}

        self.state.put_member(updated)
        self._changed()

        def revert(error):
            if self.state.has_member(member_id):
                self.state.put_member(current)
            self._failed(f"Could not update {current.full_name}; the change was undone.")

        self.writer.submit(
            f"update {member_id}",
            lambda: self.repository.update_member(member_id, **stored),
            self._saved,
            revert,
        )
        return updated

    def delete_member(self, member_id: str) -> None:
        """Delete a member and every relationship touching it."""
        self.member(member_id)
        member, index, removed = self.state.remove_member(member_id)
        self._changed()

        def revert(error):
            self.state.add_member(member, index)
            for edge in removed:
                self.state.add_edge(edge)
            self._failed(f"Could not delete {member.full_name}; the change was undone.")

        self.writer.submit(
            f"delete {member_id}",
            lambda: self.repository.delete_member(member_id),
            self._saved,
            revert,
        )

    def move_member(self, member_id: str, x: float, y: float) -> None:
        """Save a dragged position."""
        self.member(member_id)
        previous = self.state.set_position(member_id, Position(x=x, y=y))
        self._changed()

        def revert(error):
            if self.state.has_member(member_id):
                self.state.set_position(member_id, previous)
            self._failed("Could not save the new position; the node was moved back.")

        self.writer.submit(
            f"position {member_id}",
            lambda: self.repository.set_member_position(member_id, x, y),
            self._saved,
            revert,
        )

    def add_media(self, member_id: str, item: MediaItem) -> None:
        current = self.member(member_id)
        self.state.put_member(current.model_copy(update={"media": [item] + current.media}))
        self._changed()

        def revert(error):
            member = self.state.member(member_id)
            if member is not None:
                media = [m for m in member.media if m.id != item.id]
                self.state.put_member(member.model_copy(update={"media": media}))
            self._failed(f"Could not attach {item.title or 'media'}; the change was undone.")

        self.writer.submit(
            f"media {item.id}",
            lambda: self.repository.add_media(member_id, item),
            self._saved,
            revert,
        )

    # ─────────────────────────────────────────
    # Relationships
    # ─────────────────────────────────────────

    def connect(self, edges: Iterable[Edge]) -> list[Edge]:
        """Add relationships as one all-or-nothing change.

        Edges already present are treated as success. Returns the edges that
        were actually new.
        """
        edges = list(edges)
        self._validate_edges(edges)
        added = [e for e in edges if self.state.add_edge(e)]
        if not added:
            return []
        self._changed()

        def job():
            inserted = []
            try:
                for edge in added:
                    if self.repository.create_edge(edge.from_id, edge.to_id, edge.kind):
                        inserted.append(edge)
            except PersistenceError:
                for edge in inserted:
                    try:
                        self.repository.delete_edge(edge.from_id, edge.to_id, edge.kind)
                    except PersistenceError:
                        logger.warning("Could not roll back stored edge %s", edge.key)
                raise

        def revert(error):
            for edge in added:
                self.state.remove_edge(edge)
            self._failed("Could not save the relationship; the change was undone.")

        self.writer.submit(f"{len(added)} relationship(s)", job, self._saved, revert)
        return added

    def disconnect(self, edges: Iterable[Edge]) -> list[Edge]:
        """Remove relationships. Returns the edges removed locally."""
        removed: list[Edge] = []
        for edge in edges:
            removed.extend(self.state.remove_edge(edge))
        if not removed:
            return []
        self._changed()

        def job():
            for edge in removed:
                self.repository.delete_edge(edge.from_id, edge.to_id, edge.kind)

        def revert(error):
            for edge in removed:
                self.state.add_edge(edge)
            self._failed("Could not delete the relationship; the change was undone.")

        self.writer.submit(f"remove {len(removed)} relationship(s)", job, self._saved, revert)
        return removed

    def _validate_edges(self, edges: list[Edge], new_member: Optional[str] = None) -> None:
        """Reject self links, unknown members and parent cycles before any mutation."""
        known = set(m.id for m in self.state.members)
        if new_member:
            known.add(new_member)

        lineage = self.state.graph.parent_digraph()
        if new_member:
            lineage.add_node(new_member)
        for edge in edges:
            if edge.is_self_loop:
                raise InvalidRelationshipError("A member cannot be related to themselves")
            for member_id in (edge.from_id, edge.to_id):
                if member_id not in known:
                    raise InvalidRelationshipError(f"Unknown member: {member_id}")
            if edge.kind == RelationKind.PARENT:
                if nx.has_path(lineage, edge.to_id, edge.from_id):
                    raise InvalidRelationshipError("A member cannot be their own ancestor")
                lineage.add_edge(edge.from_id, edge.to_id)

    # ─────────────────────────────────────────
    # Callbacks
    # ─────────────────────────────────────────

    def _saved(self) -> None:
        if self.writer.idle:
            self.reload()

    def _failed(self, message: str) -> None:
        self._changed()
        self.notify(message)

    def notify(self, message: str, level: str = "negative") -> None:
        notice = Notice(message, level)
        self.notices.append(notice)
        logger.warning(message)
        if self.on_notice:
            self.on_notice(notice)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "member"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)
