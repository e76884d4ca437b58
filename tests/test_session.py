"""Tests for optimistic updates, reverts and reconciliation."""

from datetime import date

import pytest

from conftest import person
from family_legacy.errors import (
    InvalidRelationshipError, MemberNotFoundError, MemberValidationError, PersistenceError,
)
from family_legacy.models import Edge, MediaItem, Position, RelationKind


def fail_on(monkeypatch, repo, method, call=1):
    """Make the n-th call of a repository method raise PersistenceError."""
    original = getattr(repo, method)
    calls = []

    def flaky(*args, **kwargs):
        calls.append(args)
        if len(calls) == call:
            raise PersistenceError("disk full")
        return original(*args, **kwargs)

    monkeypatch.setattr(repo, method, flaky)


@pytest.fixture
def couple(repo, session):
    """Alice and Bob, married, loaded into the session."""
    repo.create_member(person("alice"))
    repo.create_member(person("bob"))
    repo.create_edge("alice", "bob", "spouse")
    return session


class TestOptimisticAdd:
    """Local state changes before the store confirms."""

    def test_member_visible_before_write(self, session, writer, repo):
        carol = session.new_member(first_name="Carol", last_name="King")
        session.add_member(carol)

        assert [m.id for m in session.members] == [carol.id]
        assert repo.list_members() == []
        assert writer.pending == 1

        writer.flush()
        assert [m.id for m in repo.list_members()] == [carol.id]
        assert writer.idle

    def test_add_child_with_both_parents(self, couple, writer, repo):
        kid = person("kid")
        couple.add_member(kid, parents=("alice", "bob"))
        assert couple.relations("kid").parents == ("alice", "bob")

        writer.flush()
        edges = repo.list_edges()
        assert Edge.parent("alice", "kid") in edges
        assert Edge.parent("bob", "kid") in edges
        assert len([e for e in edges if e.kind == RelationKind.SPOUSE]) == 1

    def test_pinned_position(self, session, writer, repo):
        session.add_member(person("carol"), position=Position(x=10, y=20))
        writer.flush()
        assert repo.get_member("carol").position == Position(x=10, y=20)

    def test_unpinned_member_is_laid_out_but_not_saved(self, session, writer, repo):
        session.add_member(person("carol"))
        writer.flush()
        assert session.state.layout.position_of("carol") is not None
        assert repo.get_member("carol").position is None


class TestRevert:
    """Failed writes undo exactly their own mutation."""

    def test_failed_member_add(self, session, writer, repo, monkeypatch):
        fail_on(monkeypatch, repo, "create_member")
        session.add_member(person("carol"))
        writer.flush()

        assert session.members == []
        assert len(session.notices) == 1
        assert session.notices[0].level == "negative"

    def test_connect_pair_all_or_nothing(self, couple, writer, repo, monkeypatch):
        """If the second parent edge fails, the first is rolled back too."""
        repo.create_member(person("kid"))
        couple.reload()
        fail_on(monkeypatch, repo, "create_edge", call=2)

        added = couple.connect([Edge.parent("alice", "kid"), Edge.parent("bob", "kid")])
        assert len(added) == 2
        writer.flush()

        assert couple.relations("kid").parents == ()
        assert [e for e in repo.list_edges() if e.kind == RelationKind.PARENT] == []
        assert couple.notices

    def test_failed_child_add_removes_saved_member(self, couple, writer, repo, monkeypatch):
        fail_on(monkeypatch, repo, "create_edge", call=2)
        couple.add_member(person("kid"), parents=("alice", "bob"))
        writer.flush()

        assert not couple.state.has_member("kid")
        assert repo.get_member("kid") is None
        assert [e for e in repo.list_edges() if e.kind == RelationKind.PARENT] == []

    def test_failed_delete_restores_member_and_edges(self, couple, writer, repo, monkeypatch):
        fail_on(monkeypatch, repo, "delete_member")
        couple.delete_member("alice")
        assert not couple.state.has_member("alice")

        writer.flush()
        assert [m.id for m in couple.members] == ["alice", "bob"]
        assert couple.relations("alice").spouses == ("bob",)

    def test_failed_move_restores_position(self, couple, writer, repo, monkeypatch):
        fail_on(monkeypatch, repo, "set_member_position")
        couple.move_member("alice", 500, 500)
        writer.flush()
        assert couple.member("alice").position is None

    def test_other_mutations_survive_a_revert(self, couple, writer, repo, monkeypatch):
        fail_on(monkeypatch, repo, "create_member")
        couple.add_member(person("carol"))
        couple.move_member("bob", 30, 40)
        writer.flush()
        assert not couple.state.has_member("carol")
        assert couple.member("bob").position == Position(x=30, y=40)


class TestValidation:
    """Bad commands are rejected before any state changes."""

    def test_self_link(self, couple, writer):
        version = couple.state.version
        with pytest.raises(InvalidRelationshipError):
            couple.connect([Edge.spouse("alice", "alice")])
        assert couple.state.version == version
        assert writer.queue == []

    def test_unknown_member(self, couple):
        with pytest.raises(InvalidRelationshipError):
            couple.connect([Edge.parent("alice", "ghost")])
        with pytest.raises(InvalidRelationshipError):
            couple.add_member(person("kid"), parents=("ghost",))
        assert not couple.state.has_member("kid")

    def test_parent_cycle(self, couple):
        couple.connect([Edge.parent("alice", "bob")])
        with pytest.raises(InvalidRelationshipError):
            couple.connect([Edge.parent("bob", "alice")])

    def test_cycle_within_one_request(self, couple):
        with pytest.raises(InvalidRelationshipError):
            couple.connect([Edge.parent("alice", "bob"), Edge.parent("bob", "alice")])
        assert couple.relations("alice").children == ()

    def test_blank_name(self, session):
        with pytest.raises(MemberValidationError):
            session.new_member(first_name=" ", last_name="King")

    def test_update_rejects_bad_dates(self, couple, writer):
        couple.update_member("alice", birth_date=date(1960, 1, 1))
        with pytest.raises(MemberValidationError):
            couple.update_member("alice", death_date=date(1950, 1, 1))
        assert couple.member("alice").death_date is None
        assert len(writer.queue) == 1

    def test_update_rejects_unknown_fields(self, couple):
        with pytest.raises(MemberValidationError):
            couple.update_member("alice", position=None)

    def test_missing_member(self, session):
        with pytest.raises(MemberNotFoundError):
            session.delete_member("ghost")


class TestEdits:

    def test_update_saves_normalized_values(self, couple, writer, repo):
        couple.update_member("alice", first_name="  Alicia ", bio="")
        writer.flush()
        stored = repo.get_member("alice")
        assert stored.first_name == "Alicia"
        assert stored.bio is None

    def test_connect_existing_edge_is_noop(self, couple, writer):
        assert couple.connect([Edge.spouse("bob", "alice")]) == []
        assert writer.queue == []

    def test_disconnect(self, couple, writer, repo):
        removed = couple.disconnect([Edge.spouse("bob", "alice")])
        assert removed == [Edge.spouse("alice", "bob")]
        writer.flush()
        assert repo.list_edges() == []

    def test_add_media_prepends(self, couple, writer, repo):
        couple.add_media("alice", MediaItem(url="one.jpg", title="One"))
        couple.add_media("alice", MediaItem(url="two.jpg", title="Two"))
        assert [m.title for m in couple.member("alice").media] == ["Two", "One"]
        writer.flush()
        assert len(repo.get_member("alice").media) == 2

    def test_move_member(self, couple, writer, repo):
        couple.move_member("alice", 700, 80)
        assert couple.state.layout.position_of("alice") == Position(x=700, y=80)
        writer.flush()
        assert repo.get_member("alice").position == Position(x=700, y=80)


class TestReconcile:
    """Store changes made elsewhere reach the session."""

    def test_external_change_reloads(self, couple, repo):
        repo.create_member(person("carol"))
        assert couple.state.has_member("carol")

    def test_pending_writes_are_not_dropped(self, couple, writer, repo):
        couple.add_member(person("kid"), parents=("alice",))
        repo.create_member(person("carol"))
        assert couple.state.has_member("kid")

        writer.flush()
        assert couple.state.has_member("kid")
        assert couple.state.has_member("carol")

    def test_on_change_called(self, repo, engine, writer):
        from family_legacy.state.session import TreeSession

        calls = []
        session = TreeSession(repo, engine=engine, writer=writer, on_change=lambda: calls.append(1)).open()
        session.add_member(person("carol"))
        assert len(calls) == 2

    def test_close_stops_listening(self, couple, repo):
        couple.close()
        repo.create_member(person("carol"))
        assert not couple.state.has_member("carol")
