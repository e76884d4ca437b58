"""Tests for the SQLite stores and the repository facade."""

import sqlite3
from datetime import date, datetime

import pytest

from conftest import person
from family_legacy.errors import PersistenceError
from family_legacy.graph.repository import ChangeKind, FamilyRepository
from family_legacy.models import Edge, Gender, MediaItem, MediaType, Position, RelationKind


class TestMembers:
    """Member persistence."""

    def test_create_and_list(self, repo):
        """Should store and return members in insertion order."""
        repo.create_member(person("carol", birth_date=date(1950, 3, 4), gender=Gender.FEMALE))
        repo.create_member(person("dave"))

        members = repo.list_members()
        assert [m.id for m in members] == ["carol", "dave"]
        assert members[0].birth_date == date(1950, 3, 4)
        assert members[0].gender == Gender.FEMALE
        assert members[0].position is None

    def test_get_missing_member(self, repo):
        assert repo.get_member("nobody") is None

    def test_update_member(self, repo):
        repo.create_member(person("carol"))
        repo.update_member("carol", bio="Painter", death_date=date(2010, 1, 1), gender=Gender.FEMALE)

        carol = repo.get_member("carol")
        assert carol.bio == "Painter"
        assert carol.death_date == date(2010, 1, 1)
        assert carol.gender == Gender.FEMALE

    def test_set_position(self, repo):
        repo.create_member(person("carol"))
        repo.set_member_position("carol", 120.5, 40)
        assert repo.get_member("carol").position == Position(x=120.5, y=40)

    def test_media_newest_first(self, repo):
        repo.create_member(person("carol"))
        repo.add_media("carol", MediaItem(
            type=MediaType.IMAGE, url="old.jpg", title="Old", created_at=datetime(2020, 1, 1),
        ))
        repo.add_media("carol", MediaItem(
            type=MediaType.NOTE, title="New", content="hello", created_at=datetime(2021, 1, 1),
        ))

        media = repo.get_member("carol").media
        assert [m.title for m in media] == ["New", "Old"]
        assert media[0].content == "hello"

    def test_persists_across_instances(self, db_path):
        FamilyRepository(db_path=db_path).create_member(person("carol"))
        assert FamilyRepository(db_path=db_path).get_member("carol") is not None


class TestRelationships:
    """Edge persistence is idempotent."""

    def test_spouse_twice_stores_one_edge(self, couple_repo):
        """Repeating a spouse link in either direction is a no-op."""
        assert couple_repo.create_edge("alice", "bob", "spouse") is False
        assert couple_repo.create_edge("bob", "alice", "spouse") is False
        spouse_edges = [e for e in couple_repo.list_edges() if e.kind == RelationKind.SPOUSE]
        assert len(spouse_edges) == 1

    def test_parent_edge_direction_matters(self, couple_repo):
        assert couple_repo.create_edge("alice", "bob", "parent") is True
        assert couple_repo.create_edge("bob", "alice", "parent") is True
        assert couple_repo.create_edge("alice", "bob", "parent") is False

    def test_child_alias(self, couple_repo):
        couple_repo.create_member(person("kid"))
        couple_repo.create_edge("kid", "alice", "child")
        assert Edge.parent("alice", "kid") in couple_repo.list_edges()

    def test_delete_spouse_edge_reversed(self, couple_repo):
        assert couple_repo.delete_edge("bob", "alice", "spouse") == 1
        assert couple_repo.list_edges() == []

    def test_delete_member_cascades(self, couple_repo):
        """Deleting a member removes every edge touching it and its media."""
        couple_repo.create_member(person("kid"))
        couple_repo.create_edge("alice", "kid", "parent")
        couple_repo.create_edge("bob", "kid", "parent")
        couple_repo.add_media("alice", MediaItem(url="a.jpg"))

        couple_repo.delete_member("alice")

        assert couple_repo.get_member("alice") is None
        assert couple_repo.list_edges() == [Edge.parent("bob", "kid")]
        with sqlite3.connect(couple_repo.db_path) as conn:
            assert conn.execute("SELECT COUNT(*) FROM media").fetchone()[0] == 0


class TestChangeEvents:
    """Listeners hear about every write."""

    def test_events(self, repo):
        events = []
        repo.subscribe(events.append)

        repo.create_member(person("carol"))
        repo.create_member(person("dave"))
        repo.create_edge("carol", "dave", "spouse")
        repo.create_edge("carol", "dave", "spouse")
        repo.set_member_position("carol", 1, 2)
        repo.delete_member("dave")

        assert [e.kind for e in events] == [
            ChangeKind.MEMBER_ADDED,
            ChangeKind.MEMBER_ADDED,
            ChangeKind.EDGE_SET_CHANGED,
            ChangeKind.MEMBER_CHANGED,
            ChangeKind.MEMBER_REMOVED,
        ]
        assert events[-1].member_id == "dave"

    def test_unsubscribe(self, repo):
        events = []
        unsubscribe = repo.subscribe(events.append)
        unsubscribe()
        repo.create_member(person("carol"))
        assert events == []

    def test_listener_errors_do_not_break_writes(self, repo):
        def broken(event):
            raise RuntimeError("boom")

        repo.subscribe(broken)
        repo.create_member(person("carol"))
        assert repo.get_member("carol") is not None


class TestErrors:

    def test_sqlite_errors_become_persistence_errors(self, repo, monkeypatch):
        def fail():
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(repo.members, "get_all", fail)
        with pytest.raises(PersistenceError):
            repo.list_members()

    def test_duplicate_member_id(self, repo):
        repo.create_member(person("carol"))
        with pytest.raises(PersistenceError):
            repo.create_member(person("carol"))
