"""Pytest fixtures for family tree tests."""

import pytest

from family_legacy.config import LayoutSettings
from family_legacy.graph.layout import LayoutEngine
from family_legacy.graph.repository import FamilyRepository
from family_legacy.models import Member
from family_legacy.state.session import TreeSession
from family_legacy.state.writer import PersistenceWriter


class QueuedWriter(PersistenceWriter):
    """Holds writes until flush() so optimistic state can be inspected."""

    def __init__(self):
        super().__init__()
        self.queue = []

    def submit(self, description, job, on_success=None, on_failure=None):
        self.pending += 1
        self.queue.append((description, job, on_success, on_failure))

    def flush(self):
        while self.queue:
            description, job, on_success, on_failure = self.queue.pop(0)
            try:
                job()
            except Exception as e:
                self._finish(description, e, on_success, on_failure)
            else:
                self._finish(description, None, on_success, on_failure)


def person(member_id: str, first_name: str = None, **fields) -> Member:
    """Member with a readable fixed ID."""
    return Member(
        id=member_id,
        first_name=first_name or member_id.title(),
        last_name=fields.pop("last_name", "Test"),
        **fields,
    )


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "family.db")


@pytest.fixture
def repo(db_path):
    """FamilyRepository on a fresh SQLite file."""
    return FamilyRepository(db_path=db_path)


@pytest.fixture
def engine():
    return LayoutEngine(LayoutSettings())


@pytest.fixture
def writer():
    return QueuedWriter()


@pytest.fixture
def session(repo, engine, writer):
    """Open session whose writes wait for writer.flush()."""
    return TreeSession(repo, engine=engine, writer=writer).open()


@pytest.fixture
def couple_repo(repo):
    """Alice and Bob, married, no children."""
    repo.create_member(person("alice"))
    repo.create_member(person("bob"))
    repo.create_edge("alice", "bob", "spouse")
    return repo
