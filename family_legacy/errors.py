"""
Exception hierarchy for Family Legacy.

All errors raised by the stores, the session and the interaction layer derive
from FamilyTreeError, so callers that only want to report a failure can catch
the root:

    try:
        session.connect(edges)
    except FamilyTreeError as e:
        ui.notify(str(e), type="warning")
"""


class FamilyTreeError(Exception):
    """Base class for all family tree errors."""


class MemberValidationError(FamilyTreeError):
    """Member input is malformed (missing names, impossible dates)."""


class InvalidRelationshipError(FamilyTreeError):
    """A relationship cannot be created as requested."""


class MemberNotFoundError(FamilyTreeError):
    """A member ID does not exist."""

    def __init__(self, member_id: str):
        super().__init__(f"Member not found: {member_id}")
        self.member_id = member_id


class PersistenceError(FamilyTreeError):
    """The backing store failed to read or write."""
