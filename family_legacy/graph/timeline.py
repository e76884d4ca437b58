"""Chronological view of members."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from family_legacy.models import Member


@dataclass(frozen=True)
class TimelineEntry:
    member: Member
    label: str
    side: str  # "left" or "right"


def build_timeline(members: Iterable[Member]) -> list[TimelineEntry]:
    """Sort by birth date; unknown birth dates go last, ties by name."""
    ordered = sorted(
        members,
        key=lambda m: (m.birth_date is None, m.birth_date or date.min, m.last_name, m.first_name),
    )
    return [
        TimelineEntry(
            member=m,
            label=str(m.birth_year) if m.birth_year else "Unknown",
            side="left" if i % 2 == 0 else "right",
        )
        for i, m in enumerate(ordered)
    ]
