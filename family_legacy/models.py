"""Data models for the family tree."""

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def new_id() -> str:
    """Generate a stable member/media ID."""
    return str(uuid.uuid4())


class Gender(str, Enum):
    """Gender tag shown on member cards."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class MediaType(str, Enum):
    """Kinds of media attached to a member."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    NOTE = "note"


class RelationKind(str, Enum):
    """Stored relationship kinds."""
    PARENT = "parent"
    SPOUSE = "spouse"


class Position(BaseModel):
    """Top-left corner of a node on the canvas."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)


class MediaItem(BaseModel):
    """Media reference attached to a member."""

    id: str = Field(default_factory=new_id)
    type: MediaType = MediaType.IMAGE
    url: str = ""
    title: str = ""
    content: Optional[str] = None  # notes only
    created_at: datetime = Field(default_factory=datetime.now)


class Member(BaseModel):
    """A person in the family tree.

    Relationships are not stored here; parents, children and spouses are
    derived from the edge set by the graph builder.
    """

    id: str = Field(default_factory=new_id)
    first_name: str
    last_name: str
    maiden_name: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None
    media: list[MediaItem] = Field(default_factory=list)
    position: Optional[Position] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip() if value else ""
        if not value:
            raise ValueError("name is required")
        return value

    @field_validator("maiden_name", "bio", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("birth_date", "death_date", "gender", mode="before")
    @classmethod
    def _empty_to_none(cls, value):
        return None if value == "" else value

    @model_validator(mode="after")
    def _check_dates(self) -> "Member":
        if self.birth_date and self.death_date and self.death_date < self.birth_date:
            raise ValueError("death date precedes birth date")
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        return f"{self.first_name[0]}{self.last_name[0]}".upper()

    @property
    def birth_year(self) -> Optional[int]:
        return self.birth_date.year if self.birth_date else None

    @property
    def lifespan(self) -> str:
        """Card label such as 'b. 1940' or '1940 - 2001'."""
        born = str(self.birth_year) if self.birth_year else "?"
        if self.death_date:
            return f"{born} - {self.death_date.year}"
        return f"b. {born}"

    @property
    def profile_image(self) -> Optional[MediaItem]:
        for item in self.media:
            if item.type == MediaType.IMAGE:
                return item
        return None


class Edge(BaseModel):
    """Relationship edge between two members.

    Parent edges point from parent to child. Spouse edges are symmetric and
    compare equal through `key` regardless of which end was stored first.
    """

    model_config = ConfigDict(frozen=True)

    from_id: str
    to_id: str
    kind: RelationKind

    @classmethod
    def parent(cls, parent_id: str, child_id: str) -> "Edge":
        return cls(from_id=parent_id, to_id=child_id, kind=RelationKind.PARENT)

    @classmethod
    def spouse(cls, a: str, b: str) -> "Edge":
        return cls(from_id=a, to_id=b, kind=RelationKind.SPOUSE)

    @classmethod
    def normalize(cls, from_id: str, to_id: str, kind: str) -> "Edge":
        """Build an edge, accepting 'child' as the reverse of 'parent'."""
        if kind == "child":
            return cls.parent(to_id, from_id)
        return cls(from_id=from_id, to_id=to_id, kind=RelationKind(kind))

    @property
    def key(self) -> tuple[str, str, str]:
        if self.kind == RelationKind.SPOUSE:
            a, b = sorted((self.from_id, self.to_id))
            return (self.kind.value, a, b)
        return (self.kind.value, self.from_id, self.to_id)

    @property
    def is_self_loop(self) -> bool:
        return self.from_id == self.to_id

    def same_as(self, other: "Edge") -> bool:
        return self.key == other.key

    def touches(self, member_id: str) -> bool:
        return member_id in (self.from_id, self.to_id)
