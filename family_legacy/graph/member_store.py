"""SQLite store for members, their media and saved positions."""

import sqlite3
import logging
from pathlib import Path
from typing import Optional
from datetime import date, datetime

from family_legacy.config import settings
from family_legacy.models import Member, MediaItem, Position

logger = logging.getLogger(__name__)

MEMBER_COLUMNS = {
    "first_name", "last_name", "maiden_name", "birth_date",
    "death_date", "gender", "bio",
}


class MemberStore:
    """Store member attributes in SQLite."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or settings.database.path
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS family_members (
                    id TEXT PRIMARY KEY,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    maiden_name TEXT,
                    birth_date TEXT,
                    death_date TEXT,
                    gender TEXT,
                    bio TEXT,
                    position_x REAL,
                    position_y REAL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS media (
                    id TEXT PRIMARY KEY,
                    member_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    url TEXT,
                    title TEXT,
                    content TEXT,
                    created_at TEXT
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_media_member ON media(member_id)")

    def add_member(self, member: Member) -> Member:
        """Insert a member and its media."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO family_members (id, first_name, last_name, maiden_name,
                    birth_date, death_date, gender, bio, position_x, position_y)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                member.id,
                member.first_name,
                member.last_name,
                member.maiden_name,
                member.birth_date.isoformat() if member.birth_date else None,
                member.death_date.isoformat() if member.death_date else None,
                member.gender.value if member.gender else None,
                member.bio,
                member.position.x if member.position else None,
                member.position.y if member.position else None,
            ))
            for item in member.media:
                self._insert_media(conn, member.id, item)
        return member

    def get_member(self, member_id: str) -> Optional[Member]:
        """Get member by ID."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT * FROM family_members WHERE id = ?", (member_id,)
            ).fetchone()
            if not row:
                return None
            media = self._media_by_member(conn, [member_id])
            return self._row_to_member(row, media.get(member_id, []))

    def get_all(self) -> list[Member]:
        """Get all members in insertion order."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT * FROM family_members ORDER BY rowid"
            ).fetchall()
            media = self._media_by_member(conn, [row["id"] for row in rows])
            return [self._row_to_member(row, media.get(row["id"], [])) for row in rows]

    def update_member(self, member_id: str, **kwargs) -> bool:
        """Update member attributes."""
        updates = {k: v for k, v in kwargs.items() if k in MEMBER_COLUMNS}
        if not updates:
            return False

        for key in ("birth_date", "death_date"):
            if isinstance(updates.get(key), date):
                updates[key] = updates[key].isoformat()
        if updates.get("gender") is not None:
            updates["gender"] = getattr(updates["gender"], "value", updates["gender"])

        set_clause = ", ".join(f"{k} = ?" for k in updates.keys())
        values = list(updates.values()) + [member_id]

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE family_members SET {set_clause} WHERE id = ?", values
            )
            return cursor.rowcount > 0

    def set_position(self, member_id: str, x: float, y: float) -> bool:
        """Persist a dragged position."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE family_members SET position_x = ?, position_y = ? WHERE id = ?",
                (x, y, member_id)
            )
            return cursor.rowcount > 0

    def delete_member(self, member_id: str) -> bool:
        """Delete a member and its media."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM media WHERE member_id = ?", (member_id,))
            cursor = conn.execute("DELETE FROM family_members WHERE id = ?", (member_id,))
            return cursor.rowcount > 0

    def add_media(self, member_id: str, item: MediaItem) -> None:
        """Attach a media reference to a member."""
        with sqlite3.connect(self.db_path) as conn:
            self._insert_media(conn, member_id, item)

    def _insert_media(self, conn: sqlite3.Connection, member_id: str, item: MediaItem):
        conn.execute("""
            INSERT INTO media (id, member_id, type, url, title, content, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            item.id, member_id, item.type.value, item.url,
            item.title, item.content, item.created_at.isoformat()
        ))

    def _media_by_member(self, conn: sqlite3.Connection, member_ids: list[str]) -> dict[str, list[MediaItem]]:
        """Load media grouped by member, newest first."""
        if not member_ids:
            return {}
        placeholders = ", ".join("?" for _ in member_ids)
        rows = conn.execute(
            f"SELECT * FROM media WHERE member_id IN ({placeholders}) "
            "ORDER BY created_at DESC",
            member_ids
        ).fetchall()

        grouped: dict[str, list[MediaItem]] = {}
        for row in rows:
            grouped.setdefault(row["member_id"], []).append(MediaItem(
                id=row["id"],
                type=row["type"],
                url=row["url"] or "",
                title=row["title"] or "",
                content=row["content"],
                created_at=datetime.fromisoformat(row["created_at"]),
            ))
        return grouped

    def _row_to_member(self, row: sqlite3.Row, media: list[MediaItem]) -> Member:
        """Convert database row to Member model."""
        position = None
        if row["position_x"] is not None and row["position_y"] is not None:
            position = Position(x=row["position_x"], y=row["position_y"])

        return Member(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            maiden_name=row["maiden_name"],
            birth_date=date.fromisoformat(row["birth_date"]) if row["birth_date"] else None,
            death_date=date.fromisoformat(row["death_date"]) if row["death_date"] else None,
            gender=row["gender"],
            bio=row["bio"],
            media=media,
            position=position,
        )
