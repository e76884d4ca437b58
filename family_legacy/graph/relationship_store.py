"""Relationship edges stored in SQLite."""

import sqlite3
import logging
from pathlib import Path
from typing import Optional

from family_legacy.config import settings
from family_legacy.models import Edge, RelationKind

logger = logging.getLogger(__name__)


class RelationshipStore:
    """Normalized parent/spouse edges between member IDs.

    Writes are check-then-insert so repeating a request never duplicates a row.
    Spouse edges match in either direction.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or settings.database.path
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize relationships table."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS relationships (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    from_member_id TEXT NOT NULL,
                    to_member_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_rel_from ON relationships(from_member_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_rel_to ON relationships(to_member_id)")

    def _match_clause(self, edge: Edge) -> tuple[str, tuple]:
        """WHERE clause matching an edge, direction-free for spouses."""
        if edge.kind == RelationKind.SPOUSE:
            return (
                "type = ? AND ((from_member_id = ? AND to_member_id = ?) "
                "OR (from_member_id = ? AND to_member_id = ?))",
                (edge.kind.value, edge.from_id, edge.to_id, edge.to_id, edge.from_id),
            )
        return (
            "type = ? AND from_member_id = ? AND to_member_id = ?",
            (edge.kind.value, edge.from_id, edge.to_id),
        )

    def add(self, edge: Edge) -> bool:
        """Store an edge unless an equivalent one exists. Returns True if inserted."""
        where, params = self._match_clause(edge)
        with sqlite3.connect(self.db_path) as conn:
            existing = conn.execute(
                f"SELECT 1 FROM relationships WHERE {where} LIMIT 1", params
            ).fetchone()
            if existing:
                logger.debug("Edge already stored: %s", edge.key)
                return False
            conn.execute(
                "INSERT INTO relationships (from_member_id, to_member_id, type) VALUES (?, ?, ?)",
                (edge.from_id, edge.to_id, edge.kind.value)
            )
            return True

    def remove(self, edge: Edge) -> int:
        """Delete an edge (both directions for spouses). Returns rows removed."""
        where, params = self._match_clause(edge)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(f"DELETE FROM relationships WHERE {where}", params)
            return cursor.rowcount

    def remove_for_member(self, member_id: str) -> int:
        """Delete every edge touching a member."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM relationships WHERE from_member_id = ? OR to_member_id = ?",
                (member_id, member_id)
            )
            return cursor.rowcount

    def get_all(self) -> list[Edge]:
        """Get all stored edges in insertion order."""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT from_member_id, to_member_id, type FROM relationships ORDER BY id"
            ).fetchall()
        return [Edge(from_id=r[0], to_id=r[1], kind=r[2]) for r in rows]

