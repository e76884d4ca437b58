"""State package - session-owned tree state and optimistic writes."""

from family_legacy.state.session import Notice, TreeSession
from family_legacy.state.tree_state import TreeState
from family_legacy.state.writer import PersistenceWriter

__all__ = ["Notice", "TreeSession", "TreeState", "PersistenceWriter"]
