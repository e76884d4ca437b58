"""HTTP API over the family tree store."""

from family_legacy.api.main import create_api

__all__ = ["create_api"]
