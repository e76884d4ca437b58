"""Logging setup."""

import logging
from typing import Optional

from family_legacy.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the application."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    # file watcher used by nicegui reload is noisy at DEBUG
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
