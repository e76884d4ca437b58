"""Run the Family Legacy UI."""

from family_legacy.log import configure_logging
from family_legacy.ui.main_app import run_app

if __name__ in {"__main__", "__mp_main__"}:
    configure_logging()
    run_app()
