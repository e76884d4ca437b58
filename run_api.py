"""Run the Family Legacy JSON API."""

import uvicorn

from family_legacy.api.main import create_api
from family_legacy.config import settings
from family_legacy.log import configure_logging

if __name__ == "__main__":
    configure_logging()
    settings.database.ensure_dirs()
    print(f"Starting FastAPI on http://localhost:{settings.api.port}")
    uvicorn.run(create_api(), host=settings.api.host, port=settings.api.port)
