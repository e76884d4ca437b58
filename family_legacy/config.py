"""Application configuration using Pydantic Settings."""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database path settings."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    path: str = "data/family_legacy.db"

    def ensure_dirs(self) -> None:
        """Create the database directory if needed."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)


class LayoutSettings(BaseSettings):
    """Tree layout geometry."""

    model_config = SettingsConfigDict(env_prefix="LAYOUT_")

    node_width: float = 256
    node_height: float = 100
    node_sep: float = 50
    rank_sep: float = 100
    ordering_passes: int = 4


class UISettings(BaseSettings):
    """NiceGUI server settings."""

    model_config = SettingsConfigDict(env_prefix="UI_")

    title: str = "Family Legacy"
    host: str = "0.0.0.0"
    port: int = 8080


class APISettings(BaseSettings):
    """JSON API server settings."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    database: DatabaseSettings = DatabaseSettings()
    layout: LayoutSettings = LayoutSettings()
    ui: UISettings = UISettings()
    api: APISettings = APISettings()


settings = Settings()
