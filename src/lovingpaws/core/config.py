"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    app_name: str = "LovingPaws"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///lovingpaws.db"

    # Remote sync
    remote_sync_url: str | None = None
    remote_sync_api_key: str | None = None
    remote_sync_timeout_seconds: int = 30
    sync_enabled: bool = True
    sync_interval_minutes: int = 15

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
