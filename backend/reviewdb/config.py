"""Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Settings come from REVIEWDB_* environment variables or a .env file
    - get_settings() is cached (lru_cache): single instance per process
    - database_url always names the async aiosqlite driver

Design Decisions:
    - database_url defaults to a file under data_dir; the directory is created on open
"""

import os
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = os.path.join(
    os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")),
    "reviewdb",
)
DATABASE_FILENAME = "reviewdb.sqlite"


class Settings(BaseSettings):
    """Store settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REVIEWDB_", env_file=".env", case_sensitive=False,
    )

    # Database
    data_dir: str = DEFAULT_DATA_DIR
    database_url: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v):
        """Plain sqlite:// URLs are switched to the aiosqlite driver."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @model_validator(mode="after")
    def default_database_url(self) -> "Settings":
        if not self.database_url:
            path = os.path.join(os.path.expanduser(self.data_dir), DATABASE_FILENAME)
            self.database_url = f"sqlite+aiosqlite:///{path}"
        return self

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
