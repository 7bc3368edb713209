"""Configuration loaded from environment variables (prefix ``ICOMPRAS_``)."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration.

    ``database_url`` defaults to a SQLite file inside ``data_dir``; any
    SQLAlchemy URL may be supplied instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="ICOMPRAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    storage: Literal["sql", "json"] = "sql"
    data_dir: Path = Path("data")
    database_url: str | None = None
    sql_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'orders.db'}"

    @property
    def orders_file(self) -> Path:
        return self.data_dir / "orders.json"


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
