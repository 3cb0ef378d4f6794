"""Lightweight configuration for the Goblin War service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="GOBLINWAR_"
    )

    database_url: str = Field(
        default="sqlite:///goblinwar.db", description="SQLAlchemy database URL"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    database_pool_size: int = Field(default=5, ge=1, description="Pool size for non-SQLite databases")
    database_max_overflow: int = Field(default=10, ge=0)
    log_level: str = Field(default="INFO", description="Root logging level for the entrypoint")
    battle_commit_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts at resolving a battle when the army changed concurrently",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
