"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings

from hearthgames.core.fairness import DEFAULT_SEARCH_ITERATIONS


class Settings(BaseSettings):
    """Hearth Games configuration.

    All values can be overridden via environment variables or .env file.
    Presentation toggles (themes, animations) belong to the client, not here.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///hearthgames.db"

    # Environment
    hearthgames_env: str = "development"

    # Team generation
    hearthgames_search_iterations: int = DEFAULT_SEARCH_ITERATIONS
    hearthgames_search_seed: int | None = None  # Set for reproducible team picks

    # Logging
    hearthgames_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @field_validator("hearthgames_search_iterations")
    @classmethod
    def _positive_iterations(cls, value: int) -> int:
        if value < 1:
            msg = "HEARTHGAMES_SEARCH_ITERATIONS must be at least 1"
            raise ValueError(msg)
        return value
