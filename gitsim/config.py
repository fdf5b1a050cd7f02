"""
gitsim configuration

Environment-based settings (prefix ``GITSIM_``) for the simulation engine and CLI.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Identity written on commits the engine creates on the user's behalf
    author: str = "User"

    # Always-present branch; any value other than "main" replaces main in that role
    default_branch: str = "main"
    default_remote: str = "origin"

    # Commit / stash ids: hex digest length and seed for the default generator
    id_length: int = 7
    id_seed: str = "gitsim"

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="GITSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
