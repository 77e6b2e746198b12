"""Centralized application configuration.

All settings are read from environment variables (or a .env.tchess file).
None are required; the defaults reproduce the page's behaviour, where the
agent plays Black.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TCHESS_", env_file=".env.tchess", env_file_encoding="utf-8",
        extra="ignore",
    )

    # Side the agent plays when a request does not say
    ai_color: str = "b"
    # Accepted for compatibility; only immediate moves are evaluated
    default_depth: int = 1

    # Seed for sampled super-attack connections (see config_flags)
    defend_seed: int | None = None

    log_level: str = "INFO"
