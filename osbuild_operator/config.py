"""Configuration settings for osbuild_operator.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STEP_IMAGE = "registry.access.redhat.com/ubi9:latest"
DEFAULT_WAIT_IMAGE = "quay.io/cgament/composer-cli"


def _default_db_url() -> str:
    """Return the default database URL (SQLite)."""
    db_path = Path.home() / ".local" / "share" / "osbuild-operator" / "store.sqlite"
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the OSBUILD_OP_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="OSBUILD_OP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Object store
    db_url: str = Field(
        default_factory=_default_db_url,
        description="Object store database URL",
    )
    default_namespace: str = Field(
        default="default",
        min_length=1,
        description="Namespace used when a name is given without one",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Generated task steps
    step_image: str = Field(
        default=DEFAULT_STEP_IMAGE,
        description="Container image for the curl/rm task steps",
    )
    wait_image: str = Field(
        default=DEFAULT_WAIT_IMAGE,
        description="Container image for the compose polling step",
    )
    poll_interval: int = Field(
        default=30,
        ge=1,
        description="Seconds between compose queue checks",
    )

    # Compose API client
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for compose API requests (seconds)",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_STEP_IMAGE",
    "DEFAULT_WAIT_IMAGE",
    "Settings",
    "get_settings",
    "print_settings_json",
]
