"""Configuration settings for kicker.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

These are application settings (where things live on disk, how phases
behave). The package/image declarations live in the kicker config file
loaded by ``kicker.packages.io``.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the KICKER_ prefix.
    Relative paths are resolved against the current working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="KICKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    config_path: Path = Field(
        default=Path("kicker-config.toml"),
        description="Package/image declaration file",
    )
    packages_dir: Path = Field(
        default=Path("packages"),
        description="Root directory for package working copies",
    )
    workspace_dir: Path = Field(
        default=Path("workspace"),
        description="Root directory of the assembled workspace",
    )
    basic_files_dir: Path = Field(
        default=Path("config"),
        description="Directory holding static files staged into the workspace",
    )
    init_script: Path = Field(
        default=Path("docker/layer2/init_config_json.sh"),
        description="Environment initialization script run once during assembly",
    )

    # Behaviour
    recursive_clone: bool = Field(
        default=True,
        description="Clone sub-repositories along with each package",
    )
    batch_mode: Literal["fail-fast", "best-effort"] = Field(
        default="fail-fast",
        description="Stop at the first failing package or continue with the rest",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
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


__all__ = ["Settings", "get_settings", "print_settings_json"]
