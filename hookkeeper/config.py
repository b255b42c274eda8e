"""Configuration loading for the hookkeeper webhook manager.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server identity and URLs
    root_url: str = Field(
        default="",
        description="Externally reachable root URL of this server",
    )
    webhook_path: str = Field(
        default="github-webhook",
        description="Path segment of the GitHub webhook endpoint",
    )
    identity_key_path: str = Field(
        default="./data/identity.pem",
        description="PEM file holding this installation's RSA identity key",
    )

    # Hook configuration storage
    config_db_path: str = Field(
        default="./data/hookkeeper.db",
        description="SQLite database file for the hook configuration",
    )
    allow_hook_url_override: bool = Field(
        default=True,
        description="Allow administrators to override the hook URL",
    )

    # Validation probe
    probe_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for hook URL validation probes in seconds",
    )

    # Re-registration
    reregister_failure_policy: Literal["abort", "continue"] = Field(
        default="abort",
        description="Whether a failing job aborts a re-registration pass",
    )
    reregister_queue_size: int = Field(
        default=16,
        description="Maximum number of queued re-registration passes",
    )
    jobs_file: str = Field(
        default="",
        description="JSON file listing jobs and their GitHub repositories",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL used by push triggers",
    )

    # HTTP server
    server_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on",
    )
    server_port: int = Field(
        default=8080,
        description="Port to listen on",
    )
    admin_api_key: str = Field(
        default="",
        description="API key for admin endpoints",
    )
    admin_require_auth: bool = Field(
        default=False,
        description="Require API key authentication for admin endpoints",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["server", "cli"] = Field(
        default="server",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("probe_timeout_seconds")
    @classmethod
    def validate_probe_timeout(cls, v: float) -> float:
        """Ensure probe timeout is positive."""
        if v <= 0:
            raise ValueError("probe_timeout_seconds must be positive")
        return v

    @field_validator("reregister_queue_size")
    @classmethod
    def validate_queue_size(cls, v: int) -> int:
        """Ensure queue size is non-negative."""
        if v < 0:
            raise ValueError("reregister_queue_size must be non-negative")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_server_port(cls, v: int) -> int:
        """Ensure server port is in valid range."""
        if v < 0 or v > 65535:
            raise ValueError("server_port must be between 0 and 65535")
        return v

    @field_validator("webhook_path")
    @classmethod
    def validate_webhook_path(cls, v: str) -> str:
        """Strip slashes and reject an empty path."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("webhook_path must not be empty")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
