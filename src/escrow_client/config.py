"""Configuration loading for the escrow client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_PATH_ENV_VAR = "ESCROW_CLIENT_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class ClientConfig:
    """Runtime client configuration."""

    base_url: str
    timeout_seconds: float = 10.0
    poll_attempts: int = Field(default=10, gt=0)
    poll_interval_seconds: float = Field(default=2.0, ge=0)


class ApiSettings(BaseModel):
    """Backend connection settings."""

    model_config = ConfigDict(extra="forbid")

    base_url: str
    timeout_seconds: float

    @field_validator("base_url")
    @classmethod
    def base_url_must_be_http(cls, value: str) -> str:
        """Reject relative or non-HTTP base URLs and drop a trailing slash."""
        if not value.startswith(("http://", "https://")):
            msg = "api.base_url must be an absolute http(s) URL"
            raise ValueError(msg)
        return value.rstrip("/")


class LoggingSettings(BaseModel):
    """Logging settings."""

    model_config = ConfigDict(extra="forbid")

    level: str
    directory: str | None = None


class PaymentSettings(BaseModel):
    """Funding confirmation polling settings."""

    model_config = ConfigDict(extra="forbid")

    poll_attempts: int = 10
    poll_interval_seconds: float = 2.0


class Settings(BaseModel):
    """Root configuration container."""

    model_config = ConfigDict(extra="forbid")

    api: ApiSettings
    logging: LoggingSettings
    payment: PaymentSettings = PaymentSettings()


def get_config_path() -> Path:
    """Resolve the config file from the environment, else ./config.yaml."""
    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_settings(config_path: Path | None = None) -> Settings:
    """Read and validate a YAML settings file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a YAML mapping.
        pydantic.ValidationError: If the mapping does not match Settings.
    """
    if config_path is None:
        config_path = get_config_path()

    raw = yaml.safe_load(config_path.read_text())
    if not isinstance(raw, dict):
        msg = f"Invalid config file: {config_path}"
        raise ValueError(msg)
    return Settings(**raw)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return load_settings()


def clear_settings_cache() -> None:
    """Forget cached settings so the next get_settings() re-reads the file."""
    get_settings.cache_clear()


def to_client_config(settings: Settings) -> ClientConfig:
    """Project file settings onto the runtime ClientConfig."""
    return ClientConfig(
        base_url=settings.api.base_url,
        timeout_seconds=settings.api.timeout_seconds,
        poll_attempts=settings.payment.poll_attempts,
        poll_interval_seconds=settings.payment.poll_interval_seconds,
    )


def load_client_config(config_path: Path | None = None) -> ClientConfig:
    """Load ClientConfig from a YAML settings file."""
    return to_client_config(load_settings(config_path))
