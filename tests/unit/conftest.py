"""Unit test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from escrow_client.config import ClientConfig, clear_settings_cache
from tests.helpers import BASE_URL

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def sample_config() -> ClientConfig:
    """Runtime config pointing at a backend that is never contacted."""
    return ClientConfig(
        base_url=BASE_URL,
        timeout_seconds=5,
        poll_attempts=3,
        poll_interval_seconds=0,
    )


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write a valid config.yaml and return its path."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""\
api:
  base_url: "{BASE_URL}/"
  timeout_seconds: 5
logging:
  level: "WARNING"
  directory: "{tmp_path / 'logs'}"
payment:
  poll_attempts: 4
  poll_interval_seconds: 0.5
"""
    )
    return config_path


@pytest.fixture(autouse=True)
def _clear_config_cache() -> None:
    """Clear config cache between tests."""
    clear_settings_cache()
