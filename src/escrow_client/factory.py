"""ClientFactory: builds clients from the YAML settings file."""

from __future__ import annotations

from typing import TYPE_CHECKING

from escrow_client.admin import AdminClient
from escrow_client.client import EscrowClient
from escrow_client.config import load_settings, to_client_config

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    import httpx

    from escrow_client.config import ClientConfig, Settings


class ClientFactory:
    """Factory that creates clients sharing one configuration.

    Callers never deal with URLs or timeouts; they ask for a client and log
    in with it. Each client gets its own token store.

    Args:
        config_path: Path to config.yaml. If None, resolved via the
            ESCROW_CLIENT_CONFIG_PATH env var or ./config.yaml.
        transport: Optional httpx transport handed to every client.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings: Settings = load_settings(config_path)
        self.config: ClientConfig = to_client_config(self.settings)
        self._transport = transport

    def create_client(
        self,
        on_session_expired: Callable[[], None] | None = None,
    ) -> EscrowClient:
        """Create a client for a buyer or seller."""
        return EscrowClient(
            self.config,
            on_session_expired=on_session_expired,
            transport=self._transport,
        )

    def admin_client(
        self,
        on_session_expired: Callable[[], None] | None = None,
    ) -> AdminClient:
        """Create a client with the admin-only operations."""
        return AdminClient(
            self.config,
            on_session_expired=on_session_expired,
            transport=self._transport,
        )
