"""Unit tests for AuthMixin."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from escrow_client.client import EscrowClient
from escrow_client.models import Role

if TYPE_CHECKING:
    from escrow_client.config import ClientConfig


@pytest.mark.unit
class TestLogin:
    """Tests for login."""

    async def test_stores_token_and_user(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock(  # type: ignore[method-assign]
            return_value={"id": "u-7", "email": "seller@example.com", "role": "seller", "token": "t"}
        )

        user = await client.login("seller@example.com", "secret123")

        assert user.role is Role.SELLER
        assert client.token_store.token == "t"
        assert client.token_store.user_id == "u-7"
        assert client.role is Role.SELLER
        client._request.assert_awaited_once_with(
            "POST",
            "/auth/login",
            json={"email": "seller@example.com", "password": "secret123"},
        )
        await client.close()

    async def test_accepts_user_envelope(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock(  # type: ignore[method-assign]
            return_value={
                "user": {"id": "u-1", "email": "admin@example.com", "role": "admin"},
                "token": "admin-token",
            }
        )

        user = await client.login("admin@example.com", "secret123")

        assert user.token == "admin-token"
        assert client.token_store.token == "admin-token"
        await client.close()

    @pytest.mark.parametrize(
        ("email", "password", "match"),
        [
            ("", "secret123", "Email is required"),
            ("not-an-email", "secret123", "Invalid email"),
            ("buyer@example.com", "12345", "at least 6"),
        ],
    )
    async def test_invalid_credentials_not_sent(
        self, sample_config: ClientConfig, email: str, password: str, match: str
    ) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock()  # type: ignore[method-assign]

        with pytest.raises(ValueError, match=match):
            await client.login(email, password)

        client._request.assert_not_awaited()
        await client.close()


@pytest.mark.unit
class TestRegister:
    """Tests for register and logout."""

    async def test_register_seller(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock(  # type: ignore[method-assign]
            return_value={"id": "u-9", "email": "toko@example.com", "role": "seller"}
        )

        user = await client.register("toko@example.com", "secret123", role=Role.SELLER)

        assert user.role is Role.SELLER
        assert not client.token_store
        client._request.assert_awaited_once_with(
            "POST",
            "/auth/register",
            json={"email": "toko@example.com", "password": "secret123", "role": "seller"},
        )
        await client.close()

    async def test_register_with_token_logs_in(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock(  # type: ignore[method-assign]
            return_value={"id": "u-9", "email": "b@example.com", "role": "buyer", "token": "tk"}
        )

        await client.register("b@example.com", "secret123")

        assert client.token_store.token == "tk"
        await client.close()

    async def test_admin_cannot_self_register(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client._request = AsyncMock()  # type: ignore[method-assign]

        with pytest.raises(ValueError, match="Admin accounts"):
            await client.register("root@example.com", "secret123", role=Role.ADMIN)

        client._request.assert_not_awaited()
        await client.close()

    async def test_logout_clears_store(self, sample_config: ClientConfig) -> None:
        client = EscrowClient(sample_config)
        client.token_store.set_auth("tok", "u-1")

        client.logout()

        assert client.token_store.token is None
        assert client.token_store.user_id is None
        await client.close()
