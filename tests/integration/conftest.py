"""Integration fixtures: real clients talking to the in-process fake backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from escrow_client.admin import AdminClient
from escrow_client.client import EscrowClient
from escrow_client.config import ClientConfig
from escrow_client.models import KycDecision, Role
from tests.fake_backend import FakeBackend, create_fake_app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

PASSWORD = "secret123"  # nosec B105
BUYER_EMAIL = "buyer@example.com"
SELLER_EMAIL = "seller@example.com"
ADMIN_EMAIL = "admin@example.com"


@pytest.fixture()
def backend() -> FakeBackend:
    state = FakeBackend()
    state.add_user(ADMIN_EMAIL, PASSWORD, "admin")
    return state


@pytest.fixture()
def transport(backend: FakeBackend) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_fake_app(backend))


@pytest.fixture()
def integration_config() -> ClientConfig:
    return ClientConfig(
        base_url="http://testserver/api",
        timeout_seconds=5,
        poll_attempts=5,
        poll_interval_seconds=0,
    )


@pytest.fixture()
async def admin(
    integration_config: ClientConfig, transport: httpx.ASGITransport
) -> AsyncIterator[AdminClient]:
    client = AdminClient(integration_config, transport=transport)
    await client.login(ADMIN_EMAIL, PASSWORD)
    yield client
    await client.close()


@pytest.fixture()
async def buyer(
    integration_config: ClientConfig, transport: httpx.ASGITransport
) -> AsyncIterator[EscrowClient]:
    client = EscrowClient(integration_config, transport=transport)
    await client.register(BUYER_EMAIL, PASSWORD)
    await client.login(BUYER_EMAIL, PASSWORD)
    yield client
    await client.close()


@pytest.fixture()
async def seller(
    integration_config: ClientConfig, transport: httpx.ASGITransport
) -> AsyncIterator[EscrowClient]:
    client = EscrowClient(integration_config, transport=transport)
    await client.register(SELLER_EMAIL, PASSWORD, role=Role.SELLER)
    await client.login(SELLER_EMAIL, PASSWORD)
    yield client
    await client.close()


@pytest.fixture()
async def verified_seller(seller: EscrowClient, admin: AdminClient) -> EscrowClient:
    await seller.submit_kyc(
        "Siti Rahma",
        "3174012345670001",
        document_url="https://cdn.example.com/ktp.jpg",
        selfie_url="https://cdn.example.com/selfie.jpg",
    )
    assert seller.token_store.user_id is not None
    await admin.verify_user_kyc(seller.token_store.user_id, KycDecision.VERIFIED)
    return seller
