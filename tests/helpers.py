"""Shared test helpers."""

from __future__ import annotations

from typing import Any

import httpx

from escrow_client.models import Escrow, EscrowStatus, Role, User

BASE_URL = "http://localhost:4000/api"


def make_user(role: Role, user_id: str = "u-1", token: str | None = "tok-1") -> User:
    """Create a User record as the login endpoint would return it."""
    return User(id=user_id, email=f"{role.value}@example.com", role=role, token=token)


def make_escrow(
    status: EscrowStatus,
    escrow_id: str = "ESC-1030",
    **overrides: Any,
) -> Escrow:
    """Create an Escrow in the given status."""
    data: dict[str, Any] = {
        "id": escrow_id,
        "seller": "Gadget Nusantara",
        "buyer": "buyer@example.com",
        "amount": 2_499_000,
        "status": status.value,
        "createdAt": "2026-01-01T00:00:00Z",
        "paymentMethod": "QRIS",
    }
    data.update(overrides)
    return Escrow.model_validate(data)


def mock_response(
    status_code: int,
    json_body: Any = None,
    content: bytes | None = None,
    method: str = "GET",
    url: str = "http://localhost:4000/api/escrow",
) -> httpx.Response:
    """Create an httpx.Response bound to a request."""
    request = httpx.Request(method, url)
    if content is not None:
        return httpx.Response(status_code=status_code, content=content, request=request)
    return httpx.Response(status_code=status_code, json=json_body, request=request)
