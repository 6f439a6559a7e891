"""Auth mixin: login, registration, logout."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from escrow_client.logging import get_logger
from escrow_client.mixins._common import require_text
from escrow_client.models import Role, User

if TYPE_CHECKING:
    from escrow_client.token_store import TokenStore

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class _AuthClient(Protocol):
    token_store: TokenStore

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any: ...


def _validate_credentials(email: str, password: str) -> str:
    email = require_text(email, "Email")
    if "@" not in email:
        msg = f"Invalid email address: {email!r}"
        raise ValueError(msg)
    if len(password) < MIN_PASSWORD_LENGTH:
        msg = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        raise ValueError(msg)
    return email


def _parse_user(response: dict[str, Any]) -> User:
    # Some backends wrap the record: {"user": {...}, "token": "..."}.
    if isinstance(response.get("user"), dict):
        data = dict(response["user"])
        if "token" in response and "token" not in data:
            data["token"] = response["token"]
        return User.model_validate(data)
    return User.model_validate(response)


class AuthMixin:
    """Methods for the /auth endpoints."""

    async def login(self: _AuthClient, email: str, password: str) -> User:
        """Log in and keep the returned bearer token for later requests.

        Raises:
            ValueError: On a malformed email or a too-short password.
            ApiError: If the backend rejects the credentials.
        """
        email = _validate_credentials(email, password)
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        user = _parse_user(response)
        self.token_store.set_user(user)
        logger.info("Logged in", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def register(
        self: _AuthClient,
        email: str,
        password: str,
        role: Role = Role.BUYER,
    ) -> User:
        """Create a buyer or seller account.

        Admin accounts cannot be self-registered. If the backend answers with
        a token, the new user is logged in.
        """
        if role is Role.ADMIN:
            msg = "Admin accounts cannot be self-registered"
            raise ValueError(msg)
        email = _validate_credentials(email, password)
        response = await self._request(
            "POST",
            "/auth/register",
            json={"email": email, "password": password, "role": role.value},
        )
        user = _parse_user(response)
        if user.token:
            self.token_store.set_user(user)
        return user

    def logout(self: _AuthClient) -> None:
        """Forget the current token and user."""
        self.token_store.clear_auth()
