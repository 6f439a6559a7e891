"""In-memory holder for the logged-in user's bearer token."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from escrow_client.models import User

TOKEN_KEY = "auth_token"
USER_ID_KEY = "auth_user_id"


class TokenStore:
    """Per-client auth state: bearer token, user id and the user record."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._user: User | None = None

    def set_auth(self, token: str | None, user_id: str | None) -> None:
        """Store whichever of token and user id are non-empty."""
        if token:
            self._values[TOKEN_KEY] = token
        if user_id:
            self._values[USER_ID_KEY] = user_id

    def set_user(self, user: User) -> None:
        self._user = user
        self.set_auth(user.token, user.id)

    def clear_auth(self) -> None:
        self._values.clear()
        self._user = None

    @property
    def token(self) -> str | None:
        return self._values.get(TOKEN_KEY)

    @property
    def user_id(self) -> str | None:
        return self._values.get(USER_ID_KEY)

    @property
    def user(self) -> User | None:
        return self._user

    def __bool__(self) -> bool:
        return TOKEN_KEY in self._values
