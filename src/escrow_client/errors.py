"""Exception types raised by the escrow client."""

from __future__ import annotations

from typing import Any


class ClientError(Exception):
    """Base error carrying a machine-readable code and a human message."""

    def __init__(
        self,
        error: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.details: dict[str, Any] = details if details is not None else {}


class ApiError(ClientError):
    """The backend answered with a non-2xx status, or could not be reached.

    ``details`` holds the parsed response body.
    """

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(error, message, details)
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error={self.error!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class SessionExpiredError(ApiError):
    """The bearer token was rejected. The token store has already been cleared."""


class ActionNotAllowedError(ClientError):
    """The escrow's status and the viewer's role do not permit the action."""


class ActionInProgressError(ClientError):
    """Another action on the same escrow is still waiting for the backend."""


class InvalidTransitionError(ValueError):
    """An action has no defined outcome from the given escrow status."""
