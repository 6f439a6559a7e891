"""
EscrowClient: async HTTP client for the escrow platform backend.

Composes endpoint-specific mixins for auth, escrows, disputes and KYC. All
cross-cutting concerns (bearer auth, error mapping, forced logout) live here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from escrow_client.errors import ApiError, SessionExpiredError
from escrow_client.logging import get_logger
from escrow_client.mixins import AuthMixin, DisputeMixin, EscrowMixin, KycMixin
from escrow_client.token_store import TokenStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from escrow_client.config import ClientConfig
    from escrow_client.models import Role, User

logger = get_logger(__name__)


class EscrowClient(AuthMixin, EscrowMixin, DisputeMixin, KycMixin):
    """Client for buyers and sellers.

    Usage::

        config = load_client_config()
        async with EscrowClient(config) as client:
            await client.login("buyer@example.com", "secret123")
            escrows = await client.list_escrows()
    """

    def __init__(
        self,
        config: ClientConfig,
        token_store: TokenStore | None = None,
        on_session_expired: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Backend URL, timeout and polling settings.
            token_store: Auth state holder. A fresh store is created if omitted.
            on_session_expired: Called after a rejected token clears the store,
                so the caller can send the user back to login.
            transport: Optional httpx transport (tests mount a fake backend here).
        """
        self.config = config
        self.token_store = token_store if token_store is not None else TokenStore()
        self._on_session_expired = on_session_expired
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    @property
    def user(self) -> User | None:
        return self.token_store.user

    @property
    def role(self) -> Role | None:
        user = self.token_store.user
        return user.role if user is not None else None

    def _auth_header(self) -> dict[str, str]:
        token = self.token_store.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an HTTP request with consistent error handling.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: Path relative to the configured base URL.
            **kwargs: Additional arguments passed to httpx.AsyncClient.request().

        Returns:
            Parsed JSON response, or an empty dict for an empty body.

        Raises:
            SessionExpiredError: If the backend rejected the bearer token.
            ApiError: On a non-2xx status or when the backend is unreachable.
        """
        auth = self._auth_header()
        headers = {**auth, **kwargs.pop("headers", {})}

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            logger.warning(
                "Backend connection failed",
                extra={"error": str(exc), "method": method, "path": path},
            )
            raise ApiError(
                error="BACKEND_UNAVAILABLE",
                message="Cannot connect to the escrow backend",
                status_code=502,
                details={},
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Backend HTTP error",
                extra={"error": str(exc), "method": method, "path": path},
            )
            raise ApiError(
                error="BACKEND_UNAVAILABLE",
                message="Escrow backend request failed",
                status_code=502,
                details={},
            ) from exc

        if response.is_success:
            if not response.content:
                return {}
            return response.json()

        raise self._error_from_response(response, method, path, sent_token=bool(auth))

    def _error_from_response(
        self,
        response: httpx.Response,
        method: str,
        path: str,
        sent_token: bool,
    ) -> ApiError:
        body = _parse_error_body(response)
        message = body.get("message") or body.get("error") or response.reason_phrase
        error = body.get("error") if isinstance(body.get("error"), str) else "HTTP_ERROR"

        logger.warning(
            "Backend returned error status",
            extra={"status_code": response.status_code, "method": method, "path": path},
        )

        if sent_token and _is_rejected_token(response.status_code, body):
            self.token_store.clear_auth()
            logger.info("Session expired, auth cleared", extra={"path": path})
            if self._on_session_expired is not None:
                self._on_session_expired()
            return SessionExpiredError(
                error=error,
                message=str(message),
                status_code=response.status_code,
                details=body,
            )

        return ApiError(
            error=error,
            message=str(message),
            status_code=response.status_code,
            details=body,
        )

    async def close(self) -> None:
        """Close the HTTP client. Call this when done using the client."""
        await self._http.aclose()

    async def __aenter__(self) -> EscrowClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        user = self.token_store.user
        who = f", user={user.email!r}" if user is not None else ""
        return f"{type(self).__name__}(base_url={self.config.base_url!r}{who})"


def _parse_error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"error": response.reason_phrase}
    if isinstance(body, dict):
        return body
    return {"error": response.reason_phrase, "body": body}


def _is_rejected_token(status_code: int, body: dict[str, Any]) -> bool:
    if status_code == 401:
        return True
    if status_code != 403:
        return False
    text = f"{body.get('error', '')} {body.get('message', '')}".lower()
    return "token" in text
