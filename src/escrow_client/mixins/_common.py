"""Helpers shared by the endpoint mixins."""

from __future__ import annotations

from typing import Any

# (filename, content, content_type), as accepted by httpx's ``files=``.
UploadFile = tuple[str, bytes, str]


def require_text(value: str | None, field: str) -> str:
    """Return the stripped value, or raise ValueError if it is blank."""
    if value is None or not value.strip():
        msg = f"{field} is required"
        raise ValueError(msg)
    return value.strip()


def unwrap_list(response: Any, key: str) -> list[dict[str, Any]]:
    """Accept a bare JSON array or an envelope object holding one under ``key``."""
    if isinstance(response, list):
        return response
    if isinstance(response, dict) and isinstance(response.get(key), list):
        return response[key]  # type: ignore[no-any-return]
    msg = f"Expected a list or an object with a '{key}' list"
    raise ValueError(msg)


def unwrap_object(response: Any, key: str) -> dict[str, Any]:
    """Accept a bare JSON object or one nested under ``key``."""
    if isinstance(response, dict) and isinstance(response.get(key), dict):
        return response[key]  # type: ignore[no-any-return]
    if isinstance(response, dict):
        return response
    msg = f"Expected a JSON object for '{key}'"
    raise ValueError(msg)
