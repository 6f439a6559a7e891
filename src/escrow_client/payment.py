"""Payment gateway reference generation for escrow funding."""

from __future__ import annotations

import secrets
import string
import time

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def make_payment_reference(now_ms: int | None = None) -> str:
    """Build a gateway reference: ``TXN`` + 6 random chars + last 6 digits of the ms clock."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    random_part = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(6))
    return f"TXN{random_part}{str(now_ms)[-6:]}"
