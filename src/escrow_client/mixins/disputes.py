"""Dispute mixin: opening disputes and attaching evidence."""

from __future__ import annotations

from typing import Any, Protocol

from escrow_client.mixins._common import require_text, unwrap_object
from escrow_client.models import Dispute, DisputeReason


class _DisputeClient(Protocol):
    async def _request(self, method: str, path: str, **kwargs: Any) -> Any: ...


class DisputeMixin:
    """Methods for opening and documenting disputes."""

    async def open_dispute(
        self: _DisputeClient,
        escrow_id: str,
        reason: DisputeReason = DisputeReason.ITEM_NOT_AS_DESCRIBED,
        note: str = "",
    ) -> Dispute:
        """Open a dispute on a shipped or delivered escrow."""
        escrow_id = require_text(escrow_id, "Escrow ID")
        response = await self._request(
            "POST",
            f"/escrow/{escrow_id}/dispute",
            json={"reason": reason.value, "note": note},
        )
        data = dict(unwrap_object(response, "dispute"))
        data.setdefault("escrowId", escrow_id)
        data.setdefault("reason", reason.value)
        return Dispute.model_validate(data)

    async def upload_evidence(
        self: _DisputeClient,
        dispute_id: str,
        file_url: str,
        note: str = "",
    ) -> dict[str, Any]:
        """Attach a link to a photo or video as dispute evidence."""
        dispute_id = require_text(dispute_id, "Dispute ID")
        file_url = require_text(file_url, "Evidence URL")
        return await self._request(  # type: ignore[no-any-return]
            "POST",
            f"/disputes/{dispute_id}/evidence",
            json={"file_url": file_url, "note": note},
        )
