"""AdminClient: privileged client for settlement, disputes and KYC review."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from escrow_client.client import EscrowClient
from escrow_client.errors import ActionNotAllowedError
from escrow_client.lifecycle import Resolution
from escrow_client.logging import get_logger
from escrow_client.mixins._common import require_text, unwrap_list
from escrow_client.models import Escrow, KycDecision, KycDetails, PendingKyc, Role

logger = get_logger(__name__)

PENDING_KYC_PAGE_SIZE = 20


class AdminClient(EscrowClient):
    """Client for platform administrators.

    Extends EscrowClient with the operations only admins may perform:
    releasing delivered escrows, resolving disputes, and reviewing seller KYC.
    When the logged-in user is known not to be an admin, these methods refuse
    before sending anything.
    """

    def _require_admin(self) -> None:
        user = self.token_store.user
        if user is not None and user.role is not Role.ADMIN:
            raise ActionNotAllowedError(
                error="ADMIN_REQUIRED",
                message="Admin role required",
                details={"role": user.role.value},
            )

    async def list_all_escrows(self) -> list[Escrow]:
        """List every escrow on the platform."""
        self._require_admin()
        response = await self._request("GET", "/admin/escrows")
        return [Escrow.model_validate(item) for item in unwrap_list(response, "escrows")]

    async def release_escrow(self, escrow_id: str) -> dict[str, Any]:
        """Release a delivered escrow's funds to the seller."""
        self._require_admin()
        escrow_id = require_text(escrow_id, "Escrow ID")
        result: dict[str, Any] = await self._request("POST", f"/admin/escrows/{escrow_id}/release")
        logger.info("Escrow released", extra={"escrow_id": escrow_id})
        return result

    async def resolve_dispute(
        self,
        dispute_id: str,
        resolution: Resolution,
        note: str,
    ) -> dict[str, Any]:
        """Close a dispute with a refund, a release, or a split.

        Args:
            dispute_id: The dispute to resolve.
            resolution: Outcome; sent as its decision value (favor_buyer,
                favor_seller, split).
            note: Explanation recorded with the decision. Required.
        """
        self._require_admin()
        dispute_id = require_text(dispute_id, "Dispute ID")
        note = require_text(note, "Resolution note")
        result: dict[str, Any] = await self._request(
            "POST",
            f"/disputes/{dispute_id}/resolve",
            json={"decision": resolution.decision, "note": note},
        )
        logger.info(
            "Dispute resolved",
            extra={"dispute_id": dispute_id, "resolution": resolution.value},
        )
        return result

    async def list_pending_kyc(
        self,
        limit: int = PENDING_KYC_PAGE_SIZE,
        offset: int = 0,
    ) -> list[PendingKyc]:
        """List sellers whose KYC awaits review, one page at a time."""
        self._require_admin()
        if limit <= 0 or offset < 0:
            msg = "limit must be positive and offset must not be negative"
            raise ValueError(msg)
        response = await self._request(
            "GET",
            "/users/kyc/pending",
            params={"limit": limit, "offset": offset},
        )
        return [PendingKyc.model_validate(item) for item in unwrap_list(response, "users")]

    async def get_user_kyc(self, user_id: str) -> KycDetails:
        """Get a user's submitted KYC, with upload paths made absolute."""
        self._require_admin()
        user_id = require_text(user_id, "User ID")
        response = await self._request("GET", f"/users/{user_id}/kyc")
        details = KycDetails.model_validate(response)
        return details.model_copy(
            update={
                "document_url": self.absolute_file_url(details.document_url),
                "selfie_url": self.absolute_file_url(details.selfie_url),
            }
        )

    async def verify_user_kyc(self, user_id: str, decision: KycDecision) -> dict[str, Any]:
        """Approve or reject a user's KYC submission."""
        self._require_admin()
        user_id = require_text(user_id, "User ID")
        result: dict[str, Any] = await self._request(
            "POST", f"/users/{user_id}/kyc", json={"status": decision.value}
        )
        logger.info("KYC reviewed", extra={"user_id": user_id, "decision": decision.value})
        return result

    def absolute_file_url(self, url: str | None) -> str | None:
        """Turn a backend-relative ``/uploads/...`` path into a full URL."""
        if not url or url.lower().startswith(("http://", "https://")):
            return url
        if not url.startswith("/uploads"):
            return url
        parts = urlsplit(self.config.base_url)
        return f"{parts.scheme}://{parts.netloc}{url}"
