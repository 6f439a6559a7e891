"""Single-escrow coordinator: gate an action, send it once, re-fetch the result."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Any, TypeVar

from escrow_client.admin import AdminClient
from escrow_client.errors import ActionInProgressError, ActionNotAllowedError, ApiError
from escrow_client.lifecycle import Action, Resolution, Viewer, allowed_actions
from escrow_client.logging import get_logger
from escrow_client.models import (
    DisputeReason,
    DisputeStatus,
    EscrowStatus,
    PaymentMethod,
    Role,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from escrow_client.client import EscrowClient
    from escrow_client.mixins._common import UploadFile
    from escrow_client.models import Dispute, Escrow, ShipmentResult

logger = get_logger(__name__)

T = TypeVar("T")


class EscrowWorkflow:
    """Drives one escrow through its lifecycle on behalf of one viewer.

    Holds the last escrow the backend returned. Every action is checked
    against the lifecycle rules, sent as a single request, and followed by a
    re-fetch. A failed request leaves the held escrow as it was. Only one
    action may be in flight at a time.

    Usage::

        workflow = EscrowWorkflow(client, "ESC-1030")
        await workflow.refresh()
        await workflow.load_viewer()
        if Action.SHIP in workflow.allowed_actions():
            await workflow.ship("JNE123456789")
    """

    def __init__(self, client: EscrowClient, escrow_id: str) -> None:
        self._client = client
        self.escrow_id = escrow_id
        self.escrow: Escrow | None = None
        self.viewer: Viewer | None = None
        self.dispute: Dispute | None = None
        self._in_flight: Action | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def refresh(self) -> Escrow:
        """Fetch the authoritative escrow from the backend."""
        self.escrow = await self._client.get_escrow(self.escrow_id)
        return self.escrow

    async def load_viewer(self) -> Viewer:
        """Build the viewer from the logged-in user, looking up KYC for sellers."""
        role = self._client.role
        if role is None:
            msg = "Log in before loading the viewer"
            raise RuntimeError(msg)

        kyc_verified: bool | None = None
        if role is Role.SELLER:
            try:
                kyc_verified = (await self._client.get_my_kyc()).is_verified
            except ApiError as exc:
                logger.warning(
                    "KYC lookup failed, treating seller as unverified",
                    extra={"escrow_id": self.escrow_id, "status_code": exc.status_code},
                )
                kyc_verified = False

        previous = self.viewer
        self.viewer = Viewer(
            role=role,
            kyc_verified=kyc_verified,
            has_receipt_proof=self._has_receipt_proof(previous),
            dispute_status=self.dispute.status if self.dispute is not None else None,
        )
        return self.viewer

    def allowed_actions(self) -> frozenset[Action]:
        if self.escrow is None or self.viewer is None:
            return frozenset()
        return allowed_actions(self.escrow.status, self.viewer)

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def fund(
        self,
        method: PaymentMethod = PaymentMethod.QRIS,
        qr_code_url: str | None = None,
    ) -> dict[str, Any]:
        return await self._perform(
            Action.FUND,
            self._client.fund_escrow(self.escrow_id, method=method, qr_code_url=qr_code_url),
        )

    async def ship(self, shipping_receipt: str, media: UploadFile | None = None) -> ShipmentResult:
        return await self._perform(
            Action.SHIP,
            self._client.ship_escrow(self.escrow_id, shipping_receipt, media=media),
        )

    async def upload_receipt(
        self,
        file_url: str | None = None,
        file: UploadFile | None = None,
        note: str = "",
    ) -> dict[str, Any]:
        return await self._perform(
            Action.UPLOAD_RECEIPT,
            self._client.upload_receipt(self.escrow_id, file_url=file_url, file=file, note=note),
            on_success=lambda _: self._mark_receipt_proof(),
        )

    async def confirm_receipt(self) -> dict[str, Any]:
        return await self._perform(
            Action.CONFIRM_RECEIPT,
            self._client.confirm_receipt(self.escrow_id),
        )

    async def open_dispute(
        self,
        reason: DisputeReason = DisputeReason.ITEM_NOT_AS_DESCRIBED,
        note: str = "",
    ) -> Dispute:
        return await self._perform(
            Action.OPEN_DISPUTE,
            self._client.open_dispute(self.escrow_id, reason=reason, note=note),
            on_success=self.track_dispute,
        )

    async def release(self) -> dict[str, Any]:
        admin = self._admin_client()
        return await self._perform(Action.RELEASE, admin.release_escrow(self.escrow_id))

    async def resolve(
        self,
        resolution: Resolution,
        note: str,
        dispute_id: str | None = None,
    ) -> dict[str, Any]:
        """Resolve the escrow's dispute.

        ``dispute_id`` defaults to the dispute this workflow opened or was
        given through track_dispute().
        """
        admin = self._admin_client()
        if dispute_id is None:
            if self.dispute is None:
                msg = "No dispute id known for this escrow"
                raise ValueError(msg)
            dispute_id = self.dispute.id
        return await self._perform(
            Action.RESOLVE,
            admin.resolve_dispute(dispute_id, resolution, note),
            on_success=lambda _: self._mark_dispute_resolved(dispute_id),
        )

    def track_dispute(self, dispute: Dispute) -> None:
        """Remember the escrow's dispute so its status gates resolution."""
        self.dispute = dispute
        if self.viewer is not None:
            self.viewer = replace(self.viewer, dispute_status=dispute.status)

    async def wait_until_funded(
        self,
        max_attempts: int | None = None,
        interval_seconds: float | None = None,
    ) -> bool:
        """Poll the escrow after a payment until the backend reports it funded.

        Lookup failures are logged and polling continues. Returns whether the
        escrow reached ``funded`` within the allowed attempts.
        """
        attempts = max_attempts if max_attempts is not None else self._client.config.poll_attempts
        interval = (
            interval_seconds
            if interval_seconds is not None
            else self._client.config.poll_interval_seconds
        )

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                await asyncio.sleep(interval)
            try:
                escrow = await self.refresh()
            except ApiError as exc:
                logger.warning(
                    "Funding poll failed",
                    extra={"escrow_id": self.escrow_id, "attempt": attempt, "error": exc.error},
                )
                continue
            if escrow.status is EscrowStatus.FUNDED:
                logger.info(
                    "Payment confirmed",
                    extra={"escrow_id": self.escrow_id, "attempt": attempt},
                )
                return True

        logger.info("Still waiting for payment confirmation", extra={"escrow_id": self.escrow_id})
        return False

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _perform(
        self,
        action: Action,
        request: Awaitable[T],
        on_success: Callable[[T], None] | None = None,
    ) -> T:
        """Send one gated action, then re-read the escrow.

        ``on_success`` runs as soon as the backend accepts the action. A failed
        re-read after that is logged and the previous escrow is kept; the
        action itself still counts as done.
        """
        try:
            self._check(action)
        except Exception:
            _discard(request)
            raise

        self._in_flight = action
        try:
            result = await request
            if on_success is not None:
                on_success(result)
            try:
                await self.refresh()
            except ApiError as exc:
                logger.warning(
                    "Escrow re-fetch failed after action",
                    extra={
                        "escrow_id": self.escrow_id,
                        "action": action.value,
                        "error": exc.error,
                    },
                )
        finally:
            self._in_flight = None

        logger.info(
            "Escrow action completed",
            extra={
                "escrow_id": self.escrow_id,
                "action": action.value,
                "status": self.escrow.status.value if self.escrow is not None else None,
            },
        )
        return result

    def _check(self, action: Action) -> None:
        if self._in_flight is not None:
            raise ActionInProgressError(
                error="ACTION_IN_PROGRESS",
                message=f"'{self._in_flight.value}' is still in progress",
                details={"escrow_id": self.escrow_id, "action": action.value},
            )
        if self.escrow is None or self.viewer is None:
            msg = "Call refresh() and load_viewer() before performing actions"
            raise RuntimeError(msg)
        if action not in self.allowed_actions():
            raise ActionNotAllowedError(
                error="ACTION_NOT_ALLOWED",
                message=(
                    f"Cannot {action.value.replace('_', ' ')} as {self.viewer.role.value} "
                    f"while escrow is '{self.escrow.status.value}'"
                ),
                details={
                    "escrow_id": self.escrow_id,
                    "action": action.value,
                    "status": self.escrow.status.value,
                    "role": self.viewer.role.value,
                },
            )

    def _admin_client(self) -> AdminClient:
        if not isinstance(self._client, AdminClient):
            raise ActionNotAllowedError(
                error="ADMIN_REQUIRED",
                message="Admin client required",
                details={"escrow_id": self.escrow_id},
            )
        return self._client

    def _mark_receipt_proof(self) -> None:
        if self.viewer is not None:
            self.viewer = replace(self.viewer, has_receipt_proof=True)

    def _mark_dispute_resolved(self, dispute_id: str) -> None:
        if self.dispute is not None and self.dispute.id == dispute_id:
            self.track_dispute(self.dispute.model_copy(update={"status": DisputeStatus.RESOLVED}))

    def _has_receipt_proof(self, previous: Viewer | None) -> bool:
        if previous is not None and previous.has_receipt_proof:
            return True
        return self.escrow is not None and bool(self.escrow.receipt_url)


def _discard(request: Awaitable[Any]) -> None:
    """Close an un-awaited coroutine so it is never sent."""
    close = getattr(request, "close", None)
    if close is not None:
        close()
