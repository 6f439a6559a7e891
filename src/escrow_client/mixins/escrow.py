"""Escrow mixin: listing, creation, funding, shipping and receipt."""

from __future__ import annotations

from typing import Any, Protocol

from escrow_client.mixins._common import UploadFile, require_text, unwrap_list
from escrow_client.models import Escrow, EscrowStatus, PaymentMethod, ShipmentResult
from escrow_client.payment import make_payment_reference

MIN_SELLER_ID_LENGTH = 3


class _EscrowClient(Protocol):
    async def _request(self, method: str, path: str, **kwargs: Any) -> Any: ...


class EscrowMixin:
    """Methods for the /escrow endpoints."""

    async def list_escrows(
        self: _EscrowClient,
        status: EscrowStatus | None = None,
    ) -> list[Escrow]:
        """List the caller's escrows, optionally filtered by status."""
        params: dict[str, str] = {}
        if status is not None:
            params["status"] = status.value
        response = await self._request("GET", "/escrow", params=params)
        return [Escrow.model_validate(item) for item in unwrap_list(response, "escrows")]

    async def create_escrow(self: _EscrowClient, seller_id: str, amount: int) -> Escrow:
        """Create an escrow for a seller. Amount is whole rupiah.

        Raises:
            ValueError: If seller_id is shorter than 3 characters or amount is not positive.
        """
        seller_id = require_text(seller_id, "Seller ID")
        if len(seller_id) < MIN_SELLER_ID_LENGTH:
            msg = f"Seller ID must be at least {MIN_SELLER_ID_LENGTH} characters"
            raise ValueError(msg)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            msg = "Amount must be a positive whole number of rupiah"
            raise ValueError(msg)
        response = await self._request(
            "POST", "/escrow", json={"sellerId": seller_id, "amount": amount}
        )
        return Escrow.model_validate(response)

    async def get_escrow(self: _EscrowClient, escrow_id: str) -> Escrow:
        """Get a single escrow."""
        escrow_id = require_text(escrow_id, "Escrow ID")
        response = await self._request("GET", f"/escrow/{escrow_id}")
        return Escrow.model_validate(response)

    async def fund_escrow(
        self: _EscrowClient,
        escrow_id: str,
        method: PaymentMethod = PaymentMethod.QRIS,
        pg_reference: str | None = None,
        qr_code_url: str | None = None,
    ) -> dict[str, Any]:
        """Report a buyer's payment for an escrow.

        A gateway reference is generated when none is given. ``qr_code_url``
        is only sent for QRIS payments.
        """
        escrow_id = require_text(escrow_id, "Escrow ID")
        payload: dict[str, Any] = {
            "method": method.value,
            "pg_reference": pg_reference or make_payment_reference(),
        }
        if method is PaymentMethod.QRIS and qr_code_url:
            payload["qr_code_url"] = qr_code_url
        return await self._request("POST", f"/escrow/{escrow_id}/fund", json=payload)  # type: ignore[no-any-return]

    async def ship_escrow(
        self: _EscrowClient,
        escrow_id: str,
        shipping_receipt: str,
        media: UploadFile | None = None,
    ) -> ShipmentResult:
        """Mark an escrow shipped with a courier receipt number.

        An optional photo or video of the shipment is sent as multipart
        field ``media``.
        """
        escrow_id = require_text(escrow_id, "Escrow ID")
        shipping_receipt = require_text(shipping_receipt, "Shipping receipt")
        path = f"/escrow/{escrow_id}/ship"
        if media is not None:
            response = await self._request(
                "POST",
                path,
                data={"shipping_receipt": shipping_receipt},
                files={"media": media},
            )
        else:
            response = await self._request(
                "POST", path, json={"shipping_receipt": shipping_receipt}
            )
        return ShipmentResult.from_response(response, shipping_receipt)

    async def upload_receipt(
        self: _EscrowClient,
        escrow_id: str,
        file_url: str | None = None,
        file: UploadFile | None = None,
        note: str = "",
    ) -> dict[str, Any]:
        """Upload the buyer's proof of receipt, as a URL or a file."""
        escrow_id = require_text(escrow_id, "Escrow ID")
        path = f"/escrow/{escrow_id}/receipt"
        if file is not None:
            data = {"note": note}
            if file_url:
                data["file_url"] = file_url
            return await self._request("POST", path, data=data, files={"file": file})  # type: ignore[no-any-return]
        file_url = require_text(file_url, "Receipt file or URL")
        return await self._request("POST", path, json={"file_url": file_url, "note": note})  # type: ignore[no-any-return]

    async def confirm_receipt(self: _EscrowClient, escrow_id: str) -> dict[str, Any]:
        """Confirm the goods arrived."""
        escrow_id = require_text(escrow_id, "Escrow ID")
        return await self._request("POST", f"/escrow/{escrow_id}/confirm")  # type: ignore[no-any-return]
