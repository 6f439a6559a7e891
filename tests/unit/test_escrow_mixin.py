"""Unit tests for EscrowMixin."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from escrow_client.client import EscrowClient
from escrow_client.models import EscrowStatus, PaymentMethod

if TYPE_CHECKING:
    from escrow_client.config import ClientConfig

ESCROW_BODY = {
    "id": "ESC-1030",
    "seller": "Gadget Nusantara",
    "amount": 2499000,
    "status": "pending_payment",
    "createdAt": "2026-01-01T00:00:00Z",
}


def _make_client(config: ClientConfig, return_value: object = None) -> EscrowClient:
    client = EscrowClient(config)
    client._request = AsyncMock(return_value=return_value)  # type: ignore[method-assign]
    return client


@pytest.mark.unit
class TestListAndGet:
    """Tests for listing and fetching escrows."""

    async def test_list_bare_array(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, [ESCROW_BODY])

        escrows = await client.list_escrows()

        assert [escrow.id for escrow in escrows] == ["ESC-1030"]
        client._request.assert_awaited_once_with("GET", "/escrow", params={})
        await client.close()

    async def test_list_envelope_with_status_filter(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {"escrows": [ESCROW_BODY]})

        escrows = await client.list_escrows(status=EscrowStatus.PENDING_PAYMENT)

        assert len(escrows) == 1
        client._request.assert_awaited_once_with(
            "GET", "/escrow", params={"status": "pending_payment"}
        )
        await client.close()

    async def test_list_unexpected_shape(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {"data": "nope"})

        with pytest.raises(ValueError, match="'escrows' list"):
            await client.list_escrows()
        await client.close()

    async def test_get_escrow(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, ESCROW_BODY)

        escrow = await client.get_escrow("ESC-1030")

        assert escrow.amount == 2_499_000
        client._request.assert_awaited_once_with("GET", "/escrow/ESC-1030")
        await client.close()

    async def test_blank_escrow_id(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config)

        with pytest.raises(ValueError, match="Escrow ID is required"):
            await client.get_escrow("  ")
        client._request.assert_not_awaited()
        await client.close()


@pytest.mark.unit
class TestCreate:
    """Tests for create_escrow validation."""

    async def test_create(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, ESCROW_BODY)

        escrow = await client.create_escrow("seller-42", 2_499_000)

        assert escrow.status is EscrowStatus.PENDING_PAYMENT
        client._request.assert_awaited_once_with(
            "POST", "/escrow", json={"sellerId": "seller-42", "amount": 2_499_000}
        )
        await client.close()

    @pytest.mark.parametrize(
        ("seller_id", "amount", "match"),
        [
            ("ab", 1000, "at least 3"),
            ("", 1000, "Seller ID is required"),
            ("seller-42", 0, "positive"),
            ("seller-42", -5, "positive"),
            ("seller-42", True, "positive"),
            ("seller-42", 10.5, "positive"),
        ],
    )
    async def test_rejects_invalid_input(
        self, sample_config: ClientConfig, seller_id: str, amount: int, match: str
    ) -> None:
        client = _make_client(sample_config)

        with pytest.raises(ValueError, match=match):
            await client.create_escrow(seller_id, amount)
        client._request.assert_not_awaited()
        await client.close()


@pytest.mark.unit
class TestFund:
    """Tests for fund_escrow."""

    async def test_qris_with_qr_code(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {"ok": True})

        await client.fund_escrow(
            "ESC-1",
            method=PaymentMethod.QRIS,
            pg_reference="TXNABC123456789",
            qr_code_url="https://pg.example.com/qr/1",
        )

        client._request.assert_awaited_once_with(
            "POST",
            "/escrow/ESC-1/fund",
            json={
                "method": "QRIS",
                "pg_reference": "TXNABC123456789",
                "qr_code_url": "https://pg.example.com/qr/1",
            },
        )
        await client.close()

    async def test_bifast_drops_qr_code_and_generates_reference(
        self, sample_config: ClientConfig
    ) -> None:
        client = _make_client(sample_config, {})

        await client.fund_escrow(
            "ESC-1", method=PaymentMethod.BIFAST, qr_code_url="https://pg.example.com/qr/1"
        )

        payload = client._request.call_args.kwargs["json"]
        assert payload["method"] == "BIFAST"
        assert "qr_code_url" not in payload
        assert re.fullmatch(r"TXN[A-Z0-9]{12}", payload["pg_reference"])
        await client.close()


@pytest.mark.unit
class TestShip:
    """Tests for ship_escrow."""

    async def test_json_without_media(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {"tracking_no": "JNE123"})

        result = await client.ship_escrow("ESC-1", " JNE123 ")

        assert result.tracking_number == "JNE123"
        client._request.assert_awaited_once_with(
            "POST", "/escrow/ESC-1/ship", json={"shipping_receipt": "JNE123"}
        )
        await client.close()

    async def test_multipart_with_media(self, sample_config: ClientConfig) -> None:
        media = ("box.jpg", b"\xff\xd8", "image/jpeg")
        client = _make_client(
            sample_config,
            {"audit": {"file": {"originalname": "box.jpg", "mimetype": "image/jpeg", "size": 2}}},
        )

        result = await client.ship_escrow("ESC-1", "JNE123", media=media)

        assert result.tracking_number == "JNE123"
        assert result.audit is not None
        assert result.audit.file_size == 2
        client._request.assert_awaited_once_with(
            "POST",
            "/escrow/ESC-1/ship",
            data={"shipping_receipt": "JNE123"},
            files={"media": media},
        )
        await client.close()

    async def test_receipt_required(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config)

        with pytest.raises(ValueError, match="Shipping receipt is required"):
            await client.ship_escrow("ESC-1", "")
        await client.close()


@pytest.mark.unit
class TestReceipt:
    """Tests for upload_receipt and confirm_receipt."""

    async def test_upload_url(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {})

        await client.upload_receipt("ESC-1", file_url="https://cdn.example.com/r.jpg", note="ok")

        client._request.assert_awaited_once_with(
            "POST",
            "/escrow/ESC-1/receipt",
            json={"file_url": "https://cdn.example.com/r.jpg", "note": "ok"},
        )
        await client.close()

    async def test_upload_file(self, sample_config: ClientConfig) -> None:
        file = ("r.jpg", b"jpeg", "image/jpeg")
        client = _make_client(sample_config, {})

        await client.upload_receipt("ESC-1", file=file)

        client._request.assert_awaited_once_with(
            "POST", "/escrow/ESC-1/receipt", data={"note": ""}, files={"file": file}
        )
        await client.close()

    async def test_upload_needs_url_or_file(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config)

        with pytest.raises(ValueError, match="Receipt file or URL is required"):
            await client.upload_receipt("ESC-1")
        await client.close()

    async def test_confirm(self, sample_config: ClientConfig) -> None:
        client = _make_client(sample_config, {})

        await client.confirm_receipt("ESC-1")

        client._request.assert_awaited_once_with("POST", "/escrow/ESC-1/confirm")
        await client.close()
