"""Pydantic models for the backend's request and response payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EscrowStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    FUNDED = "funded"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    RELEASED = "released"
    DISPUTED = "disputed"
    RESOLVED_REFUND = "resolved_refund"
    RESOLVED_RELEASE = "resolved_release"
    RESOLVED_SPLIT = "resolved_split"


class Role(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class DisputeStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class DisputeReason(str, Enum):
    NOT_RECEIVED = "not_received"
    DAMAGED = "damaged"
    ITEM_NOT_AS_DESCRIBED = "item_not_as_described"
    OTHER = "other"


class PaymentMethod(str, Enum):
    QRIS = "QRIS"
    BIFAST = "BIFAST"
    BANK_TRANSFER = "BANK_TRANSFER"

    @property
    def label(self) -> str:
        return _PAYMENT_METHOD_LABELS[self]


_PAYMENT_METHOD_LABELS = {
    PaymentMethod.QRIS: "QRIS",
    PaymentMethod.BIFAST: "BI-FAST",
    PaymentMethod.BANK_TRANSFER: "Bank transfer",
}


class KycDecision(str, Enum):
    VERIFIED = "verified"
    REJECTED = "rejected"


class _WireModel(BaseModel):
    """Base for backend payloads: accepts wire or field names, ignores extras."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_WireModel):
    id: str
    email: str
    role: Role
    token: str | None = None


class Escrow(_WireModel):
    id: str
    seller: str
    amount: int
    status: EscrowStatus
    created_at: str = Field(alias="createdAt")
    buyer: str | None = None
    payment_method: PaymentMethod | None = Field(default=None, alias="paymentMethod")
    receipt_url: str | None = Field(default=None, alias="receiptUrl")

    @field_validator("payment_method", mode="before")
    @classmethod
    def _normalize_payment_method(cls, value: Any) -> Any:
        # The payment page labels the rail "BI-FAST"; stored escrows say "BIFAST".
        if isinstance(value, str):
            return value.upper().replace("-", "")
        return value


class Dispute(_WireModel):
    id: str
    escrow_id: str = Field(alias="escrowId")
    reason: str
    status: DisputeStatus = DisputeStatus.OPEN
    note: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")

    @field_validator("status", mode="before")
    @classmethod
    def _map_legacy_status(cls, value: Any) -> Any:
        """Older backends report dispute status with escrow statuses."""
        if value == EscrowStatus.DISPUTED.value:
            return DisputeStatus.OPEN.value
        if isinstance(value, str) and value.startswith("resolved_"):
            return DisputeStatus.RESOLVED.value
        return value


class KycInfo(_WireModel):
    status: str | None = None
    verified: bool | None = None
    level: str | None = None

    @property
    def is_verified(self) -> bool:
        return bool(self.verified) or (self.status or "").lower() == "verified"

    @property
    def display_status(self) -> str:
        if self.status:
            return self.status.lower()
        return "verified" if self.verified else "unverified"


class KycDetails(_WireModel):
    full_name: str | None = None
    id_number: str | None = None
    document_url: str | None = None
    selfie_url: str | None = None
    submitted_at: str | None = None
    status: str | None = None


class KycSubmissionResult(_WireModel):
    status: str | None = None
    document_url: str | None = None
    selfie_url: str | None = None


class PendingKyc(_WireModel):
    id: str
    email: str | None = None
    status: str | None = None
    level: str | None = None
    submitted_at: str | None = None


class FileAudit(BaseModel):
    """Metadata the backend recorded for an uploaded shipping proof."""

    model_config = ConfigDict(extra="forbid")

    file_name: str | None = None
    file_type: str | None = None
    file_size: int | None = None


class ShipmentResult(BaseModel):
    """Tracking number and upload audit extracted from a ship response."""

    model_config = ConfigDict(extra="forbid")

    tracking_number: str
    audit: FileAudit | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: dict[str, Any], submitted_receipt: str) -> ShipmentResult:
        tracking = (
            response.get("tracking_number")
            or response.get("tracking_no")
            or response.get("shipping_receipt")
            or response.get("shipping_receipt_number")
            or submitted_receipt
        )
        return cls(tracking_number=str(tracking), audit=_extract_audit(response), raw=response)


def _extract_audit(response: dict[str, Any]) -> FileAudit | None:
    audit = response.get("audit")
    file_info = audit.get("file") if isinstance(audit, dict) else None
    if file_info is None:
        file_info = response.get("file")
    if file_info is None:
        files = response.get("files")
        if isinstance(files, list) and files:
            file_info = files[0]
    if not isinstance(file_info, dict):
        return None

    size = file_info.get("size")
    return FileAudit(
        file_name=file_info.get("originalname") or file_info.get("name") or file_info.get("filename"),
        file_type=file_info.get("mimetype") or file_info.get("type") or file_info.get("contentType"),
        file_size=size if isinstance(size, int) and not isinstance(size, bool) else None,
    )
