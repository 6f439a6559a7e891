"""Display helpers: IDR amounts and status labels."""

from __future__ import annotations

from escrow_client.models import EscrowStatus

_STATUS_LABELS = {
    EscrowStatus.PENDING_PAYMENT: "Pending payment",
    EscrowStatus.FUNDED: "Funded",
    EscrowStatus.SHIPPED: "Shipped",
    EscrowStatus.DELIVERED: "Delivered",
    EscrowStatus.RELEASED: "Released",
    EscrowStatus.DISPUTED: "Disputed",
    EscrowStatus.RESOLVED_REFUND: "Refunded",
    EscrowStatus.RESOLVED_RELEASE: "Released (dispute)",
    EscrowStatus.RESOLVED_SPLIT: "Split settlement",
}


def format_idr(amount: int) -> str:
    """Format whole rupiah with Indonesian digit grouping, e.g. ``Rp 1.250.000``."""
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def status_label(status: EscrowStatus) -> str:
    return _STATUS_LABELS[status]
