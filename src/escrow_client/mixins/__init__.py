"""Endpoint-specific mixin classes for EscrowClient."""

from escrow_client.mixins.auth import AuthMixin
from escrow_client.mixins.disputes import DisputeMixin
from escrow_client.mixins.escrow import EscrowMixin
from escrow_client.mixins.kyc import KycMixin

__all__ = [
    "AuthMixin",
    "DisputeMixin",
    "EscrowMixin",
    "KycMixin",
]
