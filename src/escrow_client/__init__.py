"""Escrow Client: async client for the QRIS / BI-FAST escrow platform."""

from escrow_client.admin import AdminClient
from escrow_client.client import EscrowClient
from escrow_client.factory import ClientFactory
from escrow_client.lifecycle import Action, Resolution, Viewer, allowed_actions, next_status
from escrow_client.workflow import EscrowWorkflow

__version__ = "0.1.0"

__all__ = [
    "Action",
    "AdminClient",
    "ClientFactory",
    "EscrowClient",
    "EscrowWorkflow",
    "Resolution",
    "Viewer",
    "allowed_actions",
    "next_status",
]
