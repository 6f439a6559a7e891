"""
Escrow lifecycle: which actions a viewer may take, and where each one leads.

The backend owns the authoritative status. Everything here is pure: given
the status it last reported and what is known about the viewer, decide which
actions to offer and which status a successful action should produce.

Happy path::

    pending_payment -> funded -> shipped -> delivered -> released

Dispute branch::

    shipped | delivered -> disputed -> resolved_refund | resolved_release | resolved_split
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from escrow_client.errors import InvalidTransitionError
from escrow_client.models import DisputeStatus, EscrowStatus, Role


class Action(str, Enum):
    FUND = "fund"
    SHIP = "ship"
    UPLOAD_RECEIPT = "upload_receipt"
    CONFIRM_RECEIPT = "confirm_receipt"
    OPEN_DISPUTE = "open_dispute"
    RELEASE = "release"
    RESOLVE = "resolve"


class Resolution(str, Enum):
    """Outcome an admin picks when closing a dispute."""

    REFUND = EscrowStatus.RESOLVED_REFUND.value
    RELEASE = EscrowStatus.RESOLVED_RELEASE.value
    SPLIT = EscrowStatus.RESOLVED_SPLIT.value

    @property
    def status(self) -> EscrowStatus:
        return EscrowStatus(self.value)

    @property
    def decision(self) -> str:
        """Wire value the resolve endpoint expects."""
        return _DECISIONS[self]

    @classmethod
    def from_decision(cls, decision: str) -> Resolution:
        for resolution, name in _DECISIONS.items():
            if name == decision:
                return resolution
        msg = f"Unknown dispute decision: {decision!r}"
        raise ValueError(msg)


_DECISIONS = {
    Resolution.REFUND: "favor_buyer",
    Resolution.RELEASE: "favor_seller",
    Resolution.SPLIT: "split",
}

HAPPY_PATH: tuple[EscrowStatus, ...] = (
    EscrowStatus.PENDING_PAYMENT,
    EscrowStatus.FUNDED,
    EscrowStatus.SHIPPED,
    EscrowStatus.DELIVERED,
    EscrowStatus.RELEASED,
)

RESOLUTION_STATUSES = frozenset(resolution.status for resolution in Resolution)

TERMINAL_STATUSES = frozenset({EscrowStatus.RELEASED}) | RESOLUTION_STATUSES

_IN_TRANSIT = frozenset({EscrowStatus.SHIPPED, EscrowStatus.DELIVERED})

ALLOWED_TRANSITIONS: dict[EscrowStatus, frozenset[EscrowStatus]] = {
    EscrowStatus.PENDING_PAYMENT: frozenset({EscrowStatus.FUNDED}),
    EscrowStatus.FUNDED: frozenset({EscrowStatus.SHIPPED}),
    EscrowStatus.SHIPPED: frozenset({EscrowStatus.DELIVERED, EscrowStatus.DISPUTED}),
    EscrowStatus.DELIVERED: frozenset({EscrowStatus.RELEASED, EscrowStatus.DISPUTED}),
    EscrowStatus.DISPUTED: RESOLUTION_STATUSES,
    EscrowStatus.RELEASED: frozenset(),
    EscrowStatus.RESOLVED_REFUND: frozenset(),
    EscrowStatus.RESOLVED_RELEASE: frozenset(),
    EscrowStatus.RESOLVED_SPLIT: frozenset(),
}

# Actions that change status map to their target; UPLOAD_RECEIPT keeps it.
_ACTION_OUTCOMES: dict[Action, dict[EscrowStatus, EscrowStatus]] = {
    Action.FUND: {EscrowStatus.PENDING_PAYMENT: EscrowStatus.FUNDED},
    Action.SHIP: {EscrowStatus.FUNDED: EscrowStatus.SHIPPED},
    Action.UPLOAD_RECEIPT: {status: status for status in _IN_TRANSIT},
    Action.CONFIRM_RECEIPT: {status: EscrowStatus.DELIVERED for status in _IN_TRANSIT},
    Action.OPEN_DISPUTE: {status: EscrowStatus.DISPUTED for status in _IN_TRANSIT},
    Action.RELEASE: {EscrowStatus.DELIVERED: EscrowStatus.RELEASED},
}


@dataclass(frozen=True)
class Viewer:
    """What the client knows about the person looking at an escrow.

    ``kyc_verified`` is None while the seller's KYC status is unknown.
    ``dispute_status`` is None when no dispute record has been loaded.
    """

    role: Role
    kyc_verified: bool | None = None
    has_receipt_proof: bool = False
    dispute_status: DisputeStatus | None = None


def dispute_is_open(status: EscrowStatus, dispute_status: DisputeStatus | None = None) -> bool:
    """An escrow in ``disputed`` has an open dispute unless told otherwise."""
    if status is not EscrowStatus.DISPUTED:
        return False
    return dispute_status in (None, DisputeStatus.OPEN)


def allowed_actions(status: EscrowStatus, viewer: Viewer) -> frozenset[Action]:
    """Return the actions the viewer may take on an escrow in this status."""
    actions: set[Action] = set()

    if viewer.role is Role.BUYER:
        if status is EscrowStatus.PENDING_PAYMENT:
            actions.add(Action.FUND)
        if status in _IN_TRANSIT:
            actions.add(Action.UPLOAD_RECEIPT)
            actions.add(Action.OPEN_DISPUTE)
            if viewer.has_receipt_proof:
                actions.add(Action.CONFIRM_RECEIPT)

    elif viewer.role is Role.SELLER:
        if status is EscrowStatus.FUNDED and viewer.kyc_verified is True:
            actions.add(Action.SHIP)

    elif viewer.role is Role.ADMIN:
        if status is EscrowStatus.DELIVERED:
            actions.add(Action.RELEASE)
        if dispute_is_open(status, viewer.dispute_status):
            actions.add(Action.RESOLVE)

    return frozenset(actions)


def is_allowed(action: Action, status: EscrowStatus, viewer: Viewer) -> bool:
    return action in allowed_actions(status, viewer)


def next_status(
    status: EscrowStatus,
    action: Action,
    resolution: Resolution | None = None,
) -> EscrowStatus:
    """Return the status a successful action leads to.

    Raises:
        InvalidTransitionError: If the action has no outcome from ``status``,
            or RESOLVE is requested without a resolution.
    """
    if action is Action.RESOLVE:
        if status is not EscrowStatus.DISPUTED:
            msg = f"Cannot resolve an escrow in '{status.value}' status, must be 'disputed'"
            raise InvalidTransitionError(msg)
        if resolution is None:
            msg = "Resolving a dispute requires a resolution"
            raise InvalidTransitionError(msg)
        return resolution.status

    outcomes = _ACTION_OUTCOMES[action]
    if status not in outcomes:
        msg = f"Action '{action.value}' is not possible from '{status.value}' status"
        raise InvalidTransitionError(msg)
    return outcomes[status]


def can_transition(current: EscrowStatus, target: EscrowStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: EscrowStatus) -> bool:
    return status in TERMINAL_STATUSES


def timeline_step(status: EscrowStatus) -> int | None:
    """1-based position on the happy path, or None off the path."""
    if status in HAPPY_PATH:
        return HAPPY_PATH.index(status) + 1
    return None
