"""Payment status decisions enforced by the gateway.

A payment starts as `Pending` while the pipeline runs and receives exactly one
terminal status. Terminal statuses never transition again.
"""

from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    REJECTED = "Rejected"
    AUTHORIZED = "Authorized"
    DECLINED = "Declined"


TERMINAL_STATUSES: frozenset[PaymentStatus] = frozenset(
    {PaymentStatus.REJECTED, PaymentStatus.AUTHORIZED, PaymentStatus.DECLINED}
)

ALLOWED_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: set(TERMINAL_STATUSES),
    PaymentStatus.REJECTED: set(),
    PaymentStatus.AUTHORIZED: set(),
    PaymentStatus.DECLINED: set(),
}


def validate_transition(current: PaymentStatus, new: PaymentStatus) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current.value} -> {new.value}")


def is_stored_status(status: PaymentStatus) -> bool:
    """Only bank-decided payments are kept for later retrieval."""

    return status in (PaymentStatus.AUTHORIZED, PaymentStatus.DECLINED)
