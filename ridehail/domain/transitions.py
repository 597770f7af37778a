"""
Role-aware trip transition table.

Every ``(current_status, actor_role, requested_status)`` triple is resolved
once, at import time, into a ``TransitionOutcome``.  Checking a request is a
single dictionary lookup; no endpoint re-derives the rules.

Rules
-----
* RIDER  may only request CANCELLED, and only from SEARCHING or ACCEPTED.
* DRIVER may request any forward step of the lifecycle but never CANCELLED.
* Anything else that is not a lifecycle edge is an illegal transition.

Adding a member to ``ActorRole`` without a branch in ``_resolve`` makes the
module fail to import.
"""

from __future__ import annotations

import enum
from itertools import product

from .enums import TRIP_TRANSITIONS, ActorRole, TripStatus
from .exceptions import AuthorizationError, InvalidStateTransition

RIDER_CANCELLABLE = frozenset({TripStatus.SEARCHING, TripStatus.ACCEPTED})


class TransitionOutcome(str, enum.Enum):
    ALLOWED = "ALLOWED"
    RIDER_CAN_ONLY_CANCEL = "RIDER_CAN_ONLY_CANCEL"
    DRIVER_CANNOT_CANCEL = "DRIVER_CANNOT_CANCEL"
    ILLEGAL = "ILLEGAL"


TransitionKey = tuple[TripStatus, ActorRole, TripStatus]


def _resolve(
    current: TripStatus, role: ActorRole, requested: TripStatus
) -> TransitionOutcome:
    if role is ActorRole.RIDER:
        if requested is not TripStatus.CANCELLED:
            return TransitionOutcome.RIDER_CAN_ONLY_CANCEL
        if current in RIDER_CANCELLABLE:
            return TransitionOutcome.ALLOWED
        return TransitionOutcome.ILLEGAL

    if role is ActorRole.DRIVER:
        if requested is TripStatus.CANCELLED:
            return TransitionOutcome.DRIVER_CANNOT_CANCEL
        if requested in TRIP_TRANSITIONS[current]:
            return TransitionOutcome.ALLOWED
        return TransitionOutcome.ILLEGAL

    raise TypeError(f"No transition rules for role {role!r}")


TRANSITION_TABLE: dict[TransitionKey, TransitionOutcome] = {
    (current, role, requested): _resolve(current, role, requested)
    for current, role, requested in product(TripStatus, ActorRole, TripStatus)
}


def lookup_transition(
    current: TripStatus, role: ActorRole, requested: TripStatus
) -> TransitionOutcome:
    return TRANSITION_TABLE[(current, role, requested)]


def check_transition(
    current: TripStatus, role: ActorRole, requested: TripStatus
) -> None:
    """Raise unless *role* may move a trip from *current* to *requested*."""
    outcome = lookup_transition(current, role, requested)
    if outcome is TransitionOutcome.ALLOWED:
        return
    if outcome is TransitionOutcome.RIDER_CAN_ONLY_CANCEL:
        raise AuthorizationError("Riders can only cancel trips")
    if outcome is TransitionOutcome.DRIVER_CANNOT_CANCEL:
        raise AuthorizationError("Rider must cancel the trip")
    raise InvalidStateTransition(
        f"Cannot transition from {current.value} to {requested.value}",
        details={"from": current.value, "to": requested.value},
    )
