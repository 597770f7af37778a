"""
Domain entities and the rules the trip service applies to them.

- ``Trip`` is the validated booking handed to the repository; lifecycle
  changes after creation go through ``transitions.check_transition`` and the
  repository's conditional UPDATEs.
- ``parse_status``, ``validate_stars`` and ``ensure_rateable`` are the input
  and state checks shared by the status and rating operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .enums import ActorRole, TripStatus, VehicleType
from .exceptions import AlreadyRatedError, NotCompletedError, ValidationError

MIN_STARS = 1
MAX_STARS = 5
MAX_NOTES_LENGTH = 500


def parse_status(value: TripStatus | str) -> TripStatus:
    try:
        return TripStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status",
            details={"valid_statuses": [s.value for s in TripStatus]},
        ) from None


def validate_stars(stars: Any) -> int:
    if isinstance(stars, bool) or not isinstance(stars, int):
        raise ValidationError("Invalid rating (1-5 stars)")
    if not MIN_STARS <= stars <= MAX_STARS:
        raise ValidationError("Invalid rating (1-5 stars)")
    return stars


def ensure_rateable(status: TripStatus, already_rated: bool) -> None:
    if TripStatus(status) is not TripStatus.COMPLETED:
        raise NotCompletedError("Only completed trips can be rated")
    if already_rated:
        raise AlreadyRatedError("Trip already rated")


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf an operation runs."""

    user_id: int
    role: ActorRole


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Trip:
    """A sanitized, priced booking; always persisted in SEARCHING."""

    rider_id: int
    pickup: Location
    drop: Location
    pickup_address: str
    drop_address: str
    vehicle_type: VehicleType
    distance_km: float
    duration_min: float
    fare: int
    pickup_address_raw: Optional[dict[str, Any]] = None
    drop_address_raw: Optional[dict[str, Any]] = None
    promo_code: Optional[str] = None
    discount: int = 0
    ride_notes: Optional[str] = None
    scheduled_at: Optional[datetime] = None


@dataclass
class BookingRequest:
    """Everything a rider submits to create a trip."""

    pickup_lat: float
    pickup_lng: float
    drop_lat: float
    drop_lng: float
    pickup_address: str
    drop_address: str
    distance_km: float
    duration_min: float
    client_fare: float
    vehicle_type: VehicleType
    pickup_address_raw: Optional[dict[str, Any]] = None
    drop_address_raw: Optional[dict[str, Any]] = None
    ride_notes: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    promo_code: Optional[str] = None
