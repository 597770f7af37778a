"""
Booking location validation.

Rules run in a fixed order and stop at the first failure:

1. coordinate ranges (pickup, then drop)
2. service-area bounding box (pickup, then drop)
3. minimum pickup/drop separation (haversine, metres)
4. non-blank addresses (pickup, then drop)

Limitation
----------
The service area is a single lat/lng rectangle.  It accepts sea points that
fall inside the rectangle and rejects land outside it; a polygon lookup
would replace ``ServiceArea.contains`` without touching the rule order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .distance import haversine_m

MIN_SEPARATION_M = 50.0


@dataclass(frozen=True)
class ServiceArea:
    """Inclusive lat/lng envelope of the serviceable region."""

    min_lat: float = 8.0
    max_lat: float = 35.5
    min_lng: float = 68.0
    max_lng: float = 97.5

    def contains(self, lat: float, lng: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def is_valid_coordinate(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


class BookingValidator:
    """Checks a proposed pickup/drop pair before a trip may be created."""

    def __init__(
        self,
        service_area: ServiceArea | None = None,
        min_separation_m: float = MIN_SEPARATION_M,
    ):
        self.service_area = service_area or ServiceArea()
        self.min_separation_m = min_separation_m

    def is_on_land(self, lat: float, lng: float) -> bool:
        if not is_valid_coordinate(lat, lng):
            return False
        return self.service_area.contains(lat, lng)

    def are_points_distinct(
        self, pickup_lat: float, pickup_lng: float, drop_lat: float, drop_lng: float
    ) -> bool:
        distance = haversine_m(pickup_lat, pickup_lng, drop_lat, drop_lng)
        return distance >= self.min_separation_m

    def validate(
        self,
        pickup_lat: float,
        pickup_lng: float,
        drop_lat: float,
        drop_lng: float,
        pickup_address: str | None,
        drop_address: str | None,
    ) -> ValidationResult:
        if not is_valid_coordinate(pickup_lat, pickup_lng):
            return ValidationResult(False, "Invalid pickup coordinates")
        if not is_valid_coordinate(drop_lat, drop_lng):
            return ValidationResult(False, "Invalid drop coordinates")

        if not self.is_on_land(pickup_lat, pickup_lng):
            return ValidationResult(
                False,
                "Pickup location appears to be in water or outside service area",
            )
        if not self.is_on_land(drop_lat, drop_lng):
            return ValidationResult(
                False,
                "Drop location appears to be in water or outside service area",
            )

        if not self.are_points_distinct(pickup_lat, pickup_lng, drop_lat, drop_lng):
            return ValidationResult(
                False,
                f"Pickup and drop must be at least {self.min_separation_m:g}m apart",
            )

        if not (pickup_address or "").strip():
            return ValidationResult(False, "Pickup address is required")
        if not (drop_address or "").strip():
            return ValidationResult(False, "Drop address is required")

        return ValidationResult(True)


def validate_booking(
    pickup_lat: float,
    pickup_lng: float,
    drop_lat: float,
    drop_lng: float,
    pickup_address: str | None,
    drop_address: str | None,
) -> ValidationResult:
    """Validate with the default service area and separation."""
    return BookingValidator().validate(
        pickup_lat, pickup_lng, drop_lat, drop_lng, pickup_address, drop_address
    )
