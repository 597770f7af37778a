"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ridehail.domain.entities import MAX_NOTES_LENGTH, BookingRequest
from ridehail.domain.enums import TripStatus, VehicleType


# ── Requests ──────────────────────────────────────────────────────────


class TripCreateRequest(BaseModel):
    # Range and service-area checks run in the booking validator
    pickup_lat: float
    pickup_lng: float
    drop_lat: float
    drop_lng: float
    pickup_address: str = Field(..., min_length=1)
    drop_address: str = Field(..., min_length=1)
    pickup_address_raw: Optional[dict[str, Any]] = None
    drop_address_raw: Optional[dict[str, Any]] = None
    distance_km: float = Field(..., ge=0)
    duration_min: float = Field(..., ge=0)
    fare: float = Field(..., ge=0, description="Client-computed fare; capped server-side.")
    vehicle_type: VehicleType
    ride_notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    scheduled_at: Optional[datetime] = None
    promo_code: Optional[str] = Field(None, max_length=32)

    def to_booking(self) -> BookingRequest:
        return BookingRequest(
            pickup_lat=self.pickup_lat,
            pickup_lng=self.pickup_lng,
            drop_lat=self.drop_lat,
            drop_lng=self.drop_lng,
            pickup_address=self.pickup_address,
            drop_address=self.drop_address,
            pickup_address_raw=self.pickup_address_raw,
            drop_address_raw=self.drop_address_raw,
            distance_km=self.distance_km,
            duration_min=self.duration_min,
            client_fare=self.fare,
            vehicle_type=self.vehicle_type,
            ride_notes=self.ride_notes,
            scheduled_at=self.scheduled_at,
            promo_code=self.promo_code,
        )


class TripStatusUpdateRequest(BaseModel):
    # Plain string so that unknown statuses reach the domain's own check
    status: str


class RatingCreateRequest(BaseModel):
    stars: int = Field(..., ge=1, le=5)


class DriverOnlineRequest(BaseModel):
    is_online: bool


# ── Responses ─────────────────────────────────────────────────────────


class RatingResponse(BaseModel):
    id: str
    trip_id: str
    stars: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DriverSummary(BaseModel):
    """Public view of the assigned driver, shown to the rider."""

    user_id: int
    name: str
    vehicle_type: Optional[VehicleType] = None
    vehicle_number: str
    rating: float

    model_config = {"from_attributes": True}


class TripResponse(BaseModel):
    id: str
    rider_id: int
    driver_id: Optional[int] = None
    pickup_lat: float
    pickup_lng: float
    drop_lat: float
    drop_lng: float
    pickup_address: str
    drop_address: str
    pickup_address_raw: Optional[dict[str, Any]] = None
    drop_address_raw: Optional[dict[str, Any]] = None
    vehicle_type: VehicleType
    distance_km: float
    duration_min: float
    fare: int
    promo_code: Optional[str] = None
    discount: int = 0
    ride_notes: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    status: TripStatus
    created_at: Optional[datetime] = None
    driver: Optional[DriverSummary] = None
    rating: Optional[RatingResponse] = None

    model_config = {"from_attributes": True}


class DriverStatusResponse(BaseModel):
    is_online: bool
    rating: float

    model_config = {"from_attributes": True}


class FareBreakdownResponse(BaseModel):
    base_fare: float
    distance_fare: float
    distance_km: float
    per_km_rate: float
    time_multiplier: float
    time_multiplier_label: Optional[str] = None
    surge_applied: bool

    model_config = {"from_attributes": True}


class FareQuoteResponse(BaseModel):
    total_fare: int
    surge_applied: bool
    breakdown: FareBreakdownResponse

    model_config = {"from_attributes": True}


class PromoResponse(BaseModel):
    valid: bool
    message: str
    code: Optional[str] = None
    discount_percent: Optional[int] = None
    discount_fixed: Optional[int] = None

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    details: Optional[dict[str, Any]] = None
