"""
Trip service
============

Orchestrates one unit of work per call.  The caller owns the session and
commits on success / rolls back on error.

Booking flow
------------
1. Sanitize free-text fields and validate the pickup/drop pair.
2. Quote the authoritative fare server-side; cap the client's fare at
   ``quote x (1 + fare_tolerance)``.
3. Optionally apply a promo code to the capped fare.
4. Persist the trip in SEARCHING.

Later changes (accept, status, rating) go through the transition table and
the atomic repository operations.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.config import Settings
from ridehail.domain.entities import (
    MAX_NOTES_LENGTH,
    Actor,
    BookingRequest,
    Location,
    Trip,
    ensure_rateable,
    parse_status,
    validate_stars,
)
from ridehail.domain.enums import ActorRole, TripStatus, VehicleType
from ridehail.domain.exceptions import (
    InvalidStateTransition,
    NotAvailableError,
    NotFoundError,
    ValidationError,
)
from ridehail.domain.geofence import BookingValidator
from ridehail.domain.pricing import (
    DEFAULT_TAMPER_TOLERANCE,
    FareEngine,
    FareQuote,
    cap_client_fare,
    round_half_up,
)
from ridehail.domain.promo import PromoEvaluator, PromoResult
from ridehail.domain.sanitize import sanitize_address
from ridehail.domain.transitions import check_transition
from ridehail.infrastructure.models import DriverProfileModel, RatingModel, TripModel
from ridehail.infrastructure.repositories import (
    DriverProfileRepository,
    RatingRepository,
    TripRepository,
)

logger = logging.getLogger(__name__)


class TripService:
    def __init__(
        self,
        session: AsyncSession,
        fare_engine: FareEngine | None = None,
        validator: BookingValidator | None = None,
        promos: PromoEvaluator | None = None,
        fare_tolerance: float = DEFAULT_TAMPER_TOLERANCE,
    ):
        self.trips = TripRepository(session)
        self.ratings = RatingRepository(session)
        self.drivers = DriverProfileRepository(session)
        self.fare_engine = fare_engine or FareEngine()
        self.validator = validator or BookingValidator()
        self.promos = promos or PromoEvaluator()
        self.fare_tolerance = fare_tolerance

    @classmethod
    def from_settings(cls, session: AsyncSession, settings: Settings) -> "TripService":
        return cls(
            session,
            fare_engine=FareEngine(settings.pricing_config()),
            validator=BookingValidator(
                settings.service_area(), settings.min_separation_m
            ),
            promos=PromoEvaluator(
                settings.promo_registry(), settings.currency_symbol
            ),
            fare_tolerance=settings.fare_tolerance,
        )

    # ── Pricing ───────────────────────────────────────────────────────

    def get_fare_quote(
        self,
        distance_km: float,
        vehicle_type: VehicleType | str,
        timestamp: datetime | None = None,
    ) -> FareQuote:
        return self.fare_engine.calculate_fare(distance_km, vehicle_type, timestamp)

    def validate_promo(self, code: str | None) -> PromoResult:
        return self.promos.validate(code)

    # ── Rider operations ──────────────────────────────────────────────

    async def create_trip(self, rider_id: int, request: BookingRequest) -> TripModel:
        for label, value in (
            ("Distance", request.distance_km),
            ("Duration", request.duration_min),
            ("Fare", request.client_fare),
        ):
            if not math.isfinite(value):
                raise ValidationError(f"{label} must be a finite number")
            if value < 0:
                raise ValidationError(f"{label} must be non-negative")
        try:
            vehicle_type = VehicleType(request.vehicle_type)
        except ValueError:
            raise ValidationError(
                "Invalid vehicle type",
                details={"valid_vehicle_types": [v.value for v in VehicleType]},
            ) from None
        if request.ride_notes and len(request.ride_notes) > MAX_NOTES_LENGTH:
            raise ValidationError(
                f"Ride notes must be at most {MAX_NOTES_LENGTH} characters"
            )

        pickup_address = sanitize_address(request.pickup_address)
        drop_address = sanitize_address(request.drop_address)

        check = self.validator.validate(
            request.pickup_lat,
            request.pickup_lng,
            request.drop_lat,
            request.drop_lng,
            pickup_address,
            drop_address,
        )
        if not check.valid:
            raise ValidationError(check.error or "Invalid booking")

        quote = self.fare_engine.calculate_fare(request.distance_km, vehicle_type)
        fare = cap_client_fare(request.client_fare, quote, self.fare_tolerance)
        if round_half_up(request.client_fare) > fare:
            logger.warning(
                "Client fare %.2f clamped to %d (server quote %d)",
                request.client_fare,
                fare,
                quote.total_fare,
            )

        promo_code: Optional[str] = None
        discount = 0
        if request.promo_code and request.promo_code.strip():
            promo = self.promos.validate(request.promo_code)
            if not promo.valid:
                raise ValidationError(promo.message)
            applied = self.promos.apply(fare, promo)
            promo_code, discount, fare = promo.code, applied.discount, applied.final_fare

        trip = Trip(
            rider_id=rider_id,
            pickup=Location(request.pickup_lat, request.pickup_lng),
            drop=Location(request.drop_lat, request.drop_lng),
            pickup_address=pickup_address,
            drop_address=drop_address,
            pickup_address_raw=request.pickup_address_raw,
            drop_address_raw=request.drop_address_raw,
            vehicle_type=vehicle_type,
            distance_km=request.distance_km,
            duration_min=request.duration_min,
            fare=fare,
            promo_code=promo_code,
            discount=discount,
            ride_notes=sanitize_address(request.ride_notes) or None,
            scheduled_at=request.scheduled_at,
        )
        model = await self.trips.create_trip(trip)
        logger.info(
            "Trip %s created by rider %d (%s, %.2f km, fare %d)",
            model.id,
            rider_id,
            vehicle_type.value,
            request.distance_km,
            fare,
        )
        return model

    async def get_trip(self, trip_id: str, actor: Actor) -> TripModel:
        trip = await self.trips.get_for_actor(trip_id, actor)
        if trip is None:
            raise NotFoundError("Trip not found")
        return trip

    async def list_rider_trips(self, rider_id: int) -> list[TripModel]:
        return await self.trips.list_for_rider(rider_id)

    async def submit_rating(self, trip_id: str, rider_id: int, stars: int) -> RatingModel:
        stars = validate_stars(stars)
        trip = await self.trips.get_for_actor(trip_id, Actor(rider_id, ActorRole.RIDER))
        if trip is None:
            raise NotFoundError("Trip not found")
        ensure_rateable(trip.status, trip.rating is not None)

        rating = await self.ratings.create(trip.id, stars)
        if trip.driver_id is not None:
            average = await self.drivers.record_rating(trip.driver_id, stars)
            logger.info(
                "Driver %d rating is now %s after trip %s", trip.driver_id, average, trip.id
            )
        logger.info("Trip %s rated %d stars", trip.id, stars)
        return rating

    # ── Shared lifecycle ──────────────────────────────────────────────

    async def set_trip_status(
        self, trip_id: str, actor: Actor, new_status: TripStatus | str
    ) -> TripModel:
        # Unknown statuses fail before ownership or role is considered
        requested = parse_status(new_status)

        trip = await self.trips.get_for_actor(trip_id, actor)
        if trip is None:
            raise NotFoundError("Trip not found")

        previous = TripStatus(trip.status)
        check_transition(previous, actor.role, requested)
        if not await self.trips.set_status(trip, previous, requested):
            logger.info(
                "Trip %s left %s before %s could be applied",
                trip.id,
                previous.value,
                requested.value,
            )
            raise InvalidStateTransition(
                f"Trip is no longer {previous.value}",
                details={"from": previous.value, "to": requested.value},
            )
        logger.info(
            "Trip %s: %s -> %s by %s %d",
            trip.id,
            previous.value,
            requested.value,
            actor.role.value.lower(),
            actor.user_id,
        )
        return trip

    # ── Driver operations ─────────────────────────────────────────────

    async def _driver_profile(self, driver_id: int) -> DriverProfileModel:
        profile = await self.drivers.get_by_user_id(driver_id)
        if profile is None:
            raise NotFoundError("Driver profile not found")
        return profile

    async def accept_trip(self, trip_id: str, driver_id: int) -> TripModel:
        await self._driver_profile(driver_id)

        if not await self.trips.claim(trip_id, driver_id):
            logger.info("Driver %d lost claim on trip %s", driver_id, trip_id)
            raise NotAvailableError("Trip not available or already accepted")

        trip = await self.trips.get_for_actor(
            trip_id, Actor(driver_id, ActorRole.DRIVER)
        )
        if trip is None:
            raise NotAvailableError("Trip not available or already accepted")
        logger.info("Trip %s accepted by driver %d", trip_id, driver_id)
        return trip

    async def list_available_trips(self, driver_id: int) -> list[TripModel]:
        profile = await self._driver_profile(driver_id)
        if not profile.is_online:
            return []
        return await self.trips.list_available()

    async def list_driver_trips(self, driver_id: int) -> list[TripModel]:
        return await self.trips.list_for_driver(driver_id)

    async def set_driver_online(
        self, driver_id: int, is_online: bool
    ) -> DriverProfileModel:
        profile = await self._driver_profile(driver_id)
        profile = await self.drivers.set_online(profile, is_online)
        logger.info(
            "Driver %d is now %s", driver_id, "online" if is_online else "offline"
        )
        return profile
