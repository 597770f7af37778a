"""
Service-level tests against the SQLite-backed repositories.

The ``service`` fixture disables surge windows, so the authoritative quote
for the default booking is always 100.
"""

import pytest

from ridehail.domain.entities import Actor
from ridehail.domain.enums import ActorRole, TripStatus, VehicleType
from ridehail.domain.exceptions import (
    AlreadyRatedError,
    AuthorizationError,
    InvalidStateTransition,
    NotAvailableError,
    NotCompletedError,
    NotFoundError,
    ValidationError,
)
from ridehail.services.trips import TripService
from tests.conftest import (
    DRIVER_ID,
    OTHER_DRIVER_ID,
    OTHER_RIDER_ID,
    RIDER_ID,
    UNREGISTERED_DRIVER_ID,
    make_booking,
)

RIDER = Actor(RIDER_ID, ActorRole.RIDER)
DRIVER = Actor(DRIVER_ID, ActorRole.DRIVER)


async def _completed_trip(service: TripService, driver_id: int = DRIVER_ID):
    trip = await service.create_trip(RIDER_ID, make_booking())
    await service.accept_trip(trip.id, driver_id)
    actor = Actor(driver_id, ActorRole.DRIVER)
    for status in ("ARRIVING", "STARTED", "COMPLETED"):
        trip = await service.set_trip_status(trip.id, actor, status)
    return trip


# ── Booking ───────────────────────────────────────────────────────────


class TestCreateTrip:
    @pytest.mark.asyncio
    async def test_creates_searching_trip(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking())
        assert trip.id is not None
        assert trip.status is TripStatus.SEARCHING
        assert trip.driver_id is None
        assert trip.rider_id == RIDER_ID
        assert trip.fare == 100
        assert trip.discount == 0
        assert trip.rating is None

    @pytest.mark.asyncio
    async def test_inflated_fare_is_capped(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking(client_fare=99999))
        assert trip.fare == 110

    @pytest.mark.asyncio
    async def test_lower_client_fare_is_kept(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking(client_fare=80))
        assert trip.fare == 80

    @pytest.mark.asyncio
    async def test_fractional_client_fare_rounds(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking(client_fare=99.5))
        assert trip.fare == 100

    @pytest.mark.asyncio
    async def test_addresses_are_sanitized(self, service):
        trip = await service.create_trip(
            RIDER_ID,
            make_booking(
                pickup_address="  <b>Chennai</b>   Central ",
                drop_address='"Anna" Nagar',
                ride_notes="Gate   2,\n<near> the ATM",
            ),
        )
        assert trip.pickup_address == "bChennaib Central"
        assert trip.drop_address == "Anna Nagar"
        assert trip.ride_notes == "Gate 2, near the ATM"

    @pytest.mark.asyncio
    async def test_raw_addresses_are_stored(self, service):
        raw = {"place_id": "abc123", "city": "Chennai"}
        trip = await service.create_trip(RIDER_ID, make_booking(pickup_address_raw=raw))
        assert trip.pickup_address_raw == raw

    @pytest.mark.asyncio
    async def test_percent_promo(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking(promo_code="welcome10"))
        assert trip.promo_code == "WELCOME10"
        assert trip.discount == 10
        assert trip.fare == 90

    @pytest.mark.asyncio
    async def test_promo_applies_to_capped_fare(self, service):
        trip = await service.create_trip(
            RIDER_ID, make_booking(client_fare=5000, promo_code="FLAT50")
        )
        assert trip.fare == 60  # 110 - 50
        assert trip.discount == 50

    @pytest.mark.asyncio
    async def test_blank_promo_is_ignored(self, service):
        trip = await service.create_trip(RIDER_ID, make_booking(promo_code="   "))
        assert trip.promo_code is None
        assert trip.fare == 100

    @pytest.mark.asyncio
    async def test_unknown_promo_rejected(self, service):
        with pytest.raises(ValidationError, match="Invalid promo code"):
            await service.create_trip(RIDER_ID, make_booking(promo_code="FREERIDE"))

    @pytest.mark.asyncio
    async def test_pickup_in_water_rejected(self, service):
        with pytest.raises(ValidationError, match="water"):
            await service.create_trip(RIDER_ID, make_booking(pickup_lat=0.0, pickup_lng=0.0))

    @pytest.mark.asyncio
    async def test_identical_points_rejected(self, service):
        booking = make_booking(drop_lat=13.0827, drop_lng=80.2707)
        with pytest.raises(ValidationError, match="50m"):
            await service.create_trip(RIDER_ID, booking)

    @pytest.mark.asyncio
    async def test_address_empty_after_sanitizing_rejected(self, service):
        with pytest.raises(ValidationError, match="Pickup address is required"):
            await service.create_trip(RIDER_ID, make_booking(pickup_address="<>//"))

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.create_trip(RIDER_ID, make_booking(duration_min=-1))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field", ["distance_km", "duration_min", "client_fare"]
    )
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    async def test_non_finite_numbers_rejected(self, service, field, value):
        with pytest.raises(ValidationError, match="finite"):
            await service.create_trip(RIDER_ID, make_booking(**{field: value}))

    @pytest.mark.asyncio
    async def test_unknown_vehicle_type_rejected(self, service):
        with pytest.raises(ValidationError, match="Invalid vehicle type"):
            await service.create_trip(RIDER_ID, make_booking(vehicle_type="BIKE"))

    @pytest.mark.asyncio
    async def test_long_notes_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.create_trip(RIDER_ID, make_booking(ride_notes="x" * 501))

    @pytest.mark.asyncio
    async def test_sedan_rate_used(self, service):
        trip = await service.create_trip(
            RIDER_ID, make_booking(vehicle_type=VehicleType.SEDAN, client_fare=500)
        )
        assert trip.fare == 126  # floor(115 * 1.1)


# ── Reads ─────────────────────────────────────────────────────────────


class TestTripVisibility:
    @pytest.mark.asyncio
    async def test_rider_sees_own_trip(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        trip = await service.get_trip(created.id, RIDER)
        assert trip.id == created.id

    @pytest.mark.asyncio
    async def test_other_rider_gets_not_found(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        with pytest.raises(NotFoundError):
            await service.get_trip(created.id, Actor(OTHER_RIDER_ID, ActorRole.RIDER))

    @pytest.mark.asyncio
    async def test_unassigned_driver_gets_not_found(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        with pytest.raises(NotFoundError):
            await service.get_trip(created.id, DRIVER)

    @pytest.mark.asyncio
    async def test_missing_trip(self, service):
        with pytest.raises(NotFoundError, match="Trip not found"):
            await service.get_trip("does-not-exist", RIDER)

    @pytest.mark.asyncio
    async def test_rider_history_is_own_trips_only(self, service):
        await service.create_trip(RIDER_ID, make_booking())
        await service.create_trip(RIDER_ID, make_booking())
        await service.create_trip(OTHER_RIDER_ID, make_booking())
        trips = await service.list_rider_trips(RIDER_ID)
        assert len(trips) == 2
        assert all(t.rider_id == RIDER_ID for t in trips)


# ── Driver operations ─────────────────────────────────────────────────


class TestAcceptTrip:
    @pytest.mark.asyncio
    async def test_accept_assigns_driver(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        trip = await service.accept_trip(created.id, DRIVER_ID)
        assert trip.status is TripStatus.ACCEPTED
        assert trip.driver_id == DRIVER_ID

    @pytest.mark.asyncio
    async def test_driver_sees_trip_after_accepting(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        trip = await service.get_trip(created.id, DRIVER)
        assert trip.driver_id == DRIVER_ID

    @pytest.mark.asyncio
    async def test_accepted_trip_carries_driver_profile(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        assert created.driver is None
        await service.accept_trip(created.id, DRIVER_ID)
        trip = await service.get_trip(created.id, RIDER)
        assert trip.driver.name == "Demo Driver"
        assert trip.driver.vehicle_number == "KA 01 AB 1234"

    @pytest.mark.asyncio
    async def test_second_driver_loses(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        with pytest.raises(NotAvailableError):
            await service.accept_trip(created.id, OTHER_DRIVER_ID)
        trip = await service.get_trip(created.id, RIDER)
        assert trip.driver_id == DRIVER_ID

    @pytest.mark.asyncio
    async def test_cancelled_trip_cannot_be_accepted(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.set_trip_status(created.id, RIDER, TripStatus.CANCELLED)
        with pytest.raises(NotAvailableError):
            await service.accept_trip(created.id, DRIVER_ID)

    @pytest.mark.asyncio
    async def test_missing_trip_is_not_available(self, service):
        with pytest.raises(NotAvailableError):
            await service.accept_trip("does-not-exist", DRIVER_ID)

    @pytest.mark.asyncio
    async def test_driver_without_profile(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        with pytest.raises(NotFoundError, match="Driver profile not found"):
            await service.accept_trip(created.id, UNREGISTERED_DRIVER_ID)


class TestDriverDashboard:
    @pytest.mark.asyncio
    async def test_available_lists_unassigned_searching_trips(self, service):
        open_trip = await service.create_trip(RIDER_ID, make_booking())
        taken = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(taken.id, OTHER_DRIVER_ID)

        available = await service.list_available_trips(DRIVER_ID)
        assert [t.id for t in available] == [open_trip.id]

    @pytest.mark.asyncio
    async def test_offline_driver_sees_nothing(self, service):
        await service.create_trip(RIDER_ID, make_booking())
        profile = await service.set_driver_online(DRIVER_ID, False)
        assert profile.is_online is False
        assert await service.list_available_trips(DRIVER_ID) == []

    @pytest.mark.asyncio
    async def test_my_trips(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        assert [t.id for t in await service.list_driver_trips(DRIVER_ID)] == [created.id]
        assert await service.list_driver_trips(OTHER_DRIVER_ID) == []

    @pytest.mark.asyncio
    async def test_toggle_online_requires_profile(self, service):
        with pytest.raises(NotFoundError):
            await service.set_driver_online(UNREGISTERED_DRIVER_ID, True)


# ── Status changes ────────────────────────────────────────────────────


class TestSetTripStatus:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, service):
        trip = await _completed_trip(service)
        assert trip.status is TripStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_rider_cancels_searching_trip(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        trip = await service.set_trip_status(created.id, RIDER, "CANCELLED")
        assert trip.status is TripStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_rider_cancels_accepted_trip(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        trip = await service.set_trip_status(created.id, RIDER, "CANCELLED")
        assert trip.status is TripStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_rider_cannot_advance(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        with pytest.raises(AuthorizationError, match="Riders can only cancel trips"):
            await service.set_trip_status(created.id, RIDER, "ARRIVING")

    @pytest.mark.asyncio
    async def test_driver_cannot_cancel(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        with pytest.raises(AuthorizationError, match="Rider must cancel the trip"):
            await service.set_trip_status(created.id, DRIVER, "CANCELLED")
        trip = await service.get_trip(created.id, RIDER)
        assert trip.status is TripStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_rider_cannot_cancel_started_trip(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        await service.set_trip_status(created.id, DRIVER, "ARRIVING")
        await service.set_trip_status(created.id, DRIVER, "STARTED")
        with pytest.raises(InvalidStateTransition):
            await service.set_trip_status(created.id, RIDER, "CANCELLED")

    @pytest.mark.asyncio
    async def test_driver_cannot_skip_steps(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        with pytest.raises(InvalidStateTransition):
            await service.set_trip_status(created.id, DRIVER, "COMPLETED")

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_before_ownership(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        stranger = Actor(OTHER_RIDER_ID, ActorRole.RIDER)
        with pytest.raises(ValidationError, match="Invalid status"):
            await service.set_trip_status(created.id, stranger, "FLYING")

    @pytest.mark.asyncio
    async def test_other_driver_gets_not_found(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        await service.accept_trip(created.id, DRIVER_ID)
        other = Actor(OTHER_DRIVER_ID, ActorRole.DRIVER)
        with pytest.raises(NotFoundError):
            await service.set_trip_status(created.id, other, "ARRIVING")


# ── Ratings ───────────────────────────────────────────────────────────


class TestRating:
    @pytest.mark.asyncio
    async def test_rate_completed_trip(self, service):
        trip = await _completed_trip(service)
        rating = await service.submit_rating(trip.id, RIDER_ID, 4)
        assert rating.stars == 4
        assert rating.trip_id == trip.id

        reloaded = await service.get_trip(trip.id, RIDER)
        assert reloaded.rating.stars == 4

    @pytest.mark.asyncio
    async def test_second_rating_rejected(self, service):
        trip = await _completed_trip(service)
        await service.submit_rating(trip.id, RIDER_ID, 5)
        with pytest.raises(AlreadyRatedError):
            await service.submit_rating(trip.id, RIDER_ID, 1)

    @pytest.mark.asyncio
    async def test_incomplete_trip_cannot_be_rated(self, service):
        created = await service.create_trip(RIDER_ID, make_booking())
        with pytest.raises(NotCompletedError):
            await service.submit_rating(created.id, RIDER_ID, 5)

    @pytest.mark.asyncio
    async def test_invalid_stars(self, service):
        trip = await _completed_trip(service)
        with pytest.raises(ValidationError, match="Invalid rating"):
            await service.submit_rating(trip.id, RIDER_ID, 6)

    @pytest.mark.asyncio
    async def test_other_rider_cannot_rate(self, service):
        trip = await _completed_trip(service)
        with pytest.raises(NotFoundError):
            await service.submit_rating(trip.id, OTHER_RIDER_ID, 5)

    @pytest.mark.asyncio
    async def test_driver_average_is_updated(self, service):
        profile = await service.drivers.get_by_user_id(DRIVER_ID)
        assert profile.rating == 5.0

        for stars in (5, 4, 4):
            trip = await _completed_trip(service)
            await service.submit_rating(trip.id, RIDER_ID, stars)

        profile = await service.drivers.get_by_user_id(DRIVER_ID)
        assert profile.rating_count == 3
        assert profile.rating_sum == 13
        assert profile.rating == pytest.approx(4.3)

    @pytest.mark.asyncio
    async def test_ratings_only_affect_the_assigned_driver(self, service):
        trip = await _completed_trip(service, driver_id=OTHER_DRIVER_ID)
        await service.submit_rating(trip.id, RIDER_ID, 2)

        other = await service.drivers.get_by_user_id(OTHER_DRIVER_ID)
        untouched = await service.drivers.get_by_user_id(DRIVER_ID)
        assert other.rating == 2.0
        assert untouched.rating_count == 0
