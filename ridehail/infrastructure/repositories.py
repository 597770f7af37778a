"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Ownership is applied as a query filter, so a
trip that belongs to someone else is indistinguishable from a missing one.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, literal_column, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import DriverProfileModel, RatingModel, TripModel
from ridehail.domain.entities import Actor, Trip
from ridehail.domain.enums import ActorRole, TripStatus
from ridehail.domain.exceptions import AlreadyRatedError

RIDER_HISTORY_LIMIT = 50
DRIVER_HISTORY_LIMIT = 50
AVAILABLE_TRIPS_LIMIT = 20


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_trip(self, trip: Trip) -> TripModel:
        model = TripModel(
            rider_id=trip.rider_id,
            pickup_lat=trip.pickup.latitude,
            pickup_lng=trip.pickup.longitude,
            drop_lat=trip.drop.latitude,
            drop_lng=trip.drop.longitude,
            pickup_address=trip.pickup_address,
            drop_address=trip.drop_address,
            pickup_address_raw=trip.pickup_address_raw,
            drop_address_raw=trip.drop_address_raw,
            vehicle_type=trip.vehicle_type,
            distance_km=trip.distance_km,
            duration_min=trip.duration_min,
            fare=trip.fare,
            promo_code=trip.promo_code,
            discount=trip.discount,
            ride_notes=trip.ride_notes,
            scheduled_at=trip.scheduled_at,
            status=TripStatus.SEARCHING,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return model

    async def get_for_actor(self, trip_id: str, actor: Actor) -> Optional[TripModel]:
        """Fetch a trip only if *actor* is its rider or its assigned driver."""
        if actor.role is ActorRole.RIDER:
            owner = TripModel.rider_id == actor.user_id
        else:
            owner = TripModel.driver_id == actor.user_id
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.id == trip_id, owner)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def claim(self, trip_id: str, driver_id: int) -> bool:
        """
        Atomically bind an unassigned SEARCHING trip to *driver_id*.

        Single conditional UPDATE; a concurrent loser matches zero rows.
        """
        result = await self.session.execute(
            update(TripModel)
            .where(
                TripModel.id == trip_id,
                TripModel.status == TripStatus.SEARCHING,
                TripModel.driver_id.is_(None),
            )
            .values(driver_id=driver_id, status=TripStatus.ACCEPTED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_status(
        self, trip: TripModel, expected: TripStatus, status: TripStatus
    ) -> bool:
        """
        Compare-and-set: move *trip* to *status* only if it is still *expected*.

        Returns False when another writer changed the status first.
        """
        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.id == trip.id, TripModel.status == expected)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        await self.session.refresh(trip)
        return True

    async def list_for_rider(
        self, rider_id: int, limit: int = RIDER_HISTORY_LIMIT
    ) -> list[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.rider_id == rider_id)
            .order_by(TripModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_driver(
        self, driver_id: int, limit: int = DRIVER_HISTORY_LIMIT
    ) -> list[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(TripModel.driver_id == driver_id)
            .order_by(TripModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_available(
        self, limit: int = AVAILABLE_TRIPS_LIMIT
    ) -> list[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(
                TripModel.status == TripStatus.SEARCHING,
                TripModel.driver_id.is_(None),
            )
            .order_by(TripModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


class RatingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, trip_id: str, stars: int) -> RatingModel:
        rating = RatingModel(trip_id=trip_id, stars=stars)
        self.session.add(rating)
        try:
            await self.session.flush()
        except IntegrityError:
            raise AlreadyRatedError("Trip already rated") from None
        await self.session.refresh(rating)
        return rating


class DriverProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: int) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel).where(DriverProfileModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def set_online(
        self, profile: DriverProfileModel, is_online: bool
    ) -> DriverProfileModel:
        profile.is_online = is_online
        await self.session.flush()
        return profile

    async def record_rating(self, user_id: int, stars: int) -> Optional[float]:
        """
        Fold *stars* into the driver's running average in one UPDATE.

        The right-hand side reads the pre-update totals, so sum, count and
        the rounded mean always agree.
        """
        profile = DriverProfileModel
        new_sum = profile.rating_sum + stars
        new_count = profile.rating_count + 1
        await self.session.execute(
            update(profile)
            .where(profile.user_id == user_id)
            .values(
                rating_sum=new_sum,
                rating_count=new_count,
                rating=func.round(new_sum * literal_column("1.0") / new_count, 1),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            select(profile)
            .where(profile.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        updated = result.scalar_one_or_none()
        return updated.rating if updated is not None else None

