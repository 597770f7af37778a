"""
SQLAlchemy ORM models.

Tables
------
* ``users``            -- riders and drivers (credentials live elsewhere)
* ``driver_profiles``  -- vehicle details, online flag, running rating
* ``trips``            -- one rider-requested journey; ``TripModel.driver``
  loads the assigned driver's profile alongside the trip
* ``ratings``          -- at most one per trip (unique ``trip_id``)

Indexes
-------
* **B-Tree** on ``status``, ``rider_id``, ``driver_id`` and ``created_at``
  for the rider history, driver dashboard and available-trip queries.
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from ridehail.domain.enums import ActorRole, TripStatus, VehicleType


def _uuid() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(120), nullable=True)
    role = Column(Enum(ActorRole), default=ActorRole.RIDER, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class DriverProfileModel(Base):
    __tablename__ = "driver_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    vehicle_type = Column(Enum(VehicleType), default=VehicleType.SEDAN)
    vehicle_number = Column(String(32), nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)

    # ``rating`` is derived from the running totals in the same UPDATE
    rating = Column(Float, default=5.0, nullable=False)
    rating_sum = Column(Integer, default=0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=_uuid)
    rider_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    drop_lat = Column(Float, nullable=False)
    drop_lng = Column(Float, nullable=False)
    pickup_address = Column(String(500), nullable=False)
    drop_address = Column(String(500), nullable=False)
    pickup_address_raw = Column(JSON, nullable=True)
    drop_address_raw = Column(JSON, nullable=True)

    vehicle_type = Column(Enum(VehicleType), nullable=False)
    distance_km = Column(Float, nullable=False)
    duration_min = Column(Float, nullable=False)
    fare = Column(Integer, nullable=False)
    promo_code = Column(String(32), nullable=True)
    discount = Column(Integer, default=0, nullable=False)
    ride_notes = Column(String(500), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)

    status = Column(Enum(TripStatus), default=TripStatus.SEARCHING, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    rating = relationship("RatingModel", uselist=False, lazy="selectin")
    # Assigned driver's public profile; joins on the user id, not a table FK
    driver = relationship(
        "DriverProfileModel",
        primaryjoin="foreign(TripModel.driver_id) == DriverProfileModel.user_id",
        uselist=False,
        viewonly=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("fare >= 0", name="ck_trips_fare_non_negative"),
        CheckConstraint("distance_km >= 0", name="ck_trips_distance_non_negative"),
        Index("idx_trips_status", "status"),
        Index("idx_trips_rider", "rider_id"),
        Index("idx_trips_driver", "driver_id"),
        Index("idx_trips_created", "created_at"),
    )


class RatingModel(Base):
    __tablename__ = "ratings"

    id = Column(String(36), primary_key=True, default=_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), unique=True, nullable=False)
    stars = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("stars BETWEEN 1 AND 5", name="ck_ratings_stars_range"),
    )
