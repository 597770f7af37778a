"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 3 riders and 2 drivers (with driver profiles, one online)
  - 4 sample trips around Chennai (SEARCHING, ACCEPTED, COMPLETED, CANCELLED)
  - 1 rating on the completed trip
"""

import asyncio
from datetime import datetime

from sqlalchemy import select, text

from ridehail.domain.enums import ActorRole, TripStatus, VehicleType
from ridehail.domain.pricing import calculate_fare
from ridehail.infrastructure.database import async_session_factory, engine
from ridehail.infrastructure.models import (
    DriverProfileModel,
    RatingModel,
    TripModel,
    UserModel,
)

RIDERS = [
    {"email": "aarav@example.com", "name": "Aarav Sharma"},
    {"email": "priya@example.com", "name": "Priya Patel"},
    {"email": "meera@example.com", "name": "Meera Nair"},
]

DRIVERS = [
    {
        "email": "driver@example.com",
        "name": "Demo Driver",
        "vehicle_type": VehicleType.SEDAN,
        "vehicle_number": "KA 01 AB 1234",
        "is_online": True,
    },
    {
        "email": "ravi@example.com",
        "name": "Ravi Kumar",
        "vehicle_type": VehicleType.SUV,
        "vehicle_number": "TN 09 CD 5678",
        "is_online": False,
    },
]

# (pickup, drop, addresses, km, minutes, vehicle, status, driver index)
TRIPS = [
    ((13.0827, 80.2707), (13.0878, 80.2085), ("Chennai Central", "Anna Nagar"),
     8.2, 24, VehicleType.MINI, TripStatus.SEARCHING, None),
    ((13.0604, 80.2496), (13.0418, 80.2341), ("Egmore", "T. Nagar"),
     3.1, 12, VehicleType.SEDAN, TripStatus.ACCEPTED, 0),
    ((12.9941, 80.1709), (13.0500, 80.2824), ("Chennai Airport", "Marina Beach"),
     15.4, 41, VehicleType.SUV, TripStatus.COMPLETED, 0),
    ((13.0067, 80.2206), (13.0359, 80.2440), ("Guindy", "Mylapore"),
     4.6, 16, VehicleType.MINI, TripStatus.CANCELLED, None),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        riders = [
            UserModel(email=r["email"], name=r["name"], role=ActorRole.RIDER)
            for r in RIDERS
        ]
        drivers = [
            UserModel(email=d["email"], name=d["name"], role=ActorRole.DRIVER)
            for d in DRIVERS
        ]
        session.add_all(riders + drivers)
        await session.flush()
        print(f"  Created {len(riders)} riders and {len(drivers)} drivers")

        # ── Driver profiles ───────────────────────────────────────────
        for user, d in zip(drivers, DRIVERS):
            session.add(
                DriverProfileModel(
                    user_id=user.id,
                    name=d["name"],
                    vehicle_type=d["vehicle_type"],
                    vehicle_number=d["vehicle_number"],
                    is_online=d["is_online"],
                )
            )
        await session.flush()
        print(f"  Created {len(DRIVERS)} driver profiles")

        # ── Trips ─────────────────────────────────────────────────────
        quote_time = datetime.now().replace(hour=14)
        completed: TripModel | None = None
        for i, (pickup, drop, addresses, km, minutes, vehicle, status, d_idx) in enumerate(TRIPS):
            quote = calculate_fare(km, vehicle, quote_time)
            trip = TripModel(
                rider_id=riders[i % len(riders)].id,
                driver_id=drivers[d_idx].id if d_idx is not None else None,
                pickup_lat=pickup[0],
                pickup_lng=pickup[1],
                drop_lat=drop[0],
                drop_lng=drop[1],
                pickup_address=addresses[0],
                drop_address=addresses[1],
                vehicle_type=vehicle,
                distance_km=km,
                duration_min=minutes,
                fare=quote.total_fare,
                status=status,
            )
            session.add(trip)
            if status is TripStatus.COMPLETED:
                completed = trip
        await session.flush()
        print(f"  Created {len(TRIPS)} trips")

        # ── Rating ────────────────────────────────────────────────────
        if completed is not None:
            session.add(RatingModel(trip_id=completed.id, stars=5))
            driver_profile = (
                await session.execute(
                    select(DriverProfileModel).where(
                        DriverProfileModel.user_id == completed.driver_id
                    )
                )
            ).scalar_one()
            driver_profile.rating_sum = 5
            driver_profile.rating_count = 1
            driver_profile.rating = 5.0
            print("  Created 1 rating")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
