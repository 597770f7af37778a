"""
Driver dashboard endpoints
==========================

GET   /api/v1/driver/trips?filter=available|my -- open requests, or own trips
POST  /api/v1/driver/trips/{trip_id}/accept    -- claim an unassigned trip
PATCH /api/v1/driver/online                    -- go online / offline
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Request

from ridehail.api.dependencies import get_driver, get_trip_service
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    DriverOnlineRequest,
    DriverStatusResponse,
    ErrorResponse,
    TripResponse,
)
from ridehail.config import settings
from ridehail.domain.entities import Actor
from ridehail.services.trips import TripService

router = APIRouter(prefix="/driver", tags=["driver"])


@router.get(
    "/trips",
    response_model=list[TripResponse],
    summary="List available or own trips",
    description=(
        "``available``: the 20 newest unassigned SEARCHING trips (empty while "
        "offline).  ``my``: the driver's 50 most recent trips."
    ),
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def list_driver_trips(
    request: Request,
    filter: Literal["available", "my"] = Query("available"),
    driver: Actor = Depends(get_driver),
    service: TripService = Depends(get_trip_service),
):
    if filter == "my":
        return await service.list_driver_trips(driver.user_id)
    return await service.list_available_trips(driver.user_id)


@router.post(
    "/trips/{trip_id}/accept",
    response_model=TripResponse,
    summary="Accept a trip",
    description=(
        "Atomically assigns the trip to the calling driver.  A trip that "
        "does not exist, is no longer SEARCHING or was claimed first by "
        "another driver all return the same 404."
    ),
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def accept_trip(
    request: Request,
    trip_id: str,
    driver: Actor = Depends(get_driver),
    service: TripService = Depends(get_trip_service),
):
    return await service.accept_trip(trip_id, driver.user_id)


@router.patch(
    "/online",
    response_model=DriverStatusResponse,
    summary="Toggle online status",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def set_online(
    request: Request,
    body: DriverOnlineRequest,
    driver: Actor = Depends(get_driver),
    service: TripService = Depends(get_trip_service),
):
    return await service.set_driver_online(driver.user_id, body.is_online)
