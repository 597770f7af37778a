"""
Trip endpoints
==============

POST  /api/v1/trips                -- book a trip (201, status SEARCHING)
GET   /api/v1/trips                -- the rider's 50 most recent trips
GET   /api/v1/trips/{trip_id}      -- one trip, if the caller is its rider or driver
PATCH /api/v1/trips/{trip_id}      -- request a status change
POST  /api/v1/trips/{trip_id}/rating -- rate a completed trip once (201)
"""

from fastapi import APIRouter, Depends, Request

from ridehail.api.dependencies import get_actor, get_rider, get_trip_service
from ridehail.api.middleware import limiter
from ridehail.api.schemas import (
    ErrorResponse,
    RatingCreateRequest,
    RatingResponse,
    TripCreateRequest,
    TripResponse,
    TripStatusUpdateRequest,
)
from ridehail.config import settings
from ridehail.domain.entities import Actor
from ridehail.services.trips import TripService

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    summary="Book a trip",
    description=(
        "Validates the pickup/drop pair, re-derives the fare server-side "
        "(client fare is capped at 110 % of the quote), applies an optional "
        "promo code and creates the trip in SEARCHING."
    ),
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def create_trip(
    request: Request,
    body: TripCreateRequest,
    rider: Actor = Depends(get_rider),
    service: TripService = Depends(get_trip_service),
):
    return await service.create_trip(rider.user_id, body.to_booking())


@router.get(
    "",
    response_model=list[TripResponse],
    summary="List the rider's trips",
)
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    rider: Actor = Depends(get_rider),
    service: TripService = Depends(get_trip_service),
):
    return await service.list_rider_trips(rider.user_id)


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Get a trip",
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: str,
    actor: Actor = Depends(get_actor),
    service: TripService = Depends(get_trip_service),
):
    return await service.get_trip(trip_id, actor)


@router.patch(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Change trip status",
    description=(
        "Riders may only cancel, and only while SEARCHING or ACCEPTED. "
        "The assigned driver may advance ACCEPTED -> ARRIVING -> STARTED -> "
        "COMPLETED but may not cancel."
    ),
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def update_trip_status(
    request: Request,
    trip_id: str,
    body: TripStatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: TripService = Depends(get_trip_service),
):
    return await service.set_trip_status(trip_id, actor, body.status)


@router.post(
    "/{trip_id}/rating",
    status_code=201,
    response_model=RatingResponse,
    summary="Rate a completed trip",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.rate_limit)
async def rate_trip(
    request: Request,
    trip_id: str,
    body: RatingCreateRequest,
    rider: Actor = Depends(get_rider),
    service: TripService = Depends(get_trip_service),
):
    return await service.submit_rating(trip_id, rider.user_id, body.stars)
