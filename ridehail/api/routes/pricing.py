"""
Pricing endpoints
=================

GET /api/v1/pricing/quote          -- itemised fare quote
GET /api/v1/pricing/promos/{code}  -- check a promo code
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ridehail.api.dependencies import get_trip_service
from ridehail.api.middleware import limiter
from ridehail.api.schemas import ErrorResponse, FareQuoteResponse, PromoResponse
from ridehail.config import settings
from ridehail.services.trips import TripService

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get(
    "/quote",
    response_model=FareQuoteResponse,
    summary="Quote a fare",
    description=(
        "Unknown vehicle types are priced at the MINI rate.  ``timestamp`` "
        "defaults to the server's current local time."
    ),
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(settings.rate_limit)
async def get_fare_quote(
    request: Request,
    distance_km: float = Query(...),
    vehicle_type: str = Query("MINI"),
    timestamp: Optional[datetime] = Query(None),
    service: TripService = Depends(get_trip_service),
):
    return service.get_fare_quote(distance_km, vehicle_type.upper(), timestamp)


@router.get(
    "/promos/{code}",
    response_model=PromoResponse,
    summary="Validate a promo code",
)
@limiter.limit(settings.rate_limit)
async def validate_promo(
    request: Request,
    code: str,
    service: TripService = Depends(get_trip_service),
):
    return service.validate_promo(code)
