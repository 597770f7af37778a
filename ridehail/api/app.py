"""
FastAPI application factory.

* Registers routes for trips, the driver dashboard, pricing and admin.
* Maps domain exceptions to HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.errors import register_error_handlers
from ridehail.api.middleware import limiter
from ridehail.api.routes import admin, driver, pricing, trips
from ridehail.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Hailing Trip API",
        description=(
            "Books trips with server-side fare validation and geofenced "
            "pickup/drop checks, lets drivers claim and progress trips "
            "through a role-checked lifecycle, and records one rating per "
            "completed trip."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_error_handlers(app)

    # Routers
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(driver.router, prefix="/api/v1")
    app.include_router(pricing.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
