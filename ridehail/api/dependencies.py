"""FastAPI dependency injection helpers."""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.config import settings
from ridehail.domain.entities import Actor
from ridehail.domain.enums import ActorRole
from ridehail.infrastructure.database import async_session_factory
from ridehail.services.trips import TripService


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_trip_service(db: AsyncSession = Depends(get_db)) -> TripService:
    return TripService.from_settings(db, settings)


async def get_actor(
    x_user_id: int = Header(..., description="Authenticated user id (set by the auth gateway)."),
    x_user_role: ActorRole = Header(..., description="RIDER or DRIVER."),
) -> Actor:
    return Actor(user_id=x_user_id, role=x_user_role)


async def get_rider(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role is not ActorRole.RIDER:
        raise HTTPException(status_code=403, detail="Rider access only")
    return actor


async def get_driver(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role is not ActorRole.DRIVER:
        raise HTTPException(status_code=403, detail="Driver access only")
    return actor
