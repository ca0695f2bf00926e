"""System-level endpoints."""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import ping
from ..dependencies import get_db_session
from ..schemas import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthStatus)
async def healthcheck(session: AsyncSession = Depends(get_db_session)) -> HealthStatus:
    """Liveness probe; reports whether the store answers a trivial query."""

    try:
        await ping(session)
        connected = True
    except SQLAlchemyError:
        logger.exception("Store health probe failed")
        connected = False

    return HealthStatus(
        status="ok",
        store_connected=connected,
        timestamp=datetime.now(timezone.utc),
    )
