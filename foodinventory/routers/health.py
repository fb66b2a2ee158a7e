import asyncio

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from foodinventory.core.logging import get_logger
from foodinventory.db.database import get_async_session

log = get_logger("health")

READINESS_TIMEOUT_SECONDS = 2.0

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness: OK while the process is up"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(db: AsyncSession = Depends(get_async_session)):
    """Readiness: OK when the database answers"""
    try:
        async with asyncio.timeout(READINESS_TIMEOUT_SECONDS):
            await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        log.warning("Readiness check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "DB_UNAVAILABLE", "message": "database is not reachable"},
        )
    return {"status": "ok"}
