from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodinventory.core.dependencies import request_deadline
from foodinventory.db.database import get_async_session
from foodinventory.schemas.alerts import AlertOut
from foodinventory.services.alerts import list_alerts

router = APIRouter()


@router.get("", response_model=List[AlertOut])
async def get_alerts(db: AsyncSession = Depends(get_async_session)):
    """Active low-stock and expiry warnings"""
    async with request_deadline():
        return await list_alerts(db)
