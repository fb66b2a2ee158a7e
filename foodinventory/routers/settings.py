from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodinventory.core.dependencies import request_deadline
from foodinventory.db.database import get_async_session
from foodinventory.schemas.settings import SettingsOut, SettingsUpdate
from foodinventory.services.app_settings import get_settings, update_settings

router = APIRouter()


@router.get("", response_model=SettingsOut)
async def read_settings(db: AsyncSession = Depends(get_async_session)):
    async with request_deadline():
        return await get_settings(db)


@router.patch("", response_model=SettingsOut)
async def patch_settings(payload: SettingsUpdate, db: AsyncSession = Depends(get_async_session)):
    async with request_deadline():
        return await update_settings(db, payload.expiry_warning_days)
