from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from foodinventory.db.settings import AppSettings, DEFAULT_EXPIRY_WARNING_DAYS, SETTINGS_ROW_ID
from foodinventory.schemas.settings import SettingsOut


async def _load_row(session: AsyncSession) -> AppSettings:
    row = await session.scalar(select(AppSettings).where(AppSettings.id == SETTINGS_ROW_ID))
    if row is None:
        # Startup normally creates it; fall back to defaults on a bare schema
        row = AppSettings(id=SETTINGS_ROW_ID, expiry_warning_days=DEFAULT_EXPIRY_WARNING_DAYS)
        session.add(row)
        await session.flush()
    return row


async def get_settings(session: AsyncSession) -> SettingsOut:
    row = await _load_row(session)
    return SettingsOut.model_validate(row)


async def update_settings(session: AsyncSession, expiry_warning_days: int) -> SettingsOut:
    row = await _load_row(session)
    row.expiry_warning_days = expiry_warning_days
    await session.commit()
    return SettingsOut.model_validate(row)
