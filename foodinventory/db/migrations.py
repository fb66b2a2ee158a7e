"""Database migration utilities"""
from sqlalchemy import inspect, select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from foodinventory.core.logging import get_logger
from foodinventory.db.settings import AppSettings, DEFAULT_EXPIRY_WARNING_DAYS, SETTINGS_ROW_ID

log = get_logger("migrations")


def _column_names(sync_conn, table_name: str) -> set:
    return {c["name"] for c in inspect(sync_conn).get_columns(table_name)}


async def add_resolved_column_if_missing(engine: AsyncEngine):
    """Add products.resolved to databases created before stub products existed.

    Existing rows held fully fetched metadata, so they default to resolved.
    """
    async with engine.begin() as conn:
        existing_columns = await conn.run_sync(_column_names, "products")
        if "resolved" in existing_columns:
            log.debug("resolved column already exists in products table")
            return

        log.info("Adding resolved column to products table...")
        await conn.execute(
            text("""
                ALTER TABLE products
                ADD COLUMN resolved BOOLEAN NOT NULL DEFAULT TRUE
            """)
        )
        log.info("Successfully added resolved column to products table")


async def ensure_settings_row(engine: AsyncEngine):
    """Insert the settings singleton with defaults if it is missing."""
    async with engine.begin() as conn:
        result = await conn.execute(select(AppSettings.id).where(AppSettings.id == SETTINGS_ROW_ID))
        if result.scalar() is not None:
            return
        await conn.execute(
            AppSettings.__table__.insert().values(
                id=SETTINGS_ROW_ID,
                expiry_warning_days=DEFAULT_EXPIRY_WARNING_DAYS,
            )
        )
        log.info("Created settings row (expiry_warning_days=%d)", DEFAULT_EXPIRY_WARNING_DAYS)


async def run_migrations(engine: AsyncEngine):
    await add_resolved_column_if_missing(engine)
    await ensure_settings_row(engine)
