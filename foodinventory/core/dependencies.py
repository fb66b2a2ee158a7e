import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from foodinventory.core.catalog import OpenFoodFactsCatalog
from foodinventory.core.config import settings
from foodinventory.db.database import async_session_maker
from foodinventory.services.ledger import InventoryLedger
from foodinventory.services.resolver import ProductResolver


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


def get_catalog(request: Request) -> OpenFoodFactsCatalog:
    # Created in the app lifespan around a shared httpx client
    return request.app.state.catalog


def get_resolver(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
    catalog=Depends(get_catalog),
) -> ProductResolver:
    return ProductResolver(session_maker, catalog, fetch_timeout=settings.product_lookup_timeout)


def get_ledger(
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
    resolver: ProductResolver = Depends(get_resolver),
) -> InventoryLedger:
    return InventoryLedger(
        session_maker,
        resolver,
        default_low_stock_threshold=settings.default_low_stock_threshold,
    )


@asynccontextmanager
async def request_deadline(seconds: Optional[float] = None):
    """Bound a request's work by REQUEST_TIMEOUT_MS; expiry becomes HTTP 504."""
    try:
        async with asyncio.timeout(seconds if seconds is not None else settings.request_timeout):
            yield
    except TimeoutError:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={"code": "REQUEST_TIMEOUT", "message": "request deadline exceeded"},
        )
