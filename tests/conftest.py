from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Dict, List, Optional

# The module-level engine must not need a postgres driver under test
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy import select
from sqlalchemy.pool import NullPool

from foodinventory.core.catalog import CatalogProduct
from foodinventory.db.database import create_db_and_tables, make_engine, make_session_maker
from foodinventory.db.inventory import InventoryEntry
from foodinventory.db.migrations import run_migrations
from foodinventory.db.product import Product
from foodinventory.services.ledger import InventoryLedger
from foodinventory.services.resolver import ProductResolver


COCA_COLA = CatalogProduct(
    barcode="5000112637922",
    name="Coca-Cola 330ml",
    category="beverages",
    image_url="https://images.example/coca-cola.jpg",
)


class FakeCatalog:
    """In-process stand-in for the Open Food Facts client."""

    def __init__(
        self,
        products: Optional[Dict[str, CatalogProduct]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.products = dict(products or {})
        self.delay = delay
        self.error = error
        self.calls: List[str] = []

    async def lookup(self, barcode: str) -> Optional[CatalogProduct]:
        self.calls.append(barcode)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.products.get(barcode)


async def _prepare(engine) -> None:
    await create_db_and_tables(engine)
    await run_migrations(engine)


@pytest.fixture
def engine(tmp_path: Path):
    eng = make_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
        echo=False,
    )
    asyncio.run(_prepare(eng))
    yield eng
    asyncio.run(eng.dispose())


@pytest.fixture
def session_maker(engine):
    return make_session_maker(engine)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog({COCA_COLA.barcode: COCA_COLA})


@pytest.fixture
def resolver(session_maker, catalog) -> ProductResolver:
    return ProductResolver(session_maker, catalog, fetch_timeout=0.5)


@pytest.fixture
def ledger(session_maker, resolver) -> InventoryLedger:
    return InventoryLedger(session_maker, resolver, default_low_stock_threshold=1)


async def load_product(session_maker, barcode: str) -> Optional[Product]:
    async with session_maker() as session:
        return await session.scalar(select(Product).where(Product.barcode == barcode))


async def load_entry(session_maker, barcode: str) -> Optional[InventoryEntry]:
    async with session_maker() as session:
        return await session.scalar(select(InventoryEntry).where(InventoryEntry.barcode == barcode))


async def count_products(session_maker) -> int:
    async with session_maker() as session:
        return len((await session.execute(select(Product.barcode))).all())
