"""
Product resolution: barcode -> cached or catalog-fetched metadata.

Lookups run under their own sub-deadline (PRODUCT_LOOKUP_TIMEOUT_MS), nested
inside whatever deadline the caller applies. Only expiry of the sub-deadline
is reported as ResolveStatus.TIMEOUT; a cancelled caller sees its own
cancellation.
"""

import asyncio
import enum
from dataclasses import dataclass
from typing import List, Optional, Protocol

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from foodinventory.core.catalog import CatalogProduct
from foodinventory.core.config import settings
from foodinventory.core.converters import product_to_schema
from foodinventory.core.errors import ProductNotFound
from foodinventory.core.logging import get_logger
from foodinventory.db.database import upsert_insert
from foodinventory.db.product import Product
from foodinventory.schemas.product import ProductOut

log = get_logger("resolver")


class Catalog(Protocol):
    async def lookup(self, barcode: str) -> Optional[CatalogProduct]: ...


class ResolveStatus(str, enum.Enum):
    FOUND = "found"
    UNKNOWN = "unknown"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Resolution:
    status: ResolveStatus
    product: Optional[ProductOut] = None

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND


def _caller_cancelling() -> bool:
    """True when the current task is being cancelled from outside."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class ProductResolver:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        catalog: Catalog,
        fetch_timeout: float = settings.product_lookup_timeout,
    ):
        if fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")
        self.session_maker = session_maker
        self.catalog = catalog
        self.fetch_timeout = fetch_timeout

    async def resolve(self, barcode: str) -> Resolution:
        """
        Return cached metadata for barcode, fetching it from the catalog when
        only a stub (or nothing) is stored.

        Raises CatalogError for unusable catalog answers and SQLAlchemy errors
        for storage failures.
        """
        async with self.session_maker() as session:
            cached = await session.scalar(
                select(Product).where(Product.barcode == barcode, Product.resolved.is_(True))
            )
            if cached is not None:
                return Resolution(ResolveStatus.FOUND, product_to_schema(cached))

        # No connection is held while waiting on the catalog
        try:
            fetched = await asyncio.wait_for(self.catalog.lookup(barcode), timeout=self.fetch_timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            if _caller_cancelling():
                raise
            log.info("Catalog lookup for EAN %s exceeded %.0f ms", barcode, self.fetch_timeout * 1000)
            return Resolution(ResolveStatus.TIMEOUT)
        if fetched is None:
            log.info("EAN %s is unknown to the catalog", barcode)
            return Resolution(ResolveStatus.UNKNOWN)

        product = await self._upsert(fetched)
        return Resolution(ResolveStatus.FOUND, product)

    async def _upsert(self, fetched: CatalogProduct) -> ProductOut:
        """Insert or overwrite the product; resolved only ever moves to True."""
        async with self.session_maker() as session:
            stmt = upsert_insert(session, Product.__table__).values(
                barcode=fetched.barcode,
                name=fetched.name,
                category=fetched.category,
                image_url=fetched.image_url,
                resolved=True,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[Product.barcode],
                set_={
                    "name": stmt.excluded.name,
                    "category": stmt.excluded.category,
                    "image_url": stmt.excluded.image_url,
                    "resolved": True,
                },
            )
            await session.execute(stmt)
            await session.commit()
        return ProductOut(
            barcode=fetched.barcode,
            name=fetched.name,
            category=fetched.category,
            image_url=fetched.image_url,
            resolved=True,
        )

    async def ensure_stub(self, barcode: str) -> None:
        """Insert an unresolved placeholder unless any row exists for barcode."""
        async with self.session_maker() as session:
            stmt = upsert_insert(session, Product.__table__).values(
                barcode=barcode,
                name=barcode,
                resolved=False,
            ).on_conflict_do_nothing(index_elements=[Product.barcode])
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount:
            log.info("Stored stub product for EAN %s", barcode)

    async def update_product(self, barcode: str, name: str, category: Optional[str]) -> ProductOut:
        """Manually set name/category; the row counts as resolved afterwards."""
        async with self.session_maker() as session:
            product = await session.scalar(
                select(Product).where(Product.barcode == barcode).with_for_update()
            )
            if product is None:
                raise ProductNotFound(barcode)
            product.name = name
            product.category = category
            product.resolved = True
            await session.commit()
            return product_to_schema(product)

    async def list_stubs(self) -> List[str]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(Product.barcode).where(Product.resolved.is_(False)).order_by(Product.barcode)
            )
            return [row[0] for row in result.all()]
