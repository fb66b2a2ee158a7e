"""
Inventory ledger: one row per barcode with a positive unit count.

Per-barcode atomicity is provided by the statements themselves, not by
in-process locks or SELECT-then-write sequences:

- add is a single ``INSERT ... ON CONFLICT (barcode) DO UPDATE SET
  quantity = inventory.quantity + 1``. Concurrent adds all land.
- remove issues ``UPDATE ... WHERE quantity > 1`` and, failing that,
  ``DELETE ... WHERE quantity = 1``. A row is deleted only while it holds
  exactly one unit, so a concurrent add is never lost. If neither statement
  matched because the row changed in between, the pair is retried.

Different barcodes touch different rows and never wait on each other.
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from foodinventory.core.config import settings
from foodinventory.core.converters import entry_to_schema
from foodinventory.core.errors import EntryNotFound
from foodinventory.core.logging import get_logger
from foodinventory.db.database import upsert_insert
from foodinventory.db.inventory import InventoryEntry
from foodinventory.db.product import Product
from foodinventory.schemas.inventory import InventoryEntryOut
from foodinventory.services.resolver import ProductResolver, ResolveStatus

log = get_logger("ledger")


class InventoryLedger:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        resolver: ProductResolver,
        default_low_stock_threshold: int = settings.default_low_stock_threshold,
    ):
        self.session_maker = session_maker
        self.resolver = resolver
        self.default_low_stock_threshold = default_low_stock_threshold

    async def list(self) -> List[InventoryEntryOut]:
        """All entries ordered by product name."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(InventoryEntry, Product)
                .join(Product, Product.barcode == InventoryEntry.barcode)
                .order_by(Product.name, InventoryEntry.id)
            )
            return [entry_to_schema(entry, product) for entry, product in result.all()]

    async def add(self, barcode: str, expiry_date: Optional[date] = None) -> Tuple[InventoryEntryOut, bool]:
        """
        Add one unit of barcode to stock.

        Makes sure a product row exists first: catalog metadata when it can be
        fetched, a stub when the catalog does not know the barcode or is too
        slow. Returns the entry and whether it was newly created. The expiry
        date only applies to a new entry.
        """
        resolution = await self.resolver.resolve(barcode)
        if resolution.status in (ResolveStatus.UNKNOWN, ResolveStatus.TIMEOUT):
            await self.resolver.ensure_stub(barcode)

        async with self.session_maker() as session:
            table = InventoryEntry.__table__
            stmt = upsert_insert(session, table).values(
                barcode=barcode,
                quantity=1,
                expiry_date=expiry_date,
                low_stock_threshold=self.default_low_stock_threshold,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.barcode],
                set_={"quantity": table.c.quantity + 1},
            ).returning(table.c.id, table.c.quantity)
            row = (await session.execute(stmt)).one()

            entry = await self._get_by_id(session, row.id)
            await session.commit()

        # Zero is never stored, so only a fresh insert can read back 1
        created = row.quantity == 1
        return entry, created

    async def remove(self, barcode: str) -> Optional[InventoryEntryOut]:
        """
        Take one unit of barcode out of stock.

        Returns the updated entry, or None when the last unit was removed and
        the entry deleted. Raises EntryNotFound if barcode is not in stock.
        """
        table = InventoryEntry.__table__
        async with self.session_maker() as session:
            while True:
                decremented = await session.execute(
                    update(table)
                    .where(table.c.barcode == barcode, table.c.quantity > 1)
                    .values(quantity=table.c.quantity - 1)
                    .returning(table.c.id)
                )
                entry_id = decremented.scalar()
                if entry_id is not None:
                    entry = await self._get_by_id(session, entry_id)
                    await session.commit()
                    return entry

                deleted = await session.execute(
                    delete(table)
                    .where(table.c.barcode == barcode, table.c.quantity == 1)
                    .returning(table.c.id)
                )
                if deleted.scalar() is not None:
                    await session.commit()
                    return None

                still_there = await session.scalar(
                    select(table.c.id).where(table.c.barcode == barcode)
                )
                if still_there is None:
                    await session.rollback()
                    log.debug("Remove for EAN %s: not in stock", barcode)
                    raise EntryNotFound(barcode)
                # Quantity moved between the two statements; try again
                log.debug("Remove for EAN %s raced a concurrent change, retrying", barcode)

    async def _get_by_id(self, session: AsyncSession, entry_id: int) -> InventoryEntryOut:
        result = await session.execute(
            select(InventoryEntry, Product)
            .join(Product, Product.barcode == InventoryEntry.barcode)
            .where(InventoryEntry.id == entry_id)
            .execution_options(populate_existing=True)
        )
        entry, product = result.one()
        return entry_to_schema(entry, product)
