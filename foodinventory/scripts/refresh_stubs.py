"""
Retry catalog lookups for every stub product.

Stubs are stored when a barcode was added while the catalog was unknown or
too slow. Resolving them again upgrades the ones the catalog now knows.

Run inside docker (recommended):
  docker exec -i foodinventory-api sh -lc "python -m foodinventory.scripts.refresh_stubs"
"""

from __future__ import annotations

import asyncio
from collections import Counter

from foodinventory.core.catalog import OpenFoodFactsCatalog, create_catalog_client
from foodinventory.core.config import settings
from foodinventory.db.database import async_session_maker, engine
from foodinventory.services.resolver import ProductResolver, ResolveStatus


async def refresh_stubs(resolver: ProductResolver) -> Counter:
    outcomes: Counter = Counter()
    for barcode in await resolver.list_stubs():
        resolution = await resolver.resolve(barcode)
        outcomes[resolution.status] += 1
        print(f"{barcode}: {resolution.status.value}")
    return outcomes


async def main() -> None:
    async with create_catalog_client() as client:
        resolver = ProductResolver(
            async_session_maker,
            OpenFoodFactsCatalog(client),
            fetch_timeout=settings.product_lookup_timeout,
        )
        outcomes = await refresh_stubs(resolver)
    await engine.dispose()

    print(
        f"Upgraded: {outcomes[ResolveStatus.FOUND]}, "
        f"still unknown: {outcomes[ResolveStatus.UNKNOWN]}, "
        f"timed out: {outcomes[ResolveStatus.TIMEOUT]}"
    )


if __name__ == "__main__":
    asyncio.run(main())
