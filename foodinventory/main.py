from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodinventory import __version__
from foodinventory.core.catalog import OpenFoodFactsCatalog, create_catalog_client
from foodinventory.core.config import settings
from foodinventory.core.logging import get_logger
from foodinventory.db.database import create_db_and_tables, engine
from foodinventory.db.migrations import run_migrations
from foodinventory.routers.alerts import router as alerts_router
from foodinventory.routers.health import router as health_router
from foodinventory.routers.inventory import router as inventory_router
from foodinventory.routers.products import router as products_router
from foodinventory.routers.settings import router as settings_router

log = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    await run_migrations(engine)
    async with create_catalog_client() as client:
        app.state.catalog = OpenFoodFactsCatalog(client)
        log.info(
            "Food inventory API ready (catalog timeout %d ms, request timeout %d ms)",
            settings.product_lookup_timeout_ms,
            settings.request_timeout_ms,
        )
        yield
    await engine.dispose()


app = FastAPI(
    title="Food Inventory API",
    description="Household food inventory keyed by barcode",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Probes
app.include_router(health_router, prefix="/api", tags=["health"])

# Stock and product routes
app.include_router(inventory_router, prefix="/api/inventory", tags=["inventory"])
app.include_router(products_router, prefix="/api/products", tags=["products"])

# Warnings and settings
app.include_router(alerts_router, prefix="/api/alerts", tags=["alerts"])
app.include_router(settings_router, prefix="/api/settings", tags=["settings"])


def run():
    uvicorn.run("foodinventory.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
