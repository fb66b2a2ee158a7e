from collections.abc import AsyncGenerator
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from foodinventory.core.config import settings


class Base(DeclarativeBase):
    pass


def make_engine(url: str = settings.database_url, **kwargs) -> AsyncEngine:
    """Create the async engine; postgres connections follow DB_SSL_MODE and DB_SSL_CA_CERT."""
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("postgresql+asyncpg"):
        ssl_arg = settings.connect_ssl()
        if ssl_arg is not None:
            connect_args.setdefault("ssl", ssl_arg)
        kwargs.setdefault("pool_pre_ping", True)
    kwargs.setdefault("echo", settings.database_echo)
    return create_async_engine(url, connect_args=connect_args, **kwargs)


def make_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False)


def upsert_insert(session: AsyncSession, table):
    """Dialect-specific INSERT that supports ON CONFLICT clauses."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)


engine = make_engine()
async_session_maker = make_session_maker(engine)


async def create_db_and_tables(bind: Optional[AsyncEngine] = None):
    # Import models so they register on Base.metadata
    from foodinventory.db import inventory, product, settings as settings_model  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
