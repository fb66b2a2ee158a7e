from .database import Base, async_session_maker, create_db_and_tables, get_async_session
from .inventory import InventoryEntry
from .product import Product
from .settings import AppSettings

__all__ = [
    "AppSettings",
    "Base",
    "InventoryEntry",
    "Product",
    "async_session_maker",
    "create_db_and_tables",
    "get_async_session",
]
