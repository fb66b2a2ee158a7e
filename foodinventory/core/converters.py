from foodinventory.db.inventory import InventoryEntry
from foodinventory.db.product import Product
from foodinventory.schemas.inventory import InventoryEntryOut
from foodinventory.schemas.product import ProductOut


def product_to_schema(product: Product) -> ProductOut:
    """Convert SQLAlchemy product row to its Pydantic schema"""
    return ProductOut.model_validate(product)


def entry_to_schema(entry: InventoryEntry, product: Product) -> InventoryEntryOut:
    """Convert an inventory row and its joined product to the Pydantic schema"""
    return InventoryEntryOut(
        id=entry.id,
        product=product_to_schema(product),
        quantity=entry.quantity,
        expiry_date=entry.expiry_date,
        low_stock_threshold=entry.low_stock_threshold,
    )
