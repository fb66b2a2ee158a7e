from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from foodinventory.db.inventory import InventoryEntry
from foodinventory.db.product import Product
from foodinventory.schemas.alerts import AlertOut
from foodinventory.services.app_settings import get_settings


def _expiry_detail(expiry: date, today: date) -> str:
    days_left = (expiry - today).days
    if days_left < 0:
        return f"Expired {-days_left} day(s) ago ({expiry.isoformat()})"
    return f"Expires in {days_left} day(s) ({expiry.isoformat()})"


async def list_alerts(session: AsyncSession, today: Optional[date] = None) -> List[AlertOut]:
    """
    Compute active low-stock and expiry alerts from current stock.

    Nothing is stored; every call scans the inventory.
    """
    today = today or date.today()
    current = await get_settings(session)
    warn_before = today + timedelta(days=current.expiry_warning_days)

    result = await session.execute(
        select(InventoryEntry, Product)
        .join(Product, Product.barcode == InventoryEntry.barcode)
        .order_by(Product.name, InventoryEntry.id)
    )

    alerts: List[AlertOut] = []
    for entry, product in result.all():
        if entry.quantity <= entry.low_stock_threshold:
            alerts.append(AlertOut(
                type="low_stock",
                barcode=product.barcode,
                product_name=product.name,
                detail=f"Only {entry.quantity} item(s) left (threshold: {entry.low_stock_threshold})",
            ))
        if entry.expiry_date is not None and entry.expiry_date <= warn_before:
            alerts.append(AlertOut(
                type="expiry_soon",
                barcode=product.barcode,
                product_name=product.name,
                detail=_expiry_detail(entry.expiry_date, today),
            ))
    return alerts
