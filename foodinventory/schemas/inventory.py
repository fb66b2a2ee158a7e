from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .product import ProductOut, is_valid_barcode


class InventoryAddRequest(BaseModel):
    barcode: str = Field(alias="ean")
    expiry_date: Optional[date] = None

    @field_validator("barcode")
    @classmethod
    def _barcode(cls, v: str) -> str:
        v = (v or "").strip()
        if not is_valid_barcode(v):
            raise ValueError("EAN must be 8 or 13 digits")
        return v


class InventoryEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product: ProductOut
    quantity: int
    expiry_date: Optional[date] = None
    low_stock_threshold: int
