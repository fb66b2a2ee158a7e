from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

AlertType = Literal["low_stock", "expiry_soon"]


class AlertOut(BaseModel):
    type: AlertType
    barcode: str = Field(validation_alias=AliasChoices("barcode", "ean"), serialization_alias="ean")
    product_name: str
    detail: str
