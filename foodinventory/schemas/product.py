import re
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# EAN-8 or EAN-13, ASCII digits only
BARCODE_PATTERN = r"^[0-9]{8}([0-9]{5})?$"
_BARCODE_RE = re.compile(BARCODE_PATTERN)


def is_valid_barcode(value: str) -> bool:
    return bool(_BARCODE_RE.fullmatch(value or ""))


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    barcode: str = Field(validation_alias=AliasChoices("barcode", "ean"), serialization_alias="ean")
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    resolved: bool = True


class ProductUpdate(BaseModel):
    name: str
    category: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("category")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None
