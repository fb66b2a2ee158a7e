from sqlalchemy import Boolean, Column, String, Text, true
from sqlalchemy.orm import relationship

from .database import Base


class Product(Base):
    """Product metadata cached from the catalog, one row per barcode.

    resolved is False for stubs created when a lookup failed or timed out;
    a stub's name is its barcode.
    """
    __tablename__ = "products"

    barcode = Column(String(13), primary_key=True)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    # Rows older than the stub concept count as resolved
    resolved = Column(Boolean, nullable=False, default=True, server_default=true())

    inventory_entry = relationship("InventoryEntry", back_populates="product", uselist=False)
