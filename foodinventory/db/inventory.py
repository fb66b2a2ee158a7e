from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


class InventoryEntry(Base):
    """Stock line for one barcode.

    The row only exists while quantity >= 1; the last unit removed deletes it.
    expiry_date is set on creation and never updated.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_inventory_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    barcode = Column(
        String(13),
        ForeignKey("products.barcode", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    quantity = Column(Integer, nullable=False, default=1)
    expiry_date = Column(Date, nullable=True)
    low_stock_threshold = Column(Integer, nullable=False, default=1)

    product = relationship("Product", back_populates="inventory_entry")
