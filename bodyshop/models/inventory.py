"""
Bodyshop Inventory Models
SQLAlchemy model for the spare-part and material master
"""
import uuid

from sqlalchemy import (
    Column, String, Numeric, DateTime, Boolean, CheckConstraint, Index
)
from sqlalchemy.sql import func
from bodyshop.core.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class InventoryItem(Base):
    """
    Inventory Item - stock master

    One record per spare part or bulk material. ``quantity_on_hand`` is the
    authoritative stock level and is only changed through issuance,
    purchase-order receipt or manual adjustment.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity_on_hand >= 0", name="quantity_on_hand_non_negative"),
        Index("ix_inventory_items_code", "code"),
    )

    id = Column(String(64), primary_key=True, default=_new_id, doc="Item ID")
    code = Column(String(50), nullable=False, default='', doc="Part number / material code")
    name = Column(String(200), nullable=False, doc="Display name")
    brand = Column(String(100), default='', doc="Brand")
    category = Column(String(20), nullable=False, default='sparepart', doc="sparepart or material")

    # Quantity Information
    quantity_on_hand = Column(Numeric(15, 3), nullable=False, default=0, doc="Quantity on hand")
    unit = Column(String(20), nullable=False, default='Pcs', doc="Unit of measure")
    min_stock = Column(Numeric(15, 3), default=0, doc="Minimum stock level")
    is_stock_managed = Column(Boolean, nullable=False, default=True, doc="Stock level is tracked")

    # Pricing Information
    buy_price = Column(Numeric(15, 2), nullable=False, default=0, doc="Buy price per unit")
    sell_price = Column(Numeric(15, 2), nullable=False, default=0, doc="Sell price per unit")

    location = Column(String(50), default='', doc="Storage location")
    supplier_name = Column(String(100), default='', doc="Default supplier")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<InventoryItem(id='{self.id}', code='{self.code}', on_hand={self.quantity_on_hand})>"
