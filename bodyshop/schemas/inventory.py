"""Inventory Master Schemas"""

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal

from bodyshop.services.allocation.types import ItemCategory


class InventoryItemBase(BaseModel):
    code: str = Field(default='', max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    brand: str = Field(default='', max_length=100)
    category: ItemCategory = ItemCategory.SPAREPART
    unit: str = Field(default='Pcs', max_length=20)
    min_stock: Decimal = Field(default=0, ge=0)
    is_stock_managed: bool = True
    buy_price: Decimal = Field(default=0, ge=0)
    sell_price: Decimal = Field(default=0, ge=0)
    location: str = Field(default='', max_length=100)
    supplier_name: str = Field(default='', max_length=200)


class InventoryItemCreate(InventoryItemBase):
    id: Optional[str] = Field(None, max_length=64)
    quantity_on_hand: Decimal = Field(default=0, ge=0)

    @field_validator('code')
    @classmethod
    def normalise_code(cls, v):
        return v.strip().upper()


class InventoryItemResponse(InventoryItemBase):
    id: str
    quantity_on_hand: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StockReceipt(BaseModel):
    """Purchase-order receipt"""
    quantity: Decimal = Field(..., gt=0)
    reference: str = Field(default='', max_length=100)


class StockAdjustment(BaseModel):
    """Manual stock count correction"""
    new_quantity: Decimal = Field(..., ge=0)
    reason: str = Field(..., min_length=1, max_length=500)
    adjusted_by: str = Field(default='SYSTEM', max_length=100)
