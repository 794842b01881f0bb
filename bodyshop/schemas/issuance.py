"""Stock Issuance Schemas"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from bodyshop.services.allocation.types import ItemCategory


class PartIssueRequest(BaseModel):
    job_id: str
    line_index: int = Field(..., ge=0)
    issued_by: str = Field(..., min_length=1, max_length=100)
    # Overrides; by default the line's link and quantity are used
    inventory_item_id: Optional[str] = None
    quantity: Optional[Decimal] = Field(None, gt=0)


class MaterialIssueRequest(BaseModel):
    job_id: str
    item: str = Field(..., min_length=1, description="Material name or code")
    quantity: Decimal = Field(..., gt=0)
    unit: Optional[str] = Field(None, description="Entry unit, e.g. ML against a Liter item")
    notes: Optional[str] = None
    issued_by: str = Field(..., min_length=1, max_length=100)


class CancelIssuanceRequest(BaseModel):
    job_id: str
    entry_id: int
    role: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=500)


class UsageLogEntryResponse(BaseModel):
    id: int
    job_id: str
    inventory_item_id: str
    item_name: str
    item_code: str
    category: ItemCategory
    quantity: Decimal
    input_quantity: Optional[Decimal] = None
    input_unit: Optional[str] = None
    cost_per_unit: Decimal
    total_cost: Decimal
    notes: Optional[str] = None
    issued_at: datetime
    issued_by: str
    ref_part_index: Optional[int] = None
    stock_deducted: bool

    model_config = ConfigDict(from_attributes=True)


class UsageHistoryResponse(BaseModel):
    job_id: str
    entries: List[UsageLogEntryResponse]
    total_entries: int
    total_cost: Decimal
