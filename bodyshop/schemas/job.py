"""Job and Estimate Schemas"""

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from bodyshop.services.allocation.types import VehicleLocation


class PartLineBase(BaseModel):
    name: str = Field(default='', max_length=200)
    part_number: Optional[str] = Field(None, max_length=50)
    inventory_item_id: Optional[str] = Field(None, max_length=64)
    # Stored as entered; the allocator treats unset, zero or negative as 1
    quantity: Optional[Decimal] = None
    price: Decimal = Field(default=0, ge=0)
    is_ordered: bool = False
    is_indent: bool = False
    indent_eta: Optional[str] = Field(None, max_length=50)


class PartLineCreate(PartLineBase):
    pass


class PartLineResponse(PartLineBase):
    line_index: int
    has_arrived: bool

    model_config = ConfigDict(from_attributes=True)


class PartLineUpdate(BaseModel):
    """Fields a part line can change after the estimate is written"""
    is_indent: Optional[bool] = None
    is_ordered: Optional[bool] = None
    indent_eta: Optional[str] = Field(None, max_length=50)
    inventory_item_id: Optional[str] = Field(None, max_length=64)
    part_number: Optional[str] = Field(None, max_length=50)
    quantity: Optional[Decimal] = None


class ServiceLineBase(BaseModel):
    name: str = Field(default='', max_length=200)
    price: Decimal = Field(default=0, ge=0)
    panel_count: Decimal = Field(default=0, ge=0)


class ServiceLineResponse(ServiceLineBase):
    line_index: int

    model_config = ConfigDict(from_attributes=True)


class JobBase(BaseModel):
    police_number: str = Field(..., min_length=1, max_length=20)
    customer_name: str = Field(default='', max_length=200)
    car_model: str = Field(default='', max_length=100)
    insurer_name: str = Field(default='', max_length=100)
    wo_number: Optional[str] = Field(None, max_length=50)
    status: str = Field(default='', max_length=100)
    vehicle_location: VehicleLocation = VehicleLocation.AT_WORKSHOP
    entry_date: Optional[date] = None


class JobCreate(JobBase):
    id: Optional[str] = Field(None, max_length=64)
    intake_at: Optional[datetime] = None
    part_lines: List[PartLineCreate] = []
    service_lines: List[ServiceLineBase] = []

    @field_validator('police_number')
    @classmethod
    def normalise_police_number(cls, v):
        return v.strip().upper()


class JobResponse(JobBase):
    id: str
    is_closed: bool
    intake_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    part_cost: Decimal
    material_cost: Decimal
    part_lines: List[PartLineResponse] = []
    service_lines: List[ServiceLineResponse] = []

    model_config = ConfigDict(from_attributes=True)


class EstimateLines(BaseModel):
    """Full replacement of a job's estimate lines"""
    part_lines: List[PartLineCreate]
    service_lines: Optional[List[ServiceLineBase]] = None


class PartsOrdered(BaseModel):
    line_indexes: List[int] = Field(..., min_length=1)
    indent: bool = False


class ClaimStageMove(BaseModel):
    direction: str = Field(..., pattern="^(next|prev)$")
