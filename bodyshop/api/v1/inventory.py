"""
Inventory Master API endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bodyshop.api import deps
from bodyshop.core.exceptions import BodyshopException
from bodyshop.schemas.inventory import (
    InventoryItemCreate, InventoryItemResponse, StockAdjustment, StockReceipt
)
from bodyshop.services.inventory import InventoryService

router = APIRouter()


@router.get("/", response_model=List[InventoryItemResponse])
def list_inventory_items(
    db: Session = Depends(deps.get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = None,
    category: Optional[str] = None,
):
    """
    Retrieve inventory items with optional filtering.
    """
    return InventoryService(db).list_items(category=category, search=search, skip=skip, limit=limit)


@router.post("/", response_model=InventoryItemResponse, status_code=201)
def create_inventory_item(
    item: InventoryItemCreate,
    db: Session = Depends(deps.get_db),
):
    try:
        return InventoryService(db).create_item(item.model_dump(mode="json"))
    except BodyshopException as e:
        raise deps.http_error(e)


@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_inventory_item(item_id: str, db: Session = Depends(deps.get_db)):
    try:
        return InventoryService(db).get_item(item_id)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/{item_id}/receive", response_model=InventoryItemResponse)
def receive_stock(
    item_id: str,
    receipt: StockReceipt,
    db: Session = Depends(deps.get_db),
):
    """
    Book a purchase-order receipt into stock.
    """
    try:
        return InventoryService(db).receive_stock(item_id, receipt.quantity, receipt.reference)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/{item_id}/adjust", response_model=InventoryItemResponse)
def adjust_stock(
    item_id: str,
    adjustment: StockAdjustment,
    db: Session = Depends(deps.get_db),
):
    """
    Set on-hand stock to a counted quantity.
    """
    try:
        return InventoryService(db).adjust_stock(
            item_id, adjustment.new_quantity, adjustment.reason, adjustment.adjusted_by
        )
    except BodyshopException as e:
        raise deps.http_error(e)
