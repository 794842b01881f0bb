"""
Stock Issuance API endpoints
Commit boundary: every call here changes stock in one transaction.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bodyshop.api import deps
from bodyshop.core.exceptions import BodyshopException
from bodyshop.schemas.issuance import (
    CancelIssuanceRequest, MaterialIssueRequest, PartIssueRequest,
    UsageHistoryResponse, UsageLogEntryResponse
)
from bodyshop.schemas.job import JobResponse
from bodyshop.services.allocation import ItemCategory
from bodyshop.services.inventory import StockIssuanceService

router = APIRouter()


@router.post("/parts", response_model=UsageLogEntryResponse, status_code=201)
def issue_part(request: PartIssueRequest, db: Session = Depends(deps.get_db)):
    """
    Issue an estimate part line from stock.

    Stock is re-checked at commit time; 409 when it no longer covers the
    line or the line is already issued.
    """
    try:
        return StockIssuanceService(db).issue_part(
            request.job_id,
            request.line_index,
            request.issued_by,
            inventory_item_id=request.inventory_item_id,
            quantity=request.quantity,
        )
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/materials", response_model=UsageLogEntryResponse, status_code=201)
def issue_material(request: MaterialIssueRequest, db: Session = Depends(deps.get_db)):
    try:
        return StockIssuanceService(db).issue_material(
            request.job_id,
            request.item,
            request.quantity,
            request.issued_by,
            input_unit=request.unit,
            notes=request.notes,
        )
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/cancel", response_model=JobResponse)
def cancel_issuance(request: CancelIssuanceRequest, db: Session = Depends(deps.get_db)):
    """
    Reverse an issuance (managers only).
    """
    try:
        return StockIssuanceService(db).cancel_issuance(
            request.job_id, request.entry_id, request.role, request.reason
        )
    except BodyshopException as e:
        raise deps.http_error(e)


@router.get("/jobs/{job_id}/history", response_model=UsageHistoryResponse)
def usage_history(
    job_id: str,
    category: Optional[ItemCategory] = None,
    db: Session = Depends(deps.get_db),
):
    service = StockIssuanceService(db)
    key = category.value if category is not None else None
    try:
        entries = service.usage_history(job_id, key)
    except BodyshopException as e:
        raise deps.http_error(e)
    total = sum((e.total_cost for e in entries), 0)
    return UsageHistoryResponse(
        job_id=job_id,
        entries=[UsageLogEntryResponse.model_validate(e) for e in entries],
        total_entries=len(entries),
        total_cost=total,
    )
