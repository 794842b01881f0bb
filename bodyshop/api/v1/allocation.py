"""
Allocation API endpoints

Every board is recomputed from the current database state on each request;
nothing from an earlier pass is kept.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bodyshop.api import deps
from bodyshop.core.exceptions import BodyshopException
from bodyshop.schemas.allocation import (
    AllocationResultView, BookingCandidateView, ClaimsBoardView,
    PartMonitoringView, PreviewRequest, ProductionStatusView
)
from bodyshop.schemas.job import ClaimStageMove, JobResponse
from bodyshop.services.allocation import (
    QueueCriteria, ReadinessStatus, allocate, booking_candidates,
    claims_control_board, part_monitoring, production_part_status
)
from bodyshop.services.jobs import JobService

router = APIRouter()


@router.get("/queue", response_model=AllocationResultView)
def allocation_queue(
    db: Session = Depends(deps.get_db),
    search: Optional[str] = None,
    on_premises_only: bool = False,
):
    """
    FIFO allocation across every open job with a work order.
    """
    jobs, inventory = JobService(db).load_allocation_inputs()
    result = allocate(
        jobs,
        inventory,
        criteria=QueueCriteria(require_work_order=True, on_premises_only=on_premises_only),
        search_term=search,
    )
    return AllocationResultView.from_result(result)


@router.get("/claims-board", response_model=ClaimsBoardView)
def claims_board(db: Session = Depends(deps.get_db), search: Optional[str] = None):
    jobs, inventory = JobService(db).load_allocation_inputs()
    return ClaimsBoardView.from_board(claims_control_board(jobs, inventory, search))


@router.post("/claims-board/{job_id}/move", response_model=JobResponse)
def move_claim_stage(
    job_id: str,
    move: ClaimStageMove,
    db: Session = Depends(deps.get_db),
):
    try:
        return JobService(db).move_claim_stage(job_id, move.direction)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.get("/booking-candidates", response_model=List[BookingCandidateView])
def list_booking_candidates(db: Session = Depends(deps.get_db), search: Optional[str] = None):
    """
    Jobs that can be called in for booking.
    """
    jobs, inventory = JobService(db).load_allocation_inputs()
    return [BookingCandidateView.from_allocation(a) for a in booking_candidates(jobs, inventory, search)]


@router.get("/part-monitoring", response_model=PartMonitoringView)
def monitor_parts(
    db: Session = Depends(deps.get_db),
    search: Optional[str] = None,
    status: Optional[ReadinessStatus] = Query(None, description="Arrival status filter"),
):
    jobs, inventory = JobService(db).load_allocation_inputs()
    return PartMonitoringView.from_report(part_monitoring(jobs, inventory, search, status))


@router.get("/production-status", response_model=List[ProductionStatusView])
def production_status(db: Session = Depends(deps.get_db), search: Optional[str] = None):
    jobs, inventory = JobService(db).load_allocation_inputs()
    return [ProductionStatusView.from_status(s) for s in production_part_status(jobs, inventory, search)]


@router.post("/preview", response_model=AllocationResultView)
def preview_allocation(request: PreviewRequest):
    """
    Allocate caller-supplied jobs and inventory without touching the database.
    """
    criteria = QueueCriteria(
        require_work_order=request.require_work_order,
        on_premises_only=request.on_premises_only,
        statuses=frozenset(request.statuses) if request.statuses is not None else None,
    )
    result = allocate(
        [job.to_record() for job in request.jobs],
        [item.to_record() for item in request.inventory],
        criteria=criteria,
        search_term=request.search_term,
        empty_policy=request.empty_policy,
        isolate_jobs=request.isolate_jobs,
    )
    return AllocationResultView.from_result(result)
