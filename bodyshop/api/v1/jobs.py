"""
Jobs API endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bodyshop.api import deps
from bodyshop.core.exceptions import BodyshopException
from bodyshop.schemas.job import (
    EstimateLines, JobCreate, JobResponse, PartLineResponse, PartLineUpdate, PartsOrdered
)
from bodyshop.services.jobs import JobService

router = APIRouter()


@router.get("/", response_model=List[JobResponse])
def list_jobs(
    db: Session = Depends(deps.get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = None,
    include_closed: bool = False,
):
    """
    Retrieve jobs in intake order.
    """
    return JobService(db).list_jobs(
        include_closed=include_closed, search=search, skip=skip, limit=limit
    )


@router.post("/", response_model=JobResponse, status_code=201)
def create_job(job: JobCreate, db: Session = Depends(deps.get_db)):
    data = job.model_dump(mode="python")
    data['vehicle_location'] = job.vehicle_location.value
    try:
        return JobService(db).create_job(data)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, db: Session = Depends(deps.get_db)):
    try:
        return JobService(db).get_job(job_id)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.put("/{job_id}/part-lines", response_model=JobResponse)
def set_estimate_lines(
    job_id: str,
    lines: EstimateLines,
    db: Session = Depends(deps.get_db),
):
    """
    Replace the estimate. Issued part lines must be kept as they are.
    """
    data = lines.model_dump(mode="python")
    try:
        return JobService(db).set_estimate_lines(job_id, data['part_lines'], data['service_lines'])
    except BodyshopException as e:
        raise deps.http_error(e)


@router.patch("/{job_id}/part-lines/{line_index}", response_model=PartLineResponse)
def update_part_line(
    job_id: str,
    line_index: int,
    changes: PartLineUpdate,
    db: Session = Depends(deps.get_db),
):
    try:
        return JobService(db).update_part_line(job_id, line_index, changes.model_dump(exclude_unset=True))
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/{job_id}/parts-ordered", response_model=JobResponse)
def mark_parts_ordered(
    job_id: str,
    order: PartsOrdered,
    db: Session = Depends(deps.get_db),
):
    """
    Flag part lines as covered by a purchase order.
    """
    try:
        return JobService(db).mark_parts_ordered(job_id, order.line_indexes, order.indent)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.post("/{job_id}/close", response_model=JobResponse)
def close_job(job_id: str, db: Session = Depends(deps.get_db)):
    try:
        return JobService(db).close_job(job_id)
    except BodyshopException as e:
        raise deps.http_error(e)


@router.delete("/{job_id}")
def delete_job(job_id: str, db: Session = Depends(deps.get_db)):
    try:
        JobService(db).delete_job(job_id)
    except BodyshopException as e:
        raise deps.http_error(e)
    return {"success": True, "message": f"Job {job_id} deleted"}
