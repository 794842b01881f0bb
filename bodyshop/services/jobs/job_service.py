"""
Job Service
Maintains jobs and their estimate lines, and turns the stored job and
inventory state into allocation inputs.
"""
from typing import Dict, Iterable, List, Optional, Tuple
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_, func

from bodyshop.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from bodyshop.core.logging import get_logger
from bodyshop.models.job import Job, JobPartLine, JobServiceLine
from bodyshop.services.allocation.types import JobRecord, PartLine, StockRecord, VehicleLocation
from bodyshop.services.allocation.boards import next_claim_stage
from bodyshop.services.allocation.snapshot import to_quantity
from bodyshop.services.inventory.inventory_service import InventoryService

logger = get_logger("jobs")

LOCATIONS = {loc.value for loc in VehicleLocation}
PART_LINE_FLAGS = {'is_indent', 'is_ordered', 'indent_eta'}
PART_LINE_LINKS = {'inventory_item_id', 'part_number', 'quantity'}


def job_to_record(job: Job) -> JobRecord:
    return JobRecord(
        id=job.id,
        police_number=job.police_number or "",
        customer_name=job.customer_name or "",
        wo_number=job.wo_number,
        status=job.status or "",
        vehicle_location=job.vehicle_location,
        is_closed=bool(job.is_closed),
        is_deleted=bool(job.is_deleted),
        intake_timestamp=job.intake_at,
        entry_date=job.entry_date,
        part_lines=[
            PartLine(
                name=line.name or "",
                inventory_id=line.inventory_item_id,
                part_number=line.part_number,
                quantity=Decimal(str(line.quantity)) if line.quantity is not None else None,
                has_arrived=bool(line.has_arrived),
                is_indent=bool(line.is_indent),
                is_ordered=bool(line.is_ordered),
                indent_eta=line.indent_eta,
            )
            for line in job.part_lines
        ],
        service_line_count=len(job.service_lines),
    )


def _optional_quantity(value) -> Optional[Decimal]:
    # Zero and negative quantities are stored as entered; the allocator
    # treats them as 1 and reports them
    if value is None or value == '':
        return None
    quantity = to_quantity(value)
    if quantity is None:
        raise ValidationError(f"quantity must be a number, got {value!r}")
    return quantity


class JobService:
    """Job and estimate maintenance"""

    def __init__(self, db: Session):
        self.db = db

    def create_job(self, job_data: Dict) -> Job:
        police_number = (job_data.get('police_number') or '').strip().upper()
        if not police_number:
            raise ValidationError("Registration number is required")

        location = job_data.get('vehicle_location') or VehicleLocation.AT_WORKSHOP.value
        if location not in LOCATIONS:
            raise ValidationError(f"Unknown vehicle location {location!r}")

        job = Job(
            police_number=police_number,
            customer_name=job_data.get('customer_name') or '',
            car_model=job_data.get('car_model') or '',
            insurer_name=job_data.get('insurer_name') or '',
            wo_number=job_data.get('wo_number') or None,
            status=job_data.get('status') or '',
            vehicle_location=location,
            intake_at=job_data.get('intake_at') or datetime.now(timezone.utc),
            entry_date=job_data.get('entry_date'),
        )
        if job_data.get('id'):
            if self.db.get(Job, job_data['id']) is not None:
                raise ValidationError(f"Job {job_data['id']} already exists")
            job.id = job_data['id']

        job.part_lines = self._build_part_lines(job_data.get('part_lines') or [])
        job.service_lines = self._build_service_lines(job_data.get('service_lines') or [])

        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job created: {job.id} {job.police_number} wo={job.wo_number}")
        return job

    def get_job(self, job_id: str) -> Job:
        job = self.db.get(Job, job_id)
        if job is None or job.is_deleted:
            raise NotFoundError(f"Job {job_id} not found")
        return job

    def list_jobs(
        self,
        include_closed: bool = False,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Job]:
        query = self.db.query(Job).filter(Job.is_deleted.is_(False))
        if not include_closed:
            query = query.filter(Job.is_closed.is_(False))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(Job.police_number).like(pattern),
                func.lower(Job.customer_name).like(pattern),
                func.lower(Job.wo_number).like(pattern),
            ))
        return query.order_by(Job.intake_at, Job.created_at, Job.id).offset(skip).limit(limit).all()

    def set_estimate_lines(
        self,
        job_id: str,
        part_lines: List[Dict],
        service_lines: Optional[List[Dict]] = None,
    ) -> Job:
        """
        Replace the estimate lines of a job.

        Issued part lines already consumed stock: they must stay at their
        index with the same item and quantity, and keep their issued flag.
        """
        job = self.get_job(job_id)
        issued = {line.line_index: line for line in job.part_lines if line.has_arrived}
        new_lines = self._build_part_lines(part_lines)

        for index, old in issued.items():
            if index >= len(new_lines):
                raise BusinessLogicError(f"Issued part line {index} cannot be removed")
            new = new_lines[index]
            if (new.inventory_item_id != old.inventory_item_id
                    or (new.part_number or None) != (old.part_number or None)
                    or _same_quantity(new.quantity, old.quantity) is False):
                raise BusinessLogicError(f"Issued part line {index} cannot be changed")
            new.has_arrived = True

        try:
            job.part_lines = []
            self.db.flush()
            job.part_lines = new_lines
            if service_lines is not None:
                job.service_lines = []
                self.db.flush()
                job.service_lines = self._build_service_lines(service_lines)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Estimate update failed for job {job_id}: {e}")
            raise
        self.db.refresh(job)
        return job

    def update_part_line(self, job_id: str, line_index: int, changes: Dict) -> JobPartLine:
        """Update flags or the stock link of one part line"""
        unknown = set(changes) - PART_LINE_FLAGS - PART_LINE_LINKS
        if unknown:
            raise ValidationError(f"Unknown part line fields: {', '.join(sorted(unknown))}")

        job = self.get_job(job_id)
        line = next((l for l in job.part_lines if l.line_index == line_index), None)
        if line is None:
            raise NotFoundError(f"Job {job_id} has no part line {line_index}")
        if line.has_arrived and set(changes) & PART_LINE_LINKS:
            raise BusinessLogicError(f"Part line {line_index} is already issued")

        for field, value in changes.items():
            if field == 'quantity':
                value = _optional_quantity(value)
            setattr(line, field, value)
        self.db.commit()
        self.db.refresh(line)
        return line

    def mark_parts_ordered(self, job_id: str, line_indexes: Iterable[int], indent: bool = False) -> Job:
        """Flag part lines as covered by a purchase order, optionally as indent"""
        job = self.get_job(job_id)
        lines = {line.line_index: line for line in job.part_lines}
        indexes = list(line_indexes)
        missing = [i for i in indexes if i not in lines]
        if missing:
            raise NotFoundError(f"Job {job_id} has no part lines {missing}")
        for i in indexes:
            lines[i].is_ordered = True
            lines[i].is_indent = indent
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job {job_id}: lines {indexes} ordered (indent={indent})")
        return job

    def set_status(self, job_id: str, status: str) -> Job:
        job = self.get_job(job_id)
        job.status = status
        self.db.commit()
        self.db.refresh(job)
        return job

    def move_claim_stage(self, job_id: str, direction: str) -> Job:
        """Move a job one column along the claims board"""
        job = self.get_job(job_id)
        try:
            target = next_claim_stage(job.status, direction)
        except ValueError as e:
            raise ValidationError(str(e))
        if target is None:
            raise BusinessLogicError(f"Job {job_id} cannot move {direction} from {job.status!r}")
        previous = job.status
        job.status = target
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job {job_id} moved {previous!r} -> {target!r}")
        return job

    def close_job(self, job_id: str) -> Job:
        job = self.get_job(job_id)
        job.is_closed = True
        job.closed_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(job)
        logger.info(f"Job closed: {job_id}")
        return job

    def delete_job(self, job_id: str) -> None:
        """Soft delete"""
        job = self.get_job(job_id)
        job.is_deleted = True
        self.db.commit()
        logger.info(f"Job deleted: {job_id}")

    def load_allocation_inputs(self) -> Tuple[List[JobRecord], List[StockRecord]]:
        """
        Open jobs and the whole inventory as allocation inputs.

        Jobs come in intake order with creation time then id as tie-breaks,
        which is the collection order the queue builder keeps for equal
        intake times.
        """
        jobs = (
            self.db.query(Job)
            .options(selectinload(Job.part_lines), selectinload(Job.service_lines))
            .filter(Job.is_deleted.is_(False), Job.is_closed.is_(False))
            .order_by(Job.intake_at, Job.created_at, Job.id)
            .all()
        )
        return [job_to_record(job) for job in jobs], InventoryService(self.db).stock_records()

    # ------------------------------------------------------------------

    def _build_part_lines(self, lines: List[Dict]) -> List[JobPartLine]:
        built = []
        for i, data in enumerate(lines):
            built.append(JobPartLine(
                line_index=i,
                name=data.get('name') or '',
                part_number=(data.get('part_number') or '').strip().upper() or None,
                inventory_item_id=data.get('inventory_item_id') or None,
                quantity=_optional_quantity(data.get('quantity')),
                price=data.get('price') or 0,
                is_ordered=bool(data.get('is_ordered', False)),
                is_indent=bool(data.get('is_indent', False)),
                indent_eta=data.get('indent_eta'),
            ))
        return built

    def _build_service_lines(self, lines: List[Dict]) -> List[JobServiceLine]:
        return [
            JobServiceLine(
                line_index=i,
                name=data.get('name') or '',
                price=data.get('price') or 0,
                panel_count=data.get('panel_count') or 0,
            )
            for i, data in enumerate(lines)
        ]


def _same_quantity(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return Decimal(str(a)) == Decimal(str(b))
