"""
Allocation View-Model Schemas

The board payloads use camelCase keys; the preview request accepts the
job and inventory collections in the same shape the document store holds
them.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from decimal import Decimal

from bodyshop.services.allocation import (
    AllocationResult, EmptyPartsPolicy, ItemCategory, JobAllocation, JobRecord,
    PartClassification, PartLine, ReadinessStatus, StockRecord, VehicleLocation
)
from bodyshop.services.allocation.boards import (
    ClaimsBoard, MonitoringEntry, PartMonitoringReport, ProductionPartLabel,
    ProductionPartStatus, StockHint
)
from bodyshop.services.allocation.snapshot import to_quantity


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Outputs

class LineOutcomeView(CamelModel):
    line_index: int
    classification: PartClassification
    resolved_inventory_id: Optional[str] = None
    required_quantity: Decimal


class JobAllocationView(CamelModel):
    job_id: str
    status: ReadinessStatus
    ready_count: int
    total_count: int
    lines: List[LineOutcomeView]
    police_number: str = ''
    customer_name: str = ''
    work_order_number: Optional[str] = None
    job_status: str = ''
    vehicle_location: str = VehicleLocation.AT_WORKSHOP.value

    @classmethod
    def from_allocation(cls, allocation: JobAllocation) -> "JobAllocationView":
        job = allocation.job
        return cls(
            job_id=job.id,
            status=allocation.status,
            ready_count=allocation.ready_count,
            total_count=allocation.total_count,
            lines=[
                LineOutcomeView(
                    line_index=line.line_index,
                    classification=line.classification,
                    resolved_inventory_id=line.resolved_inventory_id,
                    required_quantity=line.required_quantity,
                )
                for line in allocation.lines
            ],
            police_number=job.police_number,
            customer_name=job.customer_name,
            work_order_number=job.wo_number,
            job_status=job.status,
            vehicle_location=job.vehicle_location,
        )


class AllocationResultView(CamelModel):
    jobs: List[JobAllocationView]
    starting_stock: Dict[str, Decimal]
    remaining_stock: Dict[str, Decimal]
    warnings: List[str] = []

    @classmethod
    def from_result(cls, result: AllocationResult) -> "AllocationResultView":
        return cls(
            jobs=[JobAllocationView.from_allocation(a) for a in result.jobs],
            starting_stock=result.starting_stock,
            remaining_stock=result.remaining_stock,
            warnings=result.warnings,
        )


class ClaimsBoardView(CamelModel):
    columns: Dict[str, List[JobAllocationView]]
    ready_to_call: List[str]

    @classmethod
    def from_board(cls, board: ClaimsBoard) -> "ClaimsBoardView":
        return cls(
            columns={
                stage: [JobAllocationView.from_allocation(a) for a in allocations]
                for stage, allocations in board.columns.items()
            },
            ready_to_call=[a.job_id for a in board.ready_to_call],
        )


class BookingCandidateView(JobAllocationView):
    entry_date: Optional[Any] = None
    service_only: bool = False

    @classmethod
    def from_allocation(cls, allocation: JobAllocation) -> "BookingCandidateView":
        view = JobAllocationView.from_allocation(allocation)
        return cls(
            **view.model_dump(),
            entry_date=allocation.job.entry_date,
            service_only=allocation.job.is_service_only,
        )


class LineStockHintView(CamelModel):
    line_index: int
    hint: StockHint
    on_hand: Optional[Decimal] = None


class MonitoringEntryView(JobAllocationView):
    arrival_status: ReadinessStatus
    issued_count: int
    stock_hints: List[LineStockHintView]

    @classmethod
    def from_entry(cls, entry: MonitoringEntry) -> "MonitoringEntryView":
        view = JobAllocationView.from_allocation(entry.allocation)
        return cls(
            **view.model_dump(),
            arrival_status=entry.arrival_status,
            issued_count=entry.issued_count,
            stock_hints=[
                LineStockHintView(line_index=h.line_index, hint=h.hint, on_hand=h.on_hand)
                for h in entry.stock_hints
            ],
        )


class MonitoringSummaryView(CamelModel):
    total: int
    complete: int
    partial: int
    none: int


class PartMonitoringView(CamelModel):
    entries: List[MonitoringEntryView]
    summary: MonitoringSummaryView

    @classmethod
    def from_report(cls, report: PartMonitoringReport) -> "PartMonitoringView":
        return cls(
            entries=[MonitoringEntryView.from_entry(e) for e in report.entries],
            summary=MonitoringSummaryView(
                total=report.summary.total,
                complete=report.summary.complete,
                partial=report.summary.partial,
                none=report.summary.none,
            ),
        )


class ProductionStatusView(JobAllocationView):
    label: Optional[ProductionPartLabel] = None

    @classmethod
    def from_status(cls, status: ProductionPartStatus) -> "ProductionStatusView":
        view = JobAllocationView.from_allocation(status.allocation)
        return cls(**view.model_dump(), label=status.label)


# Preview inputs

class PreviewPartLine(CamelModel):
    name: str = ''
    inventory_id: Optional[str] = None
    part_number: Optional[str] = None
    # Raw value; unreadable quantities are reported by the allocator
    quantity: Optional[Any] = None
    has_arrived: bool = False
    is_indent: bool = False
    is_ordered: bool = False
    indent_eta: Optional[str] = None

    def to_record(self) -> PartLine:
        return PartLine(
            name=self.name,
            inventory_id=self.inventory_id,
            part_number=self.part_number,
            quantity=self.quantity,
            has_arrived=self.has_arrived,
            is_indent=self.is_indent,
            is_ordered=self.is_ordered,
            indent_eta=self.indent_eta,
        )


class PreviewJob(CamelModel):
    id: str
    police_number: str = ''
    customer_name: str = ''
    work_order_number: Optional[str] = None
    status: str = ''
    vehicle_location: VehicleLocation = VehicleLocation.AT_WORKSHOP
    is_closed: bool = False
    is_deleted: bool = False
    intake_timestamp: Optional[Any] = None
    entry_date: Optional[Any] = None
    part_lines: List[PreviewPartLine] = []
    service_line_count: int = 0

    def to_record(self) -> JobRecord:
        return JobRecord(
            id=self.id,
            police_number=self.police_number,
            customer_name=self.customer_name,
            wo_number=self.work_order_number,
            status=self.status,
            vehicle_location=self.vehicle_location.value,
            is_closed=self.is_closed,
            is_deleted=self.is_deleted,
            intake_timestamp=self.intake_timestamp,
            entry_date=self.entry_date,
            part_lines=[line.to_record() for line in self.part_lines],
            service_line_count=self.service_line_count,
        )


class PreviewInventoryItem(CamelModel):
    id: str
    on_hand_quantity: Optional[Any] = 0
    unit_of_measure: str = 'Pcs'
    category: ItemCategory = ItemCategory.SPAREPART
    code: str = ''
    name: str = ''
    is_stock_managed: bool = True

    def to_record(self) -> StockRecord:
        return StockRecord(
            id=self.id,
            quantity_on_hand=to_quantity(self.on_hand_quantity) or Decimal("0"),
            code=self.code,
            name=self.name,
            unit=self.unit_of_measure,
            category=self.category.value,
            is_stock_managed=self.is_stock_managed,
        )


class PreviewRequest(CamelModel):
    jobs: List[PreviewJob]
    inventory: List[PreviewInventoryItem]
    require_work_order: bool = True
    on_premises_only: bool = False
    statuses: Optional[List[str]] = None
    search_term: Optional[str] = None
    empty_policy: EmptyPartsPolicy = EmptyPartsPolicy.NOT_READY
    isolate_jobs: bool = Field(default=False, description="Evaluate every job against the full starting stock")
