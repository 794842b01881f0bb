"""
Allocation record types

Plain in-memory records consumed and produced by the allocation pass. They
carry no database state; callers build them from ORM rows or API payloads.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class PartClassification(str, Enum):
    ISSUED = "ISSUED"
    READY = "READY"
    INDENT_MANUAL = "INDENT_MANUAL"
    WAITING = "WAITING"


class ReadinessStatus(str, Enum):
    COMPLETE = "COMPLETE"
    PARTIAL = "PARTIAL"
    NONE = "NONE"


class EmptyPartsPolicy(str, Enum):
    """How a job without part lines is classified"""
    NOT_READY = "not_ready"
    READY = "ready"
    SERVICE_ONLY = "service_only"  # ready only when the job has labour lines


class VehicleLocation(str, Enum):
    AT_WORKSHOP = "at_workshop"
    WITH_OWNER = "with_owner"


class ItemCategory(str, Enum):
    SPAREPART = "sparepart"
    MATERIAL = "material"


@dataclass
class StockRecord:
    id: str
    quantity_on_hand: Decimal
    code: str = ""
    name: str = ""
    unit: str = "Pcs"
    category: str = ItemCategory.SPAREPART.value
    is_stock_managed: bool = True


@dataclass
class PartLine:
    name: str = ""
    inventory_id: Optional[str] = None
    part_number: Optional[str] = None
    quantity: Optional[Decimal] = None
    has_arrived: bool = False
    is_indent: bool = False
    is_ordered: bool = False
    indent_eta: Optional[str] = None


@dataclass
class JobRecord:
    id: str
    police_number: str = ""
    customer_name: str = ""
    wo_number: Optional[str] = None
    status: str = ""
    vehicle_location: str = VehicleLocation.AT_WORKSHOP.value
    is_closed: bool = False
    is_deleted: bool = False
    # datetime, ISO string, epoch seconds, {"seconds": ...} or None
    intake_timestamp: Any = None
    entry_date: Any = None
    part_lines: List[PartLine] = field(default_factory=list)
    service_line_count: int = 0

    @property
    def is_service_only(self) -> bool:
        return not self.part_lines and self.service_line_count > 0


@dataclass
class LineOutcome:
    line_index: int
    classification: PartClassification
    resolved_inventory_id: Optional[str]
    required_quantity: Decimal


@dataclass
class JobAllocation:
    job: JobRecord
    status: ReadinessStatus
    ready_count: int
    total_count: int
    lines: List[LineOutcome] = field(default_factory=list)

    @property
    def job_id(self) -> str:
        return self.job.id

    @property
    def is_ready(self) -> bool:
        return self.status == ReadinessStatus.COMPLETE


@dataclass
class AllocationResult:
    jobs: List[JobAllocation]
    starting_stock: Dict[str, Decimal]
    remaining_stock: Dict[str, Decimal]
    warnings: List[str] = field(default_factory=list)

    def for_job(self, job_id: str) -> Optional[JobAllocation]:
        for allocation in self.jobs:
            if allocation.job_id == job_id:
                return allocation
        return None

    def reserved_quantity(self, item_id: str) -> Decimal:
        """Quantity virtually reserved (READY) against an item in this pass"""
        total = Decimal("0")
        for allocation in self.jobs:
            for line in allocation.lines:
                if (line.classification == PartClassification.READY
                        and line.resolved_inventory_id == item_id):
                    total += line.required_quantity
        return total
