"""
Board presets over the allocator

Each workshop board runs the same FIFO pass with its own eligibility rules
and its own treatment of jobs without part lines:

- claims board: claim-stage jobs only, search narrows the competing set,
  no parts means not ready to call
- booking candidates: every active WO job competes, service-only jobs
  count as ready, search only narrows what is shown
- part monitoring: active WO jobs with parts, arrival progress plus FIFO
  readiness and a plain stock hint per line
- production status: production-board jobs, each evaluated against the
  full starting stock on its own
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .allocator import allocate
from .job_queue import QueueCriteria, intake_sort_key, matches_search
from .readiness import status_from_counts
from .resolver import InventoryIndex
from .snapshot import to_quantity
from .types import (
    EmptyPartsPolicy, JobAllocation, JobRecord, PartClassification,
    ReadinessStatus, StockRecord, VehicleLocation
)

BOOKED_IN = "Booked In"
WITH_OWNER_AWAITING_PARTS = "With Owner (Awaiting Parts)"

CLAIM_STAGES = (
    "Awaiting Estimate",
    "Awaiting Insurer Approval",
    "Price Negotiation",
    WITH_OWNER_AWAITING_PARTS,
    BOOKED_IN,
)

ADMIN_HURDLE_STATUSES = frozenset({
    "Price Negotiation",
    "Awaiting Parts",
    WITH_OWNER_AWAITING_PARTS,
    "Awaiting Insurer Approval",
    "Awaiting Estimate",
    BOOKED_IN,
})

PRODUCTION_STATUSES = frozenset({
    "Work In Progress",
    "Outpatient Repair",
    "Finished (Awaiting Pickup)",
})


# --- Claims board -------------------------------------------------------

@dataclass
class ClaimsBoard:
    columns: Dict[str, List[JobAllocation]]

    @property
    def ready_to_call(self) -> List[JobAllocation]:
        return [a for stage in CLAIM_STAGES for a in self.columns[stage] if a.is_ready]


def claims_control_board(
    jobs: Iterable[JobRecord],
    inventory: Iterable[StockRecord],
    search_term: Optional[str] = None,
) -> ClaimsBoard:
    result = allocate(
        jobs,
        inventory,
        criteria=QueueCriteria(require_work_order=False, statuses=frozenset(CLAIM_STAGES)),
        search_term=search_term,
        empty_policy=EmptyPartsPolicy.NOT_READY,
    )
    columns: Dict[str, List[JobAllocation]] = {stage: [] for stage in CLAIM_STAGES}
    for allocation in result.jobs:
        columns[allocation.job.status].append(allocation)
    return ClaimsBoard(columns=columns)


def next_claim_stage(current: str, direction: str) -> Optional[str]:
    """Neighbouring claim stage, None at either end or for a non-claim status"""
    if current not in CLAIM_STAGES:
        return None
    if direction not in ("next", "prev"):
        raise ValueError(f"direction must be 'next' or 'prev', got {direction!r}")
    position = CLAIM_STAGES.index(current) + (1 if direction == "next" else -1)
    if position < 0 or position >= len(CLAIM_STAGES):
        return None
    return CLAIM_STAGES[position]


# --- Booking candidates ---------------------------------------------------

def booking_candidates(
    jobs: Iterable[JobRecord],
    inventory: Iterable[StockRecord],
    search_term: Optional[str] = None,
) -> List[JobAllocation]:
    """
    Jobs customer relations can call in: already booked, or waiting with
    the owner and either part-ready or service-only.
    """
    result = allocate(
        jobs,
        inventory,
        criteria=QueueCriteria(require_work_order=True),
        empty_policy=EmptyPartsPolicy.SERVICE_ONLY,
    )
    candidates = []
    for allocation in result.jobs:
        job = allocation.job
        if not matches_search(job, search_term):
            continue
        if job.status == BOOKED_IN:
            candidates.append(allocation)
        elif job.vehicle_location == VehicleLocation.WITH_OWNER.value and allocation.is_ready:
            candidates.append(allocation)
    candidates.sort(key=lambda a: intake_sort_key(a.job.entry_date))
    return candidates


# --- Part monitoring ------------------------------------------------------

class StockHint(str, Enum):
    NOT_LINKED = "not_linked"
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"


@dataclass
class LineStockHint:
    line_index: int
    hint: StockHint
    on_hand: Optional[Decimal] = None


@dataclass
class MonitoringEntry:
    allocation: JobAllocation
    arrival_status: ReadinessStatus
    issued_count: int
    stock_hints: List[LineStockHint] = field(default_factory=list)


@dataclass
class MonitoringSummary:
    total: int = 0
    complete: int = 0
    partial: int = 0
    none: int = 0


@dataclass
class PartMonitoringReport:
    entries: List[MonitoringEntry]
    summary: MonitoringSummary


def _stock_hints(job: JobRecord, index: InventoryIndex) -> List[LineStockHint]:
    hints = []
    for i, line in enumerate(job.part_lines):
        item = index.resolve(line)
        if item is None:
            hints.append(LineStockHint(line_index=i, hint=StockHint.NOT_LINKED))
            continue
        on_hand = to_quantity(item.quantity_on_hand) or Decimal("0")
        hint = StockHint.IN_STOCK if on_hand > 0 else StockHint.OUT_OF_STOCK
        hints.append(LineStockHint(line_index=i, hint=hint, on_hand=on_hand))
    return hints


def part_monitoring(
    jobs: Iterable[JobRecord],
    inventory: Iterable[StockRecord],
    search_term: Optional[str] = None,
    status_filter: Optional[ReadinessStatus] = None,
) -> PartMonitoringReport:
    """
    Arrival progress for every active WO job that has part lines.

    ``arrival_status`` counts only issued lines; the FIFO readiness sits on
    the allocation. The summary covers all active jobs regardless of the
    search and status filter.
    """
    inventory = list(inventory)
    index = InventoryIndex(inventory)
    result = allocate(
        jobs,
        inventory,
        criteria=QueueCriteria(require_work_order=True, require_part_lines=True),
    )

    summary = MonitoringSummary()
    entries = []
    for allocation in result.jobs:
        issued = sum(1 for line in allocation.lines
                     if line.classification == PartClassification.ISSUED)
        arrival = status_from_counts(issued, allocation.total_count)
        summary.total += 1
        if arrival == ReadinessStatus.COMPLETE:
            summary.complete += 1
        elif arrival == ReadinessStatus.PARTIAL:
            summary.partial += 1
        else:
            summary.none += 1

        if not matches_search(allocation.job, search_term):
            continue
        if status_filter is not None and arrival != status_filter:
            continue
        entries.append(MonitoringEntry(
            allocation=allocation,
            arrival_status=arrival,
            issued_count=issued,
            stock_hints=_stock_hints(allocation.job, index),
        ))
    return PartMonitoringReport(entries=entries, summary=summary)


# --- Production part status ----------------------------------------------

class ProductionPartLabel(str, Enum):
    PART_READY = "PART_READY"
    PARTIAL_READY = "PARTIAL_READY"
    PART_INDENT = "PART_INDENT"
    ON_ORDER = "ON_ORDER"
    NEED_ORDER = "NEED_ORDER"


@dataclass
class ProductionPartStatus:
    allocation: JobAllocation
    label: Optional[ProductionPartLabel]


def _on_production_board(job: JobRecord) -> bool:
    hurdle = job.status in ADMIN_HURDLE_STATUSES
    if job.vehicle_location == VehicleLocation.AT_WORKSHOP.value:
        return hurdle or job.status in PRODUCTION_STATUSES
    return job.vehicle_location == VehicleLocation.WITH_OWNER.value and hurdle


def production_label(allocation: JobAllocation) -> Optional[ProductionPartLabel]:
    """Board label for one job; None when it has no part lines"""
    if allocation.total_count == 0:
        return None
    if allocation.ready_count == allocation.total_count:
        return ProductionPartLabel.PART_READY
    if allocation.ready_count > 0:
        return ProductionPartLabel.PARTIAL_READY

    indent = on_order = 0
    for outcome in allocation.lines:
        line = allocation.job.part_lines[outcome.line_index]
        if outcome.classification == PartClassification.INDENT_MANUAL:
            indent += 1
        elif line.is_ordered:
            on_order += 1
    if indent:
        return ProductionPartLabel.PART_INDENT
    if on_order:
        return ProductionPartLabel.ON_ORDER
    return ProductionPartLabel.NEED_ORDER


def production_part_status(
    jobs: Iterable[JobRecord],
    inventory: Iterable[StockRecord],
    search_term: Optional[str] = None,
) -> List[ProductionPartStatus]:
    result = allocate(
        jobs,
        inventory,
        criteria=QueueCriteria(require_work_order=True, extra=_on_production_board),
        search_term=search_term,
        isolate_jobs=True,
    )
    return [
        ProductionPartStatus(allocation=a, label=production_label(a))
        for a in result.jobs
    ]
