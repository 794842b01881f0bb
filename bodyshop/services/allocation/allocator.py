"""
FIFO part allocator

Walks the job queue in intake order and virtually reserves each job's
outstanding part lines from a per-pass stock snapshot. Earlier jobs get the
first claim on scarce stock. The pass is pure: it reads its inputs, builds
its own snapshot and never touches durable state.
"""
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from bodyshop.core.logging import get_logger
from .job_queue import QueueCriteria, build_job_queue
from .readiness import classify_job
from .resolver import InventoryIndex
from .snapshot import StockLedgerSnapshot, to_quantity
from .types import (
    AllocationResult, EmptyPartsPolicy, JobAllocation, JobRecord,
    LineOutcome, PartClassification, PartLine, StockRecord
)

logger = get_logger("allocation")

DEFAULT_QUANTITY = Decimal("1")


def required_quantity(line: PartLine, job_id: str = "", line_index: int = 0,
                      warnings: Optional[List[str]] = None) -> Decimal:
    """
    Quantity a line needs. Unset means 1; zero, negative or unreadable
    values are a data-quality problem and also count as 1.
    """
    if line.quantity is None:
        return DEFAULT_QUANTITY
    quantity = to_quantity(line.quantity)
    if quantity is None or quantity <= 0:
        message = (
            f"Job {job_id} line {line_index}: quantity {line.quantity!r} "
            f"is not a positive number, using {DEFAULT_QUANTITY}"
        )
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)
        return DEFAULT_QUANTITY
    return quantity


def classify_line(
    line: PartLine,
    line_index: int,
    job_id: str,
    snapshot: StockLedgerSnapshot,
    index: InventoryIndex,
    warnings: Optional[List[str]] = None,
) -> LineOutcome:
    """Classify one part line, reserving from the snapshot when READY"""
    quantity = required_quantity(line, job_id, line_index, warnings)
    item = index.resolve(line)
    item_id = item.id if item is not None else None

    if line.has_arrived:
        classification = PartClassification.ISSUED
    elif line.is_indent:
        classification = PartClassification.INDENT_MANUAL
    elif item_id is not None and snapshot.try_reserve(item_id, quantity):
        classification = PartClassification.READY
    else:
        classification = PartClassification.WAITING

    return LineOutcome(
        line_index=line_index,
        classification=classification,
        resolved_inventory_id=item_id,
        required_quantity=quantity,
    )


def allocate_queue(
    queue: Sequence[JobRecord],
    snapshot: StockLedgerSnapshot,
    index: InventoryIndex,
    empty_policy: EmptyPartsPolicy = EmptyPartsPolicy.NOT_READY,
    isolate_jobs: bool = False,
) -> AllocationResult:
    """
    Allocate an already ordered queue.

    With ``isolate_jobs`` every job is evaluated against its own copy of the
    starting stock, so jobs do not compete with each other.
    """
    warnings: List[str] = []
    allocations: List[JobAllocation] = []

    for job in queue:
        job_snapshot = snapshot.copy() if isolate_jobs else snapshot
        lines = [
            classify_line(line, i, job.id, job_snapshot, index, warnings)
            for i, line in enumerate(job.part_lines)
        ]
        status, ready_count, total_count = classify_job(
            lines, empty_policy, has_service_lines=job.service_line_count > 0
        )
        allocations.append(JobAllocation(
            job=job,
            status=status,
            ready_count=ready_count,
            total_count=total_count,
            lines=lines,
        ))

    result = AllocationResult(
        jobs=allocations,
        starting_stock=snapshot.starting,
        remaining_stock=snapshot.remaining,
        warnings=warnings,
    )
    logger.debug(
        f"Allocation pass: {len(allocations)} jobs, "
        f"{sum(a.total_count for a in allocations)} lines, "
        f"{sum(1 for a in allocations if a.is_ready)} jobs ready"
    )
    return result


def allocate(
    jobs: Iterable[JobRecord],
    inventory: Iterable[StockRecord],
    criteria: Optional[QueueCriteria] = None,
    search_term: Optional[str] = None,
    empty_policy: EmptyPartsPolicy = EmptyPartsPolicy.NOT_READY,
    isolate_jobs: bool = False,
) -> AllocationResult:
    """
    Full pass: build the FIFO queue, snapshot the inventory and allocate.

    Calling it twice with the same inputs gives the same result; nothing is
    retained between calls.
    """
    inventory = list(inventory)
    queue = build_job_queue(jobs, criteria, search_term)
    snapshot = StockLedgerSnapshot.from_inventory(inventory)
    return allocate_queue(queue, snapshot, InventoryIndex(inventory), empty_policy, isolate_jobs)
