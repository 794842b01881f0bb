"""FIFO part allocation - pure, database-free core"""

from .types import (
    AllocationResult, EmptyPartsPolicy, ItemCategory, JobAllocation, JobRecord,
    LineOutcome, PartClassification, PartLine, ReadinessStatus, StockRecord,
    VehicleLocation
)
from .snapshot import StockLedgerSnapshot
from .job_queue import QueueCriteria, build_job_queue, intake_sort_key, matches_search
from .resolver import InventoryIndex, resolve_inventory_ref
from .allocator import allocate, allocate_queue, required_quantity
from .readiness import classify_job, status_from_counts
from .boards import (
    CLAIM_STAGES, booking_candidates, claims_control_board, next_claim_stage,
    part_monitoring, production_part_status
)

__all__ = [
    "AllocationResult",
    "EmptyPartsPolicy",
    "ItemCategory",
    "JobAllocation",
    "JobRecord",
    "LineOutcome",
    "PartClassification",
    "PartLine",
    "ReadinessStatus",
    "StockRecord",
    "VehicleLocation",
    "StockLedgerSnapshot",
    "QueueCriteria",
    "build_job_queue",
    "intake_sort_key",
    "matches_search",
    "InventoryIndex",
    "resolve_inventory_ref",
    "allocate",
    "allocate_queue",
    "required_quantity",
    "classify_job",
    "status_from_counts",
    "CLAIM_STAGES",
    "booking_candidates",
    "claims_control_board",
    "next_claim_stage",
    "part_monitoring",
    "production_part_status",
]
