"""
Job Queue Builder

Selects the jobs that take part in an allocation pass and orders them by
intake time, earliest first. Ties keep the order of the input collection.
"""
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from bodyshop.core.logging import get_logger
from .types import JobRecord, VehicleLocation

logger = get_logger("allocation")

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class QueueCriteria:
    """Eligibility predicates for one queue"""
    require_work_order: bool = True
    on_premises_only: bool = False
    statuses: Optional[frozenset] = None
    require_part_lines: bool = False
    extra: Optional[Callable[[JobRecord], bool]] = None


def _finite_seconds(value) -> float:
    try:
        seconds = float(value)
    except OverflowError:
        seconds = math.inf
    if not math.isfinite(seconds):
        logger.warning(f"Non-finite intake timestamp {value!r}, treated as earliest")
        return 0.0
    return seconds


def intake_sort_key(value: Any) -> float:
    """
    Epoch seconds for an intake timestamp.

    Missing or unreadable timestamps sort as epoch zero, which puts those
    jobs at the front of the queue.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _finite_seconds(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp()
    if isinstance(value, dict):
        # document-store timestamp: {"seconds": ..., "nanoseconds": ...}
        seconds = value.get("seconds")
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _finite_seconds(seconds)
        return 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return intake_sort_key(datetime.fromisoformat(text))
        except ValueError:
            logger.warning(f"Unreadable intake timestamp {value!r}, treated as earliest")
            return 0.0
    logger.warning(f"Unsupported intake timestamp type {type(value).__name__}, treated as earliest")
    return 0.0


def _compact(text: Optional[str]) -> str:
    return _WHITESPACE.sub("", text or "").casefold()


def matches_search(job: JobRecord, term: Optional[str]) -> bool:
    """
    Case-insensitive substring match on registration number, customer name
    and work-order number. Registration and WO numbers are compared with all
    whitespace removed, so "B 1234" finds "B1234XY".
    """
    if not term or not term.strip():
        return True
    needle = term.strip().casefold()
    compact_needle = _compact(term)
    if compact_needle in _compact(job.police_number):
        return True
    if compact_needle in _compact(job.wo_number):
        return True
    return needle in (job.customer_name or "").casefold()


def is_eligible(job: JobRecord, criteria: QueueCriteria) -> bool:
    if job.is_deleted or job.is_closed:
        return False
    if criteria.require_work_order and not (job.wo_number or "").strip():
        return False
    if criteria.on_premises_only and job.vehicle_location != VehicleLocation.AT_WORKSHOP.value:
        return False
    if criteria.statuses is not None and job.status not in criteria.statuses:
        return False
    if criteria.require_part_lines and not job.part_lines:
        return False
    if criteria.extra is not None and not criteria.extra(job):
        return False
    return True


def build_job_queue(
    jobs: Iterable[JobRecord],
    criteria: Optional[QueueCriteria] = None,
    search_term: Optional[str] = None,
) -> List[JobRecord]:
    """Eligible jobs in FIFO order (stable on equal timestamps)"""
    criteria = criteria or QueueCriteria()
    eligible = [
        job for job in jobs
        if is_eligible(job, criteria) and matches_search(job, search_term)
    ]
    # list.sort is stable: equal intake times keep collection order
    eligible.sort(key=lambda job: intake_sort_key(job.intake_timestamp))
    return eligible

