"""
Readiness Classifier

Derives the job-level status from the allocator's per-line outcomes.
"""
from typing import Iterable, Tuple

from .types import EmptyPartsPolicy, LineOutcome, PartClassification, ReadinessStatus

READY_CLASSIFICATIONS = frozenset({PartClassification.ISSUED, PartClassification.READY})


def count_ready(lines: Iterable[LineOutcome]) -> Tuple[int, int]:
    """(ready_count, total_count) for one job's lines"""
    ready = total = 0
    for line in lines:
        total += 1
        if line.classification in READY_CLASSIFICATIONS:
            ready += 1
    return ready, total


def status_from_counts(
    ready_count: int,
    total_count: int,
    empty_policy: EmptyPartsPolicy = EmptyPartsPolicy.NOT_READY,
    has_service_lines: bool = False,
) -> ReadinessStatus:
    if total_count == 0:
        if empty_policy == EmptyPartsPolicy.READY:
            return ReadinessStatus.COMPLETE
        if empty_policy == EmptyPartsPolicy.SERVICE_ONLY and has_service_lines:
            return ReadinessStatus.COMPLETE
        return ReadinessStatus.NONE
    if ready_count == total_count:
        return ReadinessStatus.COMPLETE
    if ready_count == 0:
        return ReadinessStatus.NONE
    return ReadinessStatus.PARTIAL


def classify_job(
    lines: Iterable[LineOutcome],
    empty_policy: EmptyPartsPolicy = EmptyPartsPolicy.NOT_READY,
    has_service_lines: bool = False,
) -> Tuple[ReadinessStatus, int, int]:
    """
    Job status plus counts.

    COMPLETE when every line is ISSUED or READY, NONE when none is, PARTIAL
    otherwise. A job without part lines is decided by ``empty_policy``.
    """
    ready_count, total_count = count_ready(lines)
    status = status_from_counts(ready_count, total_count, empty_policy, has_service_lines)
    return status, ready_count, total_count
