"""Job and estimate services"""

from .job_service import JobService, job_to_record

__all__ = ["JobService", "job_to_record"]
