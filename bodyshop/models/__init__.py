"""
Bodyshop SQLAlchemy Models
Database models for jobs, inventory and issuance history
"""

# Import all models to ensure they are registered with SQLAlchemy
from .inventory import InventoryItem
from .job import Job, JobPartLine, JobServiceLine, UsageLogEntry

__all__ = [
    "InventoryItem",
    "Job",
    "JobPartLine",
    "JobServiceLine",
    "UsageLogEntry",
]
