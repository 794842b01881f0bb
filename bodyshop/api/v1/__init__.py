"""API v1 routers"""

from . import allocation, inventory, issuance, jobs

__all__ = ["allocation", "inventory", "issuance", "jobs"]
