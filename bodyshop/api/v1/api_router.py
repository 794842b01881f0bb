"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter
from bodyshop.api.v1 import (
    allocation,
    inventory,
    issuance,
    jobs,
)

api_router = APIRouter()

# Master data
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])

# FIFO allocation boards
api_router.include_router(allocation.router, prefix="/allocation", tags=["allocation"])

# Commit boundary
api_router.include_router(issuance.router, prefix="/issuance", tags=["issuance"])
