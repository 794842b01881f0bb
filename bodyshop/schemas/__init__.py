"""Pydantic request/response schemas"""

from .inventory import (
    InventoryItemCreate, InventoryItemResponse, StockAdjustment, StockReceipt
)
from .job import (
    ClaimStageMove, EstimateLines, JobCreate, JobResponse, PartLineCreate,
    PartLineResponse, PartLineUpdate, PartsOrdered, ServiceLineBase
)
from .issuance import (
    CancelIssuanceRequest, MaterialIssueRequest, PartIssueRequest,
    UsageHistoryResponse, UsageLogEntryResponse
)
from .allocation import (
    AllocationResultView, BookingCandidateView, ClaimsBoardView, JobAllocationView,
    PartMonitoringView, PreviewRequest, ProductionStatusView
)
