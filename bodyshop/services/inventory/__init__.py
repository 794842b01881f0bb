"""Inventory master and stock issuance services"""

from .inventory_service import InventoryService, item_to_record, parse_quantity
from .stock_issuance import StockIssuanceService, convert_to_stock_unit

__all__ = [
    "InventoryService",
    "StockIssuanceService",
    "convert_to_stock_unit",
    "item_to_record",
    "parse_quantity",
]
