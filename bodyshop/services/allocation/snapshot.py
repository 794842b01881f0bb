"""
Stock ledger snapshot

Scratch copy of on-hand quantities for one allocation pass. It is built
fresh for every pass and never written back.
"""
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from .types import StockRecord


def to_quantity(value) -> Optional[Decimal]:
    """Coerce a stored quantity to Decimal, None when it is not a finite number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        quantity = value
    else:
        try:
            quantity = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
    if not quantity.is_finite():
        return None
    return quantity


class StockLedgerSnapshot:
    """Mutable per-pass map of item id to available quantity"""

    def __init__(self, quantities: Dict[str, Decimal]):
        self._starting = dict(quantities)
        self._available = dict(quantities)

    @classmethod
    def from_inventory(cls, items: Iterable[StockRecord]) -> "StockLedgerSnapshot":
        quantities = {}
        for item in items:
            quantities[item.id] = to_quantity(item.quantity_on_hand) or Decimal("0")
        return cls(quantities)

    def available(self, item_id: str) -> Decimal:
        return self._available.get(item_id, Decimal("0"))

    def try_reserve(self, item_id: str, quantity: Decimal) -> bool:
        """Reserve against the already-decremented balance; False leaves it untouched"""
        if item_id not in self._available:
            return False
        if self._available[item_id] < quantity:
            return False
        self._available[item_id] -= quantity
        return True

    @property
    def starting(self) -> Dict[str, Decimal]:
        return dict(self._starting)

    @property
    def remaining(self) -> Dict[str, Decimal]:
        return dict(self._available)

    def copy(self) -> "StockLedgerSnapshot":
        """Fresh snapshot at the starting quantities"""
        return StockLedgerSnapshot(self._starting)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._available

    def __repr__(self):
        return f"<StockLedgerSnapshot(items={len(self._available)})>"
