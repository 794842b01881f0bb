"""
Inventory reference resolution for part lines.

A part line points at master stock by inventory id; older estimates only
carry the part number. Resolution tries the id first, then a
case-insensitive code match. When several items share a code the first one
in collection order wins and the ambiguity is logged.
"""
from typing import Dict, Iterable, List, Optional

from bodyshop.core.logging import get_logger
from .types import PartLine, StockRecord

logger = get_logger("allocation")


def _code_key(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class InventoryIndex:
    """Id and code lookup over one inventory collection"""

    def __init__(self, items: Iterable[StockRecord]):
        self.items: List[StockRecord] = list(items)
        self._by_id: Dict[str, StockRecord] = {}
        self._by_code: Dict[str, List[StockRecord]] = {}
        for item in self.items:
            self._by_id.setdefault(item.id, item)
            key = _code_key(item.code)
            if key:
                self._by_code.setdefault(key, []).append(item)

    def get(self, item_id: Optional[str]) -> Optional[StockRecord]:
        if not item_id:
            return None
        return self._by_id.get(item_id)

    def by_code(self, code: Optional[str]) -> Optional[StockRecord]:
        candidates = self._by_code.get(_code_key(code))
        if not candidates:
            return None
        if len(candidates) > 1:
            logger.warning(
                f"Part code {_code_key(code)} matches {len(candidates)} inventory items, "
                f"using {candidates[0].id}"
            )
        return candidates[0]

    def resolve(self, line: PartLine) -> Optional[StockRecord]:
        return self.get(line.inventory_id) or self.by_code(line.part_number)


def resolve_inventory_ref(line: PartLine, inventory) -> Optional[StockRecord]:
    """Inventory item for a part line, or None when it is not linked to master stock"""
    index = inventory if isinstance(inventory, InventoryIndex) else InventoryIndex(inventory)
    return index.resolve(line)
