"""
Inventory Master Service
Maintains spare-part and material master records and their stock levels
outside of job issuance: purchase-order receipts and manual adjustments.
"""
from typing import Dict, List, Optional
from decimal import Decimal, InvalidOperation
from sqlalchemy.orm import Session
from sqlalchemy import or_, func, update

from bodyshop.core.exceptions import NotFoundError, ValidationError
from bodyshop.core.logging import get_logger
from bodyshop.models.inventory import InventoryItem
from bodyshop.services.allocation.types import ItemCategory, StockRecord

logger = get_logger("issuance")

CATEGORIES = {c.value for c in ItemCategory}


def parse_quantity(value, field: str = "quantity", allow_zero: bool = False) -> Decimal:
    """Decimal quantity from request data, ValidationError when not usable"""
    try:
        quantity = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number, got {value!r}")
    if not quantity.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise ValidationError(f"{field} must be greater than zero")
    return quantity


def item_to_record(item: InventoryItem) -> StockRecord:
    return StockRecord(
        id=item.id,
        quantity_on_hand=Decimal(str(item.quantity_on_hand or 0)),
        code=item.code or "",
        name=item.name or "",
        unit=item.unit or "",
        category=item.category,
        is_stock_managed=bool(item.is_stock_managed),
    )


class InventoryService:
    """Inventory master maintenance"""

    def __init__(self, db: Session):
        self.db = db

    def create_item(self, item_data: Dict) -> InventoryItem:
        name = (item_data.get('name') or '').strip()
        if not name:
            raise ValidationError("Item name is required")

        category = item_data.get('category', ItemCategory.SPAREPART.value)
        if category not in CATEGORIES:
            raise ValidationError(f"Unknown category {category!r}")

        item_id = item_data.get('id')
        if item_id and self.db.get(InventoryItem, item_id) is not None:
            raise ValidationError(f"Inventory item {item_id} already exists")

        item = InventoryItem(
            code=(item_data.get('code') or '').strip().upper(),
            name=name,
            brand=item_data.get('brand') or '',
            category=category,
            quantity_on_hand=parse_quantity(item_data.get('quantity_on_hand') or 0,
                                            'quantity_on_hand', allow_zero=True),
            unit=item_data.get('unit') or 'Pcs',
            min_stock=parse_quantity(item_data.get('min_stock') or 0, 'min_stock', allow_zero=True),
            is_stock_managed=item_data.get('is_stock_managed') is not False,
            buy_price=parse_quantity(item_data.get('buy_price') or 0, 'buy_price', allow_zero=True),
            sell_price=parse_quantity(item_data.get('sell_price') or 0, 'sell_price', allow_zero=True),
            location=item_data.get('location') or '',
            supplier_name=item_data.get('supplier_name') or '',
        )
        if item_id:
            item.id = item_id
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Inventory item created: {item.id} {item.code} {item.name}")
        return item

    def get_item(self, item_id: str) -> InventoryItem:
        item = self.db.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Inventory item {item_id} not found")
        return item

    def list_items(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[InventoryItem]:
        query = self.db.query(InventoryItem)
        if category:
            query = query.filter(InventoryItem.category == category)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(InventoryItem.name).like(pattern),
                func.lower(InventoryItem.code).like(pattern),
            ))
        return query.order_by(InventoryItem.name).offset(skip).limit(limit).all()

    def find_by_code(self, code: Optional[str]) -> Optional[InventoryItem]:
        """First item (by creation) whose code matches, case-insensitive"""
        if not code or not code.strip():
            return None
        return self.db.query(InventoryItem).filter(
            func.upper(InventoryItem.code) == code.strip().upper()
        ).order_by(InventoryItem.created_at, InventoryItem.id).first()

    def find_by_name_or_code(self, term: str) -> Optional[InventoryItem]:
        """Exact name or code match, case-insensitive"""
        key = (term or '').strip().lower()
        if not key:
            return None
        return self.db.query(InventoryItem).filter(or_(
            func.lower(InventoryItem.name) == key,
            func.lower(InventoryItem.code) == key,
        )).order_by(InventoryItem.created_at, InventoryItem.id).first()

    def receive_stock(self, item_id: str, quantity, reference: str = '') -> InventoryItem:
        """Purchase-order receipt: atomic increment of on-hand stock"""
        qty = parse_quantity(quantity)
        item = self.get_item(item_id)
        try:
            self.db.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item.id)
                .values(quantity_on_hand=InventoryItem.quantity_on_hand + qty)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Stock receipt failed for {item_id}: {e}")
            raise
        self.db.refresh(item)
        logger.info(f"Received {qty} {item.unit} of {item.code or item.id} ref={reference or '-'}")
        return item

    def adjust_stock(self, item_id: str, new_quantity, reason: str, adjusted_by: str = 'SYSTEM') -> InventoryItem:
        """Manual stock count correction to an absolute, non-negative quantity"""
        qty = parse_quantity(new_quantity, 'new_quantity', allow_zero=True)
        if not (reason or '').strip():
            raise ValidationError("An adjustment reason is required")
        item = self.get_item(item_id)
        previous = item.quantity_on_hand
        item.quantity_on_hand = qty
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Stock adjustment failed for {item_id}: {e}")
            raise
        self.db.refresh(item)
        logger.info(
            f"Stock adjusted {item.code or item.id}: {previous} -> {qty} by {adjusted_by} ({reason})"
        )
        return item

    def stock_records(self) -> List[StockRecord]:
        """Every inventory item as an allocation input, in creation order"""
        items = self.db.query(InventoryItem).order_by(InventoryItem.created_at, InventoryItem.id).all()
        return [item_to_record(item) for item in items]
