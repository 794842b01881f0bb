"""
Stock Issuance Service
Commits part and material issues against jobs.

Every operation runs as one database transaction: the stock decrement, the
part-line update, the usage-log entry and the job cost all commit together
or not at all. Stock is re-read and decremented with a conditional UPDATE
at commit time; the virtual reservation shown on the boards is never
trusted for the deduction.
"""
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import update

from bodyshop.core.config import settings
from bodyshop.core.exceptions import (
    AlreadyIssuedError, BodyshopException, BusinessLogicError, InsufficientPermissionsError,
    InsufficientStockError, NotFoundError, UnlinkedPartError, ValidationError
)
from bodyshop.core.logging import get_logger
from bodyshop.models.inventory import InventoryItem
from bodyshop.models.job import Job, JobPartLine, UsageLogEntry
from bodyshop.services.allocation.types import ItemCategory
from bodyshop.services.inventory.inventory_service import InventoryService, parse_quantity

logger = get_logger("issuance")

# (stock unit, entry unit) -> entry units per stock unit
UNIT_CONVERSIONS = {
    ("liter", "ml"): Decimal("1000"),
    ("kg", "gram"): Decimal("1000"),
}
SMALL_UNITS = {"ml", "gram"}


def convert_to_stock_unit(quantity: Decimal, stock_unit: str, entry_unit: Optional[str]) -> Decimal:
    """
    Quantity in the item's stock unit. ML against a Liter item and Gram
    against a Kg item are divided by 1000; any other entry unit is taken
    one-to-one.
    """
    if not entry_unit:
        return quantity
    key = ((stock_unit or '').strip().lower(), entry_unit.strip().lower())
    factor = UNIT_CONVERSIONS.get(key)
    if factor is not None:
        return quantity / factor
    if key[1] in SMALL_UNITS and key[0] != key[1]:
        raise ValidationError(f"Cannot enter {entry_unit} for an item stocked in {stock_unit}")
    return quantity


class StockIssuanceService:
    """
    Commit boundary for stock leaving the store
    """

    def __init__(self, db: Session):
        self.db = db
        self.inventory = InventoryService(db)

    # ------------------------------------------------------------------
    # Spare parts
    # ------------------------------------------------------------------

    def issue_part(
        self,
        job_id: str,
        line_index: int,
        issued_by: str,
        inventory_item_id: Optional[str] = None,
        quantity=None,
    ) -> UsageLogEntry:
        """
        Issue one estimate part line from stock.

        The line must not be issued yet and must resolve to master stock
        (explicit item id, then the line's link, then its part number). An
        explicit item id must match the link of an already linked line.
        Raises InsufficientStockError without side effects when on-hand
        stock cannot cover the line at commit time.
        """
        try:
            job = self._get_job(job_id)
            line = self._get_part_line(job, line_index)
            if line.has_arrived:
                raise AlreadyIssuedError(f"Part line {line_index} of job {job_id} is already issued")

            item = self._resolve_part_item(line, inventory_item_id)
            if quantity is None:
                qty = Decimal(str(line.quantity)) if line.quantity and line.quantity > 0 else Decimal("1")
            else:
                qty = parse_quantity(quantity)

            self._deduct(item, qty)

            cost = self._cost(item, qty)
            line.has_arrived = True
            if not line.inventory_item_id:
                line.inventory_item_id = item.id
            entry = UsageLogEntry(
                inventory_item_id=item.id,
                item_name=item.name,
                item_code=item.code or '-',
                category=ItemCategory.SPAREPART.value,
                quantity=qty,
                cost_per_unit=item.buy_price or 0,
                total_cost=cost,
                notes='Per estimate',
                issued_at=datetime.now(timezone.utc),
                issued_by=issued_by or 'SYSTEM',
                ref_part_index=line.line_index,
                stock_deducted=True,
            )
            job.usage_log.append(entry)
            job.part_cost = Decimal(str(job.part_cost or 0)) + cost

            self.db.commit()
        except InsufficientStockError as e:
            self.db.rollback()
            logger.warning(f"Part issue refused for job {job_id} line {line_index}: {e}")
            raise
        except BodyshopException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Part issue failed for job {job_id} line {line_index}: {e}", exc_info=True)
            raise

        self.db.refresh(entry)
        logger.info(
            f"Issued {qty} {item.unit} {item.code or item.id} to job {job_id} "
            f"line {line_index} by {entry.issued_by}"
        )
        return entry

    # ------------------------------------------------------------------
    # Materials
    # ------------------------------------------------------------------

    def issue_material(
        self,
        job_id: str,
        item_term: str,
        input_quantity,
        issued_by: str,
        input_unit: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> UsageLogEntry:
        """
        Charge bulk material to a job.

        The material is found by exact name or code. Items that are not
        stock-managed are charged without touching stock.
        """
        entered = parse_quantity(input_quantity, 'input_quantity')
        try:
            job = self._get_job(job_id)
            item = self.inventory.find_by_name_or_code(item_term)
            if item is None:
                raise NotFoundError(f"Material {item_term!r} not found in master stock")

            qty = convert_to_stock_unit(entered, item.unit, input_unit)
            deducted = bool(item.is_stock_managed)
            if deducted:
                self._deduct(item, qty)

            cost = self._cost(item, qty)
            entry = UsageLogEntry(
                inventory_item_id=item.id,
                item_name=item.name,
                item_code=item.code or '-',
                category=ItemCategory.MATERIAL.value,
                quantity=qty,
                input_quantity=entered,
                input_unit=input_unit or item.unit,
                cost_per_unit=item.buy_price or 0,
                total_cost=cost,
                notes=notes or 'Material usage',
                issued_at=datetime.now(timezone.utc),
                issued_by=issued_by or 'SYSTEM',
                stock_deducted=deducted,
            )
            job.usage_log.append(entry)
            job.material_cost = Decimal(str(job.material_cost or 0)) + cost

            self.db.commit()
        except InsufficientStockError as e:
            self.db.rollback()
            logger.warning(f"Material issue refused for job {job_id}: {e}")
            raise
        except BodyshopException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Material issue failed for job {job_id}: {e}", exc_info=True)
            raise

        self.db.refresh(entry)
        logger.info(
            f"Charged {entered} {entry.input_unit} ({qty} {item.unit}) of "
            f"{item.code or item.name} to job {job_id} by {entry.issued_by}"
        )
        return entry

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel_issuance(self, job_id: str, entry_id: int, role: str, reason: str) -> Job:
        """
        Reverse a usage-log entry: restore stock, reverse the job cost and
        reopen the referenced part line. Managers only.
        """
        if settings.MANAGER_ROLE_KEYWORD not in (role or ''):
            raise InsufficientPermissionsError("Only managers can cancel an issuance")
        if not (reason or '').strip():
            raise ValidationError("A cancellation reason is required")

        try:
            job = self._get_job(job_id)
            entry = next((e for e in job.usage_log if e.id == entry_id), None)
            if entry is None:
                raise NotFoundError(f"Usage entry {entry_id} not found on job {job_id}")

            if entry.stock_deducted:
                restored = self.db.execute(
                    update(InventoryItem)
                    .where(InventoryItem.id == entry.inventory_item_id)
                    .values(quantity_on_hand=InventoryItem.quantity_on_hand + entry.quantity)
                    .execution_options(synchronize_session=False)
                )
                if restored.rowcount != 1:
                    logger.warning(
                        f"Item {entry.inventory_item_id} no longer exists, stock not restored"
                    )

            cost = Decimal(str(entry.total_cost or 0))
            if entry.category == ItemCategory.MATERIAL.value:
                job.material_cost = Decimal(str(job.material_cost or 0)) - cost
            else:
                job.part_cost = Decimal(str(job.part_cost or 0)) - cost
                if entry.ref_part_index is not None:
                    line = next(
                        (l for l in job.part_lines if l.line_index == entry.ref_part_index), None
                    )
                    if line is not None:
                        line.has_arrived = False

            job.usage_log.remove(entry)
            self.db.commit()
        except BodyshopException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Cancellation failed for job {job_id} entry {entry_id}: {e}", exc_info=True)
            raise

        self.db.refresh(job)
        logger.info(f"Cancelled usage entry {entry_id} on job {job_id} by {role}: {reason}")
        return job

    def usage_history(self, job_id: str, category: Optional[str] = None) -> List[UsageLogEntry]:
        """Usage entries of a job, newest first"""
        job = self._get_job(job_id)
        entries = [e for e in job.usage_log if category is None or e.category == category]
        return sorted(entries, key=lambda e: (e.issued_at, e.id), reverse=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_job(self, job_id: str) -> Job:
        job = self.db.query(Job).filter(Job.id == job_id).with_for_update().first()
        if job is None or job.is_deleted:
            raise NotFoundError(f"Job {job_id} not found")
        return job

    def _get_part_line(self, job: Job, line_index: int) -> JobPartLine:
        for line in job.part_lines:
            if line.line_index == line_index:
                return line
        raise NotFoundError(f"Job {job.id} has no part line {line_index}")

    def _resolve_part_item(self, line: JobPartLine, inventory_item_id: Optional[str]) -> InventoryItem:
        if inventory_item_id:
            if line.inventory_item_id and line.inventory_item_id != inventory_item_id:
                raise BusinessLogicError(
                    f"Part line {line.line_index} is linked to {line.inventory_item_id}, "
                    f"not {inventory_item_id}"
                )
            item = self.db.get(InventoryItem, inventory_item_id)
            if item is None:
                raise NotFoundError(f"Inventory item {inventory_item_id} not found")
            return item
        item = None
        if line.inventory_item_id:
            item = self.db.get(InventoryItem, line.inventory_item_id)
        if item is None:
            item = self.inventory.find_by_code(line.part_number)
        if item is None:
            raise UnlinkedPartError(
                f"Part line {line.line_index} ({line.name}) is not linked to master stock"
            )
        return item

    def _deduct(self, item: InventoryItem, qty: Decimal) -> None:
        """Conditional decrement; refuses when the current on-hand is short"""
        result = self.db.execute(
            update(InventoryItem)
            .where(InventoryItem.id == item.id, InventoryItem.quantity_on_hand >= qty)
            .values(quantity_on_hand=InventoryItem.quantity_on_hand - qty)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.refresh(item)
            raise InsufficientStockError(item.id, Decimal(str(item.quantity_on_hand or 0)), qty)

    def _cost(self, item: InventoryItem, qty: Decimal) -> Decimal:
        places = Decimal(1).scaleb(-settings.CURRENCY_DECIMAL_PLACES)
        return (Decimal(str(item.buy_price or 0)) * qty).quantize(places)
