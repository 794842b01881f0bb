"""
Bodyshop Job Models
SQLAlchemy models for work orders, estimate lines and part usage history
"""
import uuid

from sqlalchemy import (
    Column, String, Integer, Numeric, DateTime, Date, Boolean, Text,
    ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bodyshop.core.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Job(Base):
    """
    Job - one vehicle repair / insurance claim unit

    A job enters the queue at intake; its part lines are filled in when the
    estimate is authored and it leaves allocation once closed or deleted.
    """
    __tablename__ = "jobs"
    __table_args__ = (
        Index("ix_jobs_open", "is_closed", "is_deleted"),
    )

    id = Column(String(64), primary_key=True, default=_new_id, doc="Job ID")
    police_number = Column(String(20), nullable=False, doc="Registration number")
    customer_name = Column(String(200), nullable=False, default='', doc="Customer name")
    car_model = Column(String(100), default='', doc="Vehicle model")
    insurer_name = Column(String(100), default='', doc="Insurance company")

    wo_number = Column(String(50), doc="Work order number, set once the estimate is approved")
    status = Column(String(100), nullable=False, default='', doc="Vehicle workflow status")
    vehicle_location = Column(String(20), nullable=False, default='at_workshop', doc="at_workshop or with_owner")

    is_closed = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)

    intake_at = Column(DateTime(timezone=True), doc="Queue intake timestamp (FIFO key)")
    entry_date = Column(Date, doc="Planned/actual workshop entry date")
    closed_at = Column(DateTime(timezone=True))

    # Cost accumulation
    part_cost = Column(Numeric(15, 2), nullable=False, default=0, doc="Cost of issued spare parts")
    material_cost = Column(Numeric(15, 2), nullable=False, default=0, doc="Cost of issued materials")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    part_lines = relationship(
        "JobPartLine",
        back_populates="job",
        order_by="JobPartLine.line_index",
        cascade="all, delete-orphan",
    )
    service_lines = relationship(
        "JobServiceLine",
        back_populates="job",
        order_by="JobServiceLine.line_index",
        cascade="all, delete-orphan",
    )
    usage_log = relationship(
        "UsageLogEntry",
        back_populates="job",
        order_by="UsageLogEntry.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Job(id='{self.id}', police_number='{self.police_number}', wo='{self.wo_number}')>"


class JobPartLine(Base):
    """Estimate part line - one required spare part of a job"""
    __tablename__ = "job_part_lines"
    __table_args__ = (
        UniqueConstraint("job_id", "line_index", name="job_line"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(64), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    line_index = Column(Integer, nullable=False, doc="Position in the estimate")

    name = Column(String(200), nullable=False, default='')
    part_number = Column(String(50), doc="Part code, used when the inventory link is missing")
    # Not a foreign key: a removed master item leaves a dangling link
    inventory_item_id = Column(String(64), doc="Linked inventory item")
    quantity = Column(Numeric(15, 3), doc="Required quantity, 1 when unset")
    price = Column(Numeric(15, 2), nullable=False, default=0)

    has_arrived = Column(Boolean, nullable=False, default=False, doc="Already issued from stock")
    is_ordered = Column(Boolean, nullable=False, default=False, doc="Purchase order raised")
    is_indent = Column(Boolean, nullable=False, default=False, doc="Backordered at supplier")
    indent_eta = Column(String(50), doc="Supplier ETA text")

    job = relationship("Job", back_populates="part_lines")


class JobServiceLine(Base):
    """Estimate labour line"""
    __tablename__ = "job_service_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(64), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    line_index = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False, default='')
    price = Column(Numeric(15, 2), nullable=False, default=0)
    panel_count = Column(Numeric(6, 2), default=0)

    job = relationship("Job", back_populates="service_lines")


class UsageLogEntry(Base):
    """Issuance history - one committed part or material issue against a job"""
    __tablename__ = "job_usage_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(64), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)

    inventory_item_id = Column(String(64), nullable=False)
    item_name = Column(String(200), nullable=False, default='')
    item_code = Column(String(50), nullable=False, default='-')
    category = Column(String(20), nullable=False, doc="sparepart or material")

    quantity = Column(Numeric(15, 3), nullable=False, doc="Quantity in stock units")
    input_quantity = Column(Numeric(15, 3), doc="Quantity as entered")
    input_unit = Column(String(20), doc="Unit as entered")
    cost_per_unit = Column(Numeric(15, 2), nullable=False, default=0)
    total_cost = Column(Numeric(15, 2), nullable=False, default=0)

    notes = Column(Text, default='')
    issued_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    issued_by = Column(String(100), nullable=False, default='SYSTEM')
    ref_part_index = Column(Integer, doc="Part line index for spare-part issues")
    stock_deducted = Column(Boolean, nullable=False, default=True, doc="Stock was decremented by this issue")

    job = relationship("Job", back_populates="usage_log")
