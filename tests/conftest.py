"""
Test Configuration and Fixtures
Shared testing infrastructure for the workshop operations API
"""

import os

# Must be set before the application settings are imported
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_bodyshop.db")

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator, Dict, Any, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from bodyshop.main import app
from bodyshop.core.database import get_db, Base
from bodyshop.models import InventoryItem, Job
from bodyshop.services.allocation import JobRecord, PartLine, StockRecord
from bodyshop.services.inventory import InventoryService
from bodyshop.services.jobs import JobService

# In-memory database shared by every connection of the test engine
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# In-memory record builders for the allocation core

def day(n: int) -> datetime:
    """Intake timestamp on day ``n`` of January 2024"""
    return datetime(2024, 1, n, 8, 0, tzinfo=timezone.utc)


def stock(item_id: str, quantity, code: str = "", **kwargs) -> StockRecord:
    return StockRecord(id=item_id, quantity_on_hand=Decimal(str(quantity)), code=code, **kwargs)


def part(inventory_id=None, quantity=None, **kwargs) -> PartLine:
    return PartLine(inventory_id=inventory_id, quantity=quantity, **kwargs)


def job(job_id: str, intake=None, parts: List[PartLine] = None, wo="WO-1", **kwargs) -> JobRecord:
    return JobRecord(
        id=job_id,
        wo_number=wo,
        intake_timestamp=intake,
        part_lines=list(parts or []),
        **kwargs
    )


# Database sample data

@pytest.fixture
def sample_inventory_data() -> List[Dict[str, Any]]:
    """Master stock: two spare parts and two materials"""
    return [
        {
            "id": "item-bumper",
            "code": "BMP-001",
            "name": "Front Bumper Avanza",
            "category": "sparepart",
            "quantity_on_hand": 5,
            "unit": "Pcs",
            "buy_price": 850000,
            "sell_price": 1100000,
        },
        {
            "id": "item-lamp",
            "code": "LMP-002",
            "name": "Head Lamp Left",
            "category": "sparepart",
            "quantity_on_hand": 1,
            "unit": "Pcs",
            "buy_price": 1200000,
        },
        {
            "id": "item-primer",
            "code": "PRM-01",
            "name": "Epoxy Primer",
            "category": "material",
            "quantity_on_hand": 4,
            "unit": "Liter",
            "buy_price": 150000,
        },
        {
            "id": "item-tape",
            "code": "TAPE",
            "name": "Masking Tape",
            "category": "material",
            "quantity_on_hand": 0,
            "unit": "Roll",
            "buy_price": 12000,
            "is_stock_managed": False,
        },
    ]


@pytest.fixture
def sample_job_data() -> Dict[str, Any]:
    """Job with two estimate part lines and one labour line"""
    return {
        "id": "job-1",
        "police_number": "B 1234 XY",
        "customer_name": "Budi Santoso",
        "car_model": "Toyota Avanza",
        "insurer_name": "Asuransi Maju",
        "wo_number": "WO-2401-001",
        "status": "Booked In",
        "intake_at": day(1),
        "part_lines": [
            {"name": "Front Bumper", "inventory_item_id": "item-bumper", "quantity": 2, "price": 1100000},
            {"name": "Head Lamp", "part_number": "lmp-002", "quantity": 1, "price": 1500000},
        ],
        "service_lines": [
            {"name": "Bumper repaint", "price": 750000, "panel_count": 1},
        ],
    }


@pytest.fixture
def seeded_inventory(db_session: Session, sample_inventory_data) -> Dict[str, InventoryItem]:
    service = InventoryService(db_session)
    return {data["id"]: service.create_item(data) for data in sample_inventory_data}


@pytest.fixture
def seeded_job(db_session: Session, seeded_inventory, sample_job_data) -> Job:
    return JobService(db_session).create_job(sample_job_data)
