"""
Tests for job and estimate maintenance
"""

import pytest
from decimal import Decimal
from sqlalchemy.orm import Session

from bodyshop.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from bodyshop.models import Job
from bodyshop.services.allocation import PartClassification, ReadinessStatus, allocate
from bodyshop.services.inventory import StockIssuanceService
from bodyshop.services.jobs import JobService
from conftest import day


class TestJobService:
    """Test suite for JobService"""

    def test_create_job(self, db_session: Session, seeded_job: Job):
        assert seeded_job.police_number == "B 1234 XY"
        assert seeded_job.vehicle_location == "at_workshop"
        assert [l.line_index for l in seeded_job.part_lines] == [0, 1]
        assert seeded_job.part_lines[1].part_number == "LMP-002"
        assert seeded_job.part_lines[0].quantity == Decimal("2")
        assert len(seeded_job.service_lines) == 1
        assert seeded_job.intake_at is not None

    def test_create_defaults_intake_time(self, db_session: Session):
        job = JobService(db_session).create_job({"police_number": "d 9 zz"})
        assert job.police_number == "D 9 ZZ"
        assert job.intake_at is not None
        assert job.wo_number is None

    @pytest.mark.parametrize("data", [
        {"police_number": "  "},
        {"police_number": "B 1", "vehicle_location": "on_the_moon"},
    ])
    def test_create_rejects_bad_data(self, db_session: Session, data):
        with pytest.raises(ValidationError):
            JobService(db_session).create_job(data)

    def test_list_jobs(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)
        service.create_job({"id": "job-2", "police_number": "D 55 AB", "customer_name": "Siti", "intake_at": day(2)})
        service.create_job({"id": "job-0", "police_number": "F 1 AA", "intake_at": day(3)})
        service.close_job("job-0")

        assert [j.id for j in service.list_jobs()] == ["job-1", "job-2"]
        assert [j.id for j in service.list_jobs(search="siti")] == ["job-2"]
        assert [j.id for j in service.list_jobs(include_closed=True)] == ["job-1", "job-2", "job-0"]

    def test_replace_estimate_lines(self, db_session: Session, seeded_job: Job):
        job = JobService(db_session).set_estimate_lines(
            "job-1",
            [{"name": "Grille", "part_number": "grl-9", "quantity": 1}],
            service_lines=[],
        )

        assert [l.name for l in job.part_lines] == ["Grille"]
        assert job.part_lines[0].part_number == "GRL-9"
        assert job.service_lines == []

    def test_issued_line_must_be_kept(self, db_session: Session, seeded_job: Job):
        StockIssuanceService(db_session).issue_part("job-1", 0, issued_by="Andi")
        service = JobService(db_session)

        with pytest.raises(BusinessLogicError, match="cannot be changed"):
            service.set_estimate_lines("job-1", [{"name": "Front Bumper", "inventory_item_id": "item-bumper", "quantity": 3}])
        with pytest.raises(BusinessLogicError, match="cannot be removed"):
            service.set_estimate_lines("job-1", [])

        job = service.set_estimate_lines("job-1", [
            {"name": "Front Bumper (OEM)", "inventory_item_id": "item-bumper", "quantity": 2},
            {"name": "Fog Lamp", "quantity": 2},
        ])
        assert job.part_lines[0].has_arrived is True
        assert job.part_lines[0].name == "Front Bumper (OEM)"
        assert job.part_lines[1].has_arrived is False
        assert len(job.service_lines) == 1

    def test_update_part_line(self, db_session: Session, seeded_job: Job):
        line = JobService(db_session).update_part_line("job-1", 1, {"is_indent": True, "indent_eta": "2 weeks"})
        assert line.is_indent is True
        assert line.indent_eta == "2 weeks"

    def test_update_part_line_rules(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)
        with pytest.raises(ValidationError):
            service.update_part_line("job-1", 0, {"has_arrived": True})
        with pytest.raises(NotFoundError):
            service.update_part_line("job-1", 5, {"is_indent": True})

        StockIssuanceService(db_session).issue_part("job-1", 0, issued_by="Andi")
        with pytest.raises(BusinessLogicError):
            service.update_part_line("job-1", 0, {"quantity": 1})
        assert service.update_part_line("job-1", 0, {"is_ordered": True}).is_ordered is True

    def test_mark_parts_ordered(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)

        job = service.mark_parts_ordered("job-1", [1], indent=True)
        assert job.part_lines[1].is_ordered is True
        assert job.part_lines[1].is_indent is True
        assert job.part_lines[0].is_ordered is False

        with pytest.raises(NotFoundError):
            service.mark_parts_ordered("job-1", [0, 7])

    def test_move_claim_stage(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)

        assert service.move_claim_stage("job-1", "prev").status == "With Owner (Awaiting Parts)"
        assert service.move_claim_stage("job-1", "next").status == "Booked In"
        with pytest.raises(BusinessLogicError):
            service.move_claim_stage("job-1", "next")
        with pytest.raises(ValidationError):
            service.move_claim_stage("job-1", "up")

    def test_close_and_delete(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)

        closed = service.close_job("job-1")
        assert closed.is_closed is True
        assert closed.closed_at is not None
        jobs, _ = service.load_allocation_inputs()
        assert jobs == []

        service.delete_job("job-1")
        with pytest.raises(NotFoundError):
            service.get_job("job-1")


class TestAllocationInputs:

    def test_records_from_database(self, db_session: Session, seeded_job: Job):
        jobs, inventory = JobService(db_session).load_allocation_inputs()

        assert [j.id for j in jobs] == ["job-1"]
        record = jobs[0]
        assert record.wo_number == "WO-2401-001"
        assert record.service_line_count == 1
        assert [l.quantity for l in record.part_lines] == [Decimal("2"), Decimal("1")]
        assert record.part_lines[0].inventory_id == "item-bumper"
        assert len(inventory) == 4

    def test_allocation_over_stored_jobs(self, db_session: Session, seeded_job: Job):
        service = JobService(db_session)
        service.create_job({
            "id": "job-2",
            "police_number": "D 55 AB",
            "wo_number": "WO-2401-002",
            "intake_at": day(2),
            "part_lines": [{"name": "Front Bumper", "inventory_item_id": "item-bumper", "quantity": 4}],
        })

        result = allocate(*service.load_allocation_inputs())

        assert [a.job_id for a in result.jobs] == ["job-1", "job-2"]
        assert result.for_job("job-1").status == ReadinessStatus.COMPLETE
        assert [l.classification for l in result.for_job("job-2").lines] == [PartClassification.WAITING]

    def test_issued_stock_is_not_counted_twice(self, db_session: Session, seeded_job: Job):
        StockIssuanceService(db_session).issue_part("job-1", 0, issued_by="Andi")
        service = JobService(db_session)
        service.create_job({
            "id": "job-2",
            "police_number": "D 55 AB",
            "wo_number": "WO-2401-002",
            "intake_at": day(2),
            "part_lines": [{"name": "Front Bumper", "inventory_item_id": "item-bumper", "quantity": 3}],
        })

        result = allocate(*service.load_allocation_inputs())

        assert result.for_job("job-1").lines[0].classification == PartClassification.ISSUED
        assert result.for_job("job-2").lines[0].classification == PartClassification.READY
        assert result.remaining_stock["item-bumper"] == Decimal("0")
