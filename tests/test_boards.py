"""
Tests for the workshop board presets
"""

import pytest
from datetime import date
from decimal import Decimal

from bodyshop.services.allocation import (
    CLAIM_STAGES, PartClassification, ReadinessStatus, VehicleLocation,
    booking_candidates, claims_control_board, next_claim_stage,
    part_monitoring, production_part_status
)
from bodyshop.services.allocation.boards import ProductionPartLabel, StockHint
from conftest import day, job, part, stock

WITH_OWNER = VehicleLocation.WITH_OWNER.value


class TestClaimsControlBoard:

    @pytest.fixture
    def jobs(self):
        return [
            job("J1", day(1), [part("X", 1)], wo=None, status="Booked In", police_number="B 1 AA"),
            job("J2", day(2), [part("X", 1)], wo=None, status="Awaiting Estimate", police_number="D 2 BB"),
            job("J3", day(3), [], wo=None, status="Price Negotiation", service_line_count=2),
            job("J4", day(1), [part("X", 1)], status="Work In Progress"),
        ]

    def test_columns_and_ready_to_call(self, jobs):
        board = claims_control_board(jobs, [stock("X", 1)])

        assert list(board.columns) == list(CLAIM_STAGES)
        assert [a.job_id for a in board.columns["Booked In"]] == ["J1"]
        assert [a.job_id for a in board.columns["Awaiting Estimate"]] == ["J2"]
        assert [a.job_id for a in board.columns["Price Negotiation"]] == ["J3"]
        assert [a.job_id for a in board.ready_to_call] == ["J1"]

    def test_job_without_parts_is_not_ready_to_call(self, jobs):
        board = claims_control_board(jobs, [stock("X", 1)])
        j3 = board.columns["Price Negotiation"][0]
        assert j3.status == ReadinessStatus.NONE

    def test_search_narrows_competing_jobs(self, jobs):
        """Searching for the later job removes the earlier one from the pass"""
        board = claims_control_board(jobs, [stock("X", 1)], search_term="d2bb")

        assert [a.job_id for a in board.ready_to_call] == ["J2"]
        assert board.columns["Booked In"] == []


class TestNextClaimStage:

    def test_forward_and_back(self):
        assert next_claim_stage("Awaiting Estimate", "next") == "Awaiting Insurer Approval"
        assert next_claim_stage("Booked In", "prev") == "With Owner (Awaiting Parts)"

    def test_ends_of_the_board(self):
        assert next_claim_stage("Awaiting Estimate", "prev") is None
        assert next_claim_stage("Booked In", "next") is None

    def test_non_claim_status(self):
        assert next_claim_stage("Work In Progress", "next") is None

    def test_bad_direction(self):
        with pytest.raises(ValueError):
            next_claim_stage("Booked In", "sideways")


class TestBookingCandidates:

    @pytest.fixture
    def jobs(self):
        return [
            job("J1", day(1), [part("X", 1)], status="Work In Progress", police_number="B 1 AA"),
            job("J2", day(2), [part("X", 1)], status="With Owner (Awaiting Parts)",
                vehicle_location=WITH_OWNER, police_number="B 2 BB"),
            job("J3", day(3), [], status="With Owner (Awaiting Parts)", vehicle_location=WITH_OWNER,
                service_line_count=1, entry_date=date(2024, 2, 5), police_number="B 3 CC"),
            job("J4", day(4), [part("Y", 1)], status="Booked In", entry_date=date(2024, 2, 1),
                police_number="B 4 DD"),
            job("J5", day(5), [], status="With Owner (Awaiting Parts)", vehicle_location=WITH_OWNER),
        ]

    def test_candidates_sorted_by_entry_date(self, jobs):
        candidates = booking_candidates(jobs, [stock("X", 1), stock("Y", 0)])
        assert [a.job_id for a in candidates] == ["J4", "J3"]

    def test_service_only_job_counts_as_ready(self, jobs):
        candidates = booking_candidates(jobs, [stock("X", 1)])
        j3 = next(a for a in candidates if a.job_id == "J3")
        assert j3.is_ready
        assert j3.total_count == 0

    def test_search_does_not_change_competition(self, jobs):
        """J2 still loses its part to J1 when the search only shows J2"""
        assert booking_candidates(jobs, [stock("X", 1)], search_term="B 2 BB") == []
        assert [a.job_id for a in booking_candidates(jobs, [stock("X", 1)], search_term="b3cc")] == ["J3"]

    def test_with_owner_job_ready_once_stock_covers_it(self, jobs):
        candidates = booking_candidates(jobs, [stock("X", 2)])
        assert "J2" in [a.job_id for a in candidates]


class TestPartMonitoring:

    @pytest.fixture
    def jobs(self):
        return [
            job("J1", day(1), [part("X", 1, has_arrived=True), part("Z", 1)], police_number="B 1 AA"),
            job("J2", day(2), []),
            job("J3", day(3), [part("X", 1), part("NOPE", 1)], police_number="B 3 CC"),
            job("J4", day(4), [part("X", 2, has_arrived=True)], police_number="B 4 DD"),
            job("J5", day(5), [part("X", 1)], wo=None),
        ]

    @pytest.fixture
    def inventory(self):
        return [stock("X", 3), stock("Z", 0)]

    def test_arrival_status_and_summary(self, jobs, inventory):
        report = part_monitoring(jobs, inventory)

        arrival = {e.allocation.job_id: (e.arrival_status, e.issued_count) for e in report.entries}
        assert arrival == {
            "J1": (ReadinessStatus.PARTIAL, 1),
            "J3": (ReadinessStatus.NONE, 0),
            "J4": (ReadinessStatus.COMPLETE, 1),
        }
        assert (report.summary.total, report.summary.complete,
                report.summary.partial, report.summary.none) == (3, 1, 1, 1)

    def test_entries_carry_fifo_readiness(self, jobs, inventory):
        report = part_monitoring(jobs, inventory)
        j3 = next(e for e in report.entries if e.allocation.job_id == "J3")

        assert [l.classification for l in j3.allocation.lines] == [
            PartClassification.READY, PartClassification.WAITING
        ]
        assert j3.allocation.status == ReadinessStatus.PARTIAL

    def test_stock_hints(self, jobs, inventory):
        report = part_monitoring(jobs, inventory)
        hints = {e.allocation.job_id: [h.hint for h in e.stock_hints] for e in report.entries}

        assert hints["J1"] == [StockHint.IN_STOCK, StockHint.OUT_OF_STOCK]
        assert hints["J3"] == [StockHint.IN_STOCK, StockHint.NOT_LINKED]
        j1 = next(e for e in report.entries if e.allocation.job_id == "J1")
        assert j1.stock_hints[0].on_hand == Decimal("3")

    def test_stock_hint_for_unreadable_on_hand(self):
        inventory = [stock("X", 0)]
        inventory[0].quantity_on_hand = Decimal("NaN")

        report = part_monitoring([job("J1", day(1), [part("X", 1)])], inventory)

        hint = report.entries[0].stock_hints[0]
        assert hint.hint == StockHint.OUT_OF_STOCK
        assert hint.on_hand == Decimal("0")

    def test_filters_leave_summary_alone(self, jobs, inventory):
        report = part_monitoring(jobs, inventory, status_filter=ReadinessStatus.COMPLETE)
        assert [e.allocation.job_id for e in report.entries] == ["J4"]
        assert report.summary.total == 3

        report = part_monitoring(jobs, inventory, search_term="b 3")
        assert [e.allocation.job_id for e in report.entries] == ["J3"]
        assert report.summary.total == 3


class TestProductionPartStatus:

    @pytest.fixture
    def jobs(self):
        return [
            job("P1", day(1), [part("X", 1)], status="Work In Progress"),
            job("P2", day(2), [part("X", 1)], status="Work In Progress"),
            job("P3", day(3), [part("X", 2), part("Y", 1, is_indent=True)], status="Finished (Awaiting Pickup)"),
            job("P4", day(4), [part("Y", 1, is_ordered=True)], status="Outpatient Repair"),
            job("P5", day(5), [part("Y", 1)], status="Awaiting Parts"),
            job("P6", day(6), [part("X", 1)], status="Work In Progress", vehicle_location=WITH_OWNER),
            job("P7", day(7), [], status="Booked In", vehicle_location=WITH_OWNER),
            job("P8", day(8), [part("X", 1), part("Y", 1)], status="Work In Progress"),
            job("P9", day(9), [part("X", 1)], status="Delivered"),
        ]

    def test_labels(self, jobs):
        statuses = production_part_status(jobs, [stock("X", 1), stock("Y", 0)])
        labels = {s.allocation.job_id: s.label for s in statuses}

        assert labels == {
            "P1": ProductionPartLabel.PART_READY,
            "P2": ProductionPartLabel.PART_READY,
            "P3": ProductionPartLabel.PART_INDENT,
            "P4": ProductionPartLabel.ON_ORDER,
            "P5": ProductionPartLabel.NEED_ORDER,
            "P7": None,
            "P8": ProductionPartLabel.PARTIAL_READY,
        }

    def test_search(self, jobs):
        jobs[0].police_number = "B 777 ZZ"
        statuses = production_part_status(jobs, [stock("X", 1)], search_term="777")
        assert [s.allocation.job_id for s in statuses] == ["P1"]
