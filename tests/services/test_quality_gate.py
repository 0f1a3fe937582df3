"""
Tests for QualityGate.

Covers:
- Approve / reject of lots awaiting inspection
- "already processed" vs "not found" failures
- Mandatory rejection note
- Best-effort batch inspection with per-item results
- Inspection never moves or resizes a lot
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from plywood_kernel.domain.dtos import Disposition, InspectionItem, InspectionOutcome
from plywood_kernel.exceptions import (
    LotAlreadyInspectedError,
    LotNotFoundError,
    NotFoundError,
    ValidationError,
)
from plywood_kernel.models.lot import LotStatus, MaterialKind
from plywood_kernel.models.warehouse import LocationRole


class TestApprove:
    """Single-lot approval."""

    def test_approve_keeps_quantity_and_location(self, receive_lot, quality_gate, topology, actor_id):
        lot = receive_lot(quantity=Decimal("100"))

        approved = quality_gate.approve(lot.id, actor_id)

        assert approved.status == LotStatus.APPROVED
        assert approved.quantity == Decimal("100")
        assert approved.warehouse_id == topology.warehouse_id(LocationRole.RECEIVING)
        assert approved.updated_by_id == actor_id

    def test_approve_keeps_existing_note_when_none_given(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot(note="pallet 7")

        approved = quality_gate.approve(lot.id, actor_id)

        assert approved.note == "pallet 7"

    def test_approve_replaces_note_when_given(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot(note="pallet 7")

        approved = quality_gate.approve(lot.id, actor_id, note="moisture ok")

        assert approved.note == "moisture ok"

    def test_approve_twice_is_already_processed(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot()
        quality_gate.approve(lot.id, actor_id)

        with pytest.raises(LotAlreadyInspectedError) as exc_info:
            quality_gate.approve(lot.id, actor_id)

        assert exc_info.value.code == "LOT_ALREADY_INSPECTED"
        assert "already processed" in str(exc_info.value)

    def test_approve_unknown_lot_is_not_found(self, quality_gate, topology, actor_id):
        with pytest.raises(LotNotFoundError) as exc_info:
            quality_gate.approve(uuid4(), actor_id)

        assert exc_info.value.code == "LOT_NOT_FOUND"
        assert isinstance(exc_info.value, NotFoundError)

    def test_approve_logs_event(self, receive_lot, quality_gate, actor_id, captured_logs):
        lot = receive_lot()

        quality_gate.approve(lot.id, actor_id)

        approvals = [r for r in captured_logs() if r["message"] == "lot_approved"]
        assert len(approvals) == 1
        assert approvals[0]["lot_id"] == str(lot.id)
        assert approvals[0]["actor_id"] == str(actor_id)


class TestReject:
    """Single-lot rejection."""

    def test_reject_sets_status_and_note(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot(kind=MaterialKind.FACE, quantity=Decimal("40"))

        rejected = quality_gate.reject(lot.id, actor_id, note="  warped  ")

        assert rejected.status == LotStatus.REJECTED
        assert rejected.note == "warped"
        assert rejected.quantity == Decimal("40")

    @pytest.mark.parametrize("note", [None, "", "   "])
    def test_reject_requires_note(self, receive_lot, quality_gate, actor_id, note):
        lot = receive_lot()

        with pytest.raises(ValidationError):
            quality_gate.reject(lot.id, actor_id, note=note)

        pending_ids = [p.id for p in quality_gate.pending()]
        assert lot.id in pending_ids

    def test_reject_after_approve_is_already_processed(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot()
        quality_gate.approve(lot.id, actor_id)

        with pytest.raises(LotAlreadyInspectedError):
            quality_gate.reject(lot.id, actor_id, note="late")


class TestBatch:
    """Best-effort batch inspection."""

    def test_stale_item_is_skipped(self, receive_lot, quality_gate, actor_id):
        """Three lots, one already processed: success with two applied."""
        first, second, third = receive_lot(), receive_lot(), receive_lot()
        quality_gate.approve(second.id, actor_id)

        result = quality_gate.batch(
            [
                InspectionItem(first.id, Disposition.APPROVE),
                InspectionItem(second.id, Disposition.APPROVE),
                InspectionItem(third.id, Disposition.REJECT, note="delaminated"),
            ],
            actor_id,
        )

        assert result.applied_count == 2
        assert [i.outcome for i in result.items] == [
            InspectionOutcome.APPLIED,
            InspectionOutcome.SKIPPED,
            InspectionOutcome.APPLIED,
        ]
        assert result.skipped[0].lot_id == second.id
        assert result.skipped[0].reason_code == "LOT_ALREADY_INSPECTED"
        assert result.items[2].lot.status == LotStatus.REJECTED

    def test_unknown_lot_and_missing_reject_note_are_skipped(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot()
        stray = uuid4()

        result = quality_gate.batch(
            [
                InspectionItem(stray, Disposition.APPROVE),
                InspectionItem(lot.id, Disposition.REJECT),
            ],
            actor_id,
        )

        assert result.applied_count == 0
        assert [i.reason_code for i in result.skipped] == ["LOT_NOT_FOUND", "VALIDATION_ERROR"]
        assert lot.id in [p.id for p in quality_gate.pending()]

    def test_unknown_disposition_is_skipped(self, receive_lot, quality_gate, actor_id, captured_logs):
        """An unrecognised disposition skips its line; the rest still commit."""
        lowercase = receive_lot()
        legacy_code = receive_lot()
        valid = receive_lot()

        result = quality_gate.batch(
            [
                InspectionItem(lowercase.id, "approve"),
                InspectionItem(legacy_code.id, "OK"),
                InspectionItem(valid.id, "APPROVE"),
            ],
            actor_id,
        )

        assert result.applied_count == 1
        assert result.applied[0].lot.id == valid.id
        assert result.applied[0].disposition == Disposition.APPROVE
        assert [(i.disposition, i.reason_code) for i in result.skipped] == [
            ("approve", "VALIDATION_ERROR"),
            ("OK", "VALIDATION_ERROR"),
        ]
        pending_ids = [p.id for p in quality_gate.pending()]
        assert lowercase.id in pending_ids
        assert legacy_code.id in pending_ids
        assert valid.id not in pending_ids

        messages = [r["message"] for r in captured_logs()]
        assert "transaction_rolled_back" not in messages
        assert messages.count("inspection_item_skipped") == 2

    def test_duplicate_item_applies_once(self, receive_lot, quality_gate, actor_id):
        lot = receive_lot()

        result = quality_gate.batch(
            [
                InspectionItem(lot.id, Disposition.APPROVE),
                InspectionItem(lot.id, Disposition.REJECT, note="second thoughts"),
            ],
            actor_id,
        )

        assert result.applied_count == 1
        assert result.applied[0].lot.status == LotStatus.APPROVED

    def test_empty_batch(self, quality_gate, topology, actor_id):
        result = quality_gate.batch([], actor_id)

        assert result.applied_count == 0
        assert result.items == ()

    def test_batch_logs_summary(self, receive_lot, quality_gate, actor_id, captured_logs):
        lot = receive_lot()

        quality_gate.batch([InspectionItem(lot.id, Disposition.APPROVE)], actor_id)

        summary = [r for r in captured_logs() if r["message"] == "inspection_batch_applied"]
        assert summary[0]["applied_count"] == 1
        assert summary[0]["skipped_count"] == 0


class TestPending:
    """Inspection queue."""

    def test_pending_is_fifo_and_excludes_decided(self, receive_lot, quality_gate, clock, actor_id):
        first = receive_lot()
        clock.advance(60)
        second = receive_lot()
        clock.advance(60)
        third = receive_lot()
        quality_gate.approve(second.id, actor_id)

        pending = quality_gate.pending()

        assert [p.id for p in pending] == [first.id, third.id]
