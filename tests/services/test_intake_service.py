"""
Tests for IntakeService.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from plywood_kernel.exceptions import SupplierNotFoundError, ValidationError
from plywood_kernel.models.lot import LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.warehouse import LocationRole
from plywood_kernel.services.intake_service import IntakeService
from plywood_kernel.services.supplier_service import SupplierService


class TestReceive:
    def test_receive_creates_awaiting_lot_at_receiving(self, topology, receive_lot, actor_id):
        lot = receive_lot(kind="FACE", quantity="75.5", thickness="0.3", note=" truck 12 ")

        assert lot.kind == MaterialKind.FACE
        assert lot.quantity == Decimal("75.5")
        assert lot.thickness == Decimal("0.3")
        assert lot.unit == QuantityUnit.SHEET
        assert lot.status == LotStatus.AWAITING_INSPECTION
        assert lot.warehouse_id == topology.warehouse_id(LocationRole.RECEIVING)
        assert lot.origin_stage is None
        assert lot.note == "truck 12"
        assert lot.created_by_id == actor_id

    def test_receive_glue_in_liters(self, receive_lot):
        lot = receive_lot(kind=MaterialKind.GLUE, quantity=200, unit="liter")

        assert lot.unit == QuantityUnit.LITER
        assert lot.thickness is None

    def test_receive_uses_plant_default_unit(self, store, topology, clock, actor_id):
        with store.session_scope() as s:
            lot = IntakeService(s, topology, clock, default_unit=QuantityUnit.CUBIC_METER).receive(
                kind=MaterialKind.CORE, quantity=3, actor_id=actor_id
            )

        assert lot.unit == QuantityUnit.CUBIC_METER

    def test_receive_with_supplier(self, store, receive_lot, actor_id):
        with store.session_scope() as s:
            supplier = SupplierService(s).create("CV Sumber Kayu", actor_id)

        lot = receive_lot(supplier_id=supplier.id)

        assert lot.supplier_id == supplier.id

    def test_unknown_supplier(self, topology, receive_lot):
        with pytest.raises(SupplierNotFoundError):
            receive_lot(supplier_id=uuid4())

    @pytest.mark.parametrize("quantity", [0, -5, "x", None])
    def test_bad_quantity(self, topology, receive_lot, quantity):
        with pytest.raises(ValidationError) as exc_info:
            receive_lot(quantity=quantity)

        assert exc_info.value.field == "quantity"

    def test_unknown_kind(self, topology, receive_lot):
        with pytest.raises(ValidationError) as exc_info:
            receive_lot(kind="PLANK")

        assert exc_info.value.field == "kind"

    def test_unknown_unit(self, topology, receive_lot):
        with pytest.raises(ValidationError) as exc_info:
            receive_lot(unit="bundle")

        assert exc_info.value.field == "unit"

    def test_receive_logs_event(self, receive_lot, captured_logs):
        lot = receive_lot(quantity=12)

        received = [r for r in captured_logs() if r["message"] == "lot_received"]
        assert received[0]["lot_id"] == str(lot.id)
        assert received[0]["kind"] == "CORE"
        assert received[0]["quantity"] == "12"
