"""
IntakeService -- receiving raw material into the Receiving warehouse.

Responsibility:
    Records a delivery as a new lot at the Receiving warehouse with status
    AWAITING_INSPECTION.  The quality gate decides it from there.

Architecture position:
    Kernel > Services.  Flush-only; the caller owns the transaction.

Failure modes:
    - ValidationError for a non-positive quantity.
    - SupplierNotFoundError when ``supplier_id`` is given but unknown.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from plywood_kernel.domain.clock import Clock
from plywood_kernel.domain.dtos import LotInfo
from plywood_kernel.domain.topology import WarehouseTopology
from plywood_kernel.domain.validation import ZERO, clean_note, to_quantity
from plywood_kernel.exceptions import SupplierNotFoundError, ValidationError
from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.lot import Lot, LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.supplier import Supplier
from plywood_kernel.models.warehouse import LocationRole
from plywood_kernel.services.base import BaseService
from plywood_kernel.services.lot_service import LotService

logger = get_logger("services.intake")


class IntakeService(BaseService[Lot]):
    """Creates received lots awaiting inspection."""

    def __init__(
        self,
        session: Session,
        topology: WarehouseTopology,
        clock: Clock | None = None,
        default_unit: QuantityUnit = QuantityUnit.SHEET,
    ):
        super().__init__(session, clock)
        self._topology = topology
        self._default_unit = default_unit
        self._lots = LotService(session, self.clock)

    def receive(
        self,
        kind: MaterialKind | str,
        quantity: Any,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        thickness: Any = None,
        unit: QuantityUnit | str | None = None,
        note: str | None = None,
    ) -> LotInfo:
        """
        Receive a delivery at the Receiving warehouse.

        Args:
            kind: Material kind (CORE, FACE, BACK, LONGCORE, GLUE).
            quantity: Delivered quantity, > 0.
            actor_id: Operator recording the delivery.
            supplier_id: Supplier the delivery came from.
            thickness: Sheet thickness; omitted for glue.
            unit: Counting unit; defaults to the plant's default unit.
            note: Free-text remark.

        Returns:
            LotInfo for the new AWAITING_INSPECTION lot.
        """
        try:
            material = MaterialKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown material kind: {kind!r}", field="kind")

        try:
            counting_unit = QuantityUnit(unit) if unit is not None else self._default_unit
        except ValueError:
            raise ValidationError(f"Unknown unit: {unit!r}", field="unit")

        amount = to_quantity(quantity, "quantity")
        if amount <= ZERO:
            raise ValidationError("quantity must be greater than zero", field="quantity")

        sheet_thickness = to_quantity(thickness, "thickness") if thickness is not None else None

        if supplier_id is not None and self.session.get(Supplier, supplier_id) is None:
            raise SupplierNotFoundError(str(supplier_id))

        lot = self._lots.create_lot(
            kind=material,
            quantity=amount,
            warehouse_id=self._topology.warehouse_id(LocationRole.RECEIVING),
            status=LotStatus.AWAITING_INSPECTION,
            actor_id=actor_id,
            supplier_id=supplier_id,
            thickness=sheet_thickness,
            unit=counting_unit,
            note=clean_note(note),
        )

        logger.info(
            "lot_received",
            extra={
                "lot_id": str(lot.id),
                "kind": material.value,
                "quantity": str(amount),
                "supplier_id": str(supplier_id) if supplier_id else None,
            },
        )
        return LotInfo.from_model(lot)
