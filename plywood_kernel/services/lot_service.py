"""
LotService -- the lot store's mutation path.

Responsibility:
    Creates lots, locks them for a stage execution, debits them with a
    guarded UPDATE and flips their inspection status.  Every quantity
    change to an existing lot goes through ``debit()``.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the intake service,
    the quality gate and the transformation engine inside their unit of
    work.

Invariants enforced:
    L1 -- quantity never goes negative.  ``debit()`` issues
          ``quantity = quantity - :n WHERE id = :id AND quantity >= :n`` and
          treats a zero row count as InsufficientStockError.  The CHECK
          constraint on ``lots`` backs this up.
    Q1 -- status moves AWAITING_INSPECTION -> APPROVED | REJECTED only,
          checked on a locked row.

Failure modes:
    - LotNotFoundError from ``get_for_update()`` when the id is unknown.
    - LotAlreadyInspectedError from ``set_inspection_status()`` when the lot
      is no longer awaiting inspection.
    - InsufficientStockError from ``debit()`` when the guard rejects.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update

from plywood_kernel.exceptions import (
    InsufficientStockError,
    LotAlreadyInspectedError,
    LotNotFoundError,
)
from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.lot import Lot, LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.services.base import BaseService

logger = get_logger("services.lot")


class LotService(BaseService[Lot]):
    """
    Lot store mutations.

    Contract:
        Flush-only.  Callers hold the transaction; a lock taken by
        ``find_for_update()`` lasts until the caller's scope ends.
    """

    def find_for_update(self, lot_id: UUID) -> Lot | None:
        """
        Load a lot with a row lock, or None.

        ``populate_existing`` forces a re-read so a lot already in the
        identity map reflects the committed quantity after the lock is
        granted.
        """
        return self.session.execute(
            select(Lot)
            .where(Lot.id == lot_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_for_update(self, lot_id: UUID) -> Lot:
        """Load a lot with a row lock, raising if absent."""
        lot = self.find_for_update(lot_id)
        if lot is None:
            raise LotNotFoundError(str(lot_id))
        return lot

    def create_lot(
        self,
        kind: MaterialKind,
        quantity: Decimal,
        warehouse_id: UUID,
        status: LotStatus,
        actor_id: UUID,
        supplier_id: UUID | None = None,
        thickness: Decimal | None = None,
        unit: QuantityUnit = QuantityUnit.SHEET,
        note: str | None = None,
        origin_stage: StageKind | None = None,
    ) -> Lot:
        now = self.clock.now()
        lot = Lot(
            kind=MaterialKind(kind).value,
            quantity=quantity,
            warehouse_id=warehouse_id,
            status=LotStatus(status).value,
            supplier_id=supplier_id,
            thickness=thickness,
            unit=QuantityUnit(unit).value,
            note=note,
            origin_stage=origin_stage.value if origin_stage else None,
            created_by_id=actor_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(lot)
        self.session.flush()
        return lot

    def debit(self, lot: Lot, amount: Decimal, stage: StageKind, actor_id: UUID) -> Lot:
        """
        Subtract ``amount`` from a locked lot.

        The guard is evaluated by the database, so a debit that raced past
        the caller's predicate check still cannot drive the lot negative.

        Raises:
            InsufficientStockError: if no row satisfied the guard.
        """
        result = self.session.execute(
            update(Lot)
            .where(Lot.id == lot.id, Lot.quantity >= amount)
            .values(
                quantity=Lot.quantity - amount,
                updated_at=self.clock.now(),
                updated_by_id=actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InsufficientStockError(
                lot_id=str(lot.id),
                stage=stage.value,
                requested=str(amount),
                kind=lot.kind,
            )

        self.session.refresh(lot)
        logger.info(
            "lot_debited",
            extra={
                "lot_id": str(lot.id),
                "stage": stage.value,
                "amount": str(amount),
                "remaining": str(lot.quantity),
            },
        )
        return lot

    def credit(
        self,
        source: Lot,
        quantity: Decimal,
        warehouse_id: UUID,
        stage: StageKind,
        actor_id: UUID,
        note: str,
        kind: MaterialKind | None = None,
    ) -> Lot:
        """
        Create the APPROVED output lot of a stage.

        Thickness, unit and supplier are inherited from ``source``; kind is
        inherited unless the route names an output kind.
        """
        lot = self.create_lot(
            kind=kind or MaterialKind(source.kind),
            quantity=quantity,
            warehouse_id=warehouse_id,
            status=LotStatus.APPROVED,
            actor_id=actor_id,
            supplier_id=source.supplier_id,
            thickness=source.thickness,
            unit=QuantityUnit(source.unit),
            note=note,
            origin_stage=stage,
        )
        logger.info(
            "lot_credited",
            extra={
                "lot_id": str(lot.id),
                "source_lot_id": str(source.id),
                "stage": stage.value,
                "quantity": str(quantity),
                "warehouse_id": str(warehouse_id),
            },
        )
        return lot

    def set_inspection_status(
        self,
        lot_id: UUID,
        status: LotStatus,
        actor_id: UUID,
        note: str | None = None,
    ) -> Lot:
        """
        Move a lot out of AWAITING_INSPECTION.

        ``note`` replaces the lot's note when given; otherwise the existing
        note is kept.  Quantity and location are untouched.
        """
        lot = self.get_for_update(lot_id)
        if lot.status != LotStatus.AWAITING_INSPECTION.value:
            raise LotAlreadyInspectedError(str(lot_id), str(lot.status))

        lot.status = LotStatus(status).value
        if note is not None:
            lot.note = note
        lot.updated_at = self.clock.now()
        lot.updated_by_id = actor_id
        self.session.flush()
        return lot
