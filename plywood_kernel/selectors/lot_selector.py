"""
Module: plywood_kernel.selectors.lot_selector
Responsibility: Read-only queries over the lot store -- single lots, filtered
    listings, the inspection queue, stage availability and stock totals.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Availability: ``available_for_stage()`` returns only APPROVED lots
      with quantity > 0, of the stage's required kind, at the stage's
      source warehouse.  AWAITING_INSPECTION and REJECTED lots never
      appear.
    - Work queues (pending, available) are oldest first; listings are
      newest first.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from plywood_kernel.domain.dtos import LotInfo
from plywood_kernel.domain.topology import STAGE_ROUTES, WarehouseTopology
from plywood_kernel.exceptions import LotNotFoundError, ValidationError
from plywood_kernel.models.lot import Lot, LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.models.warehouse import LocationRole, Warehouse
from plywood_kernel.selectors.base import BaseSelector, as_decimal


@dataclass(frozen=True)
class StockSummaryRow:
    """Stock on hand for one (warehouse, kind, thickness, unit, status) group."""

    warehouse_id: UUID
    warehouse_name: str
    role: LocationRole
    kind: MaterialKind
    thickness: Decimal | None
    unit: QuantityUnit
    status: LotStatus
    total_quantity: Decimal
    lot_count: int


class LotSelector(BaseSelector[Lot]):
    """Selector for lot queries."""

    def __init__(self, session: Session, topology: WarehouseTopology):
        super().__init__(session)
        self._topology = topology

    def get(self, lot_id: UUID) -> LotInfo:
        """
        Get one lot.

        Raises:
            LotNotFoundError: if the lot does not exist.
        """
        lot = self.session.get(Lot, lot_id)
        if lot is None:
            raise LotNotFoundError(str(lot_id))
        return LotInfo.from_model(lot)

    def list_lots(
        self,
        status: LotStatus | None = None,
        kind: MaterialKind | None = None,
        warehouse_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> list[LotInfo]:
        """Lots matching every given filter, newest first."""
        stmt = select(Lot)
        if status is not None:
            stmt = stmt.where(Lot.status == LotStatus(status).value)
        if kind is not None:
            stmt = stmt.where(Lot.kind == MaterialKind(kind).value)
        if warehouse_id is not None:
            stmt = stmt.where(Lot.warehouse_id == warehouse_id)
        stmt = stmt.where(*self._created_between(Lot.created_at, start_date, end_date))
        stmt = stmt.order_by(Lot.created_at.desc(), Lot.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return [LotInfo.from_model(lot) for lot in self.session.execute(stmt).scalars()]

    def pending_inspection(self) -> list[LotInfo]:
        """Lots awaiting inspection at Receiving, oldest first."""
        stmt = (
            select(Lot)
            .where(
                Lot.status == LotStatus.AWAITING_INSPECTION.value,
                Lot.warehouse_id == self._topology.warehouse_id(LocationRole.RECEIVING),
            )
            .order_by(Lot.created_at.asc(), Lot.id.asc())
        )
        return [LotInfo.from_model(lot) for lot in self.session.execute(stmt).scalars()]

    def available_for_stage(self, stage: StageKind) -> list[LotInfo]:
        """
        Lots a stage may consume right now, oldest first.

        Raises:
            ValidationError: for stages that do not consume lots
                (plywood_setting, hot_press).
        """
        stage = StageKind(stage)
        stage_route = STAGE_ROUTES.get(stage)
        if stage_route is None or stage_route.source is None:
            raise ValidationError(
                f"Stage {stage.value} does not consume lots", field="stage"
            )

        stmt = select(Lot).where(
            Lot.status == LotStatus.APPROVED.value,
            Lot.quantity > 0,
            Lot.warehouse_id == self._topology.warehouse_id(stage_route.source),
        )
        if stage_route.required_kind is not None:
            stmt = stmt.where(Lot.kind == stage_route.required_kind.value)
        stmt = stmt.order_by(Lot.created_at.asc(), Lot.id.asc())
        return [LotInfo.from_model(lot) for lot in self.session.execute(stmt).scalars()]

    def stock_summary(self, exclude_rejected: bool = True) -> list[StockSummaryRow]:
        """
        Stock on hand grouped by warehouse, kind, thickness, unit and status.

        Drained lots (quantity 0) are left out.
        """
        stmt = (
            select(
                Warehouse.id,
                Warehouse.name,
                Warehouse.role,
                Lot.kind,
                Lot.thickness,
                Lot.unit,
                Lot.status,
                func.sum(Lot.quantity),
                func.count(Lot.id),
            )
            .join(Warehouse, Lot.warehouse_id == Warehouse.id)
            .where(Lot.quantity > 0)
            .group_by(
                Warehouse.id,
                Warehouse.name,
                Warehouse.role,
                Lot.kind,
                Lot.thickness,
                Lot.unit,
                Lot.status,
            )
            .order_by(Warehouse.name, Lot.kind, Lot.thickness, Lot.unit, Lot.status)
        )
        if exclude_rejected:
            stmt = stmt.where(Lot.status != LotStatus.REJECTED.value)

        return [
            StockSummaryRow(
                warehouse_id=wh_id,
                warehouse_name=wh_name,
                role=LocationRole(role),
                kind=MaterialKind(kind),
                thickness=thickness,
                unit=QuantityUnit(unit),
                status=LotStatus(status),
                total_quantity=as_decimal(total),
                lot_count=count,
            )
            for wh_id, wh_name, role, kind, thickness, unit, status, total, count
            in self.session.execute(stmt).all()
        ]
