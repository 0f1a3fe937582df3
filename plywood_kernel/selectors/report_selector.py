"""
Module: plywood_kernel.selectors.report_selector
Responsibility: Production reports and the dashboard summary -- finished
    goods output, glue usage per accepted unit, face/back intake and the
    plant-wide snapshot for a given day.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every figure is computed at query time from lots, ledger rows,
      settings and finished goods; no totals are stored.
    - Ratios with an empty divisor report 0.
    - The reporting day is passed in by the caller; the selector never
      reads the wall clock.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from plywood_kernel.domain.topology import WarehouseTopology
from plywood_kernel.domain.validation import per_unit
from plywood_kernel.models.finished_good import FinishedGood, FinishedGoodStatus
from plywood_kernel.models.lot import Lot, LotStatus, MaterialKind
from plywood_kernel.models.setting import PlywoodSetting
from plywood_kernel.models.stage_log import PressDryLog
from plywood_kernel.models.supplier import Supplier
from plywood_kernel.models.warehouse import LocationRole, Warehouse
from plywood_kernel.selectors.base import (
    BaseSelector,
    as_date,
    as_decimal,
    day_end,
    day_start,
)

DASHBOARD_PRODUCTION_DAYS = 7
DASHBOARD_SUPPLIER_DAYS = 30
DASHBOARD_TOP_SUPPLIERS = 5


@dataclass(frozen=True)
class FinishedGoodsRow:
    day: date
    plywood_type: str
    grade: str
    status: FinishedGoodStatus
    total_quantity: Decimal
    batch_count: int


@dataclass(frozen=True)
class GlueUsageRow:
    day: date
    plywood_type: str
    total_glue: Decimal
    total_accepted: Decimal
    setting_count: int
    glue_per_unit: Decimal


@dataclass(frozen=True)
class FaceBackIntakeRow:
    """Received face / back veneer per day; quantities are current balances."""

    day: date
    kind: MaterialKind
    total_quantity: Decimal
    approved_quantity: Decimal
    rejected_quantity: Decimal
    awaiting_quantity: Decimal


@dataclass(frozen=True)
class WarehouseStock:
    warehouse_id: UUID
    warehouse_name: str
    role: LocationRole
    lot_count: int
    total_quantity: Decimal


@dataclass(frozen=True)
class PressDrySnapshot:
    active_machines: int
    input_total: Decimal
    accepted_total: Decimal
    rejected_total: Decimal


@dataclass(frozen=True)
class DailyProductionRow:
    day: date
    plywood_type: str
    total_quantity: Decimal


@dataclass(frozen=True)
class SupplierActivityRow:
    supplier_id: UUID
    supplier_name: str
    lot_count: int
    total_quantity: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    """Plant snapshot for one day."""

    day: date
    stock_by_warehouse: tuple[WarehouseStock, ...]
    awaiting_inspection: int
    finished_today_count: int
    finished_today_quantity: Decimal
    press_dry_today: PressDrySnapshot
    glue_today: Decimal
    available_finished_goods: Decimal
    production_last_days: tuple[DailyProductionRow, ...]
    top_suppliers: tuple[SupplierActivityRow, ...]


class ProductionReportSelector(BaseSelector[FinishedGood]):
    """Selector for production reports."""

    def __init__(self, session: Session, topology: WarehouseTopology):
        super().__init__(session)
        self._topology = topology

    def finished_goods_summary(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[FinishedGoodsRow]:
        """Finished goods per day, type, grade and status; newest day first."""
        day = func.date(FinishedGood.created_at)
        stmt = (
            select(
                day,
                FinishedGood.plywood_type,
                FinishedGood.grade,
                FinishedGood.status,
                func.sum(FinishedGood.quantity),
                func.count(FinishedGood.id),
            )
            .where(*self._created_between(FinishedGood.created_at, start_date, end_date))
            .group_by(day, FinishedGood.plywood_type, FinishedGood.grade, FinishedGood.status)
            .order_by(day.desc(), FinishedGood.plywood_type, FinishedGood.grade, FinishedGood.status)
        )
        return [
            FinishedGoodsRow(
                day=as_date(row_day),
                plywood_type=plywood_type,
                grade=grade,
                status=FinishedGoodStatus(status),
                total_quantity=as_decimal(total),
                batch_count=count,
            )
            for row_day, plywood_type, grade, status, total, count
            in self.session.execute(stmt).all()
        ]

    def glue_usage(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[GlueUsageRow]:
        """Glue consumed per day and plywood type, with glue per accepted unit."""
        day = func.date(PlywoodSetting.created_at)
        stmt = (
            select(
                day,
                PlywoodSetting.plywood_type,
                func.sum(PlywoodSetting.glue_quantity),
                func.sum(PlywoodSetting.accepted_quantity),
                func.count(PlywoodSetting.id),
            )
            .where(*self._created_between(PlywoodSetting.created_at, start_date, end_date))
            .group_by(day, PlywoodSetting.plywood_type)
            .order_by(day.desc(), PlywoodSetting.plywood_type)
        )
        rows = []
        for row_day, plywood_type, glue, accepted, count in self.session.execute(stmt).all():
            total_glue = as_decimal(glue)
            total_accepted = as_decimal(accepted)
            rows.append(
                GlueUsageRow(
                    day=as_date(row_day),
                    plywood_type=plywood_type,
                    total_glue=total_glue,
                    total_accepted=total_accepted,
                    setting_count=count,
                    glue_per_unit=per_unit(total_glue, total_accepted),
                )
            )
        return rows

    def face_back_intake(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[FaceBackIntakeRow]:
        """Received FACE and BACK lots per day and kind, split by status."""
        day = func.date(Lot.created_at)

        def by_status(status: LotStatus):
            return func.sum(case((Lot.status == status.value, Lot.quantity), else_=0))

        stmt = (
            select(
                day,
                Lot.kind,
                func.sum(Lot.quantity),
                by_status(LotStatus.APPROVED),
                by_status(LotStatus.REJECTED),
                by_status(LotStatus.AWAITING_INSPECTION),
            )
            .where(
                Lot.kind.in_([MaterialKind.FACE.value, MaterialKind.BACK.value]),
                Lot.origin_stage.is_(None),
                *self._created_between(Lot.created_at, start_date, end_date),
            )
            .group_by(day, Lot.kind)
            .order_by(day.desc(), Lot.kind)
        )
        return [
            FaceBackIntakeRow(
                day=as_date(row_day),
                kind=MaterialKind(kind),
                total_quantity=as_decimal(total),
                approved_quantity=as_decimal(approved),
                rejected_quantity=as_decimal(rejected),
                awaiting_quantity=as_decimal(awaiting),
            )
            for row_day, kind, total, approved, rejected, awaiting
            in self.session.execute(stmt).all()
        ]

    def dashboard(self, today: date) -> DashboardSummary:
        """
        Plant snapshot for ``today``.

        Includes stock per warehouse (rejected and drained lots excluded),
        the inspection backlog, today's hot-press output, press-dry
        activity and glue use, the last seven days of finished output and
        the five most active suppliers over the last thirty days.
        """
        start, end = day_start(today), day_end(today)

        stock_rows = self.session.execute(
            select(
                Warehouse.id,
                Warehouse.name,
                Warehouse.role,
                func.count(Lot.id),
                func.sum(Lot.quantity),
            )
            .join(Warehouse, Lot.warehouse_id == Warehouse.id)
            .where(Lot.quantity > 0, Lot.status != LotStatus.REJECTED.value)
            .group_by(Warehouse.id, Warehouse.name, Warehouse.role)
            .order_by(Warehouse.name)
        ).all()
        stock = tuple(
            WarehouseStock(
                warehouse_id=wh_id,
                warehouse_name=name,
                role=LocationRole(role),
                lot_count=count,
                total_quantity=as_decimal(total),
            )
            for wh_id, name, role, count, total in stock_rows
        )

        awaiting = self.session.execute(
            select(func.count(Lot.id)).where(
                Lot.status == LotStatus.AWAITING_INSPECTION.value
            )
        ).scalar_one()

        finished_count, finished_total = self.session.execute(
            select(func.count(FinishedGood.id), func.sum(FinishedGood.quantity)).where(
                FinishedGood.created_at >= start, FinishedGood.created_at < end
            )
        ).one()

        machines, dried_in, dried_ok, dried_reject = self.session.execute(
            select(
                func.count(func.distinct(PressDryLog.machine_id)),
                func.sum(PressDryLog.input_quantity),
                func.sum(PressDryLog.accepted_quantity),
                func.sum(PressDryLog.rejected_quantity),
            ).where(PressDryLog.created_at >= start, PressDryLog.created_at < end)
        ).one()

        glue = self.session.execute(
            select(func.sum(PlywoodSetting.glue_quantity)).where(
                PlywoodSetting.created_at >= start, PlywoodSetting.created_at < end
            )
        ).scalar_one()

        available = self.session.execute(
            select(func.sum(FinishedGood.quantity)).where(
                FinishedGood.status == FinishedGoodStatus.AVAILABLE.value
            )
        ).scalar_one()

        production_start = today - timedelta(days=DASHBOARD_PRODUCTION_DAYS - 1)
        production = tuple(
            DailyProductionRow(
                day=as_date(row_day),
                plywood_type=plywood_type,
                total_quantity=as_decimal(total),
            )
            for row_day, plywood_type, total in self._daily_production(production_start, today)
        )

        return DashboardSummary(
            day=today,
            stock_by_warehouse=stock,
            awaiting_inspection=awaiting,
            finished_today_count=finished_count,
            finished_today_quantity=as_decimal(finished_total),
            press_dry_today=PressDrySnapshot(
                active_machines=machines,
                input_total=as_decimal(dried_in),
                accepted_total=as_decimal(dried_ok),
                rejected_total=as_decimal(dried_reject),
            ),
            glue_today=as_decimal(glue),
            available_finished_goods=as_decimal(available),
            production_last_days=production,
            top_suppliers=tuple(self._top_suppliers(today)),
        )

    def _daily_production(self, start_date: date, end_date: date):
        day = func.date(FinishedGood.created_at)
        return self.session.execute(
            select(day, FinishedGood.plywood_type, func.sum(FinishedGood.quantity))
            .where(*self._created_between(FinishedGood.created_at, start_date, end_date))
            .group_by(day, FinishedGood.plywood_type)
            .order_by(day.desc(), FinishedGood.plywood_type)
        ).all()

    def _top_suppliers(self, today: date) -> list[SupplierActivityRow]:
        since = day_start(today - timedelta(days=DASHBOARD_SUPPLIER_DAYS - 1))
        lot_count = func.count(Lot.id)
        stmt = (
            select(Supplier.id, Supplier.name, lot_count, func.sum(Lot.quantity))
            .join(Lot, Lot.supplier_id == Supplier.id)
            .where(
                Lot.origin_stage.is_(None),
                Lot.created_at >= since,
                Lot.created_at < day_end(today),
            )
            .group_by(Supplier.id, Supplier.name)
            .order_by(lot_count.desc(), Supplier.name)
            .limit(DASHBOARD_TOP_SUPPLIERS)
        )
        return [
            SupplierActivityRow(
                supplier_id=supplier_id,
                supplier_name=name,
                lot_count=count,
                total_quantity=as_decimal(total),
            )
            for supplier_id, name, count, total in self.session.execute(stmt).all()
        ]
