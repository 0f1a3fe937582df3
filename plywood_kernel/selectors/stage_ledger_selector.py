"""
Module: plywood_kernel.selectors.stage_ledger_selector
Responsibility: Read-only queries over the per-stage ledgers -- historical
    entries and daily yield per stage (and per machine for press-dry).
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Yield = accepted / (accepted + rejected) x 100, rounded to 2 places.
      An empty divisor reports 0, never an error.
    - Entries are newest first; daily rows are newest day first, then
      machine number.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from plywood_kernel.domain.dtos import MachineInfo, StageEntryInfo
from plywood_kernel.domain.validation import yield_percentage
from plywood_kernel.exceptions import ValidationError
from plywood_kernel.models.machine import PressDryerMachine
from plywood_kernel.models.stage_log import (
    STAGE_LOG_MODELS,
    PressDryLog,
    StageKind,
    StageLogBase,
)
from plywood_kernel.selectors.base import BaseSelector, as_date, as_decimal


@dataclass(frozen=True)
class DailyYieldRow:
    """Aggregated output of one stage (and machine) on one day."""

    day: date
    stage: StageKind
    machine_id: UUID | None
    machine_number: int | None
    entry_count: int
    input_total: Decimal
    accepted_total: Decimal
    rejected_total: Decimal
    yield_percentage: Decimal


class StageLedgerSelector(BaseSelector[StageLogBase]):
    """Selector for stage ledger queries."""

    @staticmethod
    def _model_for(stage: StageKind) -> type[StageLogBase]:
        stage = StageKind(stage)
        model = STAGE_LOG_MODELS.get(stage)
        if model is None:
            raise ValidationError(
                f"Stage {stage.value} has no stage ledger", field="stage"
            )
        return model

    @staticmethod
    def _check_machine_filter(stage: StageKind, machine_id: UUID | None) -> None:
        if machine_id is not None and stage != StageKind.PRESS_DRY:
            raise ValidationError(
                f"Stage {stage.value} is not run on a machine", field="machine_id"
            )

    def entries(
        self,
        stage: StageKind,
        start_date: date | None = None,
        end_date: date | None = None,
        machine_id: UUID | None = None,
        limit: int | None = None,
    ) -> list[StageEntryInfo]:
        """Ledger rows for ``stage``, newest first."""
        model = self._model_for(stage)
        self._check_machine_filter(model.stage, machine_id)

        stmt = select(model).where(
            *self._created_between(model.created_at, start_date, end_date)
        )
        if machine_id is not None:
            stmt = stmt.where(PressDryLog.machine_id == machine_id)
        stmt = stmt.order_by(model.created_at.desc(), model.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return [StageEntryInfo.from_model(e) for e in self.session.execute(stmt).scalars()]

    def daily_yield(
        self,
        stage: StageKind,
        start_date: date | None = None,
        end_date: date | None = None,
        machine_id: UUID | None = None,
    ) -> list[DailyYieldRow]:
        """
        Per-day totals and yield for ``stage``.

        Press-dry rows are split per machine; other stages get one row per
        day.
        """
        model = self._model_for(stage)
        self._check_machine_filter(model.stage, machine_id)

        day = func.date(model.created_at)
        totals = (
            func.count(model.id),
            func.sum(model.input_quantity),
            func.sum(model.accepted_quantity),
            func.sum(model.rejected_quantity),
        )
        where = self._created_between(model.created_at, start_date, end_date)

        if model is PressDryLog:
            stmt = (
                select(day, PressDryerMachine.id, PressDryerMachine.number, *totals)
                .join(PressDryerMachine, PressDryLog.machine_id == PressDryerMachine.id)
                .where(*where)
                .group_by(day, PressDryerMachine.id, PressDryerMachine.number)
                .order_by(day.desc(), PressDryerMachine.number)
            )
            if machine_id is not None:
                stmt = stmt.where(PressDryLog.machine_id == machine_id)
            rows = self.session.execute(stmt).all()
        else:
            stmt = (
                select(day, *totals)
                .where(*where)
                .group_by(day)
                .order_by(day.desc())
            )
            rows = [
                (row_day, None, None, count, total_in, accepted, rejected)
                for row_day, count, total_in, accepted, rejected
                in self.session.execute(stmt).all()
            ]

        result = []
        for row_day, m_id, m_number, count, total_in, accepted, rejected in rows:
            accepted_total = as_decimal(accepted)
            rejected_total = as_decimal(rejected)
            result.append(
                DailyYieldRow(
                    day=as_date(row_day),
                    stage=model.stage,
                    machine_id=m_id,
                    machine_number=m_number,
                    entry_count=count,
                    input_total=as_decimal(total_in),
                    accepted_total=accepted_total,
                    rejected_total=rejected_total,
                    yield_percentage=yield_percentage(accepted_total, rejected_total),
                )
            )
        return result

    def machines(self) -> list[MachineInfo]:
        """Press-dryer machines by number."""
        stmt = select(PressDryerMachine).order_by(PressDryerMachine.number)
        return [MachineInfo.from_model(m) for m in self.session.execute(stmt).scalars()]
