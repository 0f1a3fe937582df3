"""
Module: plywood_kernel.models.stage_log
Responsibility: ORM persistence for the stage ledgers -- one append-only
    table per transformation stage.  Each row is the immutable record of one
    stage execution: what was consumed, what came out (accepted / rejected),
    who ran it, and when.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    S1 -- Append-only.  UPDATE and DELETE on any stage log row are refused
          by db/immutability.py.
    S2 -- One ledger row per successful stage execution, written in the same
          transaction as the debit and the credit.  A failed execution leaves
          no row.
    S3 -- Quantities are non-negative (CHECK constraints).

Failure modes:
    - ImmutabilityViolationError on any attempt to modify a persisted row.
    - IntegrityError on a dangling source_lot_id / setting_id / machine_id.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Base, Quantity, UUIDString


class StageKind(str, Enum):
    """Named transformation stages, in production order."""

    PRESS_DRY = "press_dry"
    REPAIR = "repair"
    CORE_BUILD = "core_build"
    SCARF_JOIN = "scarf_join"
    PLYWOOD_SETTING = "plywood_setting"
    HOT_PRESS = "hot_press"


def _quantity_checks(table: str) -> tuple:
    return (
        CheckConstraint("input_quantity >= 0", name=f"ck_{table}_input"),
        CheckConstraint("accepted_quantity >= 0", name=f"ck_{table}_accepted"),
        CheckConstraint("rejected_quantity >= 0", name=f"ck_{table}_rejected"),
        Index(f"idx_{table}_created_at", "created_at"),
    )


class StageLogBase(Base):
    """
    Columns shared by every stage ledger table.

    Contract:
        Rows are inserted by StageLedgerWriter only and never changed.
    """

    __abstract__ = True

    # Which stage this row belongs to (denormalized for selectors)
    stage: ClassVar[StageKind]

    input_quantity: Mapped[Decimal] = mapped_column(
        Quantity(),
        nullable=False,
    )

    accepted_quantity: Mapped[Decimal] = mapped_column(
        Quantity(),
        nullable=False,
    )

    rejected_quantity: Mapped[Decimal] = mapped_column(
        Quantity(),
        nullable=False,
    )

    note: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    operator_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )


class PressDryLog(StageLogBase):
    """Press-dry: raw CORE at Receiving dried into Intermediate-1."""

    __tablename__ = "press_dry_log"
    __table_args__ = _quantity_checks("press_dry_log") + (
        Index("idx_press_dry_log_machine", "machine_id"),
    )

    stage = StageKind.PRESS_DRY

    source_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("lots.id"),
        nullable=False,
    )

    machine_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("press_dryer_machines.id"),
        nullable=False,
    )


class RepairLog(StageLogBase):
    """Repair: any approved material at Intermediate-1 into Intermediate-2."""

    __tablename__ = "repair_log"
    __table_args__ = _quantity_checks("repair_log")

    stage = StageKind.REPAIR

    source_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("lots.id"),
        nullable=False,
    )


class CoreBuildLog(StageLogBase):
    """Core builder 4x4: CORE at Intermediate-1 into Intermediate-2."""

    __tablename__ = "core_build_log"
    __table_args__ = _quantity_checks("core_build_log")

    stage = StageKind.CORE_BUILD

    source_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("lots.id"),
        nullable=False,
    )


class ScarfJoinLog(StageLogBase):
    """Scarf join 4x4: CORE at Intermediate-1 into Intermediate-2, grain reversed."""

    __tablename__ = "scarf_join_log"
    __table_args__ = _quantity_checks("scarf_join_log")

    stage = StageKind.SCARF_JOIN

    source_lot_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("lots.id"),
        nullable=False,
    )

    grain_direction: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )


class HotPressLog(StageLogBase):
    """Hot press: a plywood setting pressed into finished goods."""

    __tablename__ = "hot_press_log"
    __table_args__ = _quantity_checks("hot_press_log") + (
        Index("idx_hot_press_log_setting", "setting_id"),
    )

    stage = StageKind.HOT_PRESS

    setting_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("plywood_settings.id"),
        nullable=False,
    )


STAGE_LOG_MODELS: dict[StageKind, type[StageLogBase]] = {
    StageKind.PRESS_DRY: PressDryLog,
    StageKind.REPAIR: RepairLog,
    StageKind.CORE_BUILD: CoreBuildLog,
    StageKind.SCARF_JOIN: ScarfJoinLog,
    StageKind.HOT_PRESS: HotPressLog,
}
