"""
DTOs -- immutable results handed back across the kernel boundary.

Responsibility:
    Every public service and selector method returns one of these frozen
    dataclasses, never an ORM entity.  The request layer can serialize them
    without touching a session.

Architecture position:
    Kernel > Domain.  ``from_model()`` class methods are boundary converters
    invoked from the service / selector layer only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from plywood_kernel.models.finished_good import FinishedGoodStatus
from plywood_kernel.models.lot import LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.stage_log import StageKind

if TYPE_CHECKING:
    from plywood_kernel.models.finished_good import FinishedGood
    from plywood_kernel.models.lot import Lot
    from plywood_kernel.models.machine import PressDryerMachine
    from plywood_kernel.models.setting import PlywoodSetting
    from plywood_kernel.models.stage_log import StageLogBase
    from plywood_kernel.models.supplier import Supplier


@dataclass(frozen=True)
class LotInfo:
    id: UUID
    supplier_id: UUID | None
    kind: MaterialKind
    thickness: Decimal | None
    quantity: Decimal
    unit: QuantityUnit
    warehouse_id: UUID
    status: LotStatus
    note: str | None
    origin_stage: StageKind | None
    created_by_id: UUID
    updated_by_id: UUID | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_available(self) -> bool:
        """Eligible as stage input (before location/kind checks)."""
        return self.status == LotStatus.APPROVED and self.quantity > 0

    @classmethod
    def from_model(cls, lot: Lot) -> LotInfo:
        return cls(
            id=lot.id,
            supplier_id=lot.supplier_id,
            kind=MaterialKind(lot.kind),
            thickness=lot.thickness,
            quantity=lot.quantity,
            unit=QuantityUnit(lot.unit),
            warehouse_id=lot.warehouse_id,
            status=LotStatus(lot.status),
            note=lot.note,
            origin_stage=StageKind(lot.origin_stage) if lot.origin_stage else None,
            created_by_id=lot.created_by_id,
            updated_by_id=lot.updated_by_id,
            created_at=lot.created_at,
            updated_at=lot.updated_at,
        )


@dataclass(frozen=True)
class StageEntryInfo:
    """One stage ledger row, flattened across the per-stage tables."""

    id: UUID
    stage: StageKind
    source_lot_id: UUID | None
    setting_id: UUID | None
    machine_id: UUID | None
    input_quantity: Decimal
    accepted_quantity: Decimal
    rejected_quantity: Decimal
    grain_direction: str | None
    note: str | None
    operator_id: UUID
    created_at: datetime

    @classmethod
    def from_model(cls, entry: StageLogBase) -> StageEntryInfo:
        return cls(
            id=entry.id,
            stage=entry.stage,
            source_lot_id=getattr(entry, "source_lot_id", None),
            setting_id=getattr(entry, "setting_id", None),
            machine_id=getattr(entry, "machine_id", None),
            input_quantity=entry.input_quantity,
            accepted_quantity=entry.accepted_quantity,
            rejected_quantity=entry.rejected_quantity,
            grain_direction=getattr(entry, "grain_direction", None),
            note=entry.note,
            operator_id=entry.operator_id,
            created_at=entry.created_at,
        )


@dataclass(frozen=True)
class SettingInfo:
    id: UUID
    plywood_type: str
    short_core_quantity: Decimal
    long_core_quantity: Decimal
    face_quantity: Decimal
    back_quantity: Decimal
    glue_quantity: Decimal
    accepted_quantity: Decimal
    rejected_quantity: Decimal
    note: str | None
    operator_id: UUID
    created_at: datetime

    @classmethod
    def from_model(cls, setting: PlywoodSetting) -> SettingInfo:
        return cls(
            id=setting.id,
            plywood_type=setting.plywood_type,
            short_core_quantity=setting.short_core_quantity,
            long_core_quantity=setting.long_core_quantity,
            face_quantity=setting.face_quantity,
            back_quantity=setting.back_quantity,
            glue_quantity=setting.glue_quantity,
            accepted_quantity=setting.accepted_quantity,
            rejected_quantity=setting.rejected_quantity,
            note=setting.note,
            operator_id=setting.operator_id,
            created_at=setting.created_at,
        )


@dataclass(frozen=True)
class FinishedGoodInfo:
    id: UUID
    plywood_type: str
    quantity: Decimal
    grade: str
    hot_press_entry_id: UUID
    warehouse_id: UUID
    status: FinishedGoodStatus
    created_by_id: UUID
    created_at: datetime

    @classmethod
    def from_model(cls, good: FinishedGood) -> FinishedGoodInfo:
        return cls(
            id=good.id,
            plywood_type=good.plywood_type,
            quantity=good.quantity,
            grade=good.grade,
            hot_press_entry_id=good.hot_press_entry_id,
            warehouse_id=good.warehouse_id,
            status=FinishedGoodStatus(good.status),
            created_by_id=good.created_by_id,
            created_at=good.created_at,
        )


@dataclass(frozen=True)
class SupplierInfo:
    id: UUID
    name: str
    address: str | None
    contact: str | None
    created_by_id: UUID
    created_at: datetime

    @classmethod
    def from_model(cls, supplier: Supplier) -> SupplierInfo:
        return cls(
            id=supplier.id,
            name=supplier.name,
            address=supplier.address,
            contact=supplier.contact,
            created_by_id=supplier.created_by_id,
            created_at=supplier.created_at,
        )


@dataclass(frozen=True)
class MachineInfo:
    id: UUID
    number: int
    name: str

    @classmethod
    def from_model(cls, machine: PressDryerMachine) -> MachineInfo:
        return cls(id=machine.id, number=machine.number, name=machine.name)


@dataclass(frozen=True)
class StageResult:
    """
    Outcome of one successful stage execution.

    Attributes:
        entry: The ledger row written.
        source_lot: The debited lot after the debit (None for hot-press).
        produced_lot: The lot credited at the destination, if accepted > 0
            and the stage produces lots.
        finished_good: The finished good shelved, if hot-press accepted > 0.
    """

    entry: StageEntryInfo
    source_lot: LotInfo | None = None
    produced_lot: LotInfo | None = None
    finished_good: FinishedGoodInfo | None = None


class Disposition(str, Enum):
    """Quality decision for a received lot."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


@dataclass(frozen=True)
class InspectionItem:
    """One line of a batch inspection request."""

    lot_id: UUID
    disposition: Disposition
    note: str | None = None


class InspectionOutcome(str, Enum):
    APPLIED = "APPLIED"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class InspectionItemResult:
    """Per-item result of a batch inspection."""

    lot_id: UUID
    # Raw request value when it is not a known Disposition
    disposition: Disposition | str
    outcome: InspectionOutcome
    reason_code: str | None = None
    lot: LotInfo | None = None


@dataclass(frozen=True)
class BatchInspectionResult:
    """
    Result of a best-effort batch inspection.

    ``applied_count`` matches the count the request layer reports to the
    operator; ``items`` lets callers tell which lines were skipped and why.
    """

    items: tuple[InspectionItemResult, ...] = field(default_factory=tuple)

    @property
    def applied(self) -> tuple[InspectionItemResult, ...]:
        return tuple(i for i in self.items if i.outcome == InspectionOutcome.APPLIED)

    @property
    def skipped(self) -> tuple[InspectionItemResult, ...]:
        return tuple(i for i in self.items if i.outcome == InspectionOutcome.SKIPPED)

    @property
    def applied_count(self) -> int:
        return len(self.applied)
