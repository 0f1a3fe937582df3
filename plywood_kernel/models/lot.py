"""
Module: plywood_kernel.models.lot
Responsibility: ORM persistence for material lots.  A lot is a quantity of
    one material kind, at one warehouse, with one inspection status.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    L1 -- quantity >= 0 always.  Enforced three times: the engine checks the
          stage predicate on a locked row, the debit UPDATE is guarded with
          ``quantity >= :amount``, and the table carries a CHECK constraint.
    L2 -- Only APPROVED lots are eligible as stage input.  AWAITING_INSPECTION
          and REJECTED lots never match an availability predicate.
    L3 -- Lots are never deleted.  A lot drained to zero stays as a tombstone
          (enforced by db/immutability.py).

Failure modes:
    - IntegrityError if a raw UPDATE bypasses the service and drives
      quantity negative (ck_lot_quantity_non_negative).
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Quantity, TrackedBase, UUIDString


class MaterialKind(str, Enum):
    """Material classification for lots."""

    CORE = "CORE"
    FACE = "FACE"
    BACK = "BACK"
    LONGCORE = "LONGCORE"
    GLUE = "GLUE"


class LotStatus(str, Enum):
    """Inspection status.

    Contract: AWAITING_INSPECTION -> APPROVED | REJECTED, one way.  Lots
    produced by a stage start as APPROVED.
    """

    AWAITING_INSPECTION = "AWAITING_INSPECTION"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class QuantityUnit(str, Enum):
    """Unit a lot's quantity is counted in."""

    SHEET = "sheet"
    KG = "kg"
    LITER = "liter"
    CUBIC_METER = "m3"


class Lot(TrackedBase):
    """
    A trackable quantity of one material kind at one warehouse.

    Contract:
        quantity is mutated only by the transformation engine's guarded
        debit; status only by the quality gate.  Everything else is fixed
        at creation.

    Non-goals:
        - No movement history is kept on the lot; stage ledger rows are
          the record of what happened to it.
    """

    __tablename__ = "lots"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_lot_quantity_non_negative"),
        # Query: availability queues (status + warehouse, FIFO)
        Index("idx_lot_status_warehouse", "status", "warehouse_id", "created_at"),
        Index("idx_lot_kind", "kind"),
        Index("idx_lot_supplier", "supplier_id"),
    )

    supplier_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("suppliers.id"),
        nullable=True,
    )

    kind: Mapped[MaterialKind] = mapped_column(
        String(20),
        nullable=False,
    )

    # Absent for non-sheet materials (glue)
    thickness: Mapped[Decimal | None] = mapped_column(
        Quantity(),
        nullable=True,
    )

    # INVARIANT L1: quantity >= 0
    quantity: Mapped[Decimal] = mapped_column(
        Quantity(),
        nullable=False,
    )

    unit: Mapped[QuantityUnit] = mapped_column(
        String(10),
        nullable=False,
        default=QuantityUnit.SHEET,
    )

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    status: Mapped[LotStatus] = mapped_column(
        String(30),
        nullable=False,
    )

    note: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Stage that produced this lot; None for received lots
    origin_stage: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Lot {self.id}: {self.kind} qty={self.quantity} "
            f"status={self.status}>"
        )
