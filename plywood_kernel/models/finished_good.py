"""
Module: plywood_kernel.models.finished_good
Responsibility: ORM persistence for finished plywood produced by the hot
    press.  Terminal entity: never consumed by a further stage.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    F1 -- quantity >= 0 (CHECK constraint).
    F2 -- Every finished good links to the hot-press ledger entry that
          produced it (hot_press_entry_id NOT NULL).
    F3 -- Finished goods are never deleted (db/immutability.py).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Base, Quantity, UUIDString


class FinishedGoodStatus(str, Enum):
    """Shelf status of a finished good.  The kernel only produces AVAILABLE."""

    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SHIPPED = "SHIPPED"


class FinishedGood(Base):
    """Plywood shelved in the Finished warehouse."""

    __tablename__ = "finished_goods"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_finished_good_quantity_non_negative"),
        Index("idx_finished_good_created_at", "created_at"),
        Index("idx_finished_good_type", "plywood_type"),
    )

    plywood_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(
        Quantity(),
        nullable=False,
    )

    grade: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="A",
    )

    # INVARIANT F2
    hot_press_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("hot_press_log.id"),
        nullable=False,
    )

    warehouse_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("warehouses.id"),
        nullable=False,
    )

    status: Mapped[FinishedGoodStatus] = mapped_column(
        String(20),
        nullable=False,
        default=FinishedGoodStatus.AVAILABLE,
    )

    created_by_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<FinishedGood {self.id}: {self.plywood_type} "
            f"grade={self.grade} qty={self.quantity}>"
        )
