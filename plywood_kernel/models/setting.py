"""
Module: plywood_kernel.models.setting
Responsibility: ORM persistence for plywood setting records -- the composite
    assembly step that combines short-core, long-core, face, back and glue
    into a plywood layup ready for the hot press.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    P1 -- Immutable after insert (db/immutability.py).
    P2 -- Component quantities are informational.  No lot is debited when a
          setting is recorded.  This is the only sanctioned non-conservation
          point in the kernel; no other stage may skip debiting.
    P3 -- All quantities >= 0 (CHECK constraints).

Failure modes:
    - ImmutabilityViolationError on UPDATE / DELETE.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Base, Quantity, UUIDString


class PlywoodSetting(Base):
    """One composite-assembly (setting) event."""

    __tablename__ = "plywood_settings"

    __table_args__ = (
        CheckConstraint(
            "short_core_quantity >= 0 AND long_core_quantity >= 0 "
            "AND face_quantity >= 0 AND back_quantity >= 0 "
            "AND glue_quantity >= 0",
            name="ck_setting_components_non_negative",
        ),
        CheckConstraint(
            "accepted_quantity >= 0 AND rejected_quantity >= 0",
            name="ck_setting_yield_non_negative",
        ),
        Index("idx_setting_created_at", "created_at"),
        Index("idx_setting_type", "plywood_type"),
    )

    plywood_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    short_core_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)
    long_core_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)
    face_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)
    back_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)
    glue_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)

    accepted_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)
    rejected_quantity: Mapped[Decimal] = mapped_column(Quantity(), nullable=False)

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

    def __repr__(self) -> str:
        return f"<PlywoodSetting {self.id}: {self.plywood_type}>"
