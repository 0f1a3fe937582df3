"""
Module: plywood_kernel.models.machine
Responsibility: ORM persistence for press-dryer machines.  Static reference
    data provisioned from plant configuration; press-dry ledger entries
    reference the machine that ran them.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Base


class PressDryerMachine(Base):
    """One press-dryer on the shop floor."""

    __tablename__ = "press_dryer_machines"

    __table_args__ = (
        UniqueConstraint("number", name="uq_press_dryer_number"),
    )

    number: Mapped[int] = mapped_column(
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PressDryerMachine #{self.number} {self.name}>"
