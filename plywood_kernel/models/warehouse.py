"""
Module: plywood_kernel.models.warehouse
Responsibility: ORM persistence for the logical warehouses material moves
    between.  Each row is one named node of the warehouse topology.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - name is unique, role is unique: exactly one warehouse per topology role.
    - Rows are provisioned from plant configuration and never modified
      afterwards (enforced by db/immutability.py).

Failure modes:
    - IntegrityError on duplicate name or role.
"""

from enum import Enum

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import Base


class LocationRole(str, Enum):
    """Position of a warehouse in the production flow.

    Contract: Every stage moves material from one role to the next; the
    mapping lives in domain/topology.py.
    """

    RECEIVING = "RECEIVING"
    INTERMEDIATE_1 = "INTERMEDIATE_1"
    INTERMEDIATE_2 = "INTERMEDIATE_2"
    FINISHED = "FINISHED"


class Warehouse(Base):
    """A named logical warehouse bound to one topology role."""

    __tablename__ = "warehouses"

    __table_args__ = (
        UniqueConstraint("name", name="uq_warehouse_name"),
        UniqueConstraint("role", name="uq_warehouse_role"),
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    role: Mapped[LocationRole] = mapped_column(
        String(20),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Warehouse {self.name} ({self.role})>"
