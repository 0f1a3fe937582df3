"""
Module: plywood_kernel.models.supplier
Responsibility: ORM persistence for raw-material suppliers.  Received lots
    reference their supplier; produced lots inherit the reference from the
    lot they were made from.
Architecture position: Kernel > Models.  May import from db/base.py only.

Failure modes:
    - Deletion while lots still reference the supplier is refused by
      SupplierService (SupplierReferencedError) before the FK fires.
"""

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from plywood_kernel.db.base import TrackedBase


class Supplier(TrackedBase):
    """A supplier of raw plywood material."""

    __tablename__ = "suppliers"

    __table_args__ = (
        Index("idx_supplier_name", "name"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    address: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    contact: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Supplier {self.name}>"
