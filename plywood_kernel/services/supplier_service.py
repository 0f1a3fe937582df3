"""
Service layer for Supplier operations.

Manages the suppliers raw material is received from.  Returns SupplierInfo
DTOs instead of ORM entities.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from plywood_kernel.domain.dtos import SupplierInfo
from plywood_kernel.domain.validation import clean_note
from plywood_kernel.exceptions import (
    SupplierNotFoundError,
    SupplierReferencedError,
    ValidationError,
)
from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.lot import Lot
from plywood_kernel.models.supplier import Supplier
from plywood_kernel.services.base import BaseService

logger = get_logger("services.supplier")


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Supplier name is required", field="name")
    return name.strip()


class SupplierService(BaseService[Supplier]):
    """
    Service for managing suppliers.

    A supplier that any lot references cannot be deleted; received lots
    and everything produced from them keep pointing at it.
    """

    def _get_by_id(self, supplier_id: UUID) -> Supplier:
        """Get supplier by ID, raising if not found."""
        supplier = self.session.get(Supplier, supplier_id)
        if supplier is None:
            raise SupplierNotFoundError(str(supplier_id))
        return supplier

    def get(self, supplier_id: UUID) -> SupplierInfo:
        """
        Get supplier by ID.

        Raises:
            SupplierNotFoundError: If supplier doesn't exist.
        """
        return SupplierInfo.from_model(self._get_by_id(supplier_id))

    def list_suppliers(self) -> list[SupplierInfo]:
        """All suppliers, by name."""
        suppliers = self.session.execute(
            select(Supplier).order_by(Supplier.name, Supplier.created_at)
        ).scalars().all()
        return [SupplierInfo.from_model(s) for s in suppliers]

    def create(
        self,
        name: str,
        actor_id: UUID,
        address: str | None = None,
        contact: str | None = None,
    ) -> SupplierInfo:
        """
        Create a new supplier.

        Raises:
            ValidationError: If name is empty.
        """
        now = self.clock.now()
        supplier = Supplier(
            name=_require_name(name),
            address=clean_note(address),
            contact=clean_note(contact),
            created_by_id=actor_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(supplier)
        self.session.flush()

        logger.info(
            "supplier_created",
            extra={"supplier_id": str(supplier.id), "supplier_name": supplier.name},
        )
        return SupplierInfo.from_model(supplier)

    def update(
        self,
        supplier_id: UUID,
        name: str,
        actor_id: UUID,
        address: str | None = None,
        contact: str | None = None,
    ) -> SupplierInfo:
        """
        Replace a supplier's name, address and contact.

        Raises:
            SupplierNotFoundError: If supplier doesn't exist.
            ValidationError: If name is empty.
        """
        supplier = self._get_by_id(supplier_id)
        supplier.name = _require_name(name)
        supplier.address = clean_note(address)
        supplier.contact = clean_note(contact)
        supplier.updated_at = self.clock.now()
        supplier.updated_by_id = actor_id
        self.session.flush()
        return SupplierInfo.from_model(supplier)

    def delete(self, supplier_id: UUID, actor_id: UUID) -> None:
        """
        Delete a supplier no lot references.

        Raises:
            SupplierNotFoundError: If supplier doesn't exist.
            SupplierReferencedError: If any lot references it.
        """
        supplier = self._get_by_id(supplier_id)
        lot_count = self.session.execute(
            select(func.count()).select_from(Lot).where(Lot.supplier_id == supplier_id)
        ).scalar_one()
        if lot_count:
            raise SupplierReferencedError(str(supplier_id), lot_count)

        self.session.delete(supplier)
        self.session.flush()
        logger.info(
            "supplier_deleted",
            extra={"supplier_id": str(supplier_id), "actor_id": str(actor_id)},
        )
