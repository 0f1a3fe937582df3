"""
Tests for SupplierService.
"""

from uuid import uuid4

import pytest

from plywood_kernel.exceptions import (
    SupplierNotFoundError,
    SupplierReferencedError,
    ValidationError,
)
from plywood_kernel.services.supplier_service import SupplierService


@pytest.fixture
def suppliers(store, clock):
    """Run one SupplierService call in its own unit of work."""

    def _call(method, *args, **kwargs):
        with store.session_scope() as s:
            return getattr(SupplierService(s, clock), method)(*args, **kwargs)

    return _call


class TestSupplierService:
    def test_create_and_get(self, suppliers, actor_id):
        created = suppliers("create", "  PT Alas Jati ", actor_id, address="Jepara", contact="")

        fetched = suppliers("get", created.id)

        assert fetched.name == "PT Alas Jati"
        assert fetched.address == "Jepara"
        assert fetched.contact is None
        assert fetched.created_by_id == actor_id

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_name_required(self, suppliers, actor_id, name):
        with pytest.raises(ValidationError):
            suppliers("create", name, actor_id)

    def test_list_is_by_name(self, suppliers, actor_id):
        suppliers("create", "Zebra Timber", actor_id)
        suppliers("create", "Anugrah Veneer", actor_id)

        names = [s.name for s in suppliers("list_suppliers")]

        assert names == ["Anugrah Veneer", "Zebra Timber"]

    def test_update(self, suppliers, actor_id):
        created = suppliers("create", "Old Name", actor_id)

        updated = suppliers("update", created.id, "New Name", actor_id, contact="0812")

        assert updated.name == "New Name"
        assert updated.contact == "0812"

    def test_get_unknown(self, suppliers):
        with pytest.raises(SupplierNotFoundError):
            suppliers("get", uuid4())

    def test_delete_unreferenced(self, suppliers, actor_id):
        created = suppliers("create", "Short Lived", actor_id)

        suppliers("delete", created.id, actor_id)

        with pytest.raises(SupplierNotFoundError):
            suppliers("get", created.id)

    def test_delete_referenced_refused(self, suppliers, receive_lot, actor_id):
        created = suppliers("create", "Busy Supplier", actor_id)
        receive_lot(supplier_id=created.id)
        receive_lot(supplier_id=created.id)

        with pytest.raises(SupplierReferencedError) as exc_info:
            suppliers("delete", created.id, actor_id)

        assert exc_info.value.lot_count == 2
        assert suppliers("get", created.id).name == "Busy Supplier"

    def test_create_logs_supplier_name(self, suppliers, actor_id, captured_logs):
        suppliers("create", "Logged Supplier", actor_id)

        created = [r for r in captured_logs() if r["message"] == "supplier_created"]
        assert created[0]["supplier_name"] == "Logged Supplier"
