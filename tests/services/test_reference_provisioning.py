"""
Tests for reference data provisioning and topology resolution.
"""

from dataclasses import replace

import pytest

from plywood_config.schema import MachineDef, WarehouseDef
from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.models.warehouse import LocationRole
from plywood_kernel.selectors.stage_ledger_selector import StageLedgerSelector
from plywood_kernel.services.reference_data import provision_reference_data
from plywood_kernel.services.topology_loader import load_topology


def with_warehouse(config, role, name):
    warehouses = tuple(
        WarehouseDef(role=wh.role, name=name) if wh.role == role else wh
        for wh in config.warehouses
    )
    return replace(config, warehouses=warehouses)


class TestProvisioning:
    def test_first_run_creates_everything(self, store, plant_config):
        with store.session_scope() as s:
            report = provision_reference_data(s, plant_config)

        assert report.warehouses_created == 4
        assert report.machines_created == 4

    def test_second_run_is_a_no_op(self, store, plant_config):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
        with store.session_scope() as s:
            report = provision_reference_data(s, plant_config)

        assert (report.warehouses_created, report.machines_created) == (0, 0)

    def test_new_machine_is_added(self, store, plant_config):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
        extended = replace(
            plant_config, machines=plant_config.machines + (MachineDef(number=5, name="Pressdryer 5"),)
        )

        with store.session_scope() as s:
            report = provision_reference_data(s, extended)
            numbers = [m.number for m in StageLedgerSelector(s).machines()]

        assert report.machines_created == 1
        assert numbers == [1, 2, 3, 4, 5]

    def test_renamed_warehouse_is_refused(self, store, plant_config):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
        renamed = with_warehouse(plant_config, LocationRole.RECEIVING, "Gudang Baru")

        with pytest.raises(ConfigurationError) as exc_info:
            with store.session_scope() as s:
                provision_reference_data(s, renamed)

        assert exc_info.value.key == "warehouses.RECEIVING"


class TestTopologyLoader:
    def test_resolves_every_role(self, store, plant_config):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
            topology = load_topology(s, plant_config)

        assert {ref.role for ref in topology} == set(LocationRole)
        assert topology.name_of(LocationRole.INTERMEDIATE_2) == "Gudang C"

    def test_unprovisioned_warehouse(self, store, plant_config):
        with pytest.raises(ConfigurationError) as exc_info:
            with store.session_scope() as s:
                load_topology(s, plant_config)

        assert "not provisioned" in str(exc_info.value)

    def test_role_mismatch(self, store, plant_config):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
        swapped = with_warehouse(
            with_warehouse(plant_config, LocationRole.RECEIVING, "Gudang B"),
            LocationRole.INTERMEDIATE_1,
            "Gudang A",
        )

        with pytest.raises(ConfigurationError):
            with store.session_scope() as s:
                load_topology(s, swapped)

    def test_topology_logged(self, store, plant_config, captured_logs):
        with store.session_scope() as s:
            provision_reference_data(s, plant_config)
            load_topology(s, plant_config)

        resolved = [r for r in captured_logs() if r["message"] == "topology_resolved"]
        assert "RECEIVING=Gudang A" in resolved[0]["topology"]
