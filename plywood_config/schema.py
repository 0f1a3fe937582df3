"""
Plant configuration schema.

Defines the human-authored plant configuration as frozen dataclasses.  YAML
files are parsed into these types by the loader, checked by the validator,
and handed to the kernel (topology resolution, reference-data provisioning,
engine yield policy).
"""

from __future__ import annotations

from dataclasses import dataclass

from plywood_kernel.domain.validation import YieldPolicy
from plywood_kernel.models.lot import QuantityUnit
from plywood_kernel.models.warehouse import LocationRole


@dataclass(frozen=True)
class WarehouseDef:
    """Binds a topology role to a warehouse name."""

    role: LocationRole
    name: str


@dataclass(frozen=True)
class MachineDef:
    """A press-dryer machine to provision."""

    number: int
    name: str


@dataclass(frozen=True)
class PlantConfig:
    """
    Complete plant configuration.

    Attributes:
        plant_id: Identifier of the plant this configuration describes.
        version: Monotonic configuration version.
        warehouses: One WarehouseDef per LocationRole.
        machines: Press-dryer machines on the floor.
        plywood_types: Allowed thickness classes for settings (e.g. 9MM).
        yield_policy: Which stages enforce accepted + rejected <= input.
        default_grade: Grade stamped on finished goods from the hot press.
        default_unit: Unit for received lots when intake omits one.
        checksum: SHA-256 of the canonical form, for traceability.
    """

    plant_id: str
    version: int
    warehouses: tuple[WarehouseDef, ...]
    machines: tuple[MachineDef, ...]
    plywood_types: tuple[str, ...]
    yield_policy: YieldPolicy = YieldPolicy.STRICT
    default_grade: str = "A"
    default_unit: QuantityUnit = QuantityUnit.SHEET
    checksum: str = ""

    def warehouse_name(self, role: LocationRole) -> str | None:
        for wh in self.warehouses:
            if wh.role == role:
                return wh.name
        return None
