"""
Configuration Loader (``plywood_config.loader``).

Responsibility
--------------
Loads a plant configuration YAML file and parses it into the typed
``plywood_config.schema`` dataclasses.  Runtime callers go through
``plywood_config.get_active_config()``; this module is the parsing step
behind it.

Invariants enforced
-------------------
* Every parse error surfaces as ``ConfigurationError`` naming the key.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical (sorted-key JSON) form, independent of YAML formatting.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` wrapping ``yaml.YAMLError``.
* Missing required key / bad enum value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from plywood_config.schema import MachineDef, PlantConfig, WarehouseDef
from plywood_kernel.domain.validation import YieldPolicy
from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.models.lot import QuantityUnit
from plywood_kernel.models.warehouse import LocationRole


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigurationError: if the file is missing, unreadable, not valid
            YAML, or does not hold a mapping at the top level.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Plant configuration file not found: {path}", key=str(path))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Plant configuration is not valid YAML: {exc}", key=str(path))

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Plant configuration must be a mapping, got {type(data).__name__}",
            key=str(path),
        )
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 over the canonical JSON form of the raw configuration."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationError(f"Plant configuration is missing '{key}'", key=key)
    return data[key]


def parse_warehouses(data: dict[str, Any]) -> tuple[WarehouseDef, ...]:
    """
    Parse the ``warehouses`` mapping of role -> name.

    Example::

        warehouses:
          RECEIVING: Gudang A
          INTERMEDIATE_1: Gudang B
    """
    raw = _require(data, "warehouses")
    if not isinstance(raw, dict):
        raise ConfigurationError("'warehouses' must map role to name", key="warehouses")

    defs = []
    for role_name, name in raw.items():
        try:
            role = LocationRole(str(role_name).upper())
        except ValueError:
            raise ConfigurationError(
                f"Unknown warehouse role '{role_name}'", key=f"warehouses.{role_name}"
            )
        defs.append(WarehouseDef(role=role, name=str(name).strip() if name is not None else ""))
    return tuple(defs)


def parse_machines(data: dict[str, Any]) -> tuple[MachineDef, ...]:
    raw = data.get("press_dryer_machines") or []
    if not isinstance(raw, list):
        raise ConfigurationError(
            "'press_dryer_machines' must be a list", key="press_dryer_machines"
        )

    machines = []
    for item in raw:
        try:
            machines.append(MachineDef(number=int(item["number"]), name=str(item["name"])))
        except (KeyError, TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid press-dryer machine entry: {item!r}", key="press_dryer_machines"
            )
    return tuple(machines)


def parse_plant_config(data: dict[str, Any]) -> PlantConfig:
    """
    Parse a ``PlantConfig`` from a raw dict.

    Postconditions:
        - Returns a frozen PlantConfig carrying the checksum of ``data``.
        - Structural rules (all roles present, unique names ...) are NOT
          checked here; see ``validator.validate_plant_config``.
    """
    try:
        yield_policy = YieldPolicy(str(data.get("yield_policy", "strict")).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown yield_policy '{data.get('yield_policy')}'", key="yield_policy"
        )

    try:
        default_unit = QuantityUnit(str(data.get("default_unit", "sheet")))
    except ValueError:
        raise ConfigurationError(
            f"Unknown default_unit '{data.get('default_unit')}'", key="default_unit"
        )

    plywood_types = data.get("plywood_types") or []
    if not isinstance(plywood_types, list):
        raise ConfigurationError("'plywood_types' must be a list", key="plywood_types")

    return PlantConfig(
        plant_id=str(_require(data, "plant_id")),
        version=int(data.get("version", 1)),
        warehouses=parse_warehouses(data),
        machines=parse_machines(data),
        plywood_types=tuple(str(t).strip().upper() for t in plywood_types),
        yield_policy=yield_policy,
        default_grade=str(data.get("default_grade", "A")),
        default_unit=default_unit,
        checksum=compute_checksum(data),
    )


def load_plant_config(path: Path) -> PlantConfig:
    """Load and parse (but not validate) a plant configuration file."""
    return parse_plant_config(load_yaml_file(path))
