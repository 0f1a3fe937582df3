"""
Configuration Validator (``plywood_config.validator``).

Responsibility
--------------
Checks a parsed ``PlantConfig`` for structural integrity before the kernel
provisions reference data from it or resolves the warehouse topology.

Invariants enforced
-------------------
* Role coverage -- every LocationRole is bound to a warehouse name.
* Name uniqueness -- warehouse names and press-dryer numbers are unique.
* Non-empty plywood type list, no blank names.

Failure modes
-------------
* ``ConfigValidationResult.errors`` non-empty -> the configuration MUST NOT
  be used; ``get_active_config()`` raises ``ConfigurationError``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from plywood_config.schema import PlantConfig
from plywood_kernel.models.warehouse import LocationRole


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_plant_config(config: PlantConfig) -> ConfigValidationResult:
    result = ConfigValidationResult()

    bound_roles = Counter(wh.role for wh in config.warehouses)
    for role in LocationRole:
        if bound_roles[role] == 0:
            result.errors.append(f"No warehouse configured for role {role.value}")
        elif bound_roles[role] > 1:
            result.errors.append(f"Role {role.value} is bound more than once")

    for wh in config.warehouses:
        if not wh.name:
            result.errors.append(f"Warehouse for role {wh.role.value} has a blank name")

    names = Counter(wh.name for wh in config.warehouses if wh.name)
    for name, count in names.items():
        if count > 1:
            result.errors.append(f"Warehouse name '{name}' is used for {count} roles")

    numbers = Counter(m.number for m in config.machines)
    for number, count in numbers.items():
        if count > 1:
            result.errors.append(f"Press-dryer number {number} is declared {count} times")

    for machine in config.machines:
        if not machine.name.strip():
            result.errors.append(f"Press-dryer {machine.number} has a blank name")

    if not config.plywood_types:
        result.errors.append("At least one plywood type must be configured")
    elif any(not t for t in config.plywood_types):
        result.errors.append("Plywood types must not be blank")

    if not config.default_grade.strip():
        result.errors.append("default_grade must not be blank")

    return result
