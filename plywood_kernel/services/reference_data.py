"""
Reference data provisioning.

Inserts the warehouses and press-dryer machines a plant configuration
declares.  Existing rows are matched by role (warehouses) and number
(machines) and left untouched, so provisioning can run on every startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.machine import PressDryerMachine
from plywood_kernel.models.warehouse import Warehouse

if TYPE_CHECKING:
    from plywood_config.schema import PlantConfig

logger = get_logger("services.reference_data")


@dataclass(frozen=True)
class ProvisioningReport:
    warehouses_created: int
    machines_created: int


def provision_reference_data(session: Session, config: PlantConfig) -> ProvisioningReport:
    """
    Insert missing warehouses and machines (idempotent, flush-only).

    Raises:
        ConfigurationError: if a warehouse already provisioned for a role
            carries a different name than the configuration.  Warehouses
            are immutable; renaming one is a migration, not a startup step.
    """
    existing = {
        wh.role: wh for wh in session.execute(select(Warehouse)).scalars().all()
    }
    warehouses_created = 0
    for definition in config.warehouses:
        current = existing.get(definition.role.value)
        if current is None:
            session.add(Warehouse(name=definition.name, role=definition.role.value))
            warehouses_created += 1
        elif current.name != definition.name:
            raise ConfigurationError(
                f"Warehouse for role {definition.role.value} is provisioned as "
                f"'{current.name}' but configured as '{definition.name}'",
                key=f"warehouses.{definition.role.value}",
            )

    known_numbers = set(
        session.execute(select(PressDryerMachine.number)).scalars().all()
    )
    machines_created = 0
    for machine in config.machines:
        if machine.number not in known_numbers:
            session.add(PressDryerMachine(number=machine.number, name=machine.name))
            machines_created += 1

    session.flush()

    report = ProvisioningReport(warehouses_created, machines_created)
    logger.info(
        "reference_data_provisioned",
        extra={
            "plant_id": config.plant_id,
            "warehouses_created": warehouses_created,
            "machines_created": machines_created,
        },
    )
    return report
