"""
Topology loader -- resolves the warehouse topology at startup.

Reads the provisioned ``warehouses`` rows and binds each configured role to
its warehouse id, so stages never look a warehouse up by name per request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Session

from plywood_kernel.domain.topology import WarehouseRef, WarehouseTopology
from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.logging_config import get_logger
from plywood_kernel.models.warehouse import LocationRole, Warehouse

if TYPE_CHECKING:
    from plywood_config.schema import PlantConfig

logger = get_logger("services.topology_loader")


def load_topology(session: Session, config: PlantConfig) -> WarehouseTopology:
    """
    Build the WarehouseTopology for ``config``.

    Raises:
        ConfigurationError: if a configured warehouse name is not
            provisioned, is bound to another role, or a role is unbound.
    """
    by_name = {
        wh.name: wh for wh in session.execute(select(Warehouse)).scalars().all()
    }

    bindings: dict[LocationRole, WarehouseRef] = {}
    for definition in config.warehouses:
        warehouse = by_name.get(definition.name)
        if warehouse is None:
            raise ConfigurationError(
                f"Warehouse '{definition.name}' for role {definition.role.value} "
                f"is not provisioned",
                key=f"warehouses.{definition.role.value}",
            )
        if warehouse.role != definition.role.value:
            raise ConfigurationError(
                f"Warehouse '{definition.name}' is provisioned for role "
                f"{warehouse.role}, not {definition.role.value}",
                key=f"warehouses.{definition.role.value}",
            )
        bindings[definition.role] = WarehouseRef(
            id=warehouse.id, name=warehouse.name, role=definition.role
        )

    topology = WarehouseTopology(bindings)
    logger.info("topology_resolved", extra={"topology": repr(topology)})
    return topology
