"""
Warehouse Topology -- static routing of material between warehouses.

Responsibility:
    Holds the legal stage -> (source, destination) mapping and the resolved
    identity of each warehouse role.  The route table is code; the role ->
    warehouse binding is resolved once at startup from configuration and
    the provisioned ``warehouses`` rows.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Resolution from the
    database lives in services/topology_loader.py; this module only
    validates and freezes what it is given.

Invariants enforced:
    T1 -- Every LocationRole is bound to exactly one warehouse.  A missing
          binding is a ConfigurationError at startup, never a per-request
          failure.
    T2 -- Routes are fixed: press-dry leaves Receiving for Intermediate-1;
          repair / core-build / scarf-join leave Intermediate-1 for
          Intermediate-2; hot-press shelves into Finished.

Failure modes:
    - ConfigurationError if a role is unbound or two roles share a
      warehouse.
    - KeyError from ``route()`` for stages without a route
      (plywood_setting moves no material).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from uuid import UUID

from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.models.lot import MaterialKind
from plywood_kernel.models.stage_log import StageKind
from plywood_kernel.models.warehouse import LocationRole


@dataclass(frozen=True)
class StageRoute:
    """
    Where a stage takes material from and where it puts the output.

    Attributes:
        stage: The stage this route belongs to.
        source: Role the source lot must sit in; None for hot-press, which
            is keyed by setting id instead of a lot.
        destination: Role the produced lot / finished good lands in.
        required_kind: Kind the source lot must have; None means any kind.
        output_kind: Kind of the produced lot; None means same as source.
        annotation: Note written on the produced lot.
    """

    stage: StageKind
    source: LocationRole | None
    destination: LocationRole
    required_kind: MaterialKind | None
    output_kind: MaterialKind | None
    annotation: str


STAGE_ROUTES: Mapping[StageKind, StageRoute] = MappingProxyType({
    StageKind.PRESS_DRY: StageRoute(
        stage=StageKind.PRESS_DRY,
        source=LocationRole.RECEIVING,
        destination=LocationRole.INTERMEDIATE_1,
        required_kind=MaterialKind.CORE,
        output_kind=MaterialKind.CORE,
        annotation="Press-dry output",
    ),
    StageKind.REPAIR: StageRoute(
        stage=StageKind.REPAIR,
        source=LocationRole.INTERMEDIATE_1,
        destination=LocationRole.INTERMEDIATE_2,
        required_kind=None,
        output_kind=None,
        annotation="Repair output",
    ),
    StageKind.CORE_BUILD: StageRoute(
        stage=StageKind.CORE_BUILD,
        source=LocationRole.INTERMEDIATE_1,
        destination=LocationRole.INTERMEDIATE_2,
        required_kind=MaterialKind.CORE,
        output_kind=MaterialKind.CORE,
        annotation="Core builder 4x4 output",
    ),
    StageKind.SCARF_JOIN: StageRoute(
        stage=StageKind.SCARF_JOIN,
        source=LocationRole.INTERMEDIATE_1,
        destination=LocationRole.INTERMEDIATE_2,
        required_kind=MaterialKind.CORE,
        output_kind=MaterialKind.CORE,
        annotation="Scarf join 4x4 output, grain reversed",
    ),
    StageKind.HOT_PRESS: StageRoute(
        stage=StageKind.HOT_PRESS,
        source=None,
        destination=LocationRole.FINISHED,
        required_kind=None,
        output_kind=None,
        annotation="Hot press output",
    ),
})


def route(stage: StageKind) -> StageRoute:
    """Route for a material-moving stage."""
    return STAGE_ROUTES[stage]


@dataclass(frozen=True)
class WarehouseRef:
    """Resolved identity of one warehouse."""

    id: UUID
    name: str
    role: LocationRole


class WarehouseTopology:
    """
    Role -> warehouse binding, frozen after construction.

    Contract:
        Built once at startup (see services/topology_loader.py) and shared
        read-only by every component.  No locking is required.
    """

    def __init__(self, bindings: Mapping[LocationRole, WarehouseRef]):
        missing = [role.value for role in LocationRole if role not in bindings]
        if missing:
            raise ConfigurationError(
                f"Warehouse topology is incomplete; no warehouse for role(s): "
                f"{', '.join(missing)}",
                key="warehouses",
            )

        ids = [ref.id for ref in bindings.values()]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(
                "Warehouse topology binds two roles to the same warehouse",
                key="warehouses",
            )

        self._by_role: Mapping[LocationRole, WarehouseRef] = MappingProxyType(dict(bindings))
        self._by_id: Mapping[UUID, WarehouseRef] = MappingProxyType(
            {ref.id: ref for ref in bindings.values()}
        )

    def warehouse(self, role: LocationRole) -> WarehouseRef:
        return self._by_role[role]

    def warehouse_id(self, role: LocationRole) -> UUID:
        return self._by_role[role].id

    def name_of(self, role: LocationRole) -> str:
        return self._by_role[role].name

    def role_of(self, warehouse_id: UUID) -> LocationRole | None:
        ref = self._by_id.get(warehouse_id)
        return ref.role if ref else None

    def source_id(self, stage: StageKind) -> UUID | None:
        source = route(stage).source
        return self.warehouse_id(source) if source else None

    def destination_id(self, stage: StageKind) -> UUID:
        return self.warehouse_id(route(stage).destination)

    def __iter__(self):
        return iter(self._by_role.values())

    def __repr__(self) -> str:
        pairs = ", ".join(f"{r.role.value}={r.name}" for r in self._by_role.values())
        return f"<WarehouseTopology {pairs}>"
