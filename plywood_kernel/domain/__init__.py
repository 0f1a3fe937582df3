"""
Domain layer.

Frozen DTOs, the static stage route table, quantity validation and the
injectable clock.  Nothing here opens a session or performs I/O.
"""

from plywood_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from plywood_kernel.domain.dtos import (
    BatchInspectionResult,
    Disposition,
    FinishedGoodInfo,
    InspectionItem,
    InspectionItemResult,
    InspectionOutcome,
    LotInfo,
    MachineInfo,
    SettingInfo,
    StageEntryInfo,
    StageResult,
    SupplierInfo,
)
from plywood_kernel.domain.topology import (
    STAGE_ROUTES,
    StageRoute,
    WarehouseRef,
    WarehouseTopology,
    route,
)
from plywood_kernel.domain.validation import (
    YieldPolicy,
    validate_stage_quantities,
    yield_percentage,
)

__all__ = [
    "BatchInspectionResult",
    "Clock",
    "DeterministicClock",
    "Disposition",
    "FinishedGoodInfo",
    "InspectionItem",
    "InspectionItemResult",
    "InspectionOutcome",
    "LotInfo",
    "MachineInfo",
    "STAGE_ROUTES",
    "SettingInfo",
    "StageEntryInfo",
    "StageResult",
    "StageRoute",
    "SupplierInfo",
    "SystemClock",
    "WarehouseRef",
    "WarehouseTopology",
    "YieldPolicy",
    "route",
    "validate_stage_quantities",
    "yield_percentage",
]
