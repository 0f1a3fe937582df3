"""Domain models for the plywood kernel."""

from plywood_kernel.models.finished_good import FinishedGood, FinishedGoodStatus
from plywood_kernel.models.lot import Lot, LotStatus, MaterialKind, QuantityUnit
from plywood_kernel.models.machine import PressDryerMachine
from plywood_kernel.models.setting import PlywoodSetting
from plywood_kernel.models.stage_log import (
    STAGE_LOG_MODELS,
    CoreBuildLog,
    HotPressLog,
    PressDryLog,
    RepairLog,
    ScarfJoinLog,
    StageKind,
    StageLogBase,
)
from plywood_kernel.models.supplier import Supplier
from plywood_kernel.models.warehouse import LocationRole, Warehouse

__all__ = [
    "Lot",
    "LotStatus",
    "MaterialKind",
    "QuantityUnit",
    "Warehouse",
    "LocationRole",
    "Supplier",
    "PressDryerMachine",
    "PlywoodSetting",
    "FinishedGood",
    "FinishedGoodStatus",
    "StageKind",
    "StageLogBase",
    "PressDryLog",
    "RepairLog",
    "CoreBuildLog",
    "ScarfJoinLog",
    "HotPressLog",
    "STAGE_LOG_MODELS",
]
