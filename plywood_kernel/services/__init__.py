"""Services for the plywood kernel (write side)."""

from plywood_kernel.services.intake_service import IntakeService
from plywood_kernel.services.lot_service import LotService
from plywood_kernel.services.quality_gate import QualityGate
from plywood_kernel.services.reference_data import (
    ProvisioningReport,
    provision_reference_data,
)
from plywood_kernel.services.setting_recorder import SettingRecorder
from plywood_kernel.services.stage_ledger import StageLedgerWriter
from plywood_kernel.services.supplier_service import SupplierService
from plywood_kernel.services.topology_loader import load_topology
from plywood_kernel.services.transformation_engine import TransformationEngine

__all__ = [
    "IntakeService",
    "LotService",
    "ProvisioningReport",
    "QualityGate",
    "SettingRecorder",
    "StageLedgerWriter",
    "SupplierService",
    "TransformationEngine",
    "load_topology",
    "provision_reference_data",
]
