"""Selectors for the plywood kernel (read side)."""

from plywood_kernel.selectors.lot_selector import LotSelector, StockSummaryRow
from plywood_kernel.selectors.report_selector import (
    DailyProductionRow,
    DashboardSummary,
    FaceBackIntakeRow,
    FinishedGoodsRow,
    GlueUsageRow,
    PressDrySnapshot,
    ProductionReportSelector,
    SupplierActivityRow,
    WarehouseStock,
)
from plywood_kernel.selectors.setting_selector import SettingSelector
from plywood_kernel.selectors.stage_ledger_selector import DailyYieldRow, StageLedgerSelector

__all__ = [
    "LotSelector",
    "StockSummaryRow",
    "StageLedgerSelector",
    "DailyYieldRow",
    "SettingSelector",
    "ProductionReportSelector",
    "FinishedGoodsRow",
    "GlueUsageRow",
    "FaceBackIntakeRow",
    "DashboardSummary",
    "WarehouseStock",
    "PressDrySnapshot",
    "DailyProductionRow",
    "SupplierActivityRow",
]
