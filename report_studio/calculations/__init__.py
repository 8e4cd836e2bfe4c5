"""
Calculations for cost reports and cable schedules.

- cost_totals.py: category and report totals, variance, variation totals
- cable_sizing.py: SANS table based cable sizing and parallel runs
- lighting_handover.py: tenant lighting schedules and warranty fitting totals

Re-exported here so callers can import from report_studio.calculations.
"""
from .cost_totals import (
    CategoryTotals,
    ReportTotals,
    compute_category_totals,
    compute_report_totals,
    compute_variation_total,
    category_totals_frame,
)
from .cable_sizing import (
    CableData,
    CableSizingParams,
    CableSizingResult,
    calculate_cable_size,
    calculate_voltage_drop,
    recommend_for_entries,
)
from .lighting_handover import aggregate_warranty_fittings, build_tenant_schedules

__all__ = [
    "CategoryTotals",
    "ReportTotals",
    "compute_category_totals",
    "compute_report_totals",
    "compute_variation_total",
    "category_totals_frame",
    "CableData",
    "CableSizingParams",
    "CableSizingResult",
    "calculate_cable_size",
    "calculate_voltage_drop",
    "recommend_for_entries",
    "aggregate_warranty_fittings",
    "build_tenant_schedules",
]
