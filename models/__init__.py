"""
Models Module - Data Models

Dataclasses mapped from rows of the remote store.
NO STREAMLIT OR UI DEPENDENCIES ALLOWED.

Sub-modules:
- cost_report: reports, categories, line items, variations, artifacts
- cable_schedule: cable schedules and their entries
- lighting_handover: tenants, lighting fittings and handover schedule rows
"""
from .cost_report import (
    Report,
    Category,
    LineItem,
    Variation,
    VariationLineItem,
    ReportDetail,
    ReportBundle,
    GeneratedReportArtifact,
)
from .cable_schedule import CableSchedule, CableEntry
from .lighting_handover import (
    HandoverProject,
    Tenant,
    LightingFitting,
    LightingScheduleRow,
    LightingScheduleItem,
    TenantLightingSchedule,
    WarrantyFitting,
)

__all__ = [
    "Report",
    "Category",
    "LineItem",
    "Variation",
    "VariationLineItem",
    "ReportDetail",
    "ReportBundle",
    "GeneratedReportArtifact",
    "CableSchedule",
    "CableEntry",
    "HandoverProject",
    "Tenant",
    "LightingFitting",
    "LightingScheduleRow",
    "LightingScheduleItem",
    "TenantLightingSchedule",
    "WarrantyFitting",
]
