"""
Reporting Module.

PDF generation, CSV export and the storage sink for generated reports.
"""
from .persistence import (
    export_cost_report,
    export_cable_schedule,
    export_lighting_handover,
    list_report_artifacts,
    list_schedule_artifacts,
    list_handover_artifacts,
    download_artifact,
    delete_report_artifact,
)
from .csv_export import export_category_totals_csv, export_line_items_csv
from .pdf import build_cost_report_pdf, build_cable_schedule_pdf, PDFConfig

__all__ = [
    # Persistence
    "export_cost_report",
    "export_cable_schedule",
    "export_lighting_handover",
    "list_report_artifacts",
    "list_schedule_artifacts",
    "list_handover_artifacts",
    "download_artifact",
    "delete_report_artifact",
    # CSV
    "export_category_totals_csv",
    "export_line_items_csv",
    # PDF
    "build_cost_report_pdf",
    "build_cable_schedule_pdf",
    "PDFConfig",
]
