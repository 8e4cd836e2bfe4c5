"""
PDF Generator Module for Cost Reports and Cable Schedules.

Uses ReportLab library. No Streamlit dependency.

Module Structure:
- styles.py: Page geometry, colors, typography, table styles
- primitives.py: Cards, legends, banners and data tables
- figures.py: matplotlib charts embedded in reports
- composer.py: Section tracking, table of contents, page numbering
- layout.py: Cost report sections
- builder.py: Cost report assembly
- cable_schedule.py: Cable schedule report
- lighting_handover.py: Lighting and warranty schedules for project handover

Usage:
    from report_studio.reporting.pdf import build_cost_report_pdf, PDFConfig

    rendered = build_cost_report_pdf(bundle, PDFConfig(margin_preset="narrow"))
    pdf_bytes = rendered.pdf_bytes
"""
from .styles import PDFConfig, PDFSectionOptions, MARGIN_PRESETS, create_styles, COLORS, PAGE_SIZE
from .composer import ReportComposer, RenderedReport
from .builder import build_cost_report_pdf
from .cable_schedule import build_cable_schedule_pdf
from .lighting_handover import build_lighting_schedule_pdf, build_warranty_schedule_pdf


__all__ = [
    # Main API
    "build_cost_report_pdf",
    "build_cable_schedule_pdf",
    "build_lighting_schedule_pdf",
    "build_warranty_schedule_pdf",
    "ReportComposer",
    "RenderedReport",
    # Configuration
    "PDFConfig",
    "PDFSectionOptions",
    "MARGIN_PRESETS",
    # Styles (for advanced usage)
    "create_styles",
    "COLORS",
    "PAGE_SIZE",
]
