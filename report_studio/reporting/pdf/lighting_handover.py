"""
Lighting Handover PDFs.

Two documents handed over to the client at project close-out:
- the lighting schedule: per-tenant tables of fittings with quantities,
  wattages and supply/install costs;
- the warranty schedule: one row per fitting type with its total
  quantity and warranty period and terms.
"""
import logging
from datetime import date
from functools import partial
from typing import Dict, List, Optional, Sequence

from reportlab.lib.units import mm
from reportlab.platypus import CondPageBreak, Paragraph, Spacer
from xml.sax.saxutils import escape

from models.lighting_handover import HandoverProject, TenantLightingSchedule, WarrantyFitting
from report_studio.utils import format_currency, format_date, format_number

from .composer import RenderedReport, ReportComposer
from .primitives import data_table, info_card, metric_card_row, section_banner
from .styles import COLORS, PDFConfig, PDFSectionOptions

logger = logging.getLogger("CostReports.LightingHandoverPDF")


def default_lighting_schedule_config() -> PDFConfig:
    return PDFConfig(title="Lighting Schedule")


def default_warranty_schedule_config() -> PDFConfig:
    """Single-section document, so no table of contents."""
    return PDFConfig(title="Warranty Schedule", sections=PDFSectionOptions(table_of_contents=False))


def _watts(value: float) -> str:
    return f"{format_number(value, 0)} W"


# ============================================================================
# COVER
# ============================================================================

def build_handover_cover(
    project: HandoverProject,
    title: str,
    subtitle: str,
    config: PDFConfig,
    styles: Dict,
) -> List:
    elements = [Spacer(1, 45 * mm)]
    if config.company_name:
        elements.append(Paragraph(escape(config.company_name), styles["cover_subtitle"]))
        elements.append(Spacer(1, 10 * mm))

    elements += [
        Paragraph(escape(title), styles["cover_title"]),
        Paragraph(escape(subtitle), styles["cover_subtitle"]),
        Paragraph(f"<b>{escape(project.name)}</b>", styles["cover_subtitle"]),
        Spacer(1, 30 * mm),
    ]
    pairs = [
        ("Project Number", project.project_number or "-"),
        ("Date", format_date(date.today())),
    ]
    card = info_card("Handover Document", pairs, styles, config.content_width * 0.6)
    card.hAlign = "CENTER"
    elements.append(card)
    return elements


# ============================================================================
# LIGHTING SCHEDULE
# ============================================================================

def build_schedule_overview(schedules: Sequence[TenantLightingSchedule], styles: Dict, width: float) -> List:
    """KPI cards and one summary row per tenant."""
    fittings = sum(s.total_quantity for s in schedules)
    wattage = sum(s.total_wattage for s in schedules)
    supply = sum(s.total_supply_cost for s in schedules)
    install = sum(s.total_install_cost for s in schedules)

    elements = [
        section_banner("LIGHTING SCHEDULE SUMMARY", styles, width),
        Spacer(1, 5 * mm),
        metric_card_row(
            [
                ("TENANTS", str(len(schedules)), COLORS["primary"], None),
                ("FITTINGS", str(fittings), COLORS["primary_dark"], None),
                ("TOTAL LOAD", _watts(wattage), COLORS["warning"], None),
                ("SUPPLY + INSTALL", format_currency(supply + install), COLORS["saving"], None),
            ],
            styles,
            width,
        ),
        Spacer(1, 6 * mm),
    ]

    if not schedules:
        elements.append(Paragraph("No fittings have been scheduled for this project.", styles["small"]))
        return elements

    rows = [
        [
            s.shop_number or "-",
            s.shop_name,
            format_number(s.area, 0),
            str(s.total_quantity),
            _watts(s.total_wattage),
            format_currency(s.total_supply_cost + s.total_install_cost),
        ]
        for s in schedules
    ]
    elements.append(Paragraph("Summary by Tenant", styles["subheading"]))
    elements.append(data_table(
        ["Shop", "Tenant", "Area (m²)", "Fittings", "Load", "Cost"],
        rows,
        [width * 0.10, width * 0.32, width * 0.12, width * 0.12, width * 0.14, width * 0.20],
        styles,
        numeric_columns=[2, 3, 4, 5],
        wrap_columns=[1],
        total_row=["Total", "", "", str(fittings), _watts(wattage), format_currency(supply + install)],
    ))
    return elements


def build_tenant_tables(schedules: Sequence[TenantLightingSchedule], styles: Dict, width: float) -> List:
    """One fittings table per tenant with a totals row."""
    elements = [section_banner("SCHEDULE BY TENANT", styles, width), Spacer(1, 4 * mm)]
    col_widths = [width * f for f in (0.12, 0.26, 0.07, 0.09, 0.11, 0.11, 0.12, 0.12)]

    for schedule in schedules:
        rows = [
            [
                item.fitting_code,
                item.description,
                str(item.quantity),
                _watts(item.wattage),
                _watts(item.total_wattage),
                item.status.title(),
                format_currency(item.supply_cost),
                format_currency(item.install_cost),
            ]
            for item in schedule.items
        ]
        total = [
            "Total", "", str(schedule.total_quantity), "", _watts(schedule.total_wattage), "",
            format_currency(schedule.total_supply_cost), format_currency(schedule.total_install_cost),
        ]
        # Tenant heading stays with the first rows of its table
        elements.append(CondPageBreak(30 * mm))
        elements.append(Paragraph(escape(schedule.label), styles["subheading"]))
        elements.append(data_table(
            ["Code", "Description", "Qty", "Watt", "Total W", "Status", "Supply", "Install"],
            rows,
            col_widths,
            styles,
            numeric_columns=[2, 3, 4, 6, 7],
            wrap_columns=[1],
            total_row=total,
        ))
        elements.append(Spacer(1, 5 * mm))
    return elements


def build_lighting_schedule_pdf(
    project: HandoverProject,
    schedules: Sequence[TenantLightingSchedule],
    config: Optional[PDFConfig] = None,
    output_path: Optional[str] = None,
) -> RenderedReport:
    """Lighting schedule handover document for one project."""
    config = config or default_lighting_schedule_config()
    logger.info(
        "Building lighting schedule for '%s': %d tenants, %d fittings",
        project.name, len(schedules), sum(s.total_quantity for s in schedules),
    )

    composer = ReportComposer(config, footer_text=f"{project.name} | Lighting Schedule")
    styles = composer.styles
    width = config.content_width

    if config.sections.cover_page:
        composer.add_cover(partial(
            build_handover_cover, project, "LIGHTING SCHEDULE", "Handover Document", config, styles,
        ))
    composer.add_section("Schedule Summary", partial(build_schedule_overview, schedules, styles, width))
    if schedules:
        composer.add_section("Schedule by Tenant", partial(build_tenant_tables, schedules, styles, width))
    return composer.render(output_path)


# ============================================================================
# WARRANTY SCHEDULE
# ============================================================================

def build_warranty_table(fittings: Sequence[WarrantyFitting], styles: Dict, width: float) -> List:
    rows = [
        [
            f.fitting_code or "-",
            f.model_name or "-",
            f.manufacturer,
            str(f.total_quantity),
            f"{f.warranty_years} yrs",
            f.warranty_terms,
        ]
        for f in fittings
    ]
    return [
        section_banner("WARRANTY SCHEDULE", styles, width),
        Spacer(1, 4 * mm),
        Paragraph(
            "Warranty periods run from the date of practical completion unless the terms state otherwise.",
            styles["small"],
        ),
        Spacer(1, 3 * mm),
        data_table(
            ["Code", "Model", "Manufacturer", "Qty", "Warranty", "Terms"],
            rows,
            [width * f for f in (0.12, 0.20, 0.18, 0.08, 0.11, 0.31)],
            styles,
            numeric_columns=[3],
            wrap_columns=[1, 2, 5],
            total_row=["Total", "", "", str(sum(f.total_quantity for f in fittings)), "", ""],
        ),
    ]


def build_warranty_schedule_pdf(
    project: HandoverProject,
    fittings: Sequence[WarrantyFitting],
    config: Optional[PDFConfig] = None,
    output_path: Optional[str] = None,
) -> RenderedReport:
    """Warranty schedule for the selected fitting types of one project."""
    config = config or default_warranty_schedule_config()
    logger.info("Building warranty schedule for '%s': %d fitting types", project.name, len(fittings))

    composer = ReportComposer(config, footer_text=f"{project.name} | Warranty Schedule")
    styles = composer.styles

    if config.sections.cover_page:
        composer.add_cover(partial(
            build_handover_cover, project, "WARRANTY SCHEDULE", "Lighting Fittings", config, styles,
        ))
    composer.add_section(
        "Warranty Schedule",
        partial(build_warranty_table, fittings, styles, config.content_width),
    )
    return composer.render(output_path)
