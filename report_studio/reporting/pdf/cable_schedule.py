"""
Cable Schedule PDF.

Landscape report of a cable schedule: cover, schedule summary with a
per-voltage breakdown, the full cable table with totals and, when the
sizing calculator disagrees with any scheduled size, a recommendations
page.
"""
import logging
from collections import OrderedDict
from datetime import date
from dataclasses import replace
from functools import partial
from typing import Dict, List, Optional, Sequence

from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer
from xml.sax.saxutils import escape

from models.cable_schedule import CableEntry, CableSchedule
from report_studio.calculations.cable_sizing import SizingRecommendation, recommend_for_entries
from report_studio.utils import format_currency, format_date, format_number, sort_by_tag

from .composer import RenderedReport, ReportComposer
from .primitives import data_table, info_card, metric_card_row, section_banner
from .styles import COLORS, PDFConfig, PDFSectionOptions

logger = logging.getLogger("CostReports.CableSchedulePDF")

SANS_NOTE = "Designed in accordance with SANS 10142-1"


def default_cable_schedule_config() -> PDFConfig:
    """Landscape, narrow margins, no table of contents."""
    return PDFConfig(
        page_size=landscape(A4),
        margin_preset="narrow",
        title="Cable Schedule",
        sections=PDFSectionOptions(table_of_contents=False),
    )


def voltage_summary(entries: Sequence[CableEntry]) -> "OrderedDict[float, Dict[str, float]]":
    """Cable count and total length per voltage level, lowest voltage first."""
    groups: Dict[float, Dict[str, float]] = {}
    for entry in entries:
        stats = groups.setdefault(entry.voltage or 0, {"count": 0, "length": 0.0})
        stats["count"] += 1
        stats["length"] += entry.length
    return OrderedDict(sorted(groups.items()))


def _voltage_label(voltage: float) -> str:
    return f"{voltage:g}V"


# ============================================================================
# PAGES
# ============================================================================

def build_schedule_cover(schedule: CableSchedule, entry_count: int, config: PDFConfig, styles: Dict) -> List:
    elements = [Spacer(1, 30 * mm)]
    if config.company_name:
        elements.append(Paragraph(escape(config.company_name), styles["cover_subtitle"]))
    elements += [
        Paragraph("CABLE SCHEDULE", styles["cover_title"]),
        Paragraph("Comprehensive Cable Installation Report", styles["cover_subtitle"]),
        Paragraph(f"<b>{escape(schedule.schedule_name)}</b>", styles["cover_subtitle"]),
        Spacer(1, 15 * mm),
    ]

    pairs = []
    if schedule.project_number:
        pairs.append(("Project Number", schedule.project_number))
    if schedule.project_name:
        pairs.append(("Project", schedule.project_name))
    pairs.append(("Schedule Number", schedule.schedule_number or "-"))
    pairs.append(("Revision", schedule.revision))
    pairs.append(("Total Cables", str(entry_count)))
    if schedule.client_name:
        pairs.append(("Client", schedule.client_name))
    pairs.append(("Generated", format_date(date.today())))

    card = info_card("Schedule", pairs, styles, config.content_width * 0.5)
    card.hAlign = "CENTER"
    elements.append(card)
    elements.append(Spacer(1, 10 * mm))
    elements.append(Paragraph(SANS_NOTE, styles["center"]))
    return elements


def build_schedule_summary(entries: Sequence[CableEntry], styles: Dict, width: float) -> List:
    total_length = sum(entry.length for entry in entries)
    total_cost = sum(entry.total_cost or 0.0 for entry in entries)

    elements = [
        section_banner("SCHEDULE SUMMARY", styles, width),
        Spacer(1, 5 * mm),
        metric_card_row(
            [
                ("TOTAL CABLES", str(len(entries)), COLORS["primary"], None),
                ("TOTAL LENGTH", f"{total_length:,.1f} m".replace(",", " "), COLORS["primary_dark"], None),
                ("TOTAL COST", format_currency(total_cost), COLORS["saving"], None),
            ],
            styles,
            width,
        ),
        Spacer(1, 6 * mm),
        Paragraph("Summary by Voltage Level", styles["subheading"]),
    ]

    rows = [
        [_voltage_label(voltage), str(int(stats["count"])), f"{format_number(stats['length'])} m"]
        for voltage, stats in voltage_summary(entries).items()
    ]
    elements.append(data_table(
        ["Voltage", "Cables", "Length"],
        rows,
        [width * 0.3, width * 0.3, width * 0.4],
        styles,
        numeric_columns=[1, 2],
        total_row=["Total", str(len(entries)), f"{format_number(total_length)} m"],
    ))
    return elements


def build_schedule_table(entries: Sequence[CableEntry], styles: Dict, width: float) -> List:
    header = [
        "Cable Tag", "From", "To", "Voltage", "Load (A)", "Type", "Size",
        "Measured (m)", "Extra (m)", "Total (m)", "Ω/km", "V.Drop",
    ]
    fractions = [0.08, 0.13, 0.13, 0.06, 0.07, 0.09, 0.08, 0.08, 0.07, 0.07, 0.07, 0.07]

    rows = []
    for entry in entries:
        rows.append([
            entry.cable_tag or "-",
            entry.from_location or "-",
            entry.to_location or "-",
            _voltage_label(entry.voltage) if entry.voltage else "-",
            format_number(entry.load_amps, 1),
            entry.cable_type or "-",
            entry.cable_size or "-",
            format_number(entry.measured_length),
            format_number(entry.extra_length),
            format_number(entry.length),
            format_number(entry.ohm_per_km, 3),
            "-" if entry.volt_drop is None else f"{format_number(entry.volt_drop)}%",
        ])

    total_length = sum(entry.length for entry in entries)
    totals = ["TOTALS"] + [""] * 8 + [format_number(total_length), "", ""]

    return [
        section_banner("CABLE SCHEDULE", styles, width),
        Spacer(1, 4 * mm),
        data_table(
            header,
            rows,
            [width * f for f in fractions],
            styles,
            numeric_columns=[4, 7, 8, 9, 10, 11],
            wrap_columns=[1, 2],
            total_row=totals,
        ),
    ]


def build_recommendations(recommendations: Sequence[SizingRecommendation], styles: Dict, width: float) -> List:
    rows = []
    colors = []
    for index, rec in enumerate(recommendations):
        rows.append([
            rec.cable_tag,
            f"{rec.from_location} → {rec.to_location}",
            rec.current_config,
            rec.recommended_config,
            f"{rec.volt_drop_percentage:.2f}%",
        ])
        colors.append((3, index, COLORS["saving"]))

    return [
        section_banner("CABLE SIZING RECOMMENDATIONS", styles, width),
        Spacer(1, 4 * mm),
        Paragraph(
            "The following recommendations show alternatives for achieving the same circuit "
            "capacity while maintaining compliance with SANS 10142-1.",
            styles["small"],
        ),
        Spacer(1, 3 * mm),
        data_table(
            ["Cable Tag", "Route", "Current Config", "Recommended", "Volt Drop"],
            rows,
            [width * 0.12, width * 0.40, width * 0.17, width * 0.17, width * 0.14],
            styles,
            numeric_columns=[4],
            wrap_columns=[1],
            cell_colors=colors,
        ),
    ]


# ============================================================================
# BUILDER
# ============================================================================

def build_cable_schedule_pdf(
    schedule: CableSchedule,
    entries: Sequence[CableEntry],
    config: Optional[PDFConfig] = None,
    include_recommendations: bool = True,
    output_path: Optional[str] = None,
) -> RenderedReport:
    """Build the cable schedule PDF; entries are sorted numerically by tag."""
    config = config or default_cable_schedule_config()
    if config.page_size == A4:
        config = replace(config, page_size=landscape(A4))

    ordered = sort_by_tag(entries)
    recommendations = recommend_for_entries(ordered) if include_recommendations else []
    logger.info(
        "Building cable schedule '%s' %s: %d entries, %d recommendations",
        schedule.schedule_name, schedule.revision, len(ordered), len(recommendations),
    )

    footer = f"Cable Schedule Report | {schedule.schedule_name}"
    composer = ReportComposer(config, footer_text=footer)
    styles = composer.styles
    width = config.content_width

    if config.sections.cover_page:
        composer.add_cover(partial(build_schedule_cover, schedule, len(ordered), config, styles))

    composer.add_section("Schedule Summary", partial(build_schedule_summary, ordered, styles, width))
    composer.add_section("Cable Schedule", partial(build_schedule_table, ordered, styles, width))

    if recommendations:
        composer.add_section(
            "Cable Sizing Recommendations",
            partial(build_recommendations, recommendations, styles, width),
        )

    return composer.render(output_path)
