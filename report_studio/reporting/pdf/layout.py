"""
PDF Layout Module.

Page content for the cost report. Each function returns the flowables
for one section; the builder decides which sections are included and
registers them with the composer for the table of contents.
No aggregation happens here - totals arrive precomputed.
"""
from datetime import date
from io import BytesIO
from typing import Dict, List, Optional, Sequence

from reportlab.lib.units import mm
from reportlab.platypus import CondPageBreak, Image, KeepTogether, Paragraph, Spacer, TableStyle
from xml.sax.saxutils import escape

from models.cost_report import Category, Report, ReportDetail, Variation
from report_studio.calculations.cost_totals import ReportTotals
from report_studio.utils import format_currency, format_date, format_signed_currency

from .primitives import (
    category_card_grid,
    category_legend,
    data_table,
    info_card,
    metric_card_row,
    section_banner,
)
from .styles import COLORS, PDFConfig, category_color


def _status_color(is_saving: bool):
    return COLORS["saving"] if is_saving else COLORS["extra"]


def _report_date(report: Report) -> str:
    return format_date(report.report_date or date.today())


def _multiline(text: str) -> str:
    return escape(text).replace("\n", "<br/>")


# ============================================================================
# COVER
# ============================================================================

def build_page_cover(report: Report, config: PDFConfig, styles: Dict) -> List:
    """Cover page: company, title, project, report number and date."""
    elements = [Spacer(1, 45 * mm)]

    if config.company_name:
        elements.append(Paragraph(escape(config.company_name), styles["cover_subtitle"]))
        elements.append(Spacer(1, 10 * mm))

    elements.append(Paragraph(escape(config.title), styles["cover_title"]))
    elements.append(Paragraph(escape(report.project_name or "-"), styles["cover_subtitle"]))
    elements.append(Paragraph(f"Report #{report.report_number}", styles["cover_subtitle"]))
    elements.append(Spacer(1, 30 * mm))

    pairs = [
        ("Client", report.client_name),
        ("Project Number", report.project_number),
        ("Revision", report.revision),
        ("Date", _report_date(report)),
    ]
    card = info_card("Report", pairs, styles, config.content_width * 0.7)
    card.hAlign = "CENTER"
    elements.append(card)
    return elements


# ============================================================================
# EXECUTIVE SUMMARY & KPIs
# ============================================================================

def build_executive_summary(
    totals: ReportTotals,
    styles: Dict,
    width: float,
    chart: Optional[bytes] = None,
) -> List:
    """KPI cards, category distribution and variance by category.

    ``chart`` is a rendered distribution chart (PNG bytes) placed under
    the legend when given.
    """
    elements = [
        section_banner("EXECUTIVE SUMMARY & KEY PERFORMANCE INDICATORS", styles, width),
        Spacer(1, 6 * mm),
    ]

    variance_label = "TOTAL SAVING" if totals.is_saving else "TOTAL EXTRA"
    status_color = _status_color(totals.is_saving)
    elements.append(metric_card_row(
        [
            ("ORIGINAL BUDGET", format_currency(totals.original_budget), COLORS["primary"], None),
            ("ANTICIPATED FINAL", format_currency(totals.anticipated_final), COLORS["primary_dark"], None),
            (variance_label, format_currency(abs(totals.variance)), status_color, status_color),
            ("VARIANCE", f"{totals.variance_percent:.1f}%", status_color, status_color),
        ],
        styles,
        width,
    ))
    elements.append(Spacer(1, 8 * mm))

    elements.append(Paragraph("Category Distribution", styles["heading"]))
    legend = category_legend(totals, styles, width)
    if legend is not None:
        elements.append(legend)
    else:
        elements.append(Paragraph("No categories recorded for this report.", styles["small"]))

    if chart is not None:
        elements.append(Spacer(1, 3 * mm))
        elements.append(Image(BytesIO(chart), width=70 * mm, height=70 * mm))

    rows = []
    colors = []
    for index, category in enumerate(totals.categories[:8]):
        rows.append([category.code, format_signed_currency(category.variance), category.status])
        color = _status_color(category.is_saving)
        colors += [(1, index, color), (2, index, color)]

    if rows:
        elements.append(KeepTogether([
            Paragraph("Variance by Category", styles["heading"]),
            data_table(
                ["Code", "Variance", "Status"],
                rows,
                [width * 0.2, width * 0.5, width * 0.3],
                styles,
                numeric_columns=[1],
                cell_colors=colors,
            ),
        ]))

    direction = "under" if totals.is_saving else "over"
    elements.append(Spacer(1, 4 * mm))
    elements.append(Paragraph(
        f"Overall variance: {totals.variance_percent:.2f}% {direction} budget",
        styles["center"],
    ))
    return elements


# ============================================================================
# CATEGORY PERFORMANCE DETAILS
# ============================================================================

def build_category_details(totals: ReportTotals, styles: Dict, width: float) -> List:
    elements = [
        section_banner("CATEGORY PERFORMANCE DETAILS", styles, width),
        Spacer(1, 6 * mm),
    ]
    grid = category_card_grid(totals.categories, styles, width)
    if grid is None:
        elements.append(Paragraph("No categories recorded for this report.", styles["small"]))
    else:
        elements.append(grid)
    return elements


# ============================================================================
# PROJECT INFORMATION & REPORT DETAILS
# ============================================================================

def build_project_info(report: Report, styles: Dict, width: float) -> List:
    """Project details card plus a contractors card when any are set."""
    elements = [
        section_banner("PROJECT INFORMATION", styles, width),
        Spacer(1, 6 * mm),
        info_card(
            "Project Details",
            [
                ("Client", report.client_name),
                ("Project", report.project_name),
                ("Project Number", report.project_number),
                ("Report Date", _report_date(report)),
            ],
            styles,
            width,
        ),
    ]

    if report.contractors:
        elements.append(Spacer(1, 5 * mm))
        elements.append(info_card("Contractors", report.contractors, styles, width))

    elements.append(Spacer(1, 6 * mm))
    return elements


def detail_content(detail: ReportDetail, report: Report) -> str:
    """Section text with the generated additions for sections 1, 5 and 8.

    1 (General) ends with the report date, 5 (construction period) lists
    the handover and completion dates, 8 (contracts) lists contractors.
    """
    content = detail.section_content or ""

    if detail.section_number == 1:
        return f"{content} {_report_date(report)}".strip()

    lines = []
    if detail.section_number == 5:
        if report.site_handover_date:
            lines.append(f"Site handover: {format_date(report.site_handover_date)}")
        if report.practical_completion_date:
            lines.append(f"Practical completion: {format_date(report.practical_completion_date)}")
    elif detail.section_number == 8:
        labels = {
            "Electrical": "Electrical",
            "Earthing & Lightning": "Earthing and lightning protection",
            "Standby Plants": "Standby Plants",
            "CCTV & Access Control": "CCTV and access control",
        }
        for label, name in report.contractors:
            lines.append(f"{labels[label]}: {name}")
    else:
        return content

    if content:
        lines.append(content)
    return "\n".join(lines)


def build_report_details(details: Sequence[ReportDetail], report: Report, styles: Dict) -> List:
    elements = [
        Paragraph("REPORT DETAILS", styles["heading"]),
        Paragraph("1. GENERAL", styles["subheading"]),
    ]
    for detail in sorted(details, key=lambda d: d.display_order):
        title = Paragraph(
            f"{detail.section_number}. {escape(detail.section_title)}",
            styles["body_bold"],
        )
        content = detail_content(detail, report)
        if content:
            elements.append(KeepTogether([title, Paragraph(_multiline(content), styles["body"])]))
        else:
            elements.append(title)
        elements.append(Spacer(1, 2 * mm))
    return elements


# ============================================================================
# COST SUMMARY
# ============================================================================

def build_cost_summary(totals: ReportTotals, styles: Dict, width: float) -> List:
    """Headline figures table followed by the category breakdown."""
    variance_label = "Total Saving" if totals.is_saving else "Total Extra"
    kpi = data_table(
        ["Metric", "Value"],
        [
            ["Original Budget", format_currency(totals.original_budget)],
            ["Previous Report", format_currency(totals.previous_report)],
            ["Anticipated Final", format_currency(totals.anticipated_final)],
            [variance_label, f"{format_currency(abs(totals.variance))} ({totals.variance_percent:.2f}%)"],
        ],
        [width * 0.45, width * 0.55],
        styles,
        numeric_columns=[1],
        cell_colors=[(1, 3, _status_color(totals.is_saving))],
    )

    elements = [Paragraph("COST SUMMARY", styles["heading"]), kpi, Spacer(1, 6 * mm)]

    if not totals.categories:
        return elements

    rows = []
    colors = []
    for index, category in enumerate(totals.categories):
        rows.append([
            category.code,
            category.description,
            format_currency(category.original_budget),
            format_currency(category.anticipated_final),
            format_signed_currency(category.variance),
            category.status,
        ])
        color = _status_color(category.is_saving)
        colors += [(4, index, color), (5, index, color)]

    breakdown = data_table(
        ["Code", "Category", "Original Budget", "Anticipated Final", "Variance", "Status"],
        rows,
        [width * 0.08, width * 0.30, width * 0.18, width * 0.18, width * 0.16, width * 0.10],
        styles,
        numeric_columns=[2, 3, 4],
        wrap_columns=[1],
        total_row=[
            "",
            "TOTAL",
            format_currency(totals.original_budget),
            format_currency(totals.anticipated_final),
            format_signed_currency(totals.variance),
            "Saving" if totals.is_saving else "Extra",
        ],
        cell_colors=colors,
    )
    style = TableStyle([])
    for index in range(len(totals.categories)):
        style.add("BACKGROUND", (0, index + 1), (0, index + 1), category_color(index))
        style.add("TEXTCOLOR", (0, index + 1), (0, index + 1), COLORS["white"])
    breakdown.setStyle(style)

    elements.append(Paragraph("CATEGORY BREAKDOWN", styles["subheading"]))
    elements.append(breakdown)
    return elements


# ============================================================================
# DETAILED LINE ITEMS
# ============================================================================

def build_detailed_line_items(categories: Sequence[Category], styles: Dict, width: float) -> List:
    """One table per category with line items; empty categories are skipped."""
    elements = [Paragraph("DETAILED LINE ITEMS", styles["heading"])]
    col_widths = [width * 0.10, width * 0.34] + [width * 0.14] * 4

    for category in sorted(categories, key=lambda c: c.display_order):
        if not category.line_items:
            continue
        rows = []
        colors = []
        for index, item in enumerate(category.line_items):
            rows.append([
                item.code,
                item.description,
                format_currency(item.original_budget),
                format_currency(item.previous_report),
                format_currency(item.anticipated_final),
                format_currency(item.variance),
            ])
            if item.variance:
                colors.append((5, index, _status_color(item.variance < 0)))

        title = Paragraph(
            f"{escape(category.code)} - {escape(category.description)}",
            styles["subheading"],
        )
        table = data_table(
            ["Code", "Description", "Original", "Previous", "Anticipated", "Variance"],
            rows,
            col_widths,
            styles,
            numeric_columns=[2, 3, 4, 5],
            wrap_columns=[1],
            cell_colors=colors,
        )
        # Heading stays with the first rows of its table
        elements.append(CondPageBreak(30 * mm))
        elements.append(title)
        elements.append(table)
        elements.append(Spacer(1, 5 * mm))

    return elements


# ============================================================================
# VARIATIONS
# ============================================================================

def build_variations(variations: Sequence[Variation], variation_total: float, styles: Dict, width: float) -> List:
    """Variations table with a net total row (credits add, debits subtract)."""
    rows = []
    for variation in sorted(variations, key=lambda v: v.display_order):
        description = variation.description
        if variation.has_tenant:
            description = f"{description} ({variation.tenant_label})"
        rows.append([
            variation.code,
            description,
            variation.type_label,
            format_currency(variation.total),
        ])

    table = data_table(
        ["Code", "Description", "Type", "Amount"],
        rows,
        [width * 0.13, width * 0.53, width * 0.15, width * 0.19],
        styles,
        numeric_columns=[3],
        wrap_columns=[1],
        total_row=["", "TOTAL", "", format_currency(variation_total)],
    )
    return [Paragraph("VARIATIONS", styles["heading"]), table]

