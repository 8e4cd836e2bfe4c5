"""
PDF Layout Primitives.

Small flowable builders shared by the cost report and cable schedule
layouts: KPI cards, legends, category cards, banners and data tables.
Every builder returns a ReportLab flowable sized to the width it is given.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Table, TableStyle
from xml.sax.saxutils import escape

from report_studio.calculations.cost_totals import CategoryTotals, ReportTotals
from report_studio.utils import format_currency, format_signed_currency, truncate

from .styles import (
    COLORS,
    FONT_FAMILY_BOLD,
    FONT_SIZE_TABLE,
    category_color,
    color_hex,
    get_card_style,
    get_table_style,
)

MetricSpec = Tuple[str, str, Optional[Color], Optional[Color]]


def _text(value) -> str:
    return escape("" if value is None else str(value))


# ============================================================================
# CARDS
# ============================================================================

def metric_card(
    label: str,
    value: str,
    styles: Dict,
    width: float,
    accent: Optional[Color] = None,
    value_color: Optional[Color] = None,
) -> Table:
    """A single KPI card: small grey label above a large bold value."""
    value_markup = _text(value)
    if value_color is not None:
        value_markup = f'<font color="{color_hex(value_color)}">{value_markup}</font>'

    card = Table(
        [
            [Paragraph(_text(label), styles["card_label"])],
            [Paragraph(value_markup, styles["card_value"])],
        ],
        colWidths=[width],
    )
    card.setStyle(get_card_style(accent))
    return card


def metric_card_row(
    metrics: Sequence[MetricSpec],
    styles: Dict,
    total_width: float,
    gap: float = 3 * mm,
) -> Table:
    """Lay out KPI cards side by side with equal widths."""
    count = max(len(metrics), 1)
    card_width = (total_width - gap * (count - 1)) / count
    cells = []
    for label, value, accent, value_color in metrics:
        cells.append(metric_card(label, value, styles, card_width, accent, value_color))

    col_widths = []
    row = []
    for index, cell in enumerate(cells):
        if index:
            row.append("")
            col_widths.append(gap)
        row.append(cell)
        col_widths.append(card_width)

    table = Table([row], colWidths=col_widths)
    table.setStyle(TableStyle([
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ("TOPPADDING", (0, 0), (-1, -1), 0),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return table


def category_detail_card(
    category: CategoryTotals,
    color: Color,
    styles: Dict,
    width: float,
) -> Table:
    """Card for one category: header, budget, anticipated and variance."""
    status_color = COLORS["saving"] if category.is_saving else COLORS["extra"]
    variance = (
        f'<font color="{color_hex(status_color)}">'
        f"{_text(format_signed_currency(category.variance))} ({category.status})</font>"
    )
    title = f"<b>{_text(category.code)}</b> {_text(truncate(category.description, 28))}"

    data = [
        [Paragraph(title, styles["table_cell"]), ""],
        [Paragraph("Original Budget", styles["small"]),
         Paragraph(_text(format_currency(category.original_budget)), styles["table_cell"])],
        [Paragraph("Anticipated Final", styles["small"]),
         Paragraph(_text(format_currency(category.anticipated_final)), styles["table_cell"])],
        [Paragraph("Variance", styles["small"]), Paragraph(variance, styles["table_cell"])],
    ]
    card = Table(data, colWidths=[width * 0.42, width * 0.58])
    card.setStyle(TableStyle([
        ("SPAN", (0, 0), (-1, 0)),
        ("BACKGROUND", (0, 0), (-1, -1), COLORS["background"]),
        ("LINEABOVE", (0, 0), (-1, 0), 3, color),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, COLORS["border"]),
        ("BOX", (0, 0), (-1, -1), 0.75, COLORS["border"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 5),
        ("RIGHTPADDING", (0, 0), (-1, -1), 5),
    ]))
    return card


def category_card_grid(
    categories: Sequence[CategoryTotals],
    styles: Dict,
    total_width: float,
    columns: int = 3,
    gap: float = 3 * mm,
) -> Optional[Table]:
    """Category cards in a grid, colored in display order."""
    if not categories:
        return None

    card_width = (total_width - gap * (columns - 1)) / columns
    cards = [
        category_detail_card(category, category_color(index), styles, card_width)
        for index, category in enumerate(categories)
    ]

    rows = []
    for start in range(0, len(cards), columns):
        chunk = cards[start:start + columns]
        chunk += [""] * (columns - len(chunk))
        row = []
        for index, card in enumerate(chunk):
            if index:
                row.append("")
            row.append(card)
        rows.append(row)

    col_widths = []
    for index in range(columns):
        if index:
            col_widths.append(gap)
        col_widths.append(card_width)

    grid = Table(rows, colWidths=col_widths)
    grid.setStyle(TableStyle([
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ("TOPPADDING", (0, 0), (-1, -1), 0),
        ("BOTTOMPADDING", (0, 0), (-1, -1), gap),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    return grid


def info_card(title: str, pairs: Sequence[Tuple[str, str]], styles: Dict, width: float) -> Table:
    """Titled key/value card (project information, contractors)."""
    data = [[Paragraph(f"<b>{_text(title)}</b>", styles["body_bold"]), ""]]
    for label, value in pairs:
        data.append([
            Paragraph(_text(label), styles["small"]),
            Paragraph(_text(value) or "-", styles["table_cell"]),
        ])

    card = Table(data, colWidths=[width * 0.35, width * 0.65])
    card.setStyle(TableStyle([
        ("SPAN", (0, 0), (-1, 0)),
        ("BACKGROUND", (0, 0), (-1, -1), COLORS["background"]),
        ("LINEBELOW", (0, 0), (-1, 0), 1, COLORS["primary"]),
        ("BOX", (0, 0), (-1, -1), 0.75, COLORS["border"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
    ]))
    return card


# ============================================================================
# LEGEND & BANNERS
# ============================================================================

def category_legend(
    totals: ReportTotals,
    styles: Dict,
    width: float,
    limit: int = 8,
) -> Optional[Table]:
    """Color swatch, category, original budget and share of budget.

    Only the first ``limit`` categories are listed.
    """
    categories = totals.categories[:limit]
    if not categories:
        return None

    swatch = 5 * mm
    data = []
    for index, category in enumerate(categories):
        data.append([
            "",
            Paragraph(f"<b>{_text(category.code)}</b> {_text(category.description)}", styles["table_cell"]),
            Paragraph(_text(format_currency(category.original_budget)), styles["table_cell"]),
            Paragraph(f"{totals.share_of_budget(category):.1f}%", styles["table_cell"]),
        ])

    legend = Table(data, colWidths=[swatch + 4, width * 0.55, width * 0.25, width * 0.2 - swatch - 4])
    commands = [
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ("LINEBELOW", (0, 0), (-1, -2), 0.25, COLORS["border"]),
    ]
    for index in range(len(categories)):
        commands.append(("BACKGROUND", (0, index), (0, index), category_color(index)))
    legend.setStyle(TableStyle(commands))
    return legend


def section_banner(title: str, styles: Dict, width: float, color: Optional[Color] = None) -> Table:
    """Full-width colored bar carrying a section title in white."""
    banner = Table([[title]], colWidths=[width])
    banner.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), color or COLORS["primary"]),
        ("TEXTCOLOR", (0, 0), (-1, -1), COLORS["white"]),
        ("FONTNAME", (0, 0), (-1, -1), FONT_FAMILY_BOLD),
        ("FONTSIZE", (0, 0), (-1, -1), 12),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
    ]))
    return banner


# ============================================================================
# TABLES
# ============================================================================

def data_table(
    header: Sequence[str],
    rows: Sequence[Sequence],
    col_widths: Sequence[float],
    styles: Dict,
    numeric_columns: Sequence[int] = (),
    wrap_columns: Sequence[int] = (),
    total_row: Optional[Sequence] = None,
    cell_colors: Optional[List[Tuple[int, int, Color]]] = None,
) -> Table:
    """Header + rows table that repeats its header across page breaks.

    ``numeric_columns`` are right-aligned; ``wrap_columns`` are wrapped in
    Paragraphs so long descriptions flow onto several lines.
    ``cell_colors`` holds (column, row, color) text colors, with row
    indexes counted from the first data row.
    """
    def cell(column: int, value):
        if column in wrap_columns:
            return Paragraph(_text(value), styles["table_cell"])
        return "" if value is None else str(value)

    data: List[List] = [list(header)]
    for row in rows:
        data.append([cell(column, value) for column, value in enumerate(row)])
    if total_row is not None:
        data.append(["" if value is None else str(value) for value in total_row])

    table = Table(data, colWidths=list(col_widths), repeatRows=1)
    style = get_table_style(has_total_row=total_row is not None)
    for column in numeric_columns:
        style.add("ALIGN", (column, 1), (column, -1), "RIGHT")
    for column, row_index, color in cell_colors or []:
        style.add("TEXTCOLOR", (column, row_index + 1), (column, row_index + 1), color)
    style.add("FONTSIZE", (0, 1), (-1, -1), FONT_SIZE_TABLE)
    table.setStyle(style)
    return table
