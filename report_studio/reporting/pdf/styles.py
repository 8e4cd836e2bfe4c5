"""
PDF Styles Module.

Defines page geometry, colors, typography and reusable table styles
for cost report and cable schedule PDFs. Uses ReportLab library.
"""
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.colors import Color, HexColor, black, white
from reportlab.lib.enums import TA_LEFT, TA_CENTER, TA_RIGHT
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import TableStyle
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List

from report_studio.config import Config

logger = logging.getLogger("CostReports.PDF")


# ============================================================================
# PAGE CONFIGURATION
# ============================================================================

PAGE_SIZE = A4
PAGE_WIDTH, PAGE_HEIGHT = PAGE_SIZE

MARGIN_PRESETS = {
    "normal": 20 * mm,
    "narrow": 12 * mm,
    "wide": 30 * mm,
}
MARGIN = MARGIN_PRESETS["normal"]


# ============================================================================
# COLOR PALETTE
# ============================================================================

def _rgb(r: int, g: int, b: int) -> Color:
    return Color(r / 255.0, g / 255.0, b / 255.0)


COLORS = {
    "primary": _rgb(41, 128, 185),
    "primary_dark": _rgb(30, 58, 138),
    "saving": _rgb(34, 197, 94),
    "extra": _rgb(239, 68, 68),
    "warning": HexColor("#F1C40F"),
    "text": HexColor("#2C3E50"),
    "text_light": HexColor("#7F8C8D"),
    "background": HexColor("#F8F9FA"),
    "border": HexColor("#DEE2E6"),
    "light_grey": HexColor("#ECF0F1"),
    "total_row": HexColor("#E8EEF4"),
    "white": white,
    "black": black,
}

# Legend / chart colors, assigned to categories in display order
CATEGORY_COLORS: List[Color] = [
    _rgb(0, 136, 254),
    _rgb(0, 196, 159),
    _rgb(255, 187, 40),
    _rgb(255, 128, 66),
    _rgb(136, 132, 216),
    _rgb(130, 202, 157),
    _rgb(255, 198, 88),
    _rgb(255, 107, 157),
]


def category_color(index: int) -> Color:
    return CATEGORY_COLORS[index % len(CATEGORY_COLORS)]


def color_hex(color: Color) -> str:
    """ReportLab color as ``#RRGGBB`` (for matplotlib and inline markup)."""
    return "#" + color.hexval()[2:].upper()


# ============================================================================
# TYPOGRAPHY
# ============================================================================

# Built-in PDF fonts cannot render characters such as "²" or "Ω" reliably.
# DejaVuSans ships with matplotlib and covers them.

def register_fonts():
    """Register TrueType fonts for PDF generation."""
    try:
        import matplotlib
        font_dir = os.path.join(matplotlib.get_data_path(), "fonts", "ttf")

        pdfmetrics.registerFont(TTFont("DejaVuSans", os.path.join(font_dir, "DejaVuSans.ttf")))
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", os.path.join(font_dir, "DejaVuSans-Bold.ttf")))
        pdfmetrics.registerFont(TTFont("DejaVuSans-Italic", os.path.join(font_dir, "DejaVuSans-Oblique.ttf")))
        # <b>/<i> markup inside paragraphs
        pdfmetrics.registerFontFamily(
            "DejaVuSans",
            normal="DejaVuSans",
            bold="DejaVuSans-Bold",
            italic="DejaVuSans-Italic",
            boldItalic="DejaVuSans-Bold",
        )

        return "DejaVuSans", "DejaVuSans-Bold", "DejaVuSans-Italic"
    except Exception as e:
        logger.warning("DejaVuSans unavailable (%s), falling back to Helvetica", e)
        return "Helvetica", "Helvetica-Bold", "Helvetica-Oblique"


FONT_FAMILY, FONT_FAMILY_BOLD, FONT_FAMILY_ITALIC = register_fonts()

FONT_SIZE_BODY = 9
FONT_SIZE_SMALL = 7.5
FONT_SIZE_TABLE = 8
FONT_SIZE_HEADING = 14
FONT_SIZE_TITLE = 24


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class PDFSectionOptions:
    """Which parts of a cost report to include."""
    cover_page: bool = True
    table_of_contents: bool = True
    executive_summary: bool = True
    category_details: bool = True
    project_info: bool = True
    cost_summary: bool = True
    detailed_line_items: bool = True
    variations: bool = True


@dataclass
class PDFConfig:
    """Configuration for PDF generation."""
    page_size: tuple = A4
    margin_preset: str = Config.DEFAULT_MARGIN_PRESET
    title: str = "Cost Report"
    author: str = Config.COMPANY_NAME or "Cost Report Studio"
    company_name: str = Config.COMPANY_NAME
    include_charts: bool = True
    sections: PDFSectionOptions = field(default_factory=PDFSectionOptions)

    @property
    def margin(self) -> float:
        if self.margin_preset not in MARGIN_PRESETS:
            raise ValueError(f"Unknown margin preset: {self.margin_preset}")
        return MARGIN_PRESETS[self.margin_preset]

    @property
    def content_width(self) -> float:
        return self.page_size[0] - 2 * self.margin


def create_styles() -> Dict[str, ParagraphStyle]:
    """Create and return all paragraph styles for PDF.

    Returns:
        Dictionary mapping style names to ParagraphStyle objects.
    """
    base_styles = getSampleStyleSheet()

    styles = {}

    styles["cover_title"] = ParagraphStyle(
        "CoverTitle",
        parent=base_styles["Title"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=FONT_SIZE_TITLE,
        leading=30,
        textColor=COLORS["primary_dark"],
        alignment=TA_CENTER,
        spaceAfter=6 * mm,
    )

    styles["cover_subtitle"] = ParagraphStyle(
        "CoverSubtitle",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY,
        fontSize=13,
        leading=18,
        textColor=COLORS["text"],
        alignment=TA_CENTER,
        spaceAfter=3 * mm,
    )

    styles["title"] = ParagraphStyle(
        "Title",
        parent=base_styles["Heading1"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=18,
        textColor=COLORS["text"],
        spaceAfter=6 * mm,
        alignment=TA_CENTER,
    )

    styles["heading"] = ParagraphStyle(
        "Heading",
        parent=base_styles["Heading2"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=FONT_SIZE_HEADING,
        textColor=COLORS["primary"],
        spaceBefore=4 * mm,
        spaceAfter=3 * mm,
        alignment=TA_LEFT,
    )

    styles["subheading"] = ParagraphStyle(
        "Subheading",
        parent=base_styles["Heading3"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=11,
        textColor=COLORS["text"],
        spaceBefore=3 * mm,
        spaceAfter=2 * mm,
        alignment=TA_LEFT,
    )

    styles["body"] = ParagraphStyle(
        "Body",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY,
        fontSize=FONT_SIZE_BODY,
        textColor=COLORS["text"],
        leading=13,
        spaceAfter=2 * mm,
        alignment=TA_LEFT,
    )

    styles["body_bold"] = ParagraphStyle(
        "BodyBold",
        parent=styles["body"],
        fontName=FONT_FAMILY_BOLD,
    )

    styles["small"] = ParagraphStyle(
        "Small",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY,
        fontSize=FONT_SIZE_SMALL,
        textColor=COLORS["text_light"],
        leading=9.5,
        alignment=TA_LEFT,
    )

    styles["table_cell"] = ParagraphStyle(
        "TableCell",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY,
        fontSize=FONT_SIZE_TABLE,
        leading=10,
        textColor=COLORS["text"],
    )

    styles["card_label"] = ParagraphStyle(
        "CardLabel",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY,
        fontSize=FONT_SIZE_SMALL,
        leading=9.5,
        textColor=COLORS["text_light"],
        alignment=TA_CENTER,
    )

    styles["card_value"] = ParagraphStyle(
        "CardValue",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=12,
        leading=15,
        textColor=COLORS["text"],
        alignment=TA_CENTER,
    )

    styles["toc_entry"] = ParagraphStyle(
        "TocEntry",
        parent=styles["body"],
        fontSize=11,
        leading=18,
    )

    styles["toc_page"] = ParagraphStyle(
        "TocPage",
        parent=styles["toc_entry"],
        alignment=TA_RIGHT,
    )

    styles["center"] = ParagraphStyle(
        "Center",
        parent=styles["body"],
        alignment=TA_CENTER,
    )

    styles["warning"] = ParagraphStyle(
        "Warning",
        parent=base_styles["Normal"],
        fontName=FONT_FAMILY_BOLD,
        fontSize=FONT_SIZE_BODY,
        textColor=HexColor("#856404"),
        backColor=HexColor("#FFF3CD"),
        leading=13,
        spaceBefore=2 * mm,
        spaceAfter=2 * mm,
        alignment=TA_LEFT,
    )

    return styles


def get_table_style(has_total_row: bool = False) -> TableStyle:
    """Standard style for data tables: blue header, zebra rows, grid.

    With ``has_total_row`` the last row is bold on a tinted background.
    """
    commands = [
        # Header row
        ("BACKGROUND", (0, 0), (-1, 0), COLORS["primary"]),
        ("TEXTCOLOR", (0, 0), (-1, 0), COLORS["white"]),
        ("FONTNAME", (0, 0), (-1, 0), FONT_FAMILY_BOLD),
        ("FONTSIZE", (0, 0), (-1, 0), FONT_SIZE_TABLE),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),

        # Data rows
        ("FONTNAME", (0, 1), (-1, -1), FONT_FAMILY),
        ("FONTSIZE", (0, 1), (-1, -1), FONT_SIZE_TABLE),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [COLORS["white"], COLORS["background"]]),

        # Borders
        ("GRID", (0, 0), (-1, -1), 0.5, COLORS["border"]),
        ("BOX", (0, 0), (-1, -1), 1, COLORS["border"]),

        # Padding
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("LEFTPADDING", (0, 0), (-1, -1), 5),
        ("RIGHTPADDING", (0, 0), (-1, -1), 5),
    ]
    if has_total_row:
        commands += [
            ("BACKGROUND", (0, -1), (-1, -1), COLORS["total_row"]),
            ("FONTNAME", (0, -1), (-1, -1), FONT_FAMILY_BOLD),
            ("LINEABOVE", (0, -1), (-1, -1), 1, COLORS["primary"]),
        ]
    return TableStyle(commands)


def get_card_style(accent: Color = None) -> TableStyle:
    """Style for card-like containers, optionally with a colored top edge."""
    commands = [
        ("BACKGROUND", (0, 0), (-1, -1), COLORS["background"]),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("BOX", (0, 0), (-1, -1), 0.75, COLORS["border"]),
    ]
    if accent is not None:
        commands.append(("LINEABOVE", (0, 0), (-1, 0), 3, accent))
    return TableStyle(commands)
