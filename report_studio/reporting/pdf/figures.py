"""
Report Figures.

Charts embedded in the cost report, rendered with matplotlib to PNG bytes.
No Streamlit dependency - pure matplotlib.
"""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from report_studio.calculations.cost_totals import ReportTotals

from .styles import CATEGORY_COLORS, color_hex

# Force non-interactive backend
plt.switch_backend("Agg")

logger = logging.getLogger("CostReports.Figures")


@dataclass
class FigureConfig:
    """Configuration for figure generation."""
    dpi: int = 200
    figsize: Tuple[float, float] = (4.5, 4.5)
    font_size: int = 8
    donut_width: float = 0.38


def save_figure(fig: Figure, config: FigureConfig) -> bytes:
    """Render a figure to PNG bytes and close it."""
    buf = BytesIO()
    fig.savefig(
        buf,
        format="png",
        dpi=config.dpi,
        bbox_inches="tight",
        facecolor="white",
        edgecolor="none",
    )
    plt.close(fig)
    buf.seek(0)
    return buf.read()


def category_distribution_chart(
    totals: ReportTotals,
    config: Optional[FigureConfig] = None,
) -> Optional[bytes]:
    """Donut chart of each category's share of the original budget.

    Returns None when there is nothing positive to plot.
    """
    config = config or FigureConfig()
    slices = [
        (category.code or category.description, category.original_budget, index)
        for index, category in enumerate(totals.categories)
        if category.original_budget > 0
    ]
    if not slices:
        logger.debug("No positive budgets, skipping distribution chart")
        return None

    labels = [label for label, _, _ in slices]
    values = [value for _, value, _ in slices]
    colors = [color_hex(CATEGORY_COLORS[index % len(CATEGORY_COLORS)]) for _, _, index in slices]

    fig, ax = plt.subplots(figsize=config.figsize, dpi=config.dpi)
    ax.pie(
        values,
        labels=labels,
        colors=colors,
        startangle=90,
        counterclock=False,
        autopct=lambda pct: f"{pct:.0f}%" if pct >= 4 else "",
        pctdistance=1 - config.donut_width / 2,
        wedgeprops={"width": config.donut_width, "edgecolor": "white"},
        textprops={"fontsize": config.font_size},
    )
    ax.set_aspect("equal")
    ax.set_title("Budget Distribution", fontsize=config.font_size + 2)

    return save_figure(fig, config)
