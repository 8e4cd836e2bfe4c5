"""
Cost Totals Calculations.

Aggregates line items into per-category and report-level totals.
Totals are always sums of children; nothing here is read back from
stored aggregate columns.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence
import logging

import numpy as np
import pandas as pd

from models.cost_report import Category, Variation

logger = logging.getLogger("CostReports.Totals")

AMOUNT_COLUMNS = ["original_budget", "previous_report", "anticipated_final"]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class CategoryTotals:
    """Summed amounts for one cost category."""
    code: str
    description: str
    original_budget: float = 0.0
    previous_report: float = 0.0
    anticipated_final: float = 0.0
    category_id: str = ""

    @property
    def variance(self) -> float:
        return self.anticipated_final - self.original_budget

    @property
    def is_saving(self) -> bool:
        return self.variance < 0

    @property
    def status(self) -> str:
        return "Saving" if self.is_saving else "Extra"


@dataclass
class ReportTotals:
    """Grand totals over every category of a report."""
    categories: List[CategoryTotals] = field(default_factory=list)
    original_budget: float = 0.0
    previous_report: float = 0.0
    anticipated_final: float = 0.0

    @property
    def variance(self) -> float:
        return self.anticipated_final - self.original_budget

    @property
    def is_saving(self) -> bool:
        return self.variance < 0

    @property
    def variance_percent(self) -> float:
        """Absolute variance as a percentage of the original budget."""
        if self.original_budget == 0:
            return 0.0
        return abs(self.variance) / self.original_budget * 100

    def share_of_budget(self, category: CategoryTotals) -> float:
        """Category's share of the grand original budget, in percent."""
        if self.original_budget == 0:
            return 0.0
        return category.original_budget / self.original_budget * 100


# =============================================================================
# AGGREGATION
# =============================================================================

def line_items_frame(categories: Sequence[Category]) -> pd.DataFrame:
    """Flatten every line item into one DataFrame keyed by category id."""
    rows = [
        {
            "category_id": category.id,
            "code": item.code,
            "description": item.description,
            "original_budget": item.original_budget,
            "previous_report": item.previous_report,
            "anticipated_final": item.anticipated_final,
        }
        for category in categories
        for item in category.line_items
    ]
    columns = ["category_id", "code", "description"] + AMOUNT_COLUMNS
    df = pd.DataFrame(rows, columns=columns)
    df[AMOUNT_COLUMNS] = df[AMOUNT_COLUMNS].astype(float)
    df["variance"] = df["anticipated_final"] - df["original_budget"]
    return df


def compute_category_totals(categories: Sequence[Category]) -> List[CategoryTotals]:
    """Sum line items per category, keeping the categories' display order.

    Categories without line items get zero totals.
    """
    ordered = sorted(categories, key=lambda c: c.display_order)
    if not ordered:
        return []

    df = line_items_frame(ordered)
    sums = (
        df.groupby("category_id")[AMOUNT_COLUMNS]
        .sum()
        .reindex([c.id for c in ordered])
        .fillna(0.0)
    )

    totals = []
    for category in ordered:
        row = sums.loc[category.id]
        totals.append(
            CategoryTotals(
                code=category.code,
                description=category.description,
                original_budget=float(row["original_budget"]),
                previous_report=float(row["previous_report"]),
                anticipated_final=float(row["anticipated_final"]),
                category_id=category.id,
            )
        )

    logger.debug("Aggregated %d categories from %d line items", len(totals), len(df))
    return totals


def compute_report_totals(categories: Sequence[Category]) -> ReportTotals:
    """Category totals plus grand totals for a whole report."""
    category_totals = compute_category_totals(categories)
    if not category_totals:
        return ReportTotals()

    matrix = np.array(
        [[c.original_budget, c.previous_report, c.anticipated_final] for c in category_totals],
        dtype=float,
    )
    original, previous, anticipated = matrix.sum(axis=0)

    return ReportTotals(
        categories=category_totals,
        original_budget=float(original),
        previous_report=float(previous),
        anticipated_final=float(anticipated),
    )


def compute_variation_total(variations: Iterable[Variation]) -> float:
    """Net total of all variations.

    Credits are added and debits subtracted, matching the totals row
    printed under the variations table.
    """
    total = 0.0
    for variation in variations:
        total += variation.total if variation.is_credit else -variation.total
    return total


def category_totals_frame(totals: ReportTotals) -> pd.DataFrame:
    """Category totals as a DataFrame (used by CSV export and the UI)."""
    rows = [
        {
            "code": c.code,
            "description": c.description,
            "original_budget": c.original_budget,
            "previous_report": c.previous_report,
            "anticipated_final": c.anticipated_final,
            "variance": c.variance,
            "status": c.status,
            "share_percent": round(totals.share_of_budget(c), 2),
        }
        for c in totals.categories
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "code", "description", "original_budget", "previous_report",
            "anticipated_final", "variance", "status", "share_percent",
        ],
    )
