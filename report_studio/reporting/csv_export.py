"""
CSV export utilities for cost reports.

Provides two export functions:
- export_category_totals_csv : one row per category with totals and variance
- export_line_items_csv      : every line item with its category code

Both return bytes ready for Streamlit's st.download_button.
"""

from io import StringIO
from typing import Sequence

import pandas as pd

from models.cost_report import Category
from report_studio.calculations.cost_totals import (
    ReportTotals,
    category_totals_frame,
    line_items_frame,
)


def _to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = StringIO()
    df.to_csv(buf, index=False, float_format="%.2f")
    return buf.getvalue().encode("utf-8")


def export_category_totals_csv(totals: ReportTotals) -> bytes:
    """
    Serialize category totals plus a TOTAL row to CSV bytes.

    Args:
        totals: Report totals from compute_report_totals.

    Returns:
        UTF-8 encoded CSV bytes.
    """
    df = category_totals_frame(totals)
    total_row = pd.DataFrame([{
        "code": "",
        "description": "TOTAL",
        "original_budget": totals.original_budget,
        "previous_report": totals.previous_report,
        "anticipated_final": totals.anticipated_final,
        "variance": totals.variance,
        "status": "Saving" if totals.is_saving else "Extra",
        "share_percent": 100.0 if totals.original_budget else 0.0,
    }])
    if df.empty:
        return _to_csv_bytes(total_row[df.columns])
    return _to_csv_bytes(pd.concat([df, total_row], ignore_index=True))


def export_line_items_csv(categories: Sequence[Category]) -> bytes:
    """
    Serialize every line item to CSV, prefixed with its category code.

    Returns:
        UTF-8 encoded CSV bytes.
    """
    df = line_items_frame(categories)
    codes = {category.id: category.code for category in categories}
    df.insert(0, "category_code", df["category_id"].map(codes))
    df = df.drop(columns=["category_id"])
    return _to_csv_bytes(df)
