"""
Cost Report Export UI.

Section and margin settings, PDF generation and the history of
generated PDFs (download / delete) for one cost report.
"""
import logging

import streamlit as st

from report_studio.config import Config
from report_studio.db.supabase_store import SupabaseStore
from report_studio.errors import ReportError
from report_studio.reporting.pdf import MARGIN_PRESETS, PDFConfig, PDFSectionOptions
from report_studio.reporting.persistence import export_cost_report, list_report_artifacts
from report_studio.reporting.csv_export import export_category_totals_csv, export_line_items_csv
from report_studio.calculations.cost_totals import compute_report_totals
from report_studio.ui.shared import render_artifact_history
from report_studio.utils import format_currency

logger = logging.getLogger(__name__)

SECTION_LABELS = {
    "cover_page": "Cover page",
    "table_of_contents": "Table of contents",
    "executive_summary": "Executive summary & KPIs",
    "category_details": "Category performance details",
    "project_info": "Project information & report details",
    "cost_summary": "Cost summary",
    "detailed_line_items": "Detailed line items",
    "variations": "Variations",
}


def _pdf_settings(key_prefix: str) -> PDFConfig:
    """Render the settings form and return the resulting PDFConfig."""
    with st.expander("⚙️ PDF Settings", expanded=False):
        presets = list(MARGIN_PRESETS)
        default = presets.index(Config.DEFAULT_MARGIN_PRESET) if Config.DEFAULT_MARGIN_PRESET in presets else 0
        margin = st.radio("Margins", presets, index=default, horizontal=True, key=f"{key_prefix}_margins")
        include_charts = st.checkbox("Include budget chart", value=True, key=f"{key_prefix}_charts")

        st.markdown("**Sections**")
        cols = st.columns(2)
        flags = {}
        for i, (name, label) in enumerate(SECTION_LABELS.items()):
            with cols[i % 2]:
                flags[name] = st.checkbox(label, value=True, key=f"{key_prefix}_{name}")

    return PDFConfig(margin_preset=margin, include_charts=include_charts, sections=PDFSectionOptions(**flags))


def render_cost_report_tab(store: SupabaseStore) -> None:
    """Export a cost report to PDF and manage previously generated PDFs."""
    st.header("📑 Cost Report PDF")

    report_id = st.text_input("Cost report ID", key="cost_report_id").strip()
    if not report_id:
        st.info("Enter a cost report ID to generate or browse its PDFs.")
        return

    pdf_config = _pdf_settings("cost")
    generated_by = st.text_input("Generated by (optional)", key="cost_generated_by") or None

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Generate PDF", type="primary", key="cost_generate"):
            with st.spinner("Generating PDF..."):
                try:
                    artifact = export_cost_report(report_id, store, pdf_config, generated_by)
                except ReportError as e:
                    logger.error("PDF export failed for %s: %s", report_id, e)
                    st.error(f"Failed to generate PDF: {e}")
                else:
                    st.toast(f"PDF generated: {artifact.file_name}", icon="✅")

    with col2:
        if st.button("Prepare CSV exports", key="cost_csv"):
            try:
                bundle = store.fetch_report_bundle(report_id)
            except Exception as e:
                logger.error("Could not load report %s for CSV export: %s", report_id, e)
                st.error(f"Could not load report: {e}")
            else:
                totals = compute_report_totals(bundle.categories)
                st.metric("Anticipated final", format_currency(totals.anticipated_final),
                          delta=format_currency(totals.variance), delta_color="inverse")
                st.download_button("⬇️ Category totals (CSV)", export_category_totals_csv(totals),
                                   file_name=f"category_totals_{bundle.report.report_number}.csv",
                                   mime="text/csv")
                st.download_button("⬇️ Line items (CSV)", export_line_items_csv(bundle.categories),
                                   file_name=f"line_items_{bundle.report.report_number}.csv",
                                   mime="text/csv")

    st.divider()
    render_report_history(report_id, store)


def render_report_history(report_id: str, store: SupabaseStore) -> None:
    """List generated PDFs with download and delete actions."""
    render_artifact_history(
        report_id, store, list_report_artifacts,
        key_prefix="cost",
        empty_message="No PDFs generated for this report yet.",
    )
