"""
Cable Schedule UI.

Cable schedule PDF export with its stored PDFs, and an interactive
cable sizing calculator.
"""
import logging

import pandas as pd
import streamlit as st

from report_studio.calculations.cable_sizing import (
    INSTALLATION_METHODS,
    CableSizingParams,
    calculate_cable_size,
)
from report_studio.db.supabase_store import SupabaseStore
from report_studio.errors import ReportError
from report_studio.reporting.persistence import export_cable_schedule, list_schedule_artifacts
from report_studio.ui.shared import render_artifact_history
from report_studio.utils import format_currency

logger = logging.getLogger(__name__)


def render_cable_schedule_tab(store: SupabaseStore) -> None:
    st.header("🔌 Cable Schedule PDF")

    schedule_id = st.text_input("Cable schedule ID", key="cable_schedule_id").strip()
    if not schedule_id:
        st.info("Enter a cable schedule ID to export it.")
        return

    include_recs = st.checkbox("Include sizing recommendations", value=True)
    notes = st.text_area("Notes (optional)", key="cable_notes") or None
    generated_by = st.text_input("Generated by (optional)", key="cable_generated_by") or None

    if st.button("Generate PDF", type="primary", key="cable_generate"):
        with st.spinner("Generating cable schedule PDF..."):
            try:
                artifact = export_cable_schedule(
                    schedule_id, store,
                    generated_by=generated_by,
                    notes=notes,
                    include_recommendations=include_recs,
                )
            except ReportError as e:
                logger.error("Cable schedule export failed for %s: %s", schedule_id, e)
                st.error(f"Failed to generate PDF: {e}")
            else:
                st.toast(f"PDF saved: {artifact.file_path}", icon="✅")

    st.divider()
    render_schedule_history(schedule_id, store)


def render_schedule_history(schedule_id: str, store: SupabaseStore) -> None:
    """Stored cable schedule PDFs with download and delete actions."""
    render_artifact_history(
        schedule_id, store, list_schedule_artifacts,
        key_prefix="cable",
        empty_message="No PDFs generated for this schedule yet.",
    )


def render_cable_sizing_tab() -> None:
    """Standalone calculator over the copper / aluminium tables."""
    st.header("🧮 Cable Sizing Calculator")

    col1, col2, col3 = st.columns(3)
    with col1:
        load = st.number_input("Load [A]", min_value=0.0, value=100.0, step=5.0)
        voltage = st.selectbox("Voltage [V]", [400, 230], index=0)
    with col2:
        length = st.number_input("Length [m]", min_value=0.0, value=50.0, step=5.0)
        material = st.radio("Conductor", ["copper", "aluminium"], horizontal=True)
    with col3:
        method = st.selectbox("Installation", list(INSTALLATION_METHODS))
        derating = st.number_input("Derating factor", min_value=0.1, max_value=1.0, value=1.0, step=0.05)

    result = calculate_cable_size(CableSizingParams(
        load_amps=load,
        voltage=float(voltage),
        total_length=length,
        material=material,
        installation_method=method,
        derating_factor=derating,
    ))
    if result is None:
        st.warning("No cable configuration satisfies these inputs.")
        return

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Recommended", result.configuration)
    m2.metric("Volt drop", f"{result.volt_drop:.2f} V", f"{result.volt_drop_percentage:.2f}%", delta_color="off")
    m3.metric("Volt drop (impedance)", f"{result.impedance_volt_drop:.2f} V",
              help=f"√3·I·Z·L (2·I·Z·L single phase) with Z = {result.ohm_per_km} Ω/km")
    m4.metric("Total cost", format_currency(result.total_cost))

    for warning in result.warnings:
        if warning.level == "error":
            st.error(warning.message)
        elif warning.level == "warning":
            st.warning(warning.message)
        else:
            st.info(warning.message)

    if result.alternatives:
        st.subheader("Parallel alternatives")
        st.dataframe(
            pd.DataFrame([
                {
                    "Cables": alt.cables_in_parallel,
                    "Size": alt.cable_size,
                    "Load/cable [A]": round(alt.load_per_cable, 1),
                    "Volt drop [%]": alt.volt_drop_percentage,
                    "Total cost": format_currency(alt.total_cost),
                    "Recommended": "✅" if alt.is_recommended else "",
                }
                for alt in result.alternatives
            ]),
            use_container_width=True,
            hide_index=True,
        )
        if result.cost_savings:
            st.caption(f"Saving vs. most expensive option: {format_currency(result.cost_savings)}")
