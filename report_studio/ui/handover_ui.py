"""
Lighting Handover UI.

Pick the fittings and documents to generate, file them as project
handover documents and manage the stored copies.
"""
import logging

import streamlit as st

from report_studio.calculations.lighting_handover import aggregate_warranty_fittings, warranty_frame
from report_studio.db.supabase_store import SupabaseStore
from report_studio.errors import ReportError
from report_studio.reporting.persistence import export_lighting_handover, list_handover_artifacts
from report_studio.ui.shared import render_artifact_history

logger = logging.getLogger(__name__)


def render_handover_tab(store: SupabaseStore) -> None:
    st.header("💡 Lighting Handover Documents")

    project_id = st.text_input("Project ID", key="handover_project_id").strip()
    if not project_id:
        st.info("Enter a project ID to generate its lighting handover documents.")
        return

    col1, col2 = st.columns(2)
    include_schedule = col1.checkbox("Lighting schedule", value=True, key="handover_schedule",
                                     help="Complete schedule by tenant with quantities and costs")
    include_warranty = col2.checkbox("Warranty schedule", value=True, key="handover_warranty",
                                     help="Warranty periods and terms for the selected fittings")

    try:
        fittings = aggregate_warranty_fittings(store.fetch_lighting_schedules(project_id))
    except Exception as e:
        logger.error("Could not load lighting fittings for %s: %s", project_id, e)
        st.error(f"Could not load lighting fittings: {e}")
        return

    if not fittings:
        st.warning("No lighting fittings found for this project. Add fittings to the lighting schedule first.")
    else:
        st.subheader("Fittings to Include")
        df = warranty_frame(fittings)
        df.insert(0, "include", True)
        edited = st.data_editor(
            df,
            hide_index=True,
            use_container_width=True,
            disabled=[column for column in df.columns if column != "include"],
            column_config={"fitting_id": None},
            key="handover_fittings",
        )
        selected = list(edited.loc[edited["include"], "fitting_id"])
        st.caption(f"{len(selected)} of {len(fittings)} fittings selected")

        ready = bool(selected) and (include_schedule or include_warranty)
        if st.button("Generate Handover Documents", type="primary", disabled=not ready, key="handover_generate"):
            with st.spinner("Generating handover documents..."):
                try:
                    artifacts = export_lighting_handover(
                        project_id, store,
                        include_schedule=include_schedule,
                        include_warranty=include_warranty,
                        fitting_ids=selected,
                    )
                except ReportError as e:
                    logger.error("Handover export failed for %s: %s", project_id, e)
                    st.error(f"Failed to generate documents: {e}")
                else:
                    st.toast(f"Generated: {', '.join(a.file_name for a in artifacts)}", icon="✅")

    st.divider()
    render_artifact_history(
        project_id, store, list_handover_artifacts,
        key_prefix="handover",
        title="🗄️ Handover Documents",
        empty_message="No lighting handover documents generated for this project yet.",
    )
