"""Shared widgets for UI modules."""
import logging
from typing import Callable, List

import pandas as pd
import streamlit as st

from models.cost_report import GeneratedReportArtifact
from report_studio.db.supabase_store import SupabaseStore
from report_studio.errors import ArtifactDeleteError, ReportError
from report_studio.reporting.persistence import delete_report_artifact, download_artifact

logger = logging.getLogger(__name__)

ArtifactLoader = Callable[[str, SupabaseStore], List[GeneratedReportArtifact]]


def artifacts_frame(artifacts: List[GeneratedReportArtifact]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "File": a.file_name,
                "Revision": a.revision or a.document_type or "-",
                "Size (KB)": round(a.file_size / 1024, 1),
                "Generated": a.generated_at,
                "By": a.generated_by or "-",
            }
            for a in artifacts
        ],
        columns=["File", "Revision", "Size (KB)", "Generated", "By"],
    )


def render_artifact_history(
    owner_id: str,
    store: SupabaseStore,
    load: ArtifactLoader,
    key_prefix: str,
    title: str = "🗄️ Generated Reports",
    empty_message: str = "No PDFs generated yet.",
) -> None:
    """List stored PDFs of one owner with download and delete actions."""
    st.subheader(title)

    try:
        artifacts = load(owner_id, store)
    except Exception as e:
        logger.error("Could not list PDFs for %s: %s", owner_id, e)
        st.error(f"Could not load generated reports: {e}")
        return

    if not artifacts:
        st.info(empty_message)
        return

    selection = st.dataframe(
        artifacts_frame(artifacts),
        use_container_width=True,
        hide_index=True,
        selection_mode="single-row",
        on_select="rerun",
        key=f"{key_prefix}_history",
    )

    if not (selection and selection.selection.rows):
        st.caption("💡 Select a row to download or delete that PDF")
        return

    artifact = artifacts[selection.selection.rows[0]]
    col1, col2 = st.columns(2)
    with col1:
        try:
            data = download_artifact(artifact, store)
        except ReportError as e:
            st.error(str(e))
        else:
            st.download_button(
                "⬇️ Download PDF", data,
                file_name=artifact.file_name, mime="application/pdf", key=f"{key_prefix}_download",
            )
    with col2:
        if st.button("🗑️ Delete", key=f"{key_prefix}_delete_{artifact.id}"):
            try:
                delete_report_artifact(artifact, store)
            except ArtifactDeleteError as e:
                st.error(f"Failed to delete report: {e}")
            else:
                st.toast("Report deleted", icon="🗑️")
                st.rerun()
