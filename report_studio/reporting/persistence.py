"""
Generated Report Persistence.

Output sink for rendered PDFs: uploads them to a Supabase storage bucket
under ``{owner_id}/{filename}`` and records a metadata row per file.
A stored report is never modified; it can only be downloaded or deleted.
Lighting handover documents have fixed names per project and are
replaced, file and row, each time they are regenerated.

Storage object and metadata row are kept in step:
- if the metadata insert fails, the freshly uploaded object is removed;
- on delete the object goes first, and the row is only removed once the
  object is gone.
"""
import logging
import time
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from models.cost_report import GeneratedReportArtifact
from report_studio.calculations.lighting_handover import aggregate_warranty_fittings, build_tenant_schedules
from report_studio.config import Config
from report_studio.db.supabase_store import SupabaseStore
from report_studio.errors import ArtifactDeleteError, ReportError, ReportExportError

from .pdf import (
    PDFConfig,
    build_cable_schedule_pdf,
    build_cost_report_pdf,
    build_lighting_schedule_pdf,
    build_warranty_schedule_pdf,
)

logger = logging.getLogger(__name__)

# document_type -> (file name suffix, wording in the row notes)
HANDOVER_DOCUMENTS = {
    "lighting": ("Lighting_Schedule", "lighting schedule"),
    "warranties": ("Lighting_Warranty_Schedule", "lighting warranty schedule"),
}


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def cost_report_filename(report_number: int, timestamp_ms: Optional[int] = None) -> str:
    return f"Cost_Report_{report_number}_{timestamp_ms or _epoch_ms()}.pdf"


def cable_schedule_filename(schedule_name: str, revision: str, timestamp_ms: Optional[int] = None) -> str:
    safe_name = "".join(ch if ch.isalnum() else "_" for ch in schedule_name).strip("_") or "Cable_Schedule"
    safe_revision = "".join(ch if ch.isalnum() or ch == "." else "_" for ch in revision)
    return f"{safe_name}_{safe_revision}_{timestamp_ms or _epoch_ms()}.pdf"


def _save_local_copy(pdf_bytes: bytes, relative_path: str) -> Path:
    path = Path(Config.OUTPUT_DIR) / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf_bytes)
    logger.info("Local copy saved to: %s", path)
    return path


def _store_artifact(
    store: SupabaseStore,
    bucket: str,
    table: str,
    owner_key: str,
    file_path: str,
    pdf_bytes: bytes,
    row: dict,
    replace_existing: bool = False,
) -> GeneratedReportArtifact:
    """Upload, then insert the metadata row; roll back the upload on failure.

    With ``replace_existing`` the object at ``file_path`` is overwritten and
    older rows recorded for the same path are dropped before the insert.
    """
    try:
        store.upload_file(bucket, file_path, pdf_bytes, upsert=replace_existing)
    except Exception as e:
        logger.error("Upload of %s to %s failed: %s", file_path, bucket, e)
        raise ReportExportError(f"Failed to save PDF: {e}") from e

    try:
        if replace_existing:
            store.delete_rows(table, **{owner_key: row[owner_key], "file_path": file_path})
        inserted = store.insert_row(table, row)
    except Exception as e:
        logger.error("Metadata insert into %s failed, removing uploaded %s: %s", table, file_path, e)
        try:
            store.remove_file(bucket, file_path)
        except Exception as cleanup_error:
            logger.error("Could not remove orphaned object %s/%s: %s", bucket, file_path, cleanup_error)
        raise ReportExportError(f"Failed to record generated PDF: {e}") from e

    return GeneratedReportArtifact.from_row(inserted, bucket=bucket, table=table, owner_key=owner_key)


# ============================================================================
# EXPORT
# ============================================================================

def export_cost_report(
    report_id: str,
    store: SupabaseStore,
    pdf_config: Optional[PDFConfig] = None,
    generated_by: Optional[str] = None,
    save_local: bool = False,
) -> GeneratedReportArtifact:
    """Fetch a cost report, render it and store the PDF.

    Returns:
        The stored artifact (bucket ``cost-report-pdfs`` by default).

    Raises:
        ReportExportError: fetching, rendering or storing failed.
    """
    try:
        bundle = store.fetch_report_bundle(report_id)
        rendered = build_cost_report_pdf(bundle, pdf_config)
    except ReportError:
        raise
    except Exception as e:
        logger.exception("Cost report %s could not be generated", report_id)
        raise ReportExportError(f"Failed to generate PDF: {e}") from e

    report = bundle.report
    file_name = cost_report_filename(report.report_number)
    file_path = f"{report.project_id}/{file_name}"

    if save_local:
        _save_local_copy(rendered.pdf_bytes, file_path)

    row = {
        "cost_report_id": report.id,
        "project_id": report.project_id,
        "file_path": file_path,
        "file_name": file_name,
        "file_size": rendered.file_size,
        "revision": report.revision,
        "generated_by": generated_by,
    }
    artifact = _store_artifact(
        store,
        Config.COST_REPORT_BUCKET,
        Config.COST_REPORT_PDF_TABLE,
        "cost_report_id",
        file_path,
        rendered.pdf_bytes,
        row,
    )
    logger.info("Cost report %s stored as %s (%d pages)", report.revision, file_path, rendered.page_count)
    return artifact


def export_cable_schedule(
    schedule_id: str,
    store: SupabaseStore,
    pdf_config: Optional[PDFConfig] = None,
    generated_by: Optional[str] = None,
    notes: Optional[str] = None,
    include_recommendations: bool = True,
) -> GeneratedReportArtifact:
    """Render a cable schedule and store it in ``cable-schedule-reports``."""
    try:
        schedule = store.fetch_cable_schedule(schedule_id)
        entries = store.fetch_cable_entries(schedule_id)
        rendered = build_cable_schedule_pdf(
            schedule, entries, pdf_config, include_recommendations=include_recommendations
        )
    except ReportError:
        raise
    except Exception as e:
        logger.exception("Cable schedule %s could not be generated", schedule_id)
        raise ReportExportError(f"Failed to generate PDF: {e}") from e

    file_name = cable_schedule_filename(schedule.schedule_name, schedule.revision)
    file_path = f"{schedule.id}/{file_name}"
    row = {
        "schedule_id": schedule.id,
        "report_name": file_name,
        "revision": schedule.revision,
        "file_path": file_path,
        "file_size": rendered.file_size,
        "generated_by": generated_by,
        "notes": notes,
    }
    return _store_artifact(
        store,
        Config.CABLE_SCHEDULE_BUCKET,
        Config.CABLE_SCHEDULE_PDF_TABLE,
        "schedule_id",
        file_path,
        rendered.pdf_bytes,
        row,
    )


def handover_filename(project_number: str, document_type: str) -> str:
    return f"{project_number or 'Project'}_{HANDOVER_DOCUMENTS[document_type][0]}.pdf"


def _handover_file_url(file_path: str) -> Optional[str]:
    if not Config.SUPABASE_URL:
        return None
    base = Config.SUPABASE_URL.rstrip("/")
    return f"{base}/storage/v1/object/authenticated/{Config.HANDOVER_BUCKET}/{file_path}"


def export_lighting_handover(
    project_id: str,
    store: SupabaseStore,
    include_schedule: bool = True,
    include_warranty: bool = True,
    fitting_ids: Optional[Iterable[str]] = None,
    pdf_config: Optional[PDFConfig] = None,
    added_by: Optional[str] = None,
) -> List[GeneratedReportArtifact]:
    """Render the lighting and/or warranty schedule and file them as handover documents.

    Documents are stored at ``handover/{project_id}/{filename}`` in the
    handover bucket. Regenerating a document replaces the stored file and
    its ``handover_documents`` row.

    Args:
        fitting_ids: Fitting types to list on the warranty schedule
            (all fittings used on the project when None)

    Raises:
        ReportExportError: nothing selected, no fittings, or fetching,
            rendering or storing failed.
    """
    if not include_schedule and not include_warranty:
        raise ReportExportError("Select the lighting schedule, the warranty schedule or both")

    try:
        project = store.fetch_project(project_id)
        rows = store.fetch_lighting_schedules(project_id)
        fittings = aggregate_warranty_fittings(rows, fitting_ids)
        if not fittings:
            raise ReportExportError("Select at least one lighting fitting")

        documents = []
        if include_schedule:
            schedules = build_tenant_schedules(store.fetch_tenants(project_id), rows)
            documents.append(("lighting", build_lighting_schedule_pdf(project, schedules, pdf_config)))
        if include_warranty:
            documents.append(("warranties", build_warranty_schedule_pdf(project, fittings, pdf_config)))
    except ReportError:
        raise
    except Exception as e:
        logger.exception("Lighting handover for project %s could not be generated", project_id)
        raise ReportExportError(f"Failed to generate handover documents: {e}") from e

    generated_on = date.today().strftime("%d %b %Y")
    artifacts = []
    for document_type, rendered in documents:
        file_name = handover_filename(project.project_number, document_type)
        file_path = f"handover/{project.id}/{file_name}"
        row = {
            "project_id": project.id,
            "document_name": file_name,
            "document_type": document_type,
            "source_type": "general",
            "file_url": _handover_file_url(file_path),
            "file_path": file_path,
            "file_size": rendered.file_size,
            "added_by": added_by,
            "notes": f"Generated {HANDOVER_DOCUMENTS[document_type][1]} - {generated_on}",
        }
        artifacts.append(_store_artifact(
            store,
            Config.HANDOVER_BUCKET,
            Config.HANDOVER_TABLE,
            "project_id",
            file_path,
            rendered.pdf_bytes,
            row,
            replace_existing=True,
        ))
        logger.info("Handover document %s stored (%d pages)", file_path, rendered.page_count)
    return artifacts


# ============================================================================
# HISTORY
# ============================================================================

def list_report_artifacts(report_id: str, store: SupabaseStore) -> List[GeneratedReportArtifact]:
    """Stored PDFs of one cost report, newest first."""
    rows = store.list_rows(Config.COST_REPORT_PDF_TABLE, "cost_report_id", report_id)
    return [
        GeneratedReportArtifact.from_row(
            row, bucket=Config.COST_REPORT_BUCKET, table=Config.COST_REPORT_PDF_TABLE, owner_key="cost_report_id"
        )
        for row in rows
    ]


def list_schedule_artifacts(schedule_id: str, store: SupabaseStore) -> List[GeneratedReportArtifact]:
    rows = store.list_rows(Config.CABLE_SCHEDULE_PDF_TABLE, "schedule_id", schedule_id)
    return [
        GeneratedReportArtifact.from_row(
            row, bucket=Config.CABLE_SCHEDULE_BUCKET, table=Config.CABLE_SCHEDULE_PDF_TABLE, owner_key="schedule_id"
        )
        for row in rows
    ]


def list_handover_artifacts(project_id: str, store: SupabaseStore) -> List[GeneratedReportArtifact]:
    """Generated lighting handover documents of a project, newest first."""
    rows = store.list_rows(Config.HANDOVER_TABLE, "project_id", project_id, order_by="created_at")
    return [
        GeneratedReportArtifact.from_row(
            row, bucket=Config.HANDOVER_BUCKET, table=Config.HANDOVER_TABLE, owner_key="project_id"
        )
        for row in rows
        if row.get("document_type") in HANDOVER_DOCUMENTS
    ]


def download_artifact(artifact: GeneratedReportArtifact, store: SupabaseStore) -> bytes:
    try:
        return store.download_file(artifact.bucket, artifact.file_path)
    except Exception as e:
        logger.error("Download of %s failed: %s", artifact.file_path, e)
        raise ReportExportError(f"Failed to download PDF: {e}") from e


def delete_report_artifact(artifact: GeneratedReportArtifact, store: SupabaseStore) -> None:
    """Remove the stored object, then its metadata row.

    Raises:
        ArtifactDeleteError: the object could not be removed; the row is kept
            so the artifact stays listed and the delete can be retried.
    """
    try:
        store.remove_file(artifact.bucket, artifact.file_path)
    except Exception as e:
        logger.error("Storage delete of %s failed, keeping metadata row: %s", artifact.file_path, e)
        raise ArtifactDeleteError(f"Failed to delete {artifact.file_name}: {e}") from e

    try:
        store.delete_row(artifact.table, artifact.id)
    except Exception as e:
        logger.error("Metadata row %s in %s could not be deleted: %s", artifact.id, artifact.table, e)
        raise ArtifactDeleteError(
            f"Deleted {artifact.file_name} but failed to remove its record; "
            f"retry the delete to clean it up: {e}"
        ) from e

    logger.info("Deleted artifact %s (%s)", artifact.id, artifact.file_path)
