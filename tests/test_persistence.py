"""Tests for report_studio/reporting/persistence.py — storing, listing and deleting PDFs."""

import itertools
from datetime import date

import pytest

from report_studio.config import Config
from report_studio.errors import ArtifactDeleteError, ReportExportError
from report_studio.reporting import persistence
from report_studio.reporting.persistence import (
    cable_schedule_filename,
    cost_report_filename,
    delete_report_artifact,
    download_artifact,
    export_cable_schedule,
    export_cost_report,
    export_lighting_handover,
    list_handover_artifacts,
    list_report_artifacts,
    list_schedule_artifacts,
)


@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    ticks = itertools.count(1700000000000)
    monkeypatch.setattr(persistence, "_epoch_ms", lambda: next(ticks))


# =========================================================================
# File names
# =========================================================================

class TestFileNames:
    def test_cost_report_filename(self):
        assert cost_report_filename(3, 1700000000000) == "Cost_Report_3_1700000000000.pdf"

    def test_cable_schedule_filename(self):
        assert cable_schedule_filename("Main Building", "Rev.2", 5) == "Main_Building_Rev.2_5.pdf"

    def test_cable_schedule_filename_blank_name(self):
        assert cable_schedule_filename("", "Rev.0", 5) == "Cable_Schedule_Rev.0_5.pdf"


# =========================================================================
# Cost report export
# =========================================================================

class TestExportCostReport:
    def test_upload_and_row(self, store, fake_client):
        artifact = export_cost_report("rep-1", store, generated_by="jdoe")

        assert artifact.file_path == "proj-9/Cost_Report_3_1700000000000.pdf"
        assert artifact.bucket == Config.COST_REPORT_BUCKET
        assert artifact.revision == "Report 3"
        assert artifact.owner_id == "rep-1"

        stored = fake_client.storage.objects[Config.COST_REPORT_BUCKET][artifact.file_path]
        assert stored.startswith(b"%PDF")
        assert artifact.file_size == len(stored)

        row = fake_client.tables[Config.COST_REPORT_PDF_TABLE][0]
        assert row["generated_by"] == "jdoe"
        assert row["project_id"] == "proj-9"

    def test_missing_report(self, store, fake_client):
        with pytest.raises(ReportExportError):
            export_cost_report("nope", store)
        assert fake_client.storage.objects == {}

    def test_upload_failure_records_nothing(self, store, fake_client):
        fake_client.storage.fail_upload = True
        with pytest.raises(ReportExportError):
            export_cost_report("rep-1", store)
        assert fake_client.tables.get(Config.COST_REPORT_PDF_TABLE, []) == []

    def test_insert_failure_removes_upload(self, store, fake_client):
        fake_client.fail_insert.add(Config.COST_REPORT_PDF_TABLE)
        with pytest.raises(ReportExportError):
            export_cost_report("rep-1", store)
        assert fake_client.storage.objects[Config.COST_REPORT_BUCKET] == {}

    def test_render_failure_wrapped(self, store, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("layout exploded")

        monkeypatch.setattr(persistence, "build_cost_report_pdf", broken)
        with pytest.raises(ReportExportError, match="layout exploded"):
            export_cost_report("rep-1", store)

    def test_local_copy(self, store, tmp_path, monkeypatch):
        monkeypatch.setattr(Config, "OUTPUT_DIR", str(tmp_path))
        artifact = export_cost_report("rep-1", store, save_local=True)
        assert (tmp_path / artifact.file_path).exists()


# =========================================================================
# History
# =========================================================================

class TestHistory:
    def test_list_and_download(self, store):
        first = export_cost_report("rep-1", store)
        second = export_cost_report("rep-1", store)
        artifacts = list_report_artifacts("rep-1", store)
        assert {a.id for a in artifacts} == {first.id, second.id}
        assert download_artifact(first, store).startswith(b"%PDF")

    def test_download_missing(self, store):
        artifact = export_cost_report("rep-1", store)
        delete_report_artifact(artifact, store)
        with pytest.raises(ReportExportError):
            download_artifact(artifact, store)

    def test_delete_removes_object_and_row(self, store, fake_client):
        artifact = export_cost_report("rep-1", store)
        delete_report_artifact(artifact, store)
        assert list_report_artifacts("rep-1", store) == []
        assert artifact.file_path not in fake_client.storage.objects[Config.COST_REPORT_BUCKET]

    def test_storage_failure_keeps_row(self, store, fake_client):
        artifact = export_cost_report("rep-1", store)
        fake_client.storage.fail_remove = True
        with pytest.raises(ArtifactDeleteError):
            delete_report_artifact(artifact, store)
        assert [a.id for a in list_report_artifacts("rep-1", store)] == [artifact.id]
        assert artifact.file_path in fake_client.storage.objects[Config.COST_REPORT_BUCKET]

    def test_row_failure_after_object_removed(self, store, fake_client):
        artifact = export_cost_report("rep-1", store)
        fake_client.fail_delete.add(Config.COST_REPORT_PDF_TABLE)
        with pytest.raises(ArtifactDeleteError, match="retry the delete"):
            delete_report_artifact(artifact, store)
        assert artifact.file_path not in fake_client.storage.objects[Config.COST_REPORT_BUCKET]
        assert [a.id for a in list_report_artifacts("rep-1", store)] == [artifact.id]

    def test_retry_cleans_up_leftover_row(self, store, fake_client):
        artifact = export_cost_report("rep-1", store)
        fake_client.fail_delete.add(Config.COST_REPORT_PDF_TABLE)
        with pytest.raises(ArtifactDeleteError):
            delete_report_artifact(artifact, store)

        fake_client.fail_delete.clear()
        delete_report_artifact(artifact, store)
        assert list_report_artifacts("rep-1", store) == []


# =========================================================================
# Cable schedule export
# =========================================================================

class TestExportCableSchedule:
    def test_upload_and_row(self, store, fake_client):
        artifact = export_cable_schedule("sched-1", store, notes="Issued for tender")
        assert artifact.bucket == Config.CABLE_SCHEDULE_BUCKET
        assert artifact.file_path == "sched-1/Main_Building_Rev.2_1700000000000.pdf"
        assert artifact.file_name == "Main_Building_Rev.2_1700000000000.pdf"

        row = fake_client.tables[Config.CABLE_SCHEDULE_PDF_TABLE][0]
        assert row["schedule_id"] == "sched-1"
        assert row["notes"] == "Issued for tender"

    def test_listed(self, store):
        artifact = export_cable_schedule("sched-1", store, include_recommendations=False)
        assert [a.id for a in list_schedule_artifacts("sched-1", store)] == [artifact.id]

    def test_missing_schedule(self, store):
        with pytest.raises(ReportExportError):
            export_cable_schedule("nope", store)


# =========================================================================
# Lighting handover export
# =========================================================================

class TestExportLightingHandover:
    def test_both_documents(self, store, fake_client):
        artifacts = export_lighting_handover("proj-9", store, added_by="user-7")

        assert [a.file_path for a in artifacts] == [
            "handover/proj-9/WM-2024-07_Lighting_Schedule.pdf",
            "handover/proj-9/WM-2024-07_Lighting_Warranty_Schedule.pdf",
        ]
        assert all(a.bucket == Config.HANDOVER_BUCKET for a in artifacts)
        objects = fake_client.storage.objects[Config.HANDOVER_BUCKET]
        assert all(objects[a.file_path].startswith(b"%PDF") for a in artifacts)

        rows = fake_client.tables[Config.HANDOVER_TABLE]
        assert [row["document_type"] for row in rows] == ["lighting", "warranties"]
        lighting = rows[0]
        assert lighting["document_name"] == "WM-2024-07_Lighting_Schedule.pdf"
        assert lighting["source_type"] == "general"
        assert lighting["added_by"] == "user-7"
        assert lighting["file_size"] == len(objects[lighting["file_path"]])
        assert lighting["notes"] == f"Generated lighting schedule - {date.today().strftime('%d %b %Y')}"
        assert rows[1]["notes"].startswith("Generated lighting warranty schedule - ")

    def test_upload_overwrites(self, store, fake_client):
        export_lighting_handover("proj-9", store, include_warranty=False)
        export_lighting_handover("proj-9", store, include_warranty=False)

        path = "handover/proj-9/WM-2024-07_Lighting_Schedule.pdf"
        assert fake_client.storage.options[(Config.HANDOVER_BUCKET, path)]["upsert"] == "true"
        assert [row["file_path"] for row in fake_client.tables[Config.HANDOVER_TABLE]] == [path]

    def test_project_without_number(self, store, fake_client):
        fake_client.tables["projects"][0]["project_number"] = None
        artifacts = export_lighting_handover("proj-9", store, include_schedule=False)
        assert artifacts[0].file_name == "Project_Lighting_Warranty_Schedule.pdf"

    def test_nothing_selected(self, store):
        with pytest.raises(ReportExportError):
            export_lighting_handover("proj-9", store, include_schedule=False, include_warranty=False)

    def test_no_fittings_selected(self, store, fake_client):
        with pytest.raises(ReportExportError, match="fitting"):
            export_lighting_handover("proj-9", store, fitting_ids=[])
        assert fake_client.storage.objects == {}

    def test_project_without_fittings(self, store, fake_client):
        fake_client.tables["project_lighting_schedules"] = []
        with pytest.raises(ReportExportError):
            export_lighting_handover("proj-9", store)

    def test_insert_failure_removes_upload(self, store, fake_client):
        fake_client.fail_insert.add(Config.HANDOVER_TABLE)
        with pytest.raises(ReportExportError):
            export_lighting_handover("proj-9", store)
        assert fake_client.storage.objects[Config.HANDOVER_BUCKET] == {}

    def test_listed_and_deleted(self, store, fake_client):
        fake_client.tables[Config.HANDOVER_TABLE] = [
            {"id": "doc-0", "project_id": "proj-9", "document_name": "As built.pdf",
             "document_type": "drawings", "file_path": "handover/proj-9/As built.pdf"},
        ]
        export_lighting_handover("proj-9", store)

        listed = list_handover_artifacts("proj-9", store)
        assert sorted(a.document_type for a in listed) == ["lighting", "warranties"]
        assert {a.file_name for a in listed} == {
            "WM-2024-07_Lighting_Schedule.pdf", "WM-2024-07_Lighting_Warranty_Schedule.pdf",
        }

        for artifact in listed:
            delete_report_artifact(artifact, store)
        assert list_handover_artifacts("proj-9", store) == []
        assert [row["id"] for row in fake_client.tables[Config.HANDOVER_TABLE]] == ["doc-0"]
