"""
Supabase-backed store for report data and generated artifacts.

Thin wrapper over a ``supabase.Client``: read queries for cost reports,
cable schedules and lighting schedules, plus the storage/metadata calls
the export sink needs. Errors raised by the client propagate to the caller.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from models.cable_schedule import CableEntry, CableSchedule
from models.cost_report import Category, Report, ReportBundle, ReportDetail, Variation
from models.lighting_handover import HandoverProject, LightingScheduleRow, Tenant
from report_studio.config import Config
from report_studio.errors import ConfigurationError, ReportExportError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

LIGHTING_SCHEDULE_COLUMNS = (
    "id, tenant_id, fitting_id, quantity, approval_status, "
    "lighting_fittings(id, fitting_code, model_name, model_number, manufacturer, wattage, "
    "warranty_years, warranty_terms, supply_cost, install_cost)"
)


class SupabaseStore:
    """Read report rows and manage stored files through one Supabase client."""

    def __init__(self, client: Client, max_workers: Optional[int] = None):
        self.client = client
        self.max_workers = max_workers or Config.FETCH_WORKERS

    # ------------------------------------------------------------------
    # Cost reports
    # ------------------------------------------------------------------

    def fetch_report(self, report_id: str) -> Report:
        res = self.client.table("cost_reports").select("*").eq("id", report_id).limit(1).execute()
        if not res.data:
            raise ReportExportError(f"Cost report {report_id} not found")
        return Report.from_row(res.data[0])

    def fetch_categories(self, report_id: str) -> List[Category]:
        res = (
            self.client.table("cost_categories")
            .select("*, cost_line_items(*)")
            .eq("cost_report_id", report_id)
            .order("display_order")
            .execute()
        )
        return [Category.from_row(row) for row in res.data or []]

    def fetch_variations(self, report_id: str) -> List[Variation]:
        res = (
            self.client.table("cost_variations")
            .select("*, tenants(shop_number, shop_name), variation_line_items(*)")
            .eq("cost_report_id", report_id)
            .order("display_order")
            .execute()
        )
        return [Variation.from_row(row) for row in res.data or []]

    def fetch_details(self, report_id: str) -> List[ReportDetail]:
        res = (
            self.client.table("cost_report_details")
            .select("*")
            .eq("cost_report_id", report_id)
            .order("display_order")
            .execute()
        )
        return [ReportDetail.from_row(row) for row in res.data or []]

    def fetch_report_bundle(self, report_id: str) -> ReportBundle:
        """Report plus categories, variations and details.

        The three child queries run concurrently; the first failure is
        re-raised once all have finished.
        """
        report = self.fetch_report(report_id)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            categories = executor.submit(self.fetch_categories, report_id)
            variations = executor.submit(self.fetch_variations, report_id)
            details = executor.submit(self.fetch_details, report_id)
            bundle = ReportBundle(
                report=report,
                categories=categories.result(),
                variations=variations.result(),
                details=details.result(),
            )
        logger.debug(
            "Fetched report %s: %d categories, %d variations, %d details",
            report_id, len(bundle.categories), len(bundle.variations), len(bundle.details),
        )
        return bundle

    # ------------------------------------------------------------------
    # Cable schedules
    # ------------------------------------------------------------------

    def fetch_cable_schedule(self, schedule_id: str) -> CableSchedule:
        res = (
            self.client.table("cable_schedules")
            .select("*, projects(name, project_number, client_name)")
            .eq("id", schedule_id)
            .limit(1)
            .execute()
        )
        if not res.data:
            raise ReportExportError(f"Cable schedule {schedule_id} not found")
        return CableSchedule.from_row(res.data[0])

    def fetch_cable_entries(self, schedule_id: str) -> List[CableEntry]:
        res = self.client.table("cable_entries").select("*").eq("schedule_id", schedule_id).execute()
        return [CableEntry.from_row(row) for row in res.data or []]

    # ------------------------------------------------------------------
    # Lighting handover
    # ------------------------------------------------------------------

    def fetch_project(self, project_id: str) -> HandoverProject:
        res = (
            self.client.table("projects")
            .select("id, name, project_number")
            .eq("id", project_id)
            .limit(1)
            .execute()
        )
        if not res.data:
            raise ReportExportError(f"Project {project_id} not found")
        return HandoverProject.from_row(res.data[0])

    def fetch_tenants(self, project_id: str) -> List[Tenant]:
        res = (
            self.client.table("tenants")
            .select("id, shop_name, shop_number, area")
            .eq("project_id", project_id)
            .execute()
        )
        return [Tenant.from_row(row) for row in res.data or []]

    def fetch_lighting_schedules(self, project_id: str) -> List[LightingScheduleRow]:
        """Placed fittings of a project with their library fitting nested."""
        res = (
            self.client.table("project_lighting_schedules")
            .select(LIGHTING_SCHEDULE_COLUMNS)
            .eq("project_id", project_id)
            .execute()
        )
        return [LightingScheduleRow.from_row(row) for row in res.data or []]

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def upload_file(self, bucket: str, path: str, data: bytes, content_type: str = PDF_CONTENT_TYPE,
                    upsert: bool = False) -> str:
        """Upload bytes to ``bucket/path``.

        Existing objects are only replaced with ``upsert=True``; otherwise
        the upload fails.
        """
        self.client.storage.from_(bucket).upload(
            path,
            data,
            {"content-type": content_type, "upsert": "true" if upsert else "false"},
        )
        logger.info("Uploaded %s/%s (%d bytes)", bucket, path, len(data))
        return path

    def download_file(self, bucket: str, path: str) -> bytes:
        return self.client.storage.from_(bucket).download(path)

    def remove_file(self, bucket: str, path: str) -> None:
        self.client.storage.from_(bucket).remove([path])
        logger.info("Removed %s/%s", bucket, path)

    # ------------------------------------------------------------------
    # Metadata rows
    # ------------------------------------------------------------------

    def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        res = self.client.table(table).insert(row).execute()
        if not res.data:
            raise ReportExportError(f"Insert into {table} returned no row")
        return res.data[0]

    def delete_row(self, table: str, row_id: str) -> None:
        self.client.table(table).delete().eq("id", row_id).execute()
        logger.info("Deleted %s row %s", table, row_id)

    def delete_rows(self, table: str, **filters: Any) -> int:
        """Delete every row matching all ``column=value`` filters; returns the count."""
        if not filters:
            raise ValueError("delete_rows needs at least one filter")
        query = self.client.table(table).delete()
        for column, value in filters.items():
            query = query.eq(column, value)
        removed = len(query.execute().data or [])
        logger.info("Deleted %d %s row(s) matching %s", removed, table, filters)
        return removed

    def list_rows(self, table: str, column: str, value: Any, order_by: str = "generated_at") -> List[Dict[str, Any]]:
        """Rows where ``column == value``, newest first."""
        res = (
            self.client.table(table)
            .select("*")
            .eq(column, value)
            .order(order_by, desc=True)
            .execute()
        )
        return res.data or []


def create_store(config=Config) -> SupabaseStore:
    """Build a store from SUPABASE_URL / SUPABASE_KEY settings."""
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        raise ConfigurationError(
            "Supabase is not configured. Set SUPABASE_URL and SUPABASE_KEY in the environment or .env file."
        )
    client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    return SupabaseStore(client, max_workers=config.FETCH_WORKERS)
