# Tests configuration for Cost Report Studio
import copy
import itertools
import sys
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

import pytest
from pypdf import PdfReader

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.cost_report import Category, ReportBundle, Report, ReportDetail, Variation  # noqa: E402
from models.cable_schedule import CableEntry, CableSchedule  # noqa: E402


# =========================================================================
# In-memory Supabase client
# =========================================================================

class FakeQuery:
    """Chainable stand-in for the postgrest query builder."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.desc = False
        self.limit_to = None

    def select(self, columns="*", count=None):
        self.action = "select"
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = column
        self.desc = desc
        return self

    def limit(self, n):
        self.limit_to = n
        return self

    def _matches(self, row):
        return all(row.get(col) == value for col, value in self.filters)

    def execute(self):
        self.client.calls.append((self.table, self.action, tuple(self.filters)))
        rows = self.client.tables.setdefault(self.table, [])

        if self.action == "insert":
            if self.table in self.client.fail_insert:
                raise RuntimeError(f"insert into {self.table} rejected")
            row = dict(self.payload)
            row.setdefault("id", f"{self.table}-{next(self.client.ids)}")
            row.setdefault("generated_at", "2025-03-05T10:00:00")
            rows.append(row)
            return SimpleNamespace(data=[copy.deepcopy(row)])

        if self.action == "delete":
            if self.table in self.client.fail_delete:
                raise RuntimeError(f"delete from {self.table} rejected")
            kept = [row for row in rows if not self._matches(row)]
            removed = [row for row in rows if self._matches(row)]
            self.client.tables[self.table] = kept
            return SimpleNamespace(data=removed)

        result = [copy.deepcopy(row) for row in rows if self._matches(row)]
        if self.order_by:
            result.sort(key=lambda r: r.get(self.order_by) or 0, reverse=self.desc)
        if self.limit_to is not None:
            result = result[: self.limit_to]
        return SimpleNamespace(data=result)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail_upload:
            raise RuntimeError("upload rejected")
        objects = self.storage.objects.setdefault(self.name, {})
        upsert = (file_options or {}).get("upsert") == "true"
        if path in objects and not upsert:
            raise RuntimeError("The resource already exists")
        objects[path] = bytes(file)
        self.storage.options[(self.name, path)] = file_options
        return SimpleNamespace(path=path)

    def download(self, path):
        return self.storage.objects[self.name][path]

    def remove(self, paths):
        if self.storage.fail_remove:
            raise RuntimeError("remove rejected")
        objects = self.storage.objects.setdefault(self.name, {})
        for path in paths:
            objects.pop(path, None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.options = {}
        self.fail_upload = False
        self.fail_remove = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabaseClient:
    """Minimal supabase.Client double: tables, query chains and storage."""

    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables or {})
        self.storage = FakeStorage()
        self.calls = []
        self.ids = itertools.count(1)
        self.fail_insert = set()
        self.fail_delete = set()

    def table(self, name):
        return FakeQuery(self, name)


# =========================================================================
# Row fixtures
# =========================================================================

@pytest.fixture
def report_row():
    return {
        "id": "rep-1",
        "project_id": "proj-9",
        "report_number": 3,
        "project_name": "Mall Extension",
        "project_number": "WM-2024-07",
        "client_name": "Acme Properties",
        "report_date": "2025-03-05",
        "site_handover_date": "2024-06-01",
        "practical_completion_date": "2025-11-30",
        "electrical_contractor": "Sparks Electrical",
        "cctv_contractor": "SecureVision",
    }


@pytest.fixture
def category_rows():
    return [
        {
            "id": "cat-b", "cost_report_id": "rep-1", "code": "B", "description": "Low Voltage Reticulation",
            "display_order": 2,
            "cost_line_items": [
                {"code": "B1", "description": "Cabling", "original_budget": 400000,
                 "previous_report": 390000, "anticipated_final": 380000, "display_order": 1},
                {"code": "B2", "description": "Trenching", "original_budget": 100000,
                 "previous_report": 100000, "anticipated_final": 110000, "display_order": 2},
            ],
        },
        {
            "id": "cat-a", "cost_report_id": "rep-1", "code": "A", "description": "Preliminaries",
            "display_order": 1,
            "cost_line_items": [
                {"code": "A1", "description": "Site establishment", "original_budget": 250000,
                 "previous_report": 260000, "anticipated_final": 275000, "display_order": 1},
            ],
        },
        {
            "id": "cat-c", "cost_report_id": "rep-1", "code": "C", "description": "Standby Generators",
            "display_order": 3,
            "cost_line_items": [
                {"code": "C1", "description": "Generator supply", "quantity": 2, "rate": 125000,
                 "previous_report": 250000, "anticipated_final": 240000, "display_order": 1},
            ],
        },
    ]


@pytest.fixture
def variation_rows():
    return [
        {"id": "var-1", "cost_report_id": "rep-1", "code": "V001", "description": "Extra DB board",
         "is_credit": False, "amount": 15000, "display_order": 1},
        {"id": "var-2", "cost_report_id": "rep-1", "code": "V002", "description": "Omit floodlights",
         "is_credit": True, "amount": 5000, "display_order": 2},
    ]


@pytest.fixture
def detail_rows():
    return [
        {"cost_report_id": "rep-1", "section_number": 1, "section_title": "Report Date",
         "section_content": "This report is dated", "display_order": 1},
        {"cost_report_id": "rep-1", "section_number": 5, "section_title": "Construction Period",
         "section_content": "", "display_order": 2},
        {"cost_report_id": "rep-1", "section_number": 8, "section_title": "Contracts",
         "section_content": "Appointed under JBCC.", "display_order": 3},
    ]


@pytest.fixture
def sample_bundle(report_row, category_rows, variation_rows, detail_rows):
    """A three-category report bundle with variations and narrative details."""
    categories = sorted((Category.from_row(r) for r in category_rows), key=lambda c: c.display_order)
    return ReportBundle(
        report=Report.from_row(report_row),
        categories=categories,
        variations=[Variation.from_row(r) for r in variation_rows],
        details=[ReportDetail.from_row(r) for r in detail_rows],
    )


@pytest.fixture
def large_bundle(report_row):
    """Twelve categories; the first has enough line items to split its table over pages."""
    categories = []
    for index in range(12):
        code = chr(ord("A") + index)
        count = 80 if index == 0 else 2
        items = [
            {"code": f"{code}{n}", "description": f"Item {n} of category {code}",
             "original_budget": 10000 + n * 100, "previous_report": 10000,
             "anticipated_final": 9500 + n * 150, "display_order": n}
            for n in range(1, count + 1)
        ]
        categories.append(Category.from_row({
            "id": f"cat-{code.lower()}", "cost_report_id": "rep-1", "code": code,
            "description": f"Category {code}", "display_order": index + 1, "cost_line_items": items,
        }))
    return ReportBundle(report=Report.from_row(report_row), categories=categories)


@pytest.fixture
def pdf_reader():
    """Parse rendered PDF bytes with pypdf."""
    def _read(pdf_bytes):
        return PdfReader(BytesIO(pdf_bytes))
    return _read


@pytest.fixture
def lighting_fitting_rows():
    return {
        "fit-1": {"id": "fit-1", "fitting_code": "LF-01", "model_name": "Panel 600", "model_number": "P600",
                  "manufacturer": "Lumina", "wattage": 36, "warranty_years": 5,
                  "warranty_terms": "5 year replacement", "supply_cost": 850, "install_cost": 150},
        "fit-2": {"id": "fit-2", "fitting_code": "LF-02", "model_name": "Downlight", "model_number": "DL12",
                  "manufacturer": None, "wattage": 12, "warranty_years": None, "warranty_terms": None,
                  "supply_cost": 320, "install_cost": 80},
    }


@pytest.fixture
def lighting_rows(lighting_fitting_rows):
    """Project proj-9: tenants t1 and t2 with fittings, t3 without."""
    return {
        "projects": [{"id": "proj-9", "name": "Mall Extension", "project_number": "WM-2024-07"}],
        "tenants": [
            {"id": "t1", "project_id": "proj-9", "shop_name": "Coffee Co", "shop_number": "G01", "area": 120},
            {"id": "t2", "project_id": "proj-9", "shop_name": "Book Nook", "shop_number": "G02", "area": "85"},
            {"id": "t3", "project_id": "proj-9", "shop_name": None, "shop_number": "G03", "area": None},
        ],
        "project_lighting_schedules": [
            {"id": "pls-1", "project_id": "proj-9", "tenant_id": "t1", "fitting_id": "fit-1", "quantity": 10,
             "approval_status": "approved", "lighting_fittings": lighting_fitting_rows["fit-1"]},
            {"id": "pls-2", "project_id": "proj-9", "tenant_id": "t1", "fitting_id": "fit-2", "quantity": None,
             "approval_status": None, "lighting_fittings": lighting_fitting_rows["fit-2"]},
            {"id": "pls-3", "project_id": "proj-9", "tenant_id": "t2", "fitting_id": "fit-1", "quantity": 4,
             "approval_status": "pending", "lighting_fittings": lighting_fitting_rows["fit-1"]},
            {"id": "pls-4", "project_id": "proj-other", "tenant_id": "t9", "fitting_id": "fit-2", "quantity": 99,
             "lighting_fittings": lighting_fitting_rows["fit-2"]},
        ],
    }


@pytest.fixture
def cable_schedule():
    return CableSchedule(
        id="sched-1",
        schedule_name="Main Building",
        schedule_number="CS-001",
        revision="Rev.2",
        project_name="Mall Extension",
        project_number="WM-2024-07",
        client_name="Acme Properties",
    )


@pytest.fixture
def cable_entries():
    return [
        CableEntry(cable_tag="C10", from_location="MSB", to_location="DB-10", voltage=400,
                   load_amps=63, cable_type="Cu/PVC/SWA", cable_size="16mm²",
                   measured_length=80, extra_length=5, total_length=85, ohm_per_km=1.38, volt_drop=2.1,
                   total_cost=8000),
        CableEntry(cable_tag="C2", from_location="MSB", to_location="DB-2", voltage=400,
                   load_amps=100, cable_type="Cu/PVC/SWA", cable_size="35mm²",
                   measured_length=40, extra_length=5, ohm_per_km=0.6335, volt_drop=1.2,
                   total_cost=6000),
        CableEntry(cable_tag="C1", from_location="Mini-sub", to_location="MSB", voltage=230,
                   cable_type="Al/PVC/SWA", cable_size="240mm²", total_length=20),
    ]


@pytest.fixture
def fake_client(report_row, category_rows, variation_rows, detail_rows, lighting_rows):
    return FakeSupabaseClient({
        **lighting_rows,
        "cost_reports": [report_row],
        "cost_categories": category_rows,
        "cost_variations": variation_rows,
        "cost_report_details": detail_rows,
        "cable_schedules": [{
            "id": "sched-1", "schedule_name": "Main Building", "schedule_number": "CS-001",
            "revision": "Rev.2", "project_id": "proj-9",
            "projects": {"name": "Mall Extension", "project_number": "WM-2024-07", "client_name": "Acme"},
        }],
        "cable_entries": [
            {"id": "e1", "schedule_id": "sched-1", "cable_tag": "C2", "from_location": "MSB",
             "to_location": "DB-2", "voltage": 400, "load_amps": 100, "cable_size": "35mm²",
             "total_length": 45},
            {"id": "e2", "schedule_id": "sched-1", "cable_tag": "C1", "from_location": "MSB",
             "to_location": "DB-1", "voltage": 230, "load_amps": "20", "cable_size": "2.5mm²",
             "measured_length": "30", "extra_length": "2"},
        ],
    })


@pytest.fixture
def store(fake_client):
    from report_studio.db.supabase_store import SupabaseStore
    return SupabaseStore(fake_client, max_workers=3)
