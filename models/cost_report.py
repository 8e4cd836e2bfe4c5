"""
Cost Report Data Objects.

Rows fetched from the cost_* tables are mapped onto these dataclasses
before aggregation and layout. Totals are never stored: they are sums
of children computed in report_studio.calculations.cost_totals.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from report_studio.utils import to_number


# ============================================================
# REPORT
# ============================================================

@dataclass
class Report:
    """A periodic cost report snapshot for a project (cost_reports)."""
    id: str
    project_id: str
    report_number: int = 1
    project_name: str = ""
    project_number: str = ""
    client_name: str = ""
    report_date: Optional[str] = None
    site_handover_date: Optional[str] = None
    practical_completion_date: Optional[str] = None

    # Contractors (optional)
    electrical_contractor: Optional[str] = None
    earthing_contractor: Optional[str] = None
    standby_plants_contractor: Optional[str] = None
    cctv_contractor: Optional[str] = None

    @property
    def revision(self) -> str:
        return f"Report {self.report_number}"

    @property
    def contractors(self) -> List[tuple]:
        """(label, name) pairs for every contractor that is set."""
        pairs = [
            ("Electrical", self.electrical_contractor),
            ("Earthing & Lightning", self.earthing_contractor),
            ("Standby Plants", self.standby_plants_contractor),
            ("CCTV & Access Control", self.cctv_contractor),
        ]
        return [(label, name) for label, name in pairs if name]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Report":
        return cls(
            id=str(row["id"]),
            project_id=str(row.get("project_id") or ""),
            report_number=int(row.get("report_number") or 1),
            project_name=row.get("project_name") or "",
            project_number=row.get("project_number") or "",
            client_name=row.get("client_name") or "",
            report_date=row.get("report_date"),
            site_handover_date=row.get("site_handover_date"),
            practical_completion_date=row.get("practical_completion_date"),
            electrical_contractor=row.get("electrical_contractor"),
            earthing_contractor=row.get("earthing_contractor"),
            standby_plants_contractor=row.get("standby_plants_contractor"),
            cctv_contractor=row.get("cctv_contractor"),
        )


# ============================================================
# CATEGORIES & LINE ITEMS
# ============================================================

@dataclass
class LineItem:
    """Leaf financial record (cost_line_items).

    Either carries direct amounts or a quantity/rate pair; with no
    original budget the budget is quantity x rate.
    """
    code: str
    description: str
    original_budget: float = 0.0
    previous_report: float = 0.0
    anticipated_final: float = 0.0
    quantity: Optional[float] = None
    rate: Optional[float] = None
    id: Optional[str] = None
    category_id: Optional[str] = None
    display_order: int = 0

    @property
    def variance(self) -> float:
        return self.anticipated_final - self.original_budget

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LineItem":
        quantity = row.get("quantity")
        rate = row.get("rate")
        if row.get("original_budget") is None and quantity is not None and rate is not None:
            original = to_number(quantity) * to_number(rate)
        else:
            original = to_number(row.get("original_budget"))

        return cls(
            id=row.get("id"),
            category_id=row.get("category_id"),
            code=row.get("code") or "",
            description=row.get("description") or "",
            original_budget=original,
            previous_report=to_number(row.get("previous_report")),
            anticipated_final=to_number(row.get("anticipated_final")),
            quantity=None if quantity is None else to_number(quantity),
            rate=None if rate is None else to_number(rate),
            display_order=int(row.get("display_order") or 0),
        )


@dataclass
class Category:
    """A named cost grouping (cost_categories) owning its line items."""
    id: str
    code: str
    description: str
    display_order: int = 0
    line_items: List[LineItem] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Category":
        items = [LineItem.from_row(item) for item in row.get("cost_line_items") or []]
        items.sort(key=lambda item: item.display_order)
        return cls(
            id=str(row["id"]),
            code=row.get("code") or "",
            description=row.get("description") or row.get("name") or "",
            display_order=int(row.get("display_order") or 0),
            line_items=items,
        )


# ============================================================
# VARIATIONS
# ============================================================

@dataclass
class VariationLineItem:
    """One line on a variation sheet (variation_line_items)."""
    line_number: int
    description: str
    quantity: float = 0.0
    rate: float = 0.0
    amount: float = 0.0
    comments: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "VariationLineItem":
        quantity = to_number(row.get("quantity"))
        rate = to_number(row.get("rate"))
        amount = row.get("amount")
        return cls(
            line_number=int(row.get("line_number") or 0),
            description=row.get("description") or "",
            quantity=quantity,
            rate=rate,
            amount=quantity * rate if amount is None else to_number(amount),
            comments=row.get("comments") or "",
        )


@dataclass
class Variation:
    """A credit or debit change order against the contract (cost_variations)."""
    id: str
    code: str
    description: str
    is_credit: bool = False
    amount: float = 0.0
    tenant_shop_number: Optional[str] = None
    tenant_shop_name: Optional[str] = None
    display_order: int = 0
    line_items: List[VariationLineItem] = field(default_factory=list)

    @property
    def total(self) -> float:
        """Sum of the sheet's line items, or the stored amount without a sheet."""
        if self.line_items:
            return sum(item.amount for item in self.line_items)
        return self.amount

    @property
    def has_tenant(self) -> bool:
        return bool(self.tenant_shop_number or self.tenant_shop_name)

    @property
    def type_label(self) -> str:
        if self.has_tenant:
            return "Tenant Credit" if self.is_credit else "Tenant Variation"
        return "Credit" if self.is_credit else "Debit"

    @property
    def tenant_label(self) -> str:
        if not self.has_tenant:
            return ""
        return " - ".join(part for part in (self.tenant_shop_number, self.tenant_shop_name) if part)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Variation":
        tenant = row.get("tenants") or {}
        items = [VariationLineItem.from_row(item) for item in row.get("variation_line_items") or []]
        items.sort(key=lambda item: item.line_number)
        return cls(
            id=str(row["id"]),
            code=row.get("code") or "",
            description=row.get("description") or "",
            is_credit=bool(row.get("is_credit")),
            amount=to_number(row.get("amount")),
            tenant_shop_number=tenant.get("shop_number"),
            tenant_shop_name=tenant.get("shop_name"),
            display_order=int(row.get("display_order") or 0),
            line_items=items,
        )


# ============================================================
# REPORT DETAILS (narrative sections)
# ============================================================

@dataclass
class ReportDetail:
    """Narrative section of a report (cost_report_details)."""
    section_number: int
    section_title: str
    section_content: str = ""
    display_order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ReportDetail":
        return cls(
            section_number=int(row.get("section_number") or 0),
            section_title=row.get("section_title") or "",
            section_content=row.get("section_content") or "",
            display_order=int(row.get("display_order") or 0),
        )


@dataclass
class ReportBundle:
    """Everything the PDF builder needs for one cost report."""
    report: Report
    categories: List[Category] = field(default_factory=list)
    variations: List[Variation] = field(default_factory=list)
    details: List[ReportDetail] = field(default_factory=list)


# ============================================================
# GENERATED ARTIFACT
# ============================================================

@dataclass(frozen=True)
class GeneratedReportArtifact:
    """A stored PDF plus its metadata row. Never mutated once created."""
    id: str
    owner_id: str
    file_path: str
    file_name: str
    file_size: int
    revision: str
    bucket: str
    table: str
    project_id: Optional[str] = None
    generated_at: Optional[str] = None
    generated_by: Optional[str] = None
    document_type: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any], bucket: str, table: str, owner_key: str) -> "GeneratedReportArtifact":
        file_path = row.get("file_path") or ""
        return cls(
            id=str(row["id"]),
            owner_id=str(row.get(owner_key) or ""),
            file_path=file_path,
            file_name=(
                row.get("file_name") or row.get("report_name") or row.get("document_name")
                or file_path.rsplit("/", 1)[-1]
            ),
            file_size=int(row.get("file_size") or 0),
            revision=row.get("revision") or "",
            bucket=bucket,
            table=table,
            project_id=row.get("project_id"),
            generated_at=row.get("generated_at") or row.get("created_at") or datetime.now().isoformat(),
            generated_by=row.get("generated_by") or row.get("added_by"),
            document_type=row.get("document_type"),
        )
