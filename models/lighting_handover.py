"""
Lighting Handover Data Objects.

Rows from projects / tenants / project_lighting_schedules (with their
nested lighting_fittings) mapped onto dataclasses, plus the per-tenant
schedule and warranty rows printed in the handover documents.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from report_studio.utils import to_number

DEFAULT_WARRANTY_YEARS = 3
DEFAULT_WARRANTY_TERMS = "Standard manufacturer warranty"


# ============================================================
# STORED ROWS
# ============================================================

@dataclass
class HandoverProject:
    id: str
    name: str = "Project"
    project_number: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "HandoverProject":
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "Project",
            project_number=row.get("project_number") or "",
        )


@dataclass
class Tenant:
    """A shop on the project (tenants)."""
    id: str
    shop_name: str = "Unnamed"
    shop_number: str = ""
    area: float = 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Tenant":
        return cls(
            id=str(row["id"]),
            shop_name=row.get("shop_name") or "Unnamed",
            shop_number=str(row.get("shop_number") or ""),
            area=to_number(row.get("area")),
        )


@dataclass
class LightingFitting:
    """A fitting from the lighting library (lighting_fittings)."""
    id: str
    fitting_code: str = ""
    model_name: str = ""
    model_number: str = ""
    manufacturer: Optional[str] = None
    wattage: float = 0.0
    warranty_years: Optional[int] = None
    warranty_terms: Optional[str] = None
    supply_cost: float = 0.0
    install_cost: float = 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LightingFitting":
        years = row.get("warranty_years")
        return cls(
            id=str(row["id"]),
            fitting_code=row.get("fitting_code") or "",
            model_name=row.get("model_name") or "",
            model_number=row.get("model_number") or "",
            manufacturer=row.get("manufacturer"),
            wattage=to_number(row.get("wattage")),
            warranty_years=int(to_number(years)) if years not in (None, "") else None,
            warranty_terms=row.get("warranty_terms"),
            supply_cost=to_number(row.get("supply_cost")),
            install_cost=to_number(row.get("install_cost")),
        )


@dataclass
class LightingScheduleRow:
    """A fitting placed in a tenant's unit (project_lighting_schedules)."""
    id: str
    tenant_id: Optional[str]
    fitting_id: Optional[str]
    quantity: int = 1
    approval_status: str = "pending"
    fitting: Optional[LightingFitting] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LightingScheduleRow":
        nested = row.get("lighting_fittings")
        fitting = LightingFitting.from_row(nested) if nested and nested.get("id") is not None else None
        # A missing or zero quantity counts as one fitting
        quantity = int(to_number(row.get("quantity"))) or 1
        return cls(
            id=str(row.get("id") or ""),
            tenant_id=row.get("tenant_id"),
            fitting_id=row.get("fitting_id") or (fitting.id if fitting else None),
            quantity=quantity,
            approval_status=row.get("approval_status") or "pending",
            fitting=fitting,
        )


# ============================================================
# DOCUMENT ROWS
# ============================================================

@dataclass
class LightingScheduleItem:
    """One line of a tenant's lighting schedule; costs are line totals."""
    fitting_code: str
    description: str
    quantity: int
    wattage: float
    status: str = "pending"
    supply_cost: float = 0.0
    install_cost: float = 0.0

    @property
    def total_wattage(self) -> float:
        return self.wattage * self.quantity


@dataclass
class TenantLightingSchedule:
    shop_number: str
    shop_name: str
    area: float = 0.0
    items: List[LightingScheduleItem] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total_wattage(self) -> float:
        return sum(item.total_wattage for item in self.items)

    @property
    def total_supply_cost(self) -> float:
        return sum(item.supply_cost for item in self.items)

    @property
    def total_install_cost(self) -> float:
        return sum(item.install_cost for item in self.items)

    @property
    def label(self) -> str:
        return f"{self.shop_number} - {self.shop_name}" if self.shop_number else self.shop_name


@dataclass
class WarrantyFitting:
    """A fitting type used on the project with its summed quantity."""
    fitting_id: str
    fitting_code: str
    model_name: str
    manufacturer: str = "-"
    total_quantity: int = 0
    tenant_count: int = 0
    wattage: float = 0.0
    warranty_years: int = DEFAULT_WARRANTY_YEARS
    warranty_terms: str = DEFAULT_WARRANTY_TERMS
