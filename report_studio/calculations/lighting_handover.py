"""
Lighting Handover Calculations.

Groups a project's lighting schedule rows per tenant and sums fitting
quantities across tenants for the warranty schedule.
"""
from typing import Iterable, List, Optional, Sequence
import logging

import pandas as pd

from models.lighting_handover import (
    DEFAULT_WARRANTY_TERMS,
    DEFAULT_WARRANTY_YEARS,
    LightingScheduleItem,
    LightingScheduleRow,
    Tenant,
    TenantLightingSchedule,
    WarrantyFitting,
)

logger = logging.getLogger("CostReports.LightingHandover")


def schedule_item(row: LightingScheduleRow) -> LightingScheduleItem:
    """Schedule line for one placed fitting; costs are unit cost x quantity."""
    fitting = row.fitting
    if fitting is None:
        return LightingScheduleItem(
            fitting_code="N/A",
            description="Unknown",
            quantity=row.quantity,
            wattage=0.0,
            status=row.approval_status,
        )

    description = " ".join(part for part in (fitting.manufacturer, fitting.model_number) if part)
    return LightingScheduleItem(
        fitting_code=fitting.model_number or "N/A",
        description=description or "Unknown",
        quantity=row.quantity,
        wattage=fitting.wattage,
        status=row.approval_status,
        supply_cost=fitting.supply_cost * row.quantity,
        install_cost=fitting.install_cost * row.quantity,
    )


def build_tenant_schedules(
    tenants: Sequence[Tenant],
    rows: Sequence[LightingScheduleRow],
) -> List[TenantLightingSchedule]:
    """One schedule per tenant, in tenant order; tenants without fittings are left out."""
    schedules = []
    for tenant in tenants:
        items = [schedule_item(row) for row in rows if row.tenant_id == tenant.id]
        if not items:
            continue
        schedules.append(TenantLightingSchedule(
            shop_number=tenant.shop_number,
            shop_name=tenant.shop_name,
            area=tenant.area,
            items=items,
        ))
    logger.debug("Grouped %d schedule rows into %d tenant schedules", len(rows), len(schedules))
    return schedules


def aggregate_warranty_fittings(
    rows: Sequence[LightingScheduleRow],
    selected: Optional[Iterable[str]] = None,
) -> List[WarrantyFitting]:
    """Fitting types used on the project, in first-seen order.

    Quantities are summed across tenants and ``tenant_count`` is the
    number of distinct tenants using the fitting. Rows without a fitting
    are ignored. With ``selected`` only those fitting ids are kept.
    """
    fittings = {row.fitting.id: row.fitting for row in rows if row.fitting is not None}
    if not fittings:
        return []

    df = pd.DataFrame(
        [
            {"fitting_id": row.fitting.id, "tenant_id": row.tenant_id, "quantity": row.quantity}
            for row in rows
            if row.fitting is not None
        ]
    )
    grouped = df.groupby("fitting_id", sort=False).agg(
        total_quantity=("quantity", "sum"),
        tenant_count=("tenant_id", "nunique"),
    )

    wanted = None if selected is None else set(selected)
    result = []
    for fitting_id, stats in grouped.iterrows():
        if wanted is not None and fitting_id not in wanted:
            continue
        fitting = fittings[fitting_id]
        result.append(WarrantyFitting(
            fitting_id=fitting_id,
            fitting_code=fitting.fitting_code,
            model_name=fitting.model_name,
            manufacturer=fitting.manufacturer or "-",
            total_quantity=int(stats["total_quantity"]),
            tenant_count=int(stats["tenant_count"]),
            wattage=fitting.wattage,
            warranty_years=fitting.warranty_years or DEFAULT_WARRANTY_YEARS,
            warranty_terms=fitting.warranty_terms or DEFAULT_WARRANTY_TERMS,
        ))
    return result


def warranty_frame(fittings: Sequence[WarrantyFitting]) -> pd.DataFrame:
    """Warranty fittings as a DataFrame (fitting picker in the UI)."""
    return pd.DataFrame(
        [
            {
                "fitting_id": f.fitting_id,
                "code": f.fitting_code,
                "model": f.model_name,
                "manufacturer": f.manufacturer,
                "quantity": f.total_quantity,
                "tenants": f.tenant_count,
                "warranty_years": f.warranty_years,
            }
            for f in fittings
        ],
        columns=["fitting_id", "code", "model", "manufacturer", "quantity", "tenants", "warranty_years"],
    )
