"""
Cable Schedule Data Objects.

Rows from cable_schedules / cable_entries mapped onto dataclasses.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from report_studio.utils import to_number


def _optional_number(value: Any) -> Optional[float]:
    return None if value is None or value == "" else to_number(value)


@dataclass
class CableSchedule:
    """A cable schedule revision (cable_schedules)."""
    id: str
    schedule_name: str
    schedule_number: str = ""
    revision: str = "Rev.0"
    project_id: Optional[str] = None
    project_name: str = ""
    project_number: str = ""
    client_name: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CableSchedule":
        project = row.get("projects") or {}
        return cls(
            id=str(row["id"]),
            schedule_name=row.get("schedule_name") or "",
            schedule_number=str(row.get("schedule_number") or ""),
            revision=row.get("revision") or "Rev.0",
            project_id=row.get("project_id"),
            project_name=project.get("name") or row.get("project_name") or "",
            project_number=project.get("project_number") or row.get("project_number") or "",
            client_name=project.get("client_name") or row.get("client_name") or "",
        )


@dataclass
class CableEntry:
    """One cable run on a schedule (cable_entries)."""
    cable_tag: str
    from_location: str
    to_location: str
    voltage: float = 400.0
    load_amps: Optional[float] = None
    cable_type: Optional[str] = None
    cable_size: Optional[str] = None
    measured_length: Optional[float] = None
    extra_length: Optional[float] = None
    total_length: Optional[float] = None
    ohm_per_km: Optional[float] = None
    volt_drop: Optional[float] = None
    supply_cost: Optional[float] = None
    install_cost: Optional[float] = None
    total_cost: Optional[float] = None
    installation_method: str = "air"
    quantity: int = 1
    id: Optional[str] = None
    notes: str = ""

    @property
    def length(self) -> float:
        """Total run length; measured + extra when no total is stored."""
        if self.total_length is not None:
            return self.total_length
        return to_number(self.measured_length) + to_number(self.extra_length)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CableEntry":
        return cls(
            id=row.get("id"),
            cable_tag=row.get("cable_tag") or "",
            from_location=row.get("from_location") or "",
            to_location=row.get("to_location") or "",
            voltage=to_number(row.get("voltage"), 400.0),
            load_amps=_optional_number(row.get("load_amps")),
            cable_type=row.get("cable_type"),
            cable_size=row.get("cable_size"),
            measured_length=_optional_number(row.get("measured_length")),
            extra_length=_optional_number(row.get("extra_length")),
            total_length=_optional_number(row.get("total_length")),
            ohm_per_km=_optional_number(row.get("ohm_per_km")),
            volt_drop=_optional_number(row.get("volt_drop")),
            supply_cost=_optional_number(row.get("supply_cost")),
            install_cost=_optional_number(row.get("install_cost")),
            total_cost=_optional_number(row.get("total_cost")),
            installation_method=row.get("installation_method") or "air",
            quantity=int(row.get("quantity") or 1),
            notes=row.get("notes") or "",
        )
