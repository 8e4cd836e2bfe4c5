"""
Cable Sizing Calculations.

Selects cable sizes from SANS 10142-1 / SANS 1507-3 reference tables
for a given load, applying derating, a safety margin and a volt drop
limit. Loads above the single-cable maximum are split into parallel
runs and the cheapest viable configuration is recommended.

Table values must be verified by a qualified engineer before use on
a real installation.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np

from models.cable_schedule import CableEntry

logger = logging.getLogger("CostReports.CableSizing")

INSTALLATION_METHODS = ("air", "ducts", "ground")
THREE_PHASE_VOLTAGE = 400
MAX_PARALLEL_CABLES = 8


# =============================================================================
# REFERENCE TABLES
# =============================================================================

@dataclass(frozen=True)
class CableData:
    """One row of a cable reference table."""
    size: str
    rating_ground: float     # A
    rating_ducts: float      # A
    rating_air: float        # A
    impedance: float         # Ohm/km at 20 C
    volt_drop_3phase: float  # mV/A/m
    volt_drop_1phase: float  # mV/A/m
    supply_cost: float       # per metre
    install_cost: float      # per metre

    def rating(self, installation_method: str) -> float:
        if installation_method == "ground":
            return self.rating_ground
        if installation_method == "ducts":
            return self.rating_ducts
        return self.rating_air


def _table(rows) -> List[CableData]:
    return [CableData(*row) for row in rows]


# size, ground, ducts, air, ohm/km, 3ph mV/A/m, 1ph mV/A/m, supply/m, install/m
COPPER_CABLE_TABLE = _table([
    ("1.5mm²", 24, 20, 19, 14.48, 25.080, 28.956, 8.5, 15),
    ("2.5mm²", 32, 26, 26, 8.87, 15.363, 17.734, 12, 18),
    ("4mm²", 42, 34, 35, 5.52, 9.561, 11.034, 18, 22),
    ("6mm²", 53, 43, 45, 3.69, 6.391, 7.374, 25, 28),
    ("10mm²", 70, 58, 62, 2.19, 3.793, 4.384, 38, 35),
    ("16mm²", 91, 75, 83, 1.38, 2.390, 2.759, 52, 42),
    ("25mm²", 119, 96, 110, 0.8749, 1.515, 1.749, 75, 55),
    ("35mm²", 143, 116, 135, 0.6335, 1.097, 1.267, 95, 65),
    ("50mm²", 169, 138, 163, 0.4718, 0.817, 0.944, 125, 78),
    ("70mm²", 210, 171, 207, 0.3325, 0.576, 0.665, 165, 95),
    ("95mm²", 251, 205, 251, 0.2460, 0.427, 0.492, 210, 115),
    ("120mm²", 285, 234, 290, 0.2012, 0.348, 0.402, 255, 135),
    ("150mm²", 320, 263, 332, 0.1698, 0.294, 0.339, 310, 155),
    ("185mm²", 361, 298, 378, 0.1445, 0.250, 0.289, 375, 180),
    ("240mm²", 416, 344, 445, 0.1220, 0.211, 0.244, 475, 215),
    ("300mm²", 465, 385, 510, 0.1090, 0.189, 0.218, 580, 250),
])

ALUMINIUM_CABLE_TABLE = _table([
    ("25mm²", 90, 73, 80, 1.4446, 2.502, 2.889, 45, 55),
    ("35mm²", 108, 87, 99, 1.0465, 1.813, 2.093, 58, 65),
    ("50mm²", 129, 104, 119, 0.7749, 1.342, 1.549, 75, 78),
    ("70mm²", 158, 130, 151, 0.5388, 0.933, 1.078, 98, 95),
    ("95mm²", 192, 157, 186, 0.3934, 0.681, 0.787, 125, 115),
    ("120mm²", 219, 179, 216, 0.3148, 0.545, 0.629, 152, 135),
    ("150mm²", 245, 201, 250, 0.2607, 0.452, 0.521, 185, 155),
    ("185mm²", 278, 229, 287, 0.2133, 0.369, 0.427, 222, 180),
    ("240mm²", 324, 268, 342, 0.1708, 0.296, 0.342, 280, 215),
])

CABLE_TABLES: Dict[str, List[CableData]] = {
    "copper": COPPER_CABLE_TABLE,
    "aluminium": ALUMINIUM_CABLE_TABLE,
}


# =============================================================================
# PARAMETERS & RESULTS
# =============================================================================

@dataclass
class CableSizingParams:
    """Inputs for a sizing calculation."""
    load_amps: float
    voltage: float
    total_length: float = 0.0            # m
    derating_factor: float = 1.0
    material: str = "copper"
    max_amps_per_cable: float = 400.0
    preferred_amps_per_cable: float = 300.0
    installation_method: str = "air"
    safety_margin: float = 1.0
    voltage_drop_limit: Optional[float] = None  # %


@dataclass
class ValidationWarning:
    level: str  # "error", "warning", "info"
    message: str
    field: str = ""


@dataclass
class CableAlternative:
    """A parallel-run configuration that satisfies rating and volt drop."""
    cable_size: str
    cables_in_parallel: int
    load_per_cable: float
    volt_drop_percentage: float
    supply_cost: float
    install_cost: float
    total_cost: float
    is_recommended: bool = False


@dataclass
class CableSizingResult:
    recommended_size: str
    ohm_per_km: float
    volt_drop: float              # V
    volt_drop_percentage: float
    supply_cost: float
    install_cost: float
    total_cost: float
    cables_in_parallel: int = 1
    load_per_cable: float = 0.0
    capacity_sufficient: bool = True
    requires_engineer_verification: bool = False
    warnings: List[ValidationWarning] = field(default_factory=list)
    alternatives: List[CableAlternative] = field(default_factory=list)
    cost_savings: float = 0.0
    impedance_volt_drop: float = 0.0  # V, from ohm/km per cable

    @property
    def configuration(self) -> str:
        if self.cables_in_parallel > 1:
            return f"{self.cables_in_parallel} x {self.recommended_size}"
        return self.recommended_size


# =============================================================================
# CORE FORMULAS
# =============================================================================

def voltage_drop_limit(voltage: float, custom_limit: Optional[float] = None) -> float:
    """Permitted volt drop in percent: 5 % at 400 V, otherwise 3 %."""
    if custom_limit:
        return custom_limit
    return 5.0 if voltage == THREE_PHASE_VOLTAGE else 3.0


def calculate_voltage_drop(load_amps: float, voltage: float, length: float, cable: CableData) -> float:
    """Volt drop in volts from the tabulated mV/A/m values."""
    if length <= 0:
        return 0.0
    mv_per_amp_metre = cable.volt_drop_3phase if voltage == THREE_PHASE_VOLTAGE else cable.volt_drop_1phase
    return round(mv_per_amp_metre * load_amps * length / 1000, 2)


def calculate_impedance_voltage_drop(load_amps: float, voltage: float, length: float, ohm_per_km: float) -> float:
    """Volt drop from impedance alone (Ohm's law).

    sqrt(3) * I * Z * L for three phase, 2 * I * Z * L for single phase.
    """
    if length <= 0:
        return 0.0
    factor = np.sqrt(3) if voltage == THREE_PHASE_VOLTAGE else 2.0
    return float(factor * load_amps * ohm_per_km * length / 1000)


def _percentage(volt_drop: float, voltage: float) -> float:
    return round(volt_drop / voltage * 100, 2)


def _select_by_rating(table: Sequence[CableData], required: float, method: str) -> Optional[CableData]:
    for cable in table:
        if cable.rating(method) >= required:
            return cable
    return None


def _upsize_for_volt_drop(
    table: Sequence[CableData],
    start: CableData,
    load_amps: float,
    voltage: float,
    length: float,
    limit: float,
) -> CableData:
    """Smallest cable from ``start`` upwards within the volt drop limit.

    Falls back to the largest cable in the table.
    """
    index = table.index(start)
    for cable in table[index:]:
        drop = calculate_voltage_drop(load_amps, voltage, length, cable)
        if _percentage(drop, voltage) <= limit:
            return cable
    return table[-1]


def _validate(
    cable: CableData,
    params: CableSizingParams,
    volt_drop_percentage: float,
    limit: float,
) -> List[ValidationWarning]:
    warnings = []
    if volt_drop_percentage > limit:
        warnings.append(ValidationWarning(
            "warning",
            f"Volt drop {volt_drop_percentage:.2f}% exceeds the {limit:.1f}% limit",
            "volt_drop",
        ))
    if params.derating_factor < 0.7:
        warnings.append(ValidationWarning(
            "info",
            f"Derating factor {params.derating_factor:.2f} is unusually low; verify grouping and ambient conditions",
            "derating_factor",
        ))
    utilisation = params.load_amps / cable.rating(params.installation_method)
    if utilisation > 0.9:
        warnings.append(ValidationWarning(
            "info",
            f"{cable.size} runs at {utilisation:.0%} of its rating",
            "cable_size",
        ))
    return warnings


# =============================================================================
# SIZING
# =============================================================================

def calculate_cable_size(params: CableSizingParams) -> Optional[CableSizingResult]:
    """Recommend a cable size (or parallel configuration) for a load.

    Returns None for non-positive load or voltage, or when no parallel
    configuration satisfies the constraints.
    """
    if not params.load_amps or params.load_amps <= 0 or not params.voltage or params.voltage <= 0:
        return None
    if params.installation_method not in INSTALLATION_METHODS:
        raise ValueError(f"Unknown installation method: {params.installation_method}")

    table = CABLE_TABLES.get(params.material)
    if table is None:
        raise ValueError(f"Unknown conductor material: {params.material}")
    if params.derating_factor is None or params.derating_factor <= 0:
        raise ValueError(f"Derating factor must be positive, got {params.derating_factor}")

    limit = voltage_drop_limit(params.voltage, params.voltage_drop_limit)
    logger.debug(
        "Sizing %s A at %s V over %s m (%s, %s)",
        params.load_amps, params.voltage, params.total_length, params.material, params.installation_method,
    )

    if params.load_amps <= params.max_amps_per_cable:
        return _size_single_cable(params, table, limit)
    return _size_parallel_cables(params, table, limit)


def _size_single_cable(params: CableSizingParams, table: Sequence[CableData], limit: float) -> CableSizingResult:
    required = round(params.load_amps * params.safety_margin / params.derating_factor, 2)
    cable = _select_by_rating(table, required, params.installation_method)

    capacity_sufficient = True
    if cable is None:
        cable = table[-1]
        capacity_sufficient = cable.rating(params.installation_method) >= required
        logger.info("No single cable rated for %.2f A, suggesting %s", required, cable.size)

    if params.total_length > 0:
        cable = _upsize_for_volt_drop(table, cable, params.load_amps, params.voltage, params.total_length, limit)

    length = max(params.total_length, 0.0)
    volt_drop = calculate_voltage_drop(params.load_amps, params.voltage, length, cable)
    percentage = _percentage(volt_drop, params.voltage) if length > 0 else 0.0
    supply = round(cable.supply_cost * length, 2)
    install = round(cable.install_cost * length, 2)

    warnings = _validate(cable, params, percentage, limit)
    if not capacity_sufficient:
        warnings.insert(0, ValidationWarning(
            "error",
            f"Cable capacity insufficient: {cable.size} cannot safely carry {params.load_amps} A. "
            "Consider parallel cables or another conductor material.",
            "cable_size",
        ))

    return CableSizingResult(
        recommended_size=cable.size,
        ohm_per_km=cable.impedance,
        volt_drop=volt_drop,
        volt_drop_percentage=percentage,
        supply_cost=supply,
        install_cost=install,
        total_cost=round(supply + install, 2),
        cables_in_parallel=1,
        load_per_cable=params.load_amps,
        capacity_sufficient=capacity_sufficient,
        requires_engineer_verification=not capacity_sufficient or any(w.level == "error" for w in warnings),
        warnings=warnings,
        impedance_volt_drop=round(
            calculate_impedance_voltage_drop(params.load_amps, params.voltage, length, cable.impedance), 2
        ),
    )


def evaluate_parallel_options(
    params: CableSizingParams,
    table: Sequence[CableData],
    limit: float,
) -> List[CableAlternative]:
    """Every parallel configuration that meets rating and volt drop."""
    alternatives = []
    length = max(params.total_length, 0.0)
    min_cables = int(np.ceil(params.load_amps / params.max_amps_per_cable))
    max_cables = min(int(np.ceil(params.load_amps / params.preferred_amps_per_cable)) + 2, MAX_PARALLEL_CABLES)

    for count in range(min_cables, max_cables + 1):
        load_per_cable = params.load_amps / count
        if load_per_cable > params.max_amps_per_cable:
            continue

        required = load_per_cable / params.derating_factor * params.safety_margin
        cable = _select_by_rating(table, required, params.installation_method)
        if cable is None:
            continue

        if length > 0:
            cable = _upsize_for_volt_drop(table, cable, load_per_cable, params.voltage, length, limit)
            drop = calculate_voltage_drop(load_per_cable, params.voltage, length, cable)
            if _percentage(drop, params.voltage) > limit:
                continue

        drop = calculate_voltage_drop(load_per_cable, params.voltage, length, cable)
        supply = round(round(cable.supply_cost * length, 2) * count, 2)
        install = round(round(cable.install_cost * length, 2) * count, 2)
        alternatives.append(CableAlternative(
            cable_size=cable.size,
            cables_in_parallel=count,
            load_per_cable=load_per_cable,
            volt_drop_percentage=_percentage(drop, params.voltage) if length > 0 else 0.0,
            supply_cost=supply,
            install_cost=install,
            total_cost=round(supply + install, 2),
        ))

    return alternatives


def _size_parallel_cables(params: CableSizingParams, table: Sequence[CableData], limit: float) -> Optional[CableSizingResult]:
    alternatives = evaluate_parallel_options(params, table, limit)
    if not alternatives:
        logger.warning("No parallel configuration found for %s A", params.load_amps)
        return None

    recommended = min(alternatives, key=lambda alt: alt.total_cost)
    most_expensive = max(alternatives, key=lambda alt: alt.total_cost)
    recommended.is_recommended = True

    cable = next(c for c in table if c.size == recommended.cable_size)
    length = max(params.total_length, 0.0)

    return CableSizingResult(
        recommended_size=recommended.cable_size,
        ohm_per_km=cable.impedance,
        volt_drop=calculate_voltage_drop(recommended.load_per_cable, params.voltage, length, cable),
        volt_drop_percentage=recommended.volt_drop_percentage,
        supply_cost=recommended.supply_cost,
        install_cost=recommended.install_cost,
        total_cost=recommended.total_cost,
        cables_in_parallel=recommended.cables_in_parallel,
        load_per_cable=recommended.load_per_cable,
        alternatives=alternatives,
        cost_savings=round(most_expensive.total_cost - recommended.total_cost, 2),
        impedance_volt_drop=round(
            calculate_impedance_voltage_drop(recommended.load_per_cable, params.voltage, length, cable.impedance), 2
        ),
    )


# =============================================================================
# SCHEDULE RECOMMENDATIONS
# =============================================================================

@dataclass
class SizingRecommendation:
    """Differences between a scheduled cable and the calculated size."""
    cable_tag: str
    from_location: str
    to_location: str
    current_config: str
    recommended_config: str
    volt_drop_percentage: float


def material_for(cable_type: Optional[str]) -> str:
    """Map a free-text cable type ("Al/PVC", "Copper", ...) to a table key."""
    lower = (cable_type or "").lower()
    if "alu" in lower or lower.startswith("al"):
        return "aluminium"
    return "copper"


def recommend_for_entries(entries: Sequence[CableEntry]) -> List[SizingRecommendation]:
    """Size every entry with a load and list those whose size differs."""
    recommendations = []
    for entry in entries:
        if not entry.load_amps or entry.load_amps <= 0:
            continue
        method = entry.installation_method if entry.installation_method in INSTALLATION_METHODS else "air"
        result = calculate_cable_size(CableSizingParams(
            load_amps=entry.load_amps,
            voltage=entry.voltage,
            total_length=entry.length,
            material=material_for(entry.cable_type),
            installation_method=method,
        ))
        if result is None:
            continue
        current = entry.cable_size or "-"
        if entry.quantity > 1 and entry.cable_size:
            current = f"{entry.quantity} x {entry.cable_size}"
        if current != result.configuration:
            recommendations.append(SizingRecommendation(
                cable_tag=entry.cable_tag,
                from_location=entry.from_location,
                to_location=entry.to_location,
                current_config=current,
                recommended_config=result.configuration,
                volt_drop_percentage=result.volt_drop_percentage,
            ))
    return recommendations
