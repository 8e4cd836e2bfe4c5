"""Tests for report_studio/calculations/cable_sizing.py — cable selection and volt drop."""

import pytest

from report_studio.calculations.cable_sizing import (
    ALUMINIUM_CABLE_TABLE,
    COPPER_CABLE_TABLE,
    CableSizingParams,
    calculate_cable_size,
    calculate_impedance_voltage_drop,
    calculate_voltage_drop,
    material_for,
    recommend_for_entries,
    voltage_drop_limit,
)


def _cable(size, table=COPPER_CABLE_TABLE):
    return next(c for c in table if c.size == size)


# =========================================================================
# Reference tables & formulas
# =========================================================================

class TestTables:
    def test_sizes_ascending(self):
        for table in (COPPER_CABLE_TABLE, ALUMINIUM_CABLE_TABLE):
            ratings = [c.rating_air for c in table]
            assert ratings == sorted(ratings)

    def test_rating_by_method(self):
        cable = _cable("35mm²")
        assert cable.rating("air") == 135
        assert cable.rating("ducts") == 116
        assert cable.rating("ground") == 143


class TestVoltageDrop:
    def test_limit_three_phase(self):
        assert voltage_drop_limit(400) == 5.0

    def test_limit_single_phase(self):
        assert voltage_drop_limit(230) == 3.0

    def test_custom_limit(self):
        assert voltage_drop_limit(230, 4.0) == 4.0

    def test_three_phase_formula(self):
        drop = calculate_voltage_drop(100, 400, 50, _cable("25mm²"))
        assert drop == pytest.approx(1.515 * 100 * 50 / 1000, abs=0.01)

    def test_single_phase_uses_1ph_column(self):
        drop = calculate_voltage_drop(20, 230, 100, _cable("2.5mm²"))
        assert drop == pytest.approx(35.47, abs=0.01)

    def test_zero_length(self):
        assert calculate_voltage_drop(100, 400, 0, _cable("25mm²")) == 0.0

    def test_impedance_drop(self):
        drop = calculate_impedance_voltage_drop(10, 230, 1000, 1.0)
        assert drop == pytest.approx(20.0)


# =========================================================================
# Single cable sizing
# =========================================================================

class TestSingleCable:
    def test_non_positive_inputs(self):
        assert calculate_cable_size(CableSizingParams(load_amps=0, voltage=400)) is None
        assert calculate_cable_size(CableSizingParams(load_amps=-5, voltage=400)) is None
        assert calculate_cable_size(CableSizingParams(load_amps=10, voltage=0)) is None

    def test_smallest_rated_cable(self):
        result = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400))
        assert result.recommended_size == "25mm²"
        assert result.cables_in_parallel == 1
        assert result.volt_drop == 0.0
        assert result.capacity_sufficient

    def test_high_utilisation_flagged(self):
        result = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400))
        assert any(w.field == "cable_size" and w.level == "info" for w in result.warnings)

    def test_upsized_for_volt_drop(self):
        result = calculate_cable_size(CableSizingParams(load_amps=20, voltage=230, total_length=100))
        assert result.recommended_size == "16mm²"
        assert result.volt_drop_percentage <= 3.0

    def test_costs_scale_with_length(self):
        result = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400, total_length=10))
        cable = _cable(result.recommended_size)
        assert result.supply_cost == pytest.approx(cable.supply_cost * 10)
        assert result.total_cost == pytest.approx(result.supply_cost + result.install_cost)

    def test_derating_raises_required_rating(self):
        plain = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400))
        derated = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400, derating_factor=0.6))
        assert derated.recommended_size != plain.recommended_size
        assert any(w.field == "derating_factor" for w in derated.warnings)

    def test_capacity_insufficient(self):
        params = CableSizingParams(load_amps=390, voltage=400, installation_method="ground", derating_factor=0.8)
        result = calculate_cable_size(params)
        assert result.recommended_size == "300mm²"
        assert not result.capacity_sufficient
        assert result.requires_engineer_verification
        assert result.warnings[0].level == "error"

    def test_aluminium_table(self):
        result = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400, material="aluminium"))
        assert result.recommended_size == "50mm²"

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            calculate_cable_size(CableSizingParams(load_amps=10, voltage=400, installation_method="tray"))

    def test_unknown_material(self):
        with pytest.raises(ValueError):
            calculate_cable_size(CableSizingParams(load_amps=10, voltage=400, material="gold"))

    @pytest.mark.parametrize("factor", [0, -0.5])
    def test_non_positive_derating(self, factor):
        with pytest.raises(ValueError, match="Derating factor"):
            calculate_cable_size(CableSizingParams(load_amps=100, voltage=400, derating_factor=factor))

    def test_impedance_volt_drop_reported(self):
        result = calculate_cable_size(CableSizingParams(load_amps=100, voltage=400, total_length=50))
        assert result.recommended_size == "25mm²"
        assert result.impedance_volt_drop == pytest.approx(7.58, abs=0.05)
        assert result.impedance_volt_drop == pytest.approx(result.volt_drop, abs=0.05)


# =========================================================================
# Parallel runs
# =========================================================================

class TestParallelCables:
    @pytest.fixture
    def result(self):
        return calculate_cable_size(CableSizingParams(load_amps=600, voltage=400, total_length=100))

    def test_cheapest_configuration(self, result):
        assert result.cables_in_parallel == 3
        assert result.recommended_size == "70mm²"
        assert result.configuration == "3 x 70mm²"
        assert result.total_cost == pytest.approx(78000)

    def test_alternatives(self, result):
        counts = [alt.cables_in_parallel for alt in result.alternatives]
        assert counts == [2, 3, 4]
        assert sum(alt.is_recommended for alt in result.alternatives) == 1

    def test_cost_savings(self, result):
        assert result.cost_savings == pytest.approx(93000 - 78000)

    def test_load_shared(self, result):
        assert result.load_per_cable == pytest.approx(200)

    def test_impedance_volt_drop_per_cable(self, result):
        # sqrt(3) x 200 A x 0.3325 ohm/km x 0.1 km
        assert result.impedance_volt_drop == pytest.approx(11.52, abs=0.05)


# =========================================================================
# Schedule recommendations
# =========================================================================

class TestRecommendations:
    def test_material_for(self):
        assert material_for("Al/PVC/SWA") == "aluminium"
        assert material_for("Aluminium XLPE") == "aluminium"
        assert material_for("Cu/PVC/SWA") == "copper"
        assert material_for(None) == "copper"

    def test_only_mismatches_listed(self, cable_entries):
        recommendations = recommend_for_entries(cable_entries)
        assert len(recommendations) == 1
        rec = recommendations[0]
        assert rec.cable_tag == "C2"
        assert rec.current_config == "35mm²"
        assert rec.recommended_config == "25mm²"

    def test_entries_without_load_skipped(self, cable_entries):
        no_load = [e for e in cable_entries if e.load_amps is None]
        assert recommend_for_entries(no_load) == []
