from __future__ import annotations

from imsmetrics.services.metrics import EmissionSources, carbon_footprint_tonnes, waste_diversion_rate


def test_carbon_footprint_in_tonnes() -> None:
    assert carbon_footprint_tonnes(EmissionSources(co2_kg=1000, electricity_kwh=1000)) == 1.23
    assert carbon_footprint_tonnes(EmissionSources()) == 0


def test_waste_diversion_rate() -> None:
    assert waste_diversion_rate(30, 10, 10, 50) == 50.0
    assert waste_diversion_rate(0, 0, 0, 0) == 0
