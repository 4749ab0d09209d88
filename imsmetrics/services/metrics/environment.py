from __future__ import annotations

from dataclasses import dataclass

from imsmetrics.services.numeric import finite_or, round_to


# kg CO2e per unit: GWP-100 for gases, UK grid average for electricity.
CO2E_FACTORS = {
    "methane": 28.0,
    "nitrous_oxide": 298.0,
    "electricity_kwh": 0.233,
    "gas_m3": 2.02,
    "diesel_l": 2.68,
    "petrol_l": 2.31,
}


@dataclass(frozen=True)
class EmissionSources:
    co2_kg: float = 0
    methane: float = 0
    nitrous_oxide: float = 0
    electricity_kwh: float = 0
    gas_m3: float = 0
    diesel_l: float = 0
    petrol_l: float = 0


def carbon_footprint_tonnes(sources: EmissionSources) -> float:
    total_kg = sources.co2_kg
    for name, factor in CO2E_FACTORS.items():
        total_kg += getattr(sources, name) * factor
    return round_to(finite_or(total_kg / 1000), 2)


def waste_diversion_rate(recycled: float, composted: float, recovered: float, landfill: float) -> float:
    total = recycled + composted + recovered + landfill
    if total <= 0:
        return 0.0
    return round_to(finite_or((recycled + composted + recovered) / total * 100), 1)
