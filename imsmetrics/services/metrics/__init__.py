from __future__ import annotations

# Re-export period metric calculators for centralized imports.

from imsmetrics.services.metrics.environment import EmissionSources, carbon_footprint_tonnes, waste_diversion_rate
from imsmetrics.services.metrics.quality import (
    CopqBreakdown,
    QualityCounters,
    QualityResults,
    QualityYearToDate,
    calculate_quality_metrics,
    copq_breakdown,
    process_sigma,
    quality_rag_status,
    rolled_throughput_yield,
    year_to_date_quality,
)
from imsmetrics.services.metrics.safety import (
    IncidentPyramid,
    SafetyCounters,
    SafetyRates,
    SafetyYearToDate,
    calculate_safety_rates,
    predict_incident_pyramid,
    rate_change_pct,
    safety_rag_status,
    year_to_date_safety,
)

__all__ = [
    "CopqBreakdown",
    "EmissionSources",
    "IncidentPyramid",
    "QualityCounters",
    "QualityResults",
    "QualityYearToDate",
    "SafetyCounters",
    "SafetyRates",
    "SafetyYearToDate",
    "calculate_quality_metrics",
    "calculate_safety_rates",
    "carbon_footprint_tonnes",
    "copq_breakdown",
    "predict_incident_pyramid",
    "process_sigma",
    "quality_rag_status",
    "rate_change_pct",
    "rolled_throughput_yield",
    "safety_rag_status",
    "waste_diversion_rate",
    "year_to_date_quality",
    "year_to_date_safety",
]
