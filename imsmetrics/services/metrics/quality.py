from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from imsmetrics.core.errors import MetricInputError
from imsmetrics.domain.enums import RagStatus
from imsmetrics.services.numeric import finite_or, round_half_up, round_to


DPMO_MULTIPLIER = 1_000_000

# DPMO -> sigma level (1.5 sigma shift convention), DPMO descending.
SIGMA_TABLE: tuple[tuple[float, float], ...] = (
    (933193, 0.0),
    (691462, 0.5),
    (500000, 1.0),
    (308538, 1.5),
    (158655, 2.0),
    (66807, 2.5),
    (22750, 3.0),
    (6210, 3.5),
    (1350, 4.0),
    (233, 4.5),
    (32, 5.0),
    (3.4, 5.5),
    (0.29, 6.0),
)
SIGMA_MIN = SIGMA_TABLE[0][1]
SIGMA_MAX = SIGMA_TABLE[-1][1]

LOWER_IS_BETTER_METRICS = frozenset({"dpmo", "defect_rate"})
HIGHER_IS_BETTER_METRICS = frozenset({"fpy", "sigma"})
RAG_LOWER_AMBER_FACTOR = 1.5
RAG_HIGHER_AMBER_FACTOR = 0.9


@dataclass(frozen=True)
class QualityCounters:
    prevention_cost: float = 0
    appraisal_cost: float = 0
    internal_failure_cost: float = 0
    external_failure_cost: float = 0
    total_units: int = 0
    defective_units: int = 0
    defect_opportunities: int = 1


@dataclass(frozen=True)
class QualityResults:
    total_copq: float
    dpmo: int
    first_pass_yield: float
    process_sigma: float
    defect_rate: float


@dataclass(frozen=True)
class CopqBreakdown:
    # Shares are percentages of total COPQ.
    prevention_pct: float
    appraisal_pct: float
    internal_failure_pct: float
    external_failure_pct: float
    total: float
    conformance_cost: float
    non_conformance_cost: float


@dataclass(frozen=True)
class QualityYearToDate:
    counters: QualityCounters
    results: QualityResults


def total_copq(
    prevention: float,
    appraisal: float,
    internal_failure: float,
    external_failure: float,
) -> float:
    return round_to(finite_or(prevention + appraisal + internal_failure + external_failure), 2)


def copq_breakdown(
    prevention: float,
    appraisal: float,
    internal_failure: float,
    external_failure: float,
) -> CopqBreakdown:
    total = total_copq(prevention, appraisal, internal_failure, external_failure)

    def share(part: float) -> float:
        return round_to(finite_or(part / total * 100), 1) if total > 0 else 0.0

    return CopqBreakdown(
        prevention_pct=share(prevention),
        appraisal_pct=share(appraisal),
        internal_failure_pct=share(internal_failure),
        external_failure_pct=share(external_failure),
        total=total,
        conformance_cost=round_to(finite_or(prevention + appraisal), 2),
        non_conformance_cost=round_to(finite_or(internal_failure + external_failure), 2),
    )


def dpmo(defects: float, units: float, opportunities: float) -> int:
    if units <= 0 or opportunities <= 0:
        return 0
    return round_half_up(finite_or(defects * DPMO_MULTIPLIER / (units * opportunities)))


def first_pass_yield(total_units: float, defective_units: float) -> float:
    # Zero units reports 0% rather than 100%; displayed figures depend on this.
    if total_units <= 0:
        return 0.0
    return round_to(finite_or((total_units - defective_units) / total_units * 100), 2)


def rolled_throughput_yield(yields: Sequence[float]) -> float:
    if not yields:
        return 0.0
    product = 1.0
    for step_yield in yields:
        product *= step_yield / 100
    return round_to(finite_or(product * 100), 2)


def process_sigma(dpmo_value: float) -> float:
    """Map DPMO to a sigma level by linear interpolation over ``SIGMA_TABLE``.

    Values at or beyond the first row clamp to 0 sigma and values at or below
    the last row clamp to 6 sigma. The result is rounded to two decimals.
    """
    if dpmo_value >= SIGMA_TABLE[0][0]:
        return SIGMA_MIN
    if dpmo_value <= SIGMA_TABLE[-1][0]:
        return SIGMA_MAX
    for (upper_dpmo, upper_sigma), (lower_dpmo, lower_sigma) in zip(SIGMA_TABLE, SIGMA_TABLE[1:]):
        if lower_dpmo <= dpmo_value <= upper_dpmo:
            ratio = (upper_dpmo - dpmo_value) / (upper_dpmo - lower_dpmo)
            return round_to(upper_sigma + ratio * (lower_sigma - upper_sigma), 2)
    # Unreachable for finite input: the table brackets every value between its ends.
    return SIGMA_MIN


def defect_rate(defective_units: float, total_units: float) -> float:
    if total_units <= 0:
        return 0.0
    return round_to(finite_or(defective_units / total_units * 100), 2)


def calculate_quality_metrics(counters: QualityCounters) -> QualityResults:
    dpmo_value = dpmo(counters.defective_units, counters.total_units, counters.defect_opportunities)
    return QualityResults(
        total_copq=total_copq(
            counters.prevention_cost,
            counters.appraisal_cost,
            counters.internal_failure_cost,
            counters.external_failure_cost,
        ),
        dpmo=dpmo_value,
        first_pass_yield=first_pass_yield(counters.total_units, counters.defective_units),
        process_sigma=process_sigma(dpmo_value),
        defect_rate=defect_rate(counters.defective_units, counters.total_units),
    )


def counters_from(row: Any) -> QualityCounters:
    return QualityCounters(
        prevention_cost=float(getattr(row, "prevention_cost", 0) or 0),
        appraisal_cost=float(getattr(row, "appraisal_cost", 0) or 0),
        internal_failure_cost=float(getattr(row, "internal_failure_cost", 0) or 0),
        external_failure_cost=float(getattr(row, "external_failure_cost", 0) or 0),
        total_units=int(getattr(row, "total_units", 0) or 0),
        defective_units=int(getattr(row, "defective_units", 0) or 0),
        defect_opportunities=int(getattr(row, "defect_opportunities", 1) or 1),
    )


def year_to_date_quality(periods: Iterable[Any]) -> QualityYearToDate:
    # Periods must be ordered by month; opportunities per unit come from the latest one.
    prevention = appraisal = internal = external = 0.0
    total_units = 0
    defective_units = 0
    opportunities = 1
    for period in periods:
        counters = counters_from(period)
        prevention += counters.prevention_cost
        appraisal += counters.appraisal_cost
        internal += counters.internal_failure_cost
        external += counters.external_failure_cost
        total_units += counters.total_units
        defective_units += counters.defective_units
        opportunities = counters.defect_opportunities
    counters = QualityCounters(
        prevention_cost=prevention,
        appraisal_cost=appraisal,
        internal_failure_cost=internal,
        external_failure_cost=external,
        total_units=total_units,
        defective_units=defective_units,
        defect_opportunities=opportunities,
    )
    return QualityYearToDate(counters=counters, results=calculate_quality_metrics(counters))


def quality_rag_status(metric: str, value: float, target: float) -> RagStatus:
    if metric in LOWER_IS_BETTER_METRICS:
        if value <= target:
            return RagStatus.GREEN
        if value <= target * RAG_LOWER_AMBER_FACTOR:
            return RagStatus.AMBER
        return RagStatus.RED
    if metric not in HIGHER_IS_BETTER_METRICS:
        raise MetricInputError(f"unknown quality metric: {metric}")
    if value >= target:
        return RagStatus.GREEN
    if value >= target * RAG_HIGHER_AMBER_FACTOR:
        return RagStatus.AMBER
    return RagStatus.RED
