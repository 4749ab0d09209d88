from __future__ import annotations

from types import SimpleNamespace

import pytest

from imsmetrics.core.errors import MetricInputError
from imsmetrics.domain.enums import RagStatus
from imsmetrics.services.metrics.quality import (
    SIGMA_TABLE,
    QualityCounters,
    calculate_quality_metrics,
    copq_breakdown,
    defect_rate,
    dpmo,
    first_pass_yield,
    process_sigma,
    quality_rag_status,
    rolled_throughput_yield,
    total_copq,
    year_to_date_quality,
)


def test_dpmo_examples_and_guards() -> None:
    assert dpmo(0, 100, 4) == 0
    assert dpmo(10, 1000, 5) == 2000
    assert dpmo(34, 10_000, 10) == 340
    assert dpmo(5, 0, 4) == 0
    assert dpmo(5, 100, 0) == 0


def test_sigma_table_shape() -> None:
    assert len(SIGMA_TABLE) == 13
    assert [sigma for _, sigma in SIGMA_TABLE] == [step * 0.5 for step in range(13)]


def test_sigma_ends_clamp() -> None:
    assert process_sigma(933_193) == 0
    assert process_sigma(2_000_000) == 0
    assert process_sigma(0.29) == 6.0
    assert process_sigma(0) == 6.0


def test_sigma_hits_table_rows() -> None:
    assert process_sigma(3.4) == 5.5
    assert process_sigma(66_807) == 2.5


def test_sigma_interpolates_between_rows() -> None:
    # 340 lies between 1350 (4.0) and 233 (4.5).
    assert process_sigma(340) == 4.45


def test_sigma_is_non_increasing() -> None:
    previous = process_sigma(0)
    for value in [0.5, 3, 10, 100, 500, 2_000, 10_000, 100_000, 400_000, 800_000, 933_193]:
        current = process_sigma(value)
        assert current <= previous
        previous = current


def test_first_pass_yield_zero_units_is_zero() -> None:
    assert first_pass_yield(0, 0) == 0
    assert first_pass_yield(10_000, 34) == 99.66


def test_defect_rate_and_rty() -> None:
    assert defect_rate(34, 10_000) == 0.34
    assert defect_rate(1, 0) == 0
    assert rolled_throughput_yield([100, 50]) == 50.0
    assert rolled_throughput_yield([]) == 0


def test_copq_totals_and_shares() -> None:
    assert total_copq(100.111, 200, 300, 400) == 1000.11
    breakdown = copq_breakdown(100, 200, 300, 400)
    assert breakdown.total == 1000
    assert breakdown.prevention_pct == 10.0
    assert breakdown.external_failure_pct == 40.0
    assert breakdown.conformance_cost == 300
    assert breakdown.non_conformance_cost == 700
    assert copq_breakdown(0, 0, 0, 0).prevention_pct == 0


def test_calculate_quality_metrics_end_to_end() -> None:
    results = calculate_quality_metrics(
        QualityCounters(total_units=10_000, defective_units=34, defect_opportunities=10, prevention_cost=50)
    )
    assert results.dpmo == 340
    assert results.process_sigma == 4.45
    assert results.first_pass_yield == 99.66
    assert results.total_copq == 50


def test_year_to_date_uses_latest_opportunities() -> None:
    periods = [
        SimpleNamespace(total_units=1000, defective_units=10, defect_opportunities=5, appraisal_cost=10),
        SimpleNamespace(total_units=1000, defective_units=10, defect_opportunities=10, appraisal_cost=15),
    ]
    ytd = year_to_date_quality(periods)
    assert ytd.counters.defect_opportunities == 10
    assert ytd.counters.appraisal_cost == 25
    assert ytd.results.dpmo == 1000
    assert year_to_date_quality([]).counters.defect_opportunities == 1


def test_rag_status_directions() -> None:
    assert quality_rag_status("dpmo", 300, 340) is RagStatus.GREEN
    assert quality_rag_status("dpmo", 500, 340) is RagStatus.AMBER
    assert quality_rag_status("dpmo", 600, 340) is RagStatus.RED
    assert quality_rag_status("fpy", 99.5, 99) is RagStatus.GREEN
    assert quality_rag_status("fpy", 95, 99) is RagStatus.AMBER
    assert quality_rag_status("sigma", 3, 4.5) is RagStatus.RED
    with pytest.raises(MetricInputError):
        quality_rag_status("throughput", 1, 1)


def test_unbounded_counters_stay_defined() -> None:
    assert dpmo(10**30, 1, 1) == 10**36
    assert dpmo(float("inf"), 10, 1) == 0
    assert first_pass_yield(float("inf"), 1) == 0
    assert process_sigma(float("nan")) == 0
