from __future__ import annotations

import pytest

from imsmetrics.domain.enums import RiskLevel
from imsmetrics.services.scoring import (
    assess_risk,
    calculate_risk_score,
    clamp_factor,
    matrix_risk_level,
    matrix_score,
    residual_risk,
    risk_level,
    risk_matrix_cells,
)


def test_three_factor_score_example() -> None:
    result = assess_risk(4, 5, 2)
    assert result.score == 40
    assert result.level is RiskLevel.HIGH


def test_factors_are_clamped_not_rejected() -> None:
    assert calculate_risk_score(0, -3, 99) == 1 * 1 * 5
    assert calculate_risk_score(10, 10, 10) == 125
    assert clamp_factor(2.6) == 3


@pytest.mark.parametrize(
    ("score", "level"),
    [
        (1, RiskLevel.LOW),
        (8, RiskLevel.LOW),
        (9, RiskLevel.MEDIUM),
        (27, RiskLevel.MEDIUM),
        (28, RiskLevel.HIGH),
        (64, RiskLevel.HIGH),
        (65, RiskLevel.CRITICAL),
        (125, RiskLevel.CRITICAL),
    ],
)
def test_risk_level_boundaries(score: int, level: RiskLevel) -> None:
    assert risk_level(score) is level


def test_score_range_over_full_grid() -> None:
    order = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]
    previous = 0
    for score in range(1, 126):
        rank = order.index(risk_level(score))
        assert rank >= previous
        previous = rank
    scores = {calculate_risk_score(l, s, d) for l in range(-1, 8) for s in range(1, 6) for d in range(1, 6)}
    assert min(scores) == 1
    assert max(scores) == 125


def test_detectability_defaults_to_one() -> None:
    assert calculate_risk_score(3, 4) == 12


def test_matrix_variant_thresholds() -> None:
    assert matrix_score(2, 2) == 4
    assert matrix_risk_level(2, 2) is RiskLevel.LOW
    assert matrix_risk_level(3, 3) is RiskLevel.MEDIUM
    assert matrix_risk_level(3, 5) is RiskLevel.HIGH
    assert matrix_risk_level(4, 4) is RiskLevel.CRITICAL
    assert matrix_risk_level(9, 9) is RiskLevel.CRITICAL


def test_matrix_cells_cover_grid() -> None:
    cells = risk_matrix_cells()
    assert len(cells) == 25
    assert cells[0].score == 1
    assert cells[-1].score == 25
    assert cells[-1].level is RiskLevel.CRITICAL


def test_residual_risk_rounds_half_up_and_clamps() -> None:
    assert residual_risk(40, 50) == 20
    assert residual_risk(25, 50) == 13
    assert residual_risk(40, 150) == 0
    assert residual_risk(40, -20) == 40


def test_huge_and_non_finite_factors_clamp() -> None:
    assert calculate_risk_score(10**30, 1, 1) == 5
    assert calculate_risk_score(-(10**40), 2, 2) == 4
    assert calculate_risk_score(float("inf"), 1, 1) == 5
    assert calculate_risk_score(float("-inf"), 5, 5) == 25
    assert clamp_factor(float("nan")) == 1
    assert residual_risk(float("inf"), 100) == 0
