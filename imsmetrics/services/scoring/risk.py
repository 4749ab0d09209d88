from __future__ import annotations

from dataclasses import dataclass

from imsmetrics.domain.enums import RiskLevel
from imsmetrics.services.numeric import clamp, finite_or, round_half_up


FACTOR_MIN = 1
FACTOR_MAX = 5

# Inclusive upper bounds for the L x S x D score (range 1-125).
RISK_LOW_MAX = 8
RISK_MEDIUM_MAX = 27
RISK_HIGH_MAX = 64

# Inclusive upper bounds for the 5x5 L x S matrix view (range 1-25).
MATRIX_LOW_MAX = 4
MATRIX_MEDIUM_MAX = 9
MATRIX_HIGH_MAX = 15


@dataclass(frozen=True)
class RiskAssessment:
    score: int
    level: RiskLevel


@dataclass(frozen=True)
class MatrixCell:
    likelihood: int
    severity: int
    score: int
    level: RiskLevel


def clamp_factor(value: float, low: int = FACTOR_MIN, high: int = FACTOR_MAX) -> int:
    # Clamp before rounding so huge, infinite or NaN factors still land on the scale.
    return round_half_up(clamp(value, low, high))


def calculate_risk_score(likelihood: float, severity: float, detectability: float = 1) -> int:
    return clamp_factor(likelihood) * clamp_factor(severity) * clamp_factor(detectability)


def risk_level(score: float) -> RiskLevel:
    if score <= RISK_LOW_MAX:
        return RiskLevel.LOW
    if score <= RISK_MEDIUM_MAX:
        return RiskLevel.MEDIUM
    if score <= RISK_HIGH_MAX:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def assess_risk(likelihood: float, severity: float, detectability: float = 1) -> RiskAssessment:
    # Single entry point for every L x S x D entity (risks, process risks).
    score = calculate_risk_score(likelihood, severity, detectability)
    return RiskAssessment(score=score, level=risk_level(score))


def matrix_score(likelihood: float, severity: float) -> int:
    return clamp_factor(likelihood) * clamp_factor(severity)


def matrix_risk_level(likelihood: float, severity: float) -> RiskLevel:
    # Two-factor heat-map banding; never mixed with the three-factor bands for one record.
    score = matrix_score(likelihood, severity)
    if score <= MATRIX_LOW_MAX:
        return RiskLevel.LOW
    if score <= MATRIX_MEDIUM_MAX:
        return RiskLevel.MEDIUM
    if score <= MATRIX_HIGH_MAX:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def residual_risk(score: float, control_effectiveness: float) -> int:
    effectiveness = clamp(control_effectiveness, 0, 100)
    return round_half_up(finite_or(score * (1 - effectiveness / 100)))


def risk_matrix_cells() -> list[MatrixCell]:
    # Enumerate the 5x5 grid row-major by likelihood for heat-map consumers.
    cells: list[MatrixCell] = []
    for likelihood in range(FACTOR_MIN, FACTOR_MAX + 1):
        for severity in range(FACTOR_MIN, FACTOR_MAX + 1):
            cells.append(
                MatrixCell(
                    likelihood=likelihood,
                    severity=severity,
                    score=likelihood * severity,
                    level=matrix_risk_level(likelihood, severity),
                )
            )
    return cells
