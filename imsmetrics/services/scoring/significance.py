from __future__ import annotations

from dataclasses import dataclass

from imsmetrics.domain.enums import SignificanceLevel
from imsmetrics.services.numeric import round_half_up
from imsmetrics.services.scoring.risk import clamp_factor


SIGNIFICANCE_NEGLIGIBLE_MAX = 8
SIGNIFICANCE_LOW_MAX = 27
SIGNIFICANCE_MODERATE_MAX = 64
SIGNIFICANCE_HIGH_MAX = 100

# Fixed flag threshold; it overlaps the LOW/MODERATE band edge on purpose.
SIGNIFICANCE_THRESHOLD = 27

NEUTRAL_MODIFIER = 3
MODIFIER_STEP = 0.1


@dataclass(frozen=True)
class AspectSignificance:
    score: int
    level: SignificanceLevel
    is_significant: bool


def _apply_modifier(score: int, factor: float | None) -> int:
    # Each modifier scales by 10% per step away from neutral, rounded before the next one.
    if factor is None or factor == NEUTRAL_MODIFIER:
        return score
    clamped = clamp_factor(factor)
    return round_half_up(score * (1 + (clamped - NEUTRAL_MODIFIER) * MODIFIER_STEP))


def calculate_significance(
    scale: float,
    frequency: float,
    legal_impact: float,
    *,
    reversibility: float | None = None,
    stakeholder_concern: float | None = None,
) -> int:
    score = clamp_factor(scale) * clamp_factor(frequency) * clamp_factor(legal_impact)
    score = _apply_modifier(score, reversibility)
    return _apply_modifier(score, stakeholder_concern)


def significance_level(score: float) -> SignificanceLevel:
    if score <= SIGNIFICANCE_NEGLIGIBLE_MAX:
        return SignificanceLevel.NEGLIGIBLE
    if score <= SIGNIFICANCE_LOW_MAX:
        return SignificanceLevel.LOW
    if score <= SIGNIFICANCE_MODERATE_MAX:
        return SignificanceLevel.MODERATE
    if score <= SIGNIFICANCE_HIGH_MAX:
        return SignificanceLevel.HIGH
    return SignificanceLevel.CRITICAL


def is_significant(score: float, threshold: float = SIGNIFICANCE_THRESHOLD) -> bool:
    return score > threshold


def assess_aspect(
    scale: float,
    frequency: float,
    legal_impact: float,
    *,
    reversibility: float | None = None,
    stakeholder_concern: float | None = None,
) -> AspectSignificance:
    score = calculate_significance(
        scale,
        frequency,
        legal_impact,
        reversibility=reversibility,
        stakeholder_concern=stakeholder_concern,
    )
    return AspectSignificance(
        score=score,
        level=significance_level(score),
        is_significant=is_significant(score),
    )
