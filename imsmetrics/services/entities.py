from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.errors import MetricInputError
from imsmetrics.domain.models import (
    EnvironmentalAspect,
    ProcessRisk,
    QualityMetric,
    Risk,
    SafetyMetric,
)
from imsmetrics.domain.schemas import QualityMetricInput, SafetyMetricInput, parse_payload
from imsmetrics.persistence.repos import period_metrics as period_repo
from imsmetrics.services.metrics import quality as quality_metrics
from imsmetrics.services.metrics import safety as safety_metrics
from imsmetrics.services.scoring import assess_aspect, assess_risk, clamp_factor, residual_risk


logger = logging.getLogger(__name__)

_RISK_FACTORS = ("likelihood", "severity", "detectability")
_ASPECT_FACTORS = ("scale", "frequency", "legal_impact")
_ASPECT_MODIFIERS = ("reversibility", "stakeholder_concern")


def _apply_changes(entity: Any, changes: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise MetricInputError(f"unsupported fields: {', '.join(sorted(unknown))}")
    for name, value in changes.items():
        setattr(entity, name, value)


def apply_risk_fields(risk: Risk | ProcessRisk) -> Risk | ProcessRisk:
    """Recompute score and level from the three factors.

    Stored factors are normalised to their clamped values so the row always
    satisfies score == likelihood * severity * detectability.
    """
    for name in _RISK_FACTORS:
        setattr(risk, name, clamp_factor(getattr(risk, name) or 1))
    assessment = assess_risk(risk.likelihood, risk.severity, risk.detectability)
    risk.risk_score = assessment.score
    risk.risk_level = assessment.level.value
    if isinstance(risk, Risk):
        risk.residual_score = (
            residual_risk(assessment.score, risk.control_effectiveness)
            if risk.control_effectiveness is not None
            else None
        )
    return risk


def update_risk(risk: Risk | ProcessRisk, changes: dict[str, Any]) -> Risk | ProcessRisk:
    allowed = set(_RISK_FACTORS) | {"title"}
    if isinstance(risk, Risk):
        allowed |= {"status", "control_effectiveness"}
    else:
        allowed |= {"process_name", "failure_mode"}
    _apply_changes(risk, changes, frozenset(allowed))
    return apply_risk_fields(risk)


def apply_aspect_fields(aspect: EnvironmentalAspect) -> EnvironmentalAspect:
    for name in _ASPECT_FACTORS:
        setattr(aspect, name, clamp_factor(getattr(aspect, name) or 1))
    result = assess_aspect(
        aspect.scale,
        aspect.frequency,
        aspect.legal_impact,
        reversibility=aspect.reversibility,
        stakeholder_concern=aspect.stakeholder_concern,
    )
    aspect.significance_score = result.score
    aspect.significance_level = result.level.value
    aspect.is_significant = result.is_significant
    return aspect


def update_aspect(aspect: EnvironmentalAspect, changes: dict[str, Any]) -> EnvironmentalAspect:
    allowed = frozenset({*_ASPECT_FACTORS, *_ASPECT_MODIFIERS, "title", "aspect_type"})
    _apply_changes(aspect, changes, allowed)
    return apply_aspect_fields(aspect)


def safety_row_values(payload: SafetyMetricInput) -> dict[str, Any]:
    counters = safety_metrics.SafetyCounters(
        hours_worked=payload.hours_worked,
        lost_time_injuries=payload.lost_time_injuries,
        total_recordable_injuries=payload.total_recordable_injuries,
        days_lost=payload.days_lost,
        near_misses=payload.near_misses,
        first_aid_cases=payload.first_aid_cases,
    )
    rates = safety_metrics.calculate_safety_rates(counters)
    return {
        "year": payload.year,
        "month": payload.month,
        **asdict(counters),
        "ltifr": rates.ltifr,
        "trir": rates.trir,
        "severity_rate": rates.severity_rate,
        "near_miss_rate": rates.near_miss_rate,
    }


def quality_row_values(payload: QualityMetricInput) -> dict[str, Any]:
    counters = quality_metrics.QualityCounters(
        prevention_cost=payload.prevention_cost,
        appraisal_cost=payload.appraisal_cost,
        internal_failure_cost=payload.internal_failure_cost,
        external_failure_cost=payload.external_failure_cost,
        total_units=payload.total_units,
        defective_units=payload.defective_units,
        defect_opportunities=payload.defect_opportunities,
    )
    results = quality_metrics.calculate_quality_metrics(counters)
    return {"year": payload.year, "month": payload.month, **asdict(counters), **asdict(results)}


async def record_safety_metric(
    session: AsyncSession,
    payload: dict[str, Any],
    *,
    commit: bool = True,
) -> SafetyMetric:
    data = parse_payload(SafetyMetricInput, payload)
    row = await period_repo.upsert_period(session, SafetyMetric, values=safety_row_values(data))
    if commit:
        await session.commit()
    logger.info("safety_metric_recorded year=%s month=%s ltifr=%s", data.year, data.month, row.ltifr)
    return row


async def record_quality_metric(
    session: AsyncSession,
    payload: dict[str, Any],
    *,
    commit: bool = True,
) -> QualityMetric:
    data = parse_payload(QualityMetricInput, payload)
    row = await period_repo.upsert_period(session, QualityMetric, values=quality_row_values(data))
    if commit:
        await session.commit()
    logger.info("quality_metric_recorded year=%s month=%s dpmo=%s", data.year, data.month, row.dpmo)
    return row


async def safety_year_to_date(session: AsyncSession, *, year: int) -> safety_metrics.SafetyYearToDate:
    periods = await period_repo.list_year(session, SafetyMetric, year=year)
    return safety_metrics.year_to_date_safety(periods)


async def quality_year_to_date(session: AsyncSession, *, year: int) -> quality_metrics.QualityYearToDate:
    periods = await period_repo.list_year(session, QualityMetric, year=year)
    return quality_metrics.year_to_date_quality(periods)
