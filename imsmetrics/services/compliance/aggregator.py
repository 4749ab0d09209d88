from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.clock import utc_now
from imsmetrics.core.config import SUPPORTED_STANDARDS, get_settings
from imsmetrics.core.errors import MetricInputError
from imsmetrics.domain.models import ComplianceScore
from imsmetrics.persistence.repos import compliance_scores as scores_repo
from imsmetrics.persistence.repos import counts as counts_repo
from imsmetrics.services.numeric import round_half_up


logger = logging.getLogger(__name__)

# Decimal weights keep the contract sum exactly 1.
COMPLIANCE_WEIGHTS: dict[str, Decimal] = {
    "risk": Decimal("0.20"),
    "incident": Decimal("0.20"),
    "legal": Decimal("0.25"),
    "objective": Decimal("0.15"),
    "action": Decimal("0.20"),
}

FULL_MARKS = 100.0


@dataclass(frozen=True)
class DomainCount:
    total: int
    compliant: int


@dataclass(frozen=True)
class ComplianceCounts:
    risk: DomainCount
    incident: DomainCount
    legal: DomainCount
    objective: DomainCount
    action: DomainCount

    def domains(self) -> dict[str, DomainCount]:
        return {name: getattr(self, name) for name in COMPLIANCE_WEIGHTS}


@dataclass(frozen=True)
class ComplianceBreakdown:
    standard: str
    risk_score: int
    incident_score: int
    legal_score: int
    objective_score: int
    action_score: int
    overall_score: int
    total_items: int
    compliant_items: int

    def row_values(self, *, calculated_at: datetime) -> dict[str, Any]:
        values = asdict(self)
        values.pop("standard")
        values["calculated_at"] = calculated_at
        return values


def sub_score(compliant: int, total: int) -> float:
    # An empty population has nothing out of compliance.
    if total <= 0:
        return FULL_MARKS
    return compliant / total * 100


def weighted_overall(sub_scores: dict[str, float]) -> float:
    total = sum(
        (Decimal(str(sub_scores[name])) * weight for name, weight in COMPLIANCE_WEIGHTS.items()),
        Decimal("0"),
    )
    return float(total)


def compute_compliance_score(standard: str, counts: ComplianceCounts) -> ComplianceBreakdown:
    """Roll five domain ratios into one weighted compliance score.

    Sub-scores are rounded for storage, but the overall score is weighted from
    the unrounded ratios and rounded once so rounding error does not compound.
    """
    domains = counts.domains()
    raw = {name: sub_score(domain.compliant, domain.total) for name, domain in domains.items()}
    return ComplianceBreakdown(
        standard=standard,
        risk_score=round_half_up(raw["risk"]),
        incident_score=round_half_up(raw["incident"]),
        legal_score=round_half_up(raw["legal"]),
        objective_score=round_half_up(raw["objective"]),
        action_score=round_half_up(raw["action"]),
        overall_score=round_half_up(weighted_overall(raw)),
        total_items=sum(domain.total for domain in domains.values()),
        compliant_items=sum(domain.compliant for domain in domains.values()),
    )


async def collect_compliance_counts(session: AsyncSession, standard: str) -> ComplianceCounts:
    risk = await counts_repo.risk_counts(session, standard)
    incident = await counts_repo.incident_counts(session, standard)
    legal = await counts_repo.legal_counts(session, standard)
    objective = await counts_repo.objective_counts(session, standard)
    action = await counts_repo.action_counts(session, standard)
    return ComplianceCounts(
        risk=DomainCount(*risk),
        incident=DomainCount(*incident),
        legal=DomainCount(*legal),
        objective=DomainCount(*objective),
        action=DomainCount(*action),
    )


async def recalculate_compliance_score(
    session: AsyncSession,
    standard: str,
    *,
    now: datetime | None = None,
    commit: bool = True,
) -> ComplianceScore:
    if standard not in SUPPORTED_STANDARDS:
        raise MetricInputError(f"unsupported standard: {standard}")
    counts = await collect_compliance_counts(session, standard)
    breakdown = compute_compliance_score(standard, counts)
    row = await scores_repo.upsert_score(
        session,
        standard=standard,
        values=breakdown.row_values(calculated_at=now or utc_now()),
    )
    if commit:
        await session.commit()
    logger.info(
        "compliance_score_recalculated standard=%s overall=%s total_items=%s",
        standard,
        breakdown.overall_score,
        breakdown.total_items,
    )
    return row


async def recalculate_all(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    standards: Iterable[str] | None = None,
) -> list[ComplianceScore]:
    # One timestamp for the whole run keeps the three rows consistent with each other.
    current = now or utc_now()
    selected = list(standards) if standards is not None else get_settings().standards()
    rows = []
    for standard in selected:
        rows.append(await recalculate_compliance_score(session, standard, now=current, commit=False))
    await session.commit()
    return rows


def overall_posture(scores: Iterable[ComplianceScore]) -> dict[str, int]:
    # Dashboard headline: mean of the three standards, missing standards count as 0.
    by_standard = {score.standard: int(score.overall_score) for score in scores}
    posture = {standard: by_standard.get(standard, 0) for standard in SUPPORTED_STANDARDS}
    posture["overall"] = round_half_up(sum(posture.values()) / len(SUPPORTED_STANDARDS))
    return posture
