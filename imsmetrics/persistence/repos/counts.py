from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.domain.enums import (
    COMPLETED_ACTION_STATUSES,
    COMPLIANT_LEGAL_STATUSES,
    MITIGATED_RISK_STATUSES,
    IncidentStatus,
    ObjectiveStatus,
)
from imsmetrics.domain.models import Action, Incident, LegalRequirement, Objective, Risk


def _values(statuses: Iterable[Any]) -> list[str]:
    return sorted(getattr(status, "value", status) for status in statuses)


async def _count(session: AsyncSession, model: Any, *conditions: Any) -> int:
    stmt = select(func.count()).select_from(model).where(*conditions)
    return int((await session.execute(stmt)).scalar() or 0)


async def count_total_and_matching(
    session: AsyncSession,
    model: Any,
    *,
    standard_column: Any,
    status_column: Any,
    standard: str,
    statuses: Iterable[Any],
) -> tuple[int, int]:
    # Pair the population count with the compliant subset for one sub-domain.
    total = await _count(session, model, standard_column == standard)
    matching = await _count(
        session,
        model,
        standard_column == standard,
        status_column.in_(_values(statuses)),
    )
    return total, matching


async def risk_counts(session: AsyncSession, standard: str) -> tuple[int, int]:
    return await count_total_and_matching(
        session,
        Risk,
        standard_column=Risk.standard,
        status_column=Risk.status,
        standard=standard,
        statuses=MITIGATED_RISK_STATUSES,
    )


async def incident_counts(session: AsyncSession, standard: str) -> tuple[int, int]:
    return await count_total_and_matching(
        session,
        Incident,
        standard_column=Incident.standard,
        status_column=Incident.status,
        standard=standard,
        statuses=[IncidentStatus.CLOSED],
    )


async def legal_counts(session: AsyncSession, standard: str) -> tuple[int, int]:
    return await count_total_and_matching(
        session,
        LegalRequirement,
        standard_column=LegalRequirement.standard,
        status_column=LegalRequirement.compliance_status,
        standard=standard,
        statuses=COMPLIANT_LEGAL_STATUSES,
    )


async def objective_counts(session: AsyncSession, standard: str) -> tuple[int, int]:
    return await count_total_and_matching(
        session,
        Objective,
        standard_column=Objective.standard,
        status_column=Objective.status,
        standard=standard,
        statuses=[ObjectiveStatus.ACHIEVED],
    )


async def action_counts(session: AsyncSession, standard: str) -> tuple[int, int]:
    return await count_total_and_matching(
        session,
        Action,
        standard_column=Action.standard,
        status_column=Action.status,
        standard=standard,
        statuses=COMPLETED_ACTION_STATUSES,
    )
