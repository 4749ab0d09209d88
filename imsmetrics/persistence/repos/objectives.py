from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.domain.models import Objective, ObjectiveProgress


async def get_objective(session: AsyncSession, objective_id: str) -> Objective | None:
    result = await session.execute(select(Objective).where(Objective.id == objective_id))
    return result.scalar_one_or_none()


async def list_progress(session: AsyncSession, objective_id: str) -> list[ObjectiveProgress]:
    result = await session.execute(
        select(ObjectiveProgress)
        .where(ObjectiveProgress.objective_id == objective_id)
        .order_by(ObjectiveProgress.recorded_at, ObjectiveProgress.id)
    )
    return list(result.scalars().all())


async def list_open_objectives(session: AsyncSession, *, standard: str | None = None) -> list[Objective]:
    # Terminal objectives never change status again, so refreshes skip them.
    stmt = select(Objective).where(Objective.status.not_in(["ACHIEVED", "CANCELLED"])).order_by(Objective.id)
    if standard is not None:
        stmt = stmt.where(Objective.standard == standard)
    result = await session.execute(stmt)
    return list(result.scalars().all())
