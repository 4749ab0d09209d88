from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.domain.enums import OPEN_ACTION_STATUSES, ActionStatus
from imsmetrics.domain.models import Action


_OPEN_VALUES = sorted(status.value for status in OPEN_ACTION_STATUSES)


async def get_action(session: AsyncSession, action_id: str) -> Action | None:
    result = await session.execute(select(Action).where(Action.id == action_id))
    return result.scalar_one_or_none()


async def mark_overdue(session: AsyncSession, *, now: datetime, standard: str | None = None) -> int:
    # Conditional update keyed on the filter so concurrent sweeps converge without lost writes.
    stmt = (
        update(Action)
        .where(Action.status.in_(_OPEN_VALUES), Action.due_date < now)
        .values(status=ActionStatus.OVERDUE.value)
        .returning(Action.id)
        .execution_options(synchronize_session="fetch")
    )
    if standard is not None:
        stmt = stmt.where(Action.standard == standard)
    result = await session.execute(stmt)
    return len(result.scalars().all())


async def count_actions(
    session: AsyncSession,
    *,
    standard: str | None = None,
    statuses: list[str] | None = None,
    due_from: datetime | None = None,
    due_to: datetime | None = None,
) -> int:
    stmt = select(func.count()).select_from(Action)
    if standard is not None:
        stmt = stmt.where(Action.standard == standard)
    if statuses is not None:
        stmt = stmt.where(Action.status.in_(statuses))
    if due_from is not None:
        stmt = stmt.where(Action.due_date >= due_from)
    if due_to is not None:
        stmt = stmt.where(Action.due_date <= due_to)
    return int((await session.execute(stmt)).scalar() or 0)


async def count_by_status(session: AsyncSession, *, standard: str | None = None) -> dict[str, int]:
    stmt = select(Action.status, func.count()).group_by(Action.status)
    if standard is not None:
        stmt = stmt.where(Action.standard == standard)
    result = await session.execute(stmt)
    return {str(status): int(count) for status, count in result.all()}


async def list_actions(
    session: AsyncSession,
    *,
    standard: str | None = None,
    statuses: list[str] | None = None,
) -> list[Action]:
    stmt = select(Action).order_by(Action.due_date, Action.id)
    if standard is not None:
        stmt = stmt.where(Action.standard == standard)
    if statuses is not None:
        stmt = stmt.where(Action.status.in_(statuses))
    result = await session.execute(stmt)
    return list(result.scalars().all())
