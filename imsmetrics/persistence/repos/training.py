from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.domain.enums import TrainingStatus
from imsmetrics.domain.models import TrainingCourse, TrainingRecord, User


async def list_active_users(session: AsyncSession, *, department: str | None = None) -> list[User]:
    stmt = select(User).where(User.is_active.is_(True)).order_by(User.id)
    if department is not None:
        stmt = stmt.where(User.department == department)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_active_courses(session: AsyncSession, *, standard: str | None = None) -> list[TrainingCourse]:
    stmt = select(TrainingCourse).where(TrainingCourse.is_active.is_(True)).order_by(TrainingCourse.id)
    if standard is not None:
        stmt = stmt.where(TrainingCourse.standard == standard)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_records(session: AsyncSession) -> list[TrainingRecord]:
    result = await session.execute(select(TrainingRecord).order_by(TrainingRecord.created_at, TrainingRecord.id))
    return list(result.scalars().all())


async def mark_expired(session: AsyncSession, *, now: datetime) -> int:
    # Only COMPLETED records with a lapsed expiry move; re-running finds nothing left to change.
    stmt = (
        update(TrainingRecord)
        .where(
            TrainingRecord.status == TrainingStatus.COMPLETED.value,
            TrainingRecord.expires_at.is_not(None),
            TrainingRecord.expires_at < now,
        )
        .values(status=TrainingStatus.EXPIRED.value)
        .returning(TrainingRecord.id)
        .execution_options(synchronize_session="fetch")
    )
    result = await session.execute(stmt)
    return len(result.scalars().all())
