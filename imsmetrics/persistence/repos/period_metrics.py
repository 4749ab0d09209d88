from __future__ import annotations

from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.errors import DatabaseError
from imsmetrics.domain.models import QualityMetric, SafetyMetric
from imsmetrics.persistence.upsert import upsert_row


_PERIOD_KEY = ["year", "month"]

_PeriodT = TypeVar("_PeriodT", SafetyMetric, QualityMetric)


async def get_period(session: AsyncSession, model: type[_PeriodT], *, year: int, month: int) -> _PeriodT | None:
    result = await session.execute(
        select(model)
        .where(model.year == year, model.month == month)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_year(session: AsyncSession, model: type[_PeriodT], *, year: int) -> list[_PeriodT]:
    result = await session.execute(
        select(model)
        .where(model.year == year)
        .order_by(model.month)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def upsert_period(session: AsyncSession, model: type[_PeriodT], *, values: dict[str, Any]) -> _PeriodT:
    # One row per (year, month); a second write for the period replaces counters and rates together.
    await upsert_row(session, model, key_columns=_PERIOD_KEY, values={"id": uuid4().hex, **values})
    row = await get_period(session, model, year=values["year"], month=values["month"])
    if row is None:
        raise DatabaseError(f"{model.__tablename__} upsert failed unexpectedly")
    return row
