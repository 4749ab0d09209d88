from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.errors import DatabaseError
from imsmetrics.domain.models import ComplianceScore
from imsmetrics.persistence.upsert import upsert_row


async def get_score(session: AsyncSession, standard: str) -> ComplianceScore | None:
    result = await session.execute(
        select(ComplianceScore)
        .where(ComplianceScore.standard == standard)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_scores(session: AsyncSession) -> list[ComplianceScore]:
    result = await session.execute(
        select(ComplianceScore)
        .order_by(ComplianceScore.standard)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def upsert_score(session: AsyncSession, *, standard: str, values: dict[str, Any]) -> ComplianceScore:
    # Replace the whole row for the standard; partial updates are never issued.
    await upsert_row(
        session,
        ComplianceScore,
        key_columns=["standard"],
        values={"id": uuid4().hex, "standard": standard, **values},
    )
    row = await get_score(session, standard)
    if row is None:
        raise DatabaseError("compliance score upsert failed unexpectedly")
    return row
