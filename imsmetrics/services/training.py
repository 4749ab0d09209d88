from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.clock import utc_now
from imsmetrics.core.config import get_settings
from imsmetrics.domain.enums import TrainingStatus
from imsmetrics.persistence.repos import training as training_repo
from imsmetrics.services.numeric import round_half_up


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingRequirement:
    user_id: str
    course_id: str
    required: bool
    met: bool
    record_status: str | None = None


@dataclass(frozen=True)
class TrainingMatrix:
    cells: list[TrainingRequirement]
    total_required: int
    total_completed: int
    expired_count: int
    completion_rate: int

    def for_user(self, user_id: str) -> list[TrainingRequirement]:
        return [cell for cell in self.cells if cell.user_id == user_id]


def parse_requirement_list(text: str | None) -> list[str]:
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def is_course_required(course: Any, user: Any) -> bool:
    """Return True when the course applies to the user.

    A course without any role or department restriction applies to everyone.
    Otherwise a match on either list is enough.
    """
    roles = parse_requirement_list(course.required_for_roles)
    departments = parse_requirement_list(course.required_for_departments)
    if not roles and not departments:
        return True
    if user.role in roles:
        return True
    return user.department is not None and user.department in departments


def is_requirement_met(record: Any | None) -> bool:
    return record is not None and TrainingStatus(record.status) is TrainingStatus.COMPLETED


def _index_records(records: Iterable[Any]) -> dict[tuple[str, str], Any]:
    # Later records win, so callers pass history in chronological order.
    latest: dict[tuple[str, str], Any] = {}
    for record in records:
        latest[(record.user_id, record.course_id)] = record
    return latest


def resolve_training_matrix(
    users: Iterable[Any],
    courses: Iterable[Any],
    records: Iterable[Any],
) -> TrainingMatrix:
    course_list = list(courses)
    by_pair = _index_records(records)
    cells: list[TrainingRequirement] = []
    total_required = 0
    total_completed = 0
    expired = 0
    for user in users:
        for course in course_list:
            record = by_pair.get((user.id, course.id))
            required = is_course_required(course, user)
            met = is_requirement_met(record)
            status = record.status if record is not None else None
            cells.append(
                TrainingRequirement(
                    user_id=user.id,
                    course_id=course.id,
                    required=required,
                    met=met,
                    record_status=status,
                )
            )
            if not required:
                continue
            total_required += 1
            if met:
                total_completed += 1
            elif status == TrainingStatus.EXPIRED.value:
                expired += 1
    completion_rate = (
        100 if total_required == 0 else round_half_up(total_completed / total_required * 100)
    )
    return TrainingMatrix(
        cells=cells,
        total_required=total_required,
        total_completed=total_completed,
        expired_count=expired,
        completion_rate=completion_rate,
    )


async def load_training_matrix(
    session: AsyncSession,
    *,
    standard: str | None = None,
    department: str | None = None,
) -> TrainingMatrix:
    users = await training_repo.list_active_users(session, department=department)
    courses = await training_repo.list_active_courses(session, standard=standard)
    records = await training_repo.list_records(session)
    return resolve_training_matrix(users, courses, records)


async def sweep_expired_training(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    commit: bool = True,
) -> int:
    if not get_settings().training_expiry_sweep_enabled:
        logger.info("training_expiry_sweep_skipped reason=disabled")
        return 0
    updated = await training_repo.mark_expired(session, now=now or utc_now())
    if commit:
        await session.commit()
    if updated:
        logger.info("training_records_expired count=%s", updated)
    return updated
