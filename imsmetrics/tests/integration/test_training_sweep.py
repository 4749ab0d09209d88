from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from imsmetrics.domain.models import TrainingCourse, TrainingRecord, User
from imsmetrics.services.training import load_training_matrix, sweep_expired_training


NOW = datetime(2026, 9, 1, tzinfo=timezone.utc)


async def _seed(session) -> dict[str, str]:
    manager = User(role="manager", department="Office")
    operator = User(role="operator", department="Warehouse")
    retired = User(role="operator", department="Warehouse", is_active=False)
    induction = TrainingCourse(title="Induction", standard="ISO_45001")
    forklift = TrainingCourse(title="Forklift", standard="ISO_45001", required_for_departments="Warehouse")
    legacy = TrainingCourse(title="Legacy", is_active=False)
    session.add_all([manager, operator, retired, induction, forklift, legacy])
    await session.flush()
    session.add_all(
        [
            TrainingRecord(
                user_id=manager.id,
                course_id=induction.id,
                status="COMPLETED",
                completed_at=NOW - timedelta(days=400),
                expires_at=NOW - timedelta(days=35),
            ),
            TrainingRecord(
                user_id=operator.id,
                course_id=induction.id,
                status="COMPLETED",
                completed_at=NOW - timedelta(days=30),
                expires_at=NOW + timedelta(days=335),
            ),
            TrainingRecord(user_id=operator.id, course_id=forklift.id, status="IN_PROGRESS"),
        ]
    )
    await session.commit()
    return {"manager": manager.id, "induction": induction.id}


async def test_sweep_expires_lapsed_completions(session) -> None:
    ids = await _seed(session)

    assert await sweep_expired_training(session, now=NOW) == 1
    assert await sweep_expired_training(session, now=NOW) == 0

    result = await session.execute(
        select(TrainingRecord.status).where(
            TrainingRecord.user_id == ids["manager"],
            TrainingRecord.course_id == ids["induction"],
        )
    )
    assert result.scalar_one() == "EXPIRED"


async def test_matrix_from_active_users_and_courses(session) -> None:
    await _seed(session)
    await sweep_expired_training(session, now=NOW)

    matrix = await load_training_matrix(session)
    # Two active users x two active courses; forklift only applies to the warehouse.
    assert len(matrix.cells) == 4
    assert matrix.total_required == 3
    assert matrix.total_completed == 1
    assert matrix.expired_count == 1
    assert matrix.completion_rate == 33


async def test_matrix_scoped_to_department(session) -> None:
    await _seed(session)
    await sweep_expired_training(session, now=NOW)

    matrix = await load_training_matrix(session, department="Warehouse")
    # The inactive warehouse user stays out; only the operator's two cells remain.
    assert len({cell.user_id for cell in matrix.cells}) == 1
    assert len(matrix.cells) == 2
    assert matrix.total_required == 2
    assert matrix.total_completed == 1
    assert matrix.expired_count == 0
    assert matrix.completion_rate == 50
