from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from imsmetrics.core.errors import InvalidTransitionError, MetricInputError, NotFoundError
from imsmetrics.domain.enums import ActionStatus
from imsmetrics.domain.models import Action
from imsmetrics.services.actions import (
    action_statistics,
    complete_action_by_id,
    list_actions,
    sweep_overdue_actions,
    verify_action_by_id,
)


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _action(title: str, status: ActionStatus, due_in_days: float, standard: str = "ISO_45001") -> Action:
    return Action(standard=standard, title=title, status=status.value, due_date=NOW + timedelta(days=due_in_days))


async def _statuses(session) -> dict[str, str]:
    result = await session.execute(select(Action.title, Action.status))
    return {title: status for title, status in result.all()}


async def test_sweep_marks_only_open_past_due_actions(session) -> None:
    session.add_all(
        [
            _action("open-late", ActionStatus.OPEN, -2),
            _action("progress-late", ActionStatus.IN_PROGRESS, -1),
            _action("completed-late", ActionStatus.COMPLETED, -10),
            _action("open-future", ActionStatus.OPEN, 3),
        ]
    )
    await session.commit()

    assert await sweep_overdue_actions(session, now=NOW) == 2
    statuses = await _statuses(session)
    assert statuses["open-late"] == "OVERDUE"
    assert statuses["progress-late"] == "OVERDUE"
    assert statuses["completed-late"] == "COMPLETED"
    assert statuses["open-future"] == "OPEN"


async def test_sweep_is_idempotent(session) -> None:
    session.add(_action("late", ActionStatus.OPEN, -1))
    await session.commit()

    assert await sweep_overdue_actions(session, now=NOW) == 1
    assert await sweep_overdue_actions(session, now=NOW) == 0


async def test_sweep_updates_loaded_objects(session) -> None:
    action = _action("late", ActionStatus.OPEN, -1)
    session.add(action)
    await session.commit()

    await sweep_overdue_actions(session, now=NOW)
    assert action.status == ActionStatus.OVERDUE.value


async def test_sweep_can_be_scoped_to_a_standard(session) -> None:
    session.add_all(
        [
            _action("safety-late", ActionStatus.OPEN, -1, standard="ISO_45001"),
            _action("quality-late", ActionStatus.OPEN, -1, standard="ISO_9001"),
        ]
    )
    await session.commit()

    assert await sweep_overdue_actions(session, now=NOW, standard="ISO_9001") == 1
    statuses = await _statuses(session)
    assert statuses["safety-late"] == "OPEN"
    assert statuses["quality-late"] == "OVERDUE"


async def test_statistics_run_the_sweep_first(session) -> None:
    session.add_all(
        [
            _action("late", ActionStatus.OPEN, -1),
            _action("soon", ActionStatus.IN_PROGRESS, 2),
            _action("later", ActionStatus.OPEN, 30),
            _action("done", ActionStatus.VERIFIED, -5),
        ]
    )
    await session.commit()

    stats = await action_statistics(session, now=NOW)
    assert stats.total == 4
    assert stats.overdue == 1
    assert stats.open == 2
    assert stats.due_soon == 1
    assert stats.by_status == {"OVERDUE": 1, "IN_PROGRESS": 1, "OPEN": 1, "VERIFIED": 1}


async def test_complete_and_verify_by_id(session) -> None:
    action = _action("fix", ActionStatus.OPEN, 5)
    session.add(action)
    await session.commit()

    with pytest.raises(InvalidTransitionError):
        await verify_action_by_id(session, action.id, {}, now=NOW)

    await complete_action_by_id(session, action.id, now=NOW)
    with pytest.raises(MetricInputError):
        await verify_action_by_id(session, action.id, {"effectiveness_rating": 9}, now=NOW)

    verified = await verify_action_by_id(
        session, action.id, {"effectiveness_rating": 5, "verification_notes": "No recurrence"}, now=NOW
    )
    assert verified.status == ActionStatus.VERIFIED.value
    assert verified.effectiveness_rating == 5


async def test_missing_action_raises_not_found(session) -> None:
    with pytest.raises(NotFoundError):
        await complete_action_by_id(session, "missing", now=NOW)


async def test_listing_returns_swept_statuses(session) -> None:
    session.add_all(
        [
            _action("late", ActionStatus.OPEN, -2),
            _action("future", ActionStatus.IN_PROGRESS, 4),
            _action("other-standard", ActionStatus.OPEN, -2, standard="ISO_9001"),
        ]
    )
    await session.commit()

    actions = await list_actions(session, now=NOW, standard="ISO_45001")
    assert [(action.title, action.status) for action in actions] == [
        ("late", "OVERDUE"),
        ("future", "IN_PROGRESS"),
    ]
    overdue = await list_actions(session, now=NOW, statuses=[ActionStatus.OVERDUE])
    assert {action.title for action in overdue} == {"late", "other-standard"}
