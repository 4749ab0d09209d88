from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from imsmetrics.core.errors import InvalidTransitionError, MetricInputError
from imsmetrics.domain.enums import ActionStatus
from imsmetrics.domain.models import Action
from imsmetrics.services.actions import (
    ACTION_TRANSITIONS,
    TERMINAL_ACTION_STATUSES,
    can_transition,
    cancel_action,
    complete_action,
    ensure_transition,
    is_overdue,
    prepare_new_action,
    start_action,
    verify_action,
)


NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _action(status: ActionStatus = ActionStatus.OPEN, due_in_days: int = 5) -> Action:
    return Action(
        standard="ISO_45001",
        title="Fix guard rail",
        status=status.value,
        due_date=NOW + timedelta(days=due_in_days),
    )


def test_transition_table_covers_every_status() -> None:
    assert set(ACTION_TRANSITIONS) == set(ActionStatus)
    assert TERMINAL_ACTION_STATUSES == {ActionStatus.VERIFIED, ActionStatus.CANCELLED}


def test_overdue_reachable_only_from_open_states() -> None:
    sources = {status for status, targets in ACTION_TRANSITIONS.items() if ActionStatus.OVERDUE in targets}
    assert sources == {ActionStatus.OPEN, ActionStatus.IN_PROGRESS}


def test_cancel_reachable_from_every_non_terminal_state() -> None:
    for status, targets in ACTION_TRANSITIONS.items():
        if status not in TERMINAL_ACTION_STATUSES:
            assert ActionStatus.CANCELLED in targets


def test_can_transition_accepts_strings() -> None:
    assert can_transition("OPEN", "IN_PROGRESS") is True
    assert can_transition("VERIFIED", "OPEN") is False


def test_ensure_transition_raises_with_detail() -> None:
    with pytest.raises(InvalidTransitionError) as excinfo:
        ensure_transition(ActionStatus.CANCELLED, ActionStatus.OPEN)
    detail = excinfo.value.to_detail()
    assert detail["code"] == "INVALID_STATUS"
    assert detail["current"] == "CANCELLED"
    assert detail["target"] == "OPEN"


def test_complete_then_verify() -> None:
    action = start_action(_action())
    complete_action(action, now=NOW)
    assert action.status == ActionStatus.COMPLETED.value
    assert action.completed_at == NOW
    later = NOW + timedelta(days=2)
    verify_action(action, now=later, effectiveness_rating=4, verification_notes="Checked on site")
    assert action.status == ActionStatus.VERIFIED.value
    assert action.verified_at == later
    assert action.effectiveness_rating == 4
    assert action.verification_notes == "Checked on site"


def test_verify_requires_completed_status() -> None:
    action = _action(ActionStatus.IN_PROGRESS)
    with pytest.raises(InvalidTransitionError) as excinfo:
        verify_action(action, now=NOW)
    assert "completed before verification" in str(excinfo.value)
    assert action.status == ActionStatus.IN_PROGRESS.value


def test_verify_rejects_rating_out_of_range() -> None:
    action = _action(ActionStatus.COMPLETED)
    with pytest.raises(MetricInputError):
        verify_action(action, now=NOW, effectiveness_rating=6)
    assert action.status == ActionStatus.COMPLETED.value


def test_terminal_actions_cannot_be_cancelled() -> None:
    with pytest.raises(InvalidTransitionError):
        cancel_action(_action(ActionStatus.VERIFIED))


def test_is_overdue_ignores_closed_statuses() -> None:
    past = NOW - timedelta(days=1)
    assert is_overdue(ActionStatus.OPEN, past, now=NOW) is True
    assert is_overdue(ActionStatus.IN_PROGRESS, past, now=NOW) is True
    assert is_overdue(ActionStatus.COMPLETED, past, now=NOW) is False
    assert is_overdue(ActionStatus.OPEN, NOW, now=NOW) is False


def test_new_action_past_due_is_overdue() -> None:
    action = Action(standard="ISO_9001", title="Recalibrate", due_date=NOW - timedelta(days=1))
    prepare_new_action(action, now=NOW)
    assert action.status == ActionStatus.OVERDUE.value


def test_overdue_action_can_still_complete() -> None:
    action = complete_action(_action(ActionStatus.OVERDUE, due_in_days=-3), now=NOW)
    assert action.status == ActionStatus.COMPLETED.value
