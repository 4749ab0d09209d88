from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.clock import as_utc, utc_now
from imsmetrics.core.config import get_settings
from imsmetrics.core.errors import InvalidTransitionError, MetricInputError, NotFoundError
from imsmetrics.domain.enums import OPEN_ACTION_STATUSES, ActionStatus
from imsmetrics.domain.models import Action
from imsmetrics.domain.schemas import VerificationInput, parse_payload
from imsmetrics.persistence.repos import actions as actions_repo


logger = logging.getLogger(__name__)

# Allowed source -> target status pairs; every status change is checked against this table.
ACTION_TRANSITIONS: dict[ActionStatus, frozenset[ActionStatus]] = {
    ActionStatus.OPEN: frozenset(
        {ActionStatus.IN_PROGRESS, ActionStatus.COMPLETED, ActionStatus.OVERDUE, ActionStatus.CANCELLED}
    ),
    ActionStatus.IN_PROGRESS: frozenset(
        {ActionStatus.COMPLETED, ActionStatus.OVERDUE, ActionStatus.CANCELLED}
    ),
    ActionStatus.OVERDUE: frozenset(
        {ActionStatus.IN_PROGRESS, ActionStatus.COMPLETED, ActionStatus.CANCELLED}
    ),
    ActionStatus.COMPLETED: frozenset({ActionStatus.VERIFIED, ActionStatus.CANCELLED}),
    ActionStatus.VERIFIED: frozenset(),
    ActionStatus.CANCELLED: frozenset(),
}

TERMINAL_ACTION_STATUSES = frozenset(
    status for status, targets in ACTION_TRANSITIONS.items() if not targets
)


@dataclass(frozen=True)
class ActionStatistics:
    total: int
    open: int
    overdue: int
    due_soon: int
    by_status: dict[str, int]


def can_transition(current: ActionStatus | str, target: ActionStatus | str) -> bool:
    return ActionStatus(target) in ACTION_TRANSITIONS[ActionStatus(current)]


def ensure_transition(current: ActionStatus | str, target: ActionStatus | str) -> ActionStatus:
    source = ActionStatus(current)
    destination = ActionStatus(target)
    if destination not in ACTION_TRANSITIONS[source]:
        raise InvalidTransitionError(entity="action", current=source.value, target=destination.value)
    return destination


def is_overdue(status: ActionStatus | str, due_date: datetime, *, now: datetime) -> bool:
    return ActionStatus(status) in OPEN_ACTION_STATUSES and as_utc(due_date) < as_utc(now)


def _transition(action: Action, target: ActionStatus) -> ActionStatus:
    destination = ensure_transition(action.status, target)
    action.status = destination.value
    return destination


def prepare_new_action(action: Action, *, now: datetime) -> Action:
    # Actions created with a past due date are overdue from the first write.
    if action.status is None:
        action.status = ActionStatus.OPEN.value
    return apply_overdue(action, now=now)


def start_action(action: Action) -> Action:
    _transition(action, ActionStatus.IN_PROGRESS)
    return action


def complete_action(action: Action, *, now: datetime) -> Action:
    _transition(action, ActionStatus.COMPLETED)
    action.completed_at = now
    return action


def verify_action(
    action: Action,
    *,
    now: datetime,
    effectiveness_rating: int | None = None,
    verification_notes: str | None = None,
) -> Action:
    # Verification is only legal for completed actions; anything else is a workflow violation.
    if ActionStatus(action.status) is not ActionStatus.COMPLETED:
        raise InvalidTransitionError(
            entity="action",
            current=ActionStatus(action.status).value,
            target=ActionStatus.VERIFIED.value,
            message="Action must be completed before verification",
        )
    if effectiveness_rating is not None and not 1 <= effectiveness_rating <= 5:
        raise MetricInputError("effectiveness_rating must be between 1 and 5")
    _transition(action, ActionStatus.VERIFIED)
    action.verified_at = now
    action.effectiveness_rating = effectiveness_rating
    action.verification_notes = verification_notes
    return action


def cancel_action(action: Action) -> Action:
    _transition(action, ActionStatus.CANCELLED)
    return action


def apply_overdue(action: Action, *, now: datetime) -> Action:
    # In-memory counterpart of the sweep for freshly created or detached actions.
    if is_overdue(action.status, action.due_date, now=now):
        _transition(action, ActionStatus.OVERDUE)
    return action


async def sweep_overdue_actions(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    standard: str | None = None,
    commit: bool = True,
) -> int:
    current = now or utc_now()
    updated = await actions_repo.mark_overdue(session, now=current, standard=standard)
    if commit:
        await session.commit()
    if updated:
        logger.info("actions_marked_overdue count=%s standard=%s", updated, standard or "all")
    return updated


async def list_actions(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    standard: str | None = None,
    statuses: Iterable[ActionStatus | str] | None = None,
) -> list[Action]:
    # Listings are served only after the overdue invariant has been re-established.
    current = now or utc_now()
    await sweep_overdue_actions(session, now=current, standard=standard)
    values = sorted(ActionStatus(status).value for status in statuses) if statuses is not None else None
    return await actions_repo.list_actions(session, standard=standard, statuses=values)


async def action_statistics(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    standard: str | None = None,
) -> ActionStatistics:
    # Serve statistics only after the overdue invariant has been re-established.
    current = now or utc_now()
    await sweep_overdue_actions(session, now=current, standard=standard)
    open_values = sorted(status.value for status in OPEN_ACTION_STATUSES)
    due_soon_end = current + timedelta(days=get_settings().action_due_soon_days)
    total = await actions_repo.count_actions(session, standard=standard)
    open_count = await actions_repo.count_actions(session, standard=standard, statuses=open_values)
    overdue = await actions_repo.count_actions(
        session, standard=standard, statuses=[ActionStatus.OVERDUE.value]
    )
    due_soon = await actions_repo.count_actions(
        session,
        standard=standard,
        statuses=open_values,
        due_from=current,
        due_to=due_soon_end,
    )
    by_status = await actions_repo.count_by_status(session, standard=standard)
    return ActionStatistics(
        total=total,
        open=open_count,
        overdue=overdue,
        due_soon=due_soon,
        by_status=by_status,
    )


async def load_action(session: AsyncSession, action_id: str) -> Action:
    action = await actions_repo.get_action(session, action_id)
    if action is None:
        raise NotFoundError(f"action {action_id} not found")
    return action


async def complete_action_by_id(session: AsyncSession, action_id: str, *, now: datetime | None = None) -> Action:
    action = complete_action(await load_action(session, action_id), now=now or utc_now())
    await session.commit()
    logger.info("action_completed action_id=%s", action_id)
    return action


async def verify_action_by_id(
    session: AsyncSession,
    action_id: str,
    payload: dict[str, Any],
    *,
    now: datetime | None = None,
) -> Action:
    data = parse_payload(VerificationInput, payload)
    action = verify_action(
        await load_action(session, action_id),
        now=now or utc_now(),
        effectiveness_rating=data.effectiveness_rating,
        verification_notes=data.verification_notes,
    )
    await session.commit()
    logger.info("action_verified action_id=%s rating=%s", action_id, data.effectiveness_rating)
    return action
