from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.clock import as_utc, utc_now
from imsmetrics.core.errors import MetricInputError, NotFoundError
from imsmetrics.domain.enums import ObjectiveStatus
from imsmetrics.domain.models import Objective, ObjectiveProgress
from imsmetrics.domain.schemas import ProgressInput, parse_payload
from imsmetrics.persistence.repos import objectives as objectives_repo
from imsmetrics.services.numeric import clamp, round_half_up


logger = logging.getLogger(__name__)

# Objectives without an explicit start are assumed to run over a 90-day horizon.
OBJECTIVE_HORIZON_DAYS = 90
ON_TRACK_TOLERANCE = 10
AT_RISK_TOLERANCE = 25

# Fields whose change invalidates progress_percent / status.
_PROGRESS_INPUTS = frozenset({"baseline_value", "target_value", "current_value", "target_date"})
_UPDATABLE_FIELDS = frozenset(
    {"title", "unit", "baseline_value", "target_value", "current_value", "start_date", "target_date", "status"}
)


@dataclass(frozen=True)
class ObjectiveSnapshot:
    progress_percent: int
    status: ObjectiveStatus


def calculate_progress(current: float | None, baseline: float | None, target: float | None) -> int:
    if current is None or target is None:
        return 0
    base = baseline if baseline is not None else 0
    span = target - base
    if span == 0:
        return 100 if current >= target else 0
    progress = (current - base) / span * 100
    return round_half_up(clamp(progress, 0, 100))


def days_remaining(target_date: datetime, *, now: datetime) -> int:
    # Partial days count as a full remaining day.
    delta = as_utc(target_date) - as_utc(now)
    return math.ceil(delta.total_seconds() / 86400)


def expected_progress(target_date: datetime, *, now: datetime) -> float:
    remaining = days_remaining(target_date, now=now)
    return max(0.0, (OBJECTIVE_HORIZON_DAYS - remaining) / OBJECTIVE_HORIZON_DAYS * 100)


def derive_objective_status(
    progress: int,
    target_date: datetime | None,
    current_status: ObjectiveStatus | str,
    *,
    now: datetime,
) -> ObjectiveStatus:
    """Derive the trend status of an objective.

    ACHIEVED and CANCELLED are absorbing: once reached they are returned as-is.
    Without a target date the status only distinguishes started from not
    started. With one, progress is compared against a linear expectation over
    the objective horizon, with tolerance bands for ON_TRACK and AT_RISK.
    """
    status = ObjectiveStatus(current_status)
    if status.is_terminal:
        return status
    if progress >= 100:
        return ObjectiveStatus.ACHIEVED
    if target_date is None:
        return ObjectiveStatus.ON_TRACK if progress > 0 else ObjectiveStatus.NOT_STARTED

    expected = expected_progress(target_date, now=now)
    if progress >= expected - ON_TRACK_TOLERANCE:
        return ObjectiveStatus.ON_TRACK
    if progress >= expected - AT_RISK_TOLERANCE:
        return ObjectiveStatus.AT_RISK
    return ObjectiveStatus.BEHIND


def evaluate_objective(objective: Objective, *, now: datetime) -> ObjectiveSnapshot:
    progress = calculate_progress(objective.current_value, objective.baseline_value, objective.target_value)
    status = derive_objective_status(
        progress,
        objective.target_date,
        objective.status or ObjectiveStatus.NOT_STARTED,
        now=now,
    )
    return ObjectiveSnapshot(progress_percent=progress, status=status)


def _apply_snapshot(objective: Objective, snapshot: ObjectiveSnapshot) -> None:
    objective.progress_percent = snapshot.progress_percent
    objective.status = snapshot.status.value


def prepare_new_objective(objective: Objective, *, now: datetime) -> Objective:
    # New objectives start at their baseline unless a current value was supplied.
    if objective.current_value is None:
        objective.current_value = objective.baseline_value
    if objective.status is None:
        objective.status = ObjectiveStatus.NOT_STARTED.value
    _apply_snapshot(objective, evaluate_objective(objective, now=now))
    return objective


def apply_objective_update(objective: Objective, changes: dict[str, Any], *, now: datetime) -> Objective:
    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise MetricInputError(f"unsupported objective fields: {', '.join(sorted(unknown))}")
    explicit_status = changes.get("status")
    for field, value in changes.items():
        if field == "status":
            continue
        setattr(objective, field, value)
    if explicit_status is not None:
        # Manual status overrides (e.g. cancellation) win over derivation.
        objective.status = ObjectiveStatus(explicit_status).value
        objective.progress_percent = calculate_progress(
            objective.current_value, objective.baseline_value, objective.target_value
        )
    elif _PROGRESS_INPUTS & set(changes):
        _apply_snapshot(objective, evaluate_objective(objective, now=now))
    return objective


async def record_progress(
    session: AsyncSession,
    objective: Objective,
    *,
    value: float,
    notes: str | None = None,
    now: datetime | None = None,
    commit: bool = False,
) -> ObjectiveProgress:
    # Append history and re-derive the parent objective inside one unit of work.
    current = now or utc_now()
    entry = ObjectiveProgress(
        objective_id=objective.id,
        value=value,
        notes=notes,
        recorded_at=current,
    )
    session.add(entry)
    objective.current_value = value
    _apply_snapshot(objective, evaluate_objective(objective, now=current))
    await session.flush()
    if commit:
        await session.commit()
    logger.info(
        "objective_progress_recorded objective_id=%s progress=%s status=%s",
        objective.id,
        objective.progress_percent,
        objective.status,
    )
    return entry


async def record_objective_progress(
    session: AsyncSession,
    objective_id: str,
    payload: dict[str, Any],
    *,
    now: datetime | None = None,
) -> ObjectiveProgress:
    data = parse_payload(ProgressInput, payload)
    objective = await objectives_repo.get_objective(session, objective_id)
    if objective is None:
        raise NotFoundError(f"objective {objective_id} not found")
    return await record_progress(session, objective, value=data.value, notes=data.notes, now=now, commit=True)


async def refresh_objective_statuses(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    standard: str | None = None,
    commit: bool = True,
) -> int:
    # Status drifts with the clock even when no value changes; re-derive open objectives.
    current = now or utc_now()
    changed = 0
    for objective in await objectives_repo.list_open_objectives(session, standard=standard):
        snapshot = evaluate_objective(objective, now=current)
        if snapshot.status.value != objective.status or snapshot.progress_percent != objective.progress_percent:
            _apply_snapshot(objective, snapshot)
            changed += 1
    if commit:
        await session.commit()
    if changed:
        logger.info("objective_statuses_refreshed count=%s standard=%s", changed, standard or "all")
    return changed
