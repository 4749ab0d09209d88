from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from imsmetrics.core.errors import MetricInputError, NotFoundError
from imsmetrics.domain.models import Objective
from imsmetrics.persistence.repos.objectives import list_progress
from imsmetrics.services.objectives import (
    prepare_new_objective,
    record_objective_progress,
    record_progress,
    refresh_objective_statuses,
)


NOW = datetime(2026, 2, 1, tzinfo=timezone.utc)


async def _objective(session, **fields) -> Objective:
    objective = prepare_new_objective(
        Objective(standard="ISO_14001", title="Reduce energy", baseline_value=0, target_value=100, **fields),
        now=NOW,
    )
    session.add(objective)
    await session.commit()
    return objective


async def test_record_progress_appends_history_and_rederives(session) -> None:
    objective = await _objective(session, target_date=NOW + timedelta(days=45))

    await record_progress(session, objective, value=45, notes="Q1 audit", now=NOW, commit=True)
    assert objective.current_value == 45
    assert objective.progress_percent == 45
    assert objective.status == "ON_TRACK"

    await record_progress(session, objective, value=100, now=NOW + timedelta(days=1), commit=True)
    assert objective.status == "ACHIEVED"

    history = await list_progress(session, objective.id)
    assert [entry.value for entry in history] == [45, 100]
    assert history[0].notes == "Q1 audit"


async def test_achieved_objective_stays_achieved(session) -> None:
    objective = await _objective(session)
    await record_progress(session, objective, value=100, now=NOW, commit=True)
    await record_progress(session, objective, value=10, now=NOW, commit=True)
    assert objective.status == "ACHIEVED"
    assert objective.progress_percent == 10


async def test_record_by_id_validates_payload(session) -> None:
    objective = await _objective(session)
    with pytest.raises(MetricInputError):
        await record_objective_progress(session, objective.id, {"notes": "no value"}, now=NOW)
    with pytest.raises(NotFoundError):
        await record_objective_progress(session, "missing", {"value": 5}, now=NOW)

    entry = await record_objective_progress(session, objective.id, {"value": 30}, now=NOW)
    assert entry.objective_id == objective.id
    assert objective.progress_percent == 30


async def test_refresh_reflects_passing_time(session) -> None:
    objective = await _objective(session, target_date=NOW + timedelta(days=80))
    await record_progress(session, objective, value=20, now=NOW, commit=True)
    assert objective.status == "ON_TRACK"

    # Ten days before the deadline the expectation is ~89%, far ahead of 20%.
    later = NOW + timedelta(days=70)
    assert await refresh_objective_statuses(session, now=later) == 1
    assert objective.status == "BEHIND"
    assert await refresh_objective_statuses(session, now=later) == 0
