from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from imsmetrics.core.errors import MetricInputError


class PeriodKey(BaseModel):
    model_config = ConfigDict(extra="forbid")

    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)


class SafetyMetricInput(PeriodKey):
    hours_worked: float = Field(ge=0)
    lost_time_injuries: int = Field(default=0, ge=0)
    total_recordable_injuries: int = Field(default=0, ge=0)
    days_lost: int = Field(default=0, ge=0)
    near_misses: int = Field(default=0, ge=0)
    first_aid_cases: int = Field(default=0, ge=0)


class QualityMetricInput(PeriodKey):
    prevention_cost: float = Field(default=0, ge=0)
    appraisal_cost: float = Field(default=0, ge=0)
    internal_failure_cost: float = Field(default=0, ge=0)
    external_failure_cost: float = Field(default=0, ge=0)
    total_units: int = Field(default=0, ge=0)
    defective_units: int = Field(default=0, ge=0)
    defect_opportunities: int = Field(default=1, ge=1)


class ProgressInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: float
    notes: str | None = None


class VerificationInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    verification_notes: str | None = None
    effectiveness_rating: int | None = Field(default=None, ge=1, le=5)


_ModelT = TypeVar("_ModelT", bound=BaseModel)


def parse_payload(model: type[_ModelT], payload: dict[str, Any]) -> _ModelT:
    # Translate pydantic failures into the engine's typed validation error.
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        raise MetricInputError(f"invalid {model.__name__} payload", errors=errors) from exc
