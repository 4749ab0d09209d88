from __future__ import annotations

from typing import Any


class ImsError(Exception):
    """Base error for imsmetrics."""


class NotFoundError(ImsError):
    """Requested record does not exist."""


class InvalidTransitionError(ImsError):
    """Requested status change is not allowed from the current status."""

    code = "INVALID_STATUS"

    def __init__(self, *, entity: str, current: str, target: str, message: str | None = None) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(message or f"{entity} cannot move from {current} to {target}")

    def to_detail(self) -> dict[str, Any]:
        # Shape mirrors the error envelope callers render for workflow violations.
        return {
            "code": self.code,
            "message": str(self),
            "entity": self.entity,
            "current": self.current,
            "target": self.target,
        }


class MetricInputError(ImsError):
    """Input payload, field set or argument failed validation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class DatabaseError(ImsError):
    """Database layer failure."""
