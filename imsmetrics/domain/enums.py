from __future__ import annotations

from enum import Enum


class Standard(str, Enum):
    ISO_45001 = "ISO_45001"
    ISO_14001 = "ISO_14001"
    ISO_9001 = "ISO_9001"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MITIGATED = "MITIGATED"
    CLOSED = "CLOSED"
    ACCEPTED = "ACCEPTED"


class SignificanceLevel(str, Enum):
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ObjectiveStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    BEHIND = "BEHIND"
    ACHIEVED = "ACHIEVED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (ObjectiveStatus.ACHIEVED, ObjectiveStatus.CANCELLED)


class ActionStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    VERIFIED = "VERIFIED"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class IncidentStatus(str, Enum):
    REPORTED = "REPORTED"
    UNDER_INVESTIGATION = "UNDER_INVESTIGATION"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    CLOSED = "CLOSED"


class LegalComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    PARTIALLY_COMPLIANT = "PARTIALLY_COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    NOT_ASSESSED = "NOT_ASSESSED"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class TrainingStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


class RagStatus(str, Enum):
    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"


# Status groups shared by count queries and sweeps.
MITIGATED_RISK_STATUSES = frozenset({RiskStatus.MITIGATED, RiskStatus.CLOSED, RiskStatus.ACCEPTED})
COMPLIANT_LEGAL_STATUSES = frozenset({LegalComplianceStatus.COMPLIANT, LegalComplianceStatus.NOT_APPLICABLE})
COMPLETED_ACTION_STATUSES = frozenset({ActionStatus.COMPLETED, ActionStatus.VERIFIED})
OPEN_ACTION_STATUSES = frozenset({ActionStatus.OPEN, ActionStatus.IN_PROGRESS})
