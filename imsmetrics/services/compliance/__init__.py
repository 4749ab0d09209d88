from __future__ import annotations

from imsmetrics.services.compliance.aggregator import (
    COMPLIANCE_WEIGHTS,
    ComplianceBreakdown,
    ComplianceCounts,
    DomainCount,
    collect_compliance_counts,
    compute_compliance_score,
    overall_posture,
    recalculate_all,
    recalculate_compliance_score,
    sub_score,
)


__all__ = [
    "COMPLIANCE_WEIGHTS",
    "ComplianceBreakdown",
    "ComplianceCounts",
    "DomainCount",
    "collect_compliance_counts",
    "compute_compliance_score",
    "overall_posture",
    "recalculate_all",
    "recalculate_compliance_score",
    "sub_score",
]
