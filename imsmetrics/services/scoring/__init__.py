from __future__ import annotations

# Re-export scoring services for centralized imports.

from imsmetrics.services.scoring.risk import (
    MatrixCell,
    RiskAssessment,
    assess_risk,
    calculate_risk_score,
    clamp_factor,
    matrix_risk_level,
    matrix_score,
    residual_risk,
    risk_level,
    risk_matrix_cells,
)
from imsmetrics.services.scoring.significance import (
    AspectSignificance,
    assess_aspect,
    calculate_significance,
    is_significant,
    significance_level,
)

__all__ = [
    "AspectSignificance",
    "MatrixCell",
    "RiskAssessment",
    "assess_aspect",
    "assess_risk",
    "calculate_risk_score",
    "calculate_significance",
    "clamp_factor",
    "is_significant",
    "matrix_risk_level",
    "matrix_score",
    "residual_risk",
    "risk_level",
    "risk_matrix_cells",
    "significance_level",
]
