"""Deterministic component risk scoring."""

from .engine import RiskScoringEngine, extract_failure_patterns, predict
from .models import (
    ComponentRiskAssessment,
    DiagnosisResult,
    FailurePattern,
    RemainingUsefulLife,
)

__all__ = [
    "ComponentRiskAssessment",
    "DiagnosisResult",
    "FailurePattern",
    "RemainingUsefulLife",
    "RiskScoringEngine",
    "extract_failure_patterns",
    "predict",
]
