"""Result models produced by the risk scoring engine."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

RiskLevel = Literal["critical", "high", "medium", "low"]
ComponentSeverity = Literal["critical", "high", "medium"]
Confidence = Literal["high", "medium", "low"]


class ComponentRiskAssessment(BaseModel):
    """Failure risk for a single vehicle component."""

    component: str
    probability: float = Field(ge=0.0, le=1.0)
    severity: ComponentSeverity
    estimated_days_to_failure: int
    factors: Dict[str, Any] = Field(default_factory=dict)


class RemainingUsefulLife(BaseModel):
    estimated_distance: float
    estimated_days: int
    confidence: Confidence


class DiagnosisResult(BaseModel):
    """Prioritized component predictions for one vehicle."""

    vehicle_id: str
    predictions: List[ComponentRiskAssessment] = Field(default_factory=list)
    overall_risk: RiskLevel = "low"
    remaining_useful_life: RemainingUsefulLife
    recommended_action: str

    def components(self, severity: Optional[str] = None) -> List[str]:
        """Return predicted component names, optionally for one severity."""
        return [
            p.component
            for p in self.predictions
            if severity is None or p.severity == severity
        ]


class FailurePattern(BaseModel):
    """Aggregated view of one recurring issue in maintenance history."""

    issue: str
    occurrences: int = 0
    avg_mileage: int = 0
    dtc_codes: List[str] = Field(default_factory=list)
    severity: str = "medium"
