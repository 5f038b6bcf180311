"""Diagnosis worker backed by the risk scoring engine."""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from ..contracts import (
    AnalysisResult,
    CostEstimate,
    DiagnosisReport,
    DurationEstimate,
    UrgencyLevel,
)
from ..scoring.engine import RiskScoringEngine
from ..scoring.models import ComponentRiskAssessment, DiagnosisResult
from ..telemetry.provider import TelemetryProvider
from .base import DiagnosisWorker

logger = logging.getLogger(__name__)

# Repair cost range per component, INR
COMPONENT_COSTS = {
    "Engine": (5000, 15000),
    "Brake System": (3000, 8000),
    "Battery": (4000, 7000),
    "Oil System": (1500, 3000),
}
DEFAULT_COST = (2000, 5000)

# Workshop minutes per component
COMPONENT_MINUTES = {
    "Engine": 180,
    "Brake System": 120,
    "Battery": 60,
    "Oil System": 45,
}
DEFAULT_MINUTES = 90


class PredictiveDiagnosisWorker(DiagnosisWorker):
    """Scores the vehicle and turns the prediction into a service plan."""

    def __init__(
        self, provider: TelemetryProvider, engine: Optional[RiskScoringEngine] = None
    ) -> None:
        self._provider = provider
        self._engine = engine or RiskScoringEngine()

    async def diagnose(self, vehicle_id: str, analysis: AnalysisResult) -> DiagnosisReport:
        logger.info(f"Running diagnosis for vehicle {vehicle_id}")
        vehicle = self._provider.get_vehicle(vehicle_id)
        snapshot = self._provider.get_latest_snapshot(vehicle_id)
        history = self._provider.get_maintenance_history(vehicle_id)

        prediction = self._engine.predict(vehicle, snapshot, history)
        maintenance_required = prediction.overall_risk != "low" or bool(
            prediction.predictions
        )

        logger.info(
            f"Diagnosis completed for {vehicle_id}: "
            f"{'maintenance required' if maintenance_required else 'vehicle OK'}"
        )
        return DiagnosisReport(
            vehicle_id=vehicle_id,
            maintenance_required=maintenance_required,
            diagnosis=prediction,
            urgency=urgency_for(prediction),
            estimated_cost=estimate_cost(prediction.predictions),
            estimated_duration=estimate_duration(prediction.predictions),
            summary=summarize(prediction),
        )


def urgency_for(prediction: DiagnosisResult) -> UrgencyLevel:
    if prediction.components("critical"):
        return UrgencyLevel(
            level="CRITICAL",
            message="Immediate attention required - risk of breakdown",
            schedule_within="24 hours",
        )
    if prediction.components("high"):
        return UrgencyLevel(
            level="HIGH",
            message="Schedule service soon to prevent failure",
            schedule_within="7 days",
        )
    if prediction.predictions:
        return UrgencyLevel(
            level="MEDIUM",
            message="Routine maintenance recommended",
            schedule_within="14 days",
        )
    return UrgencyLevel(
        level="LOW",
        message="Vehicle in good condition",
        schedule_within="Next scheduled service",
    )


def estimate_cost(predictions: List[ComponentRiskAssessment]) -> CostEstimate:
    if not predictions:
        return CostEstimate()
    ranges = [COMPONENT_COSTS.get(p.component, DEFAULT_COST) for p in predictions]
    return CostEstimate(min=sum(r[0] for r in ranges), max=sum(r[1] for r in ranges))


def estimate_duration(predictions: List[ComponentRiskAssessment]) -> DurationEstimate:
    if not predictions:
        return DurationEstimate()
    minutes = sum(COMPONENT_MINUTES.get(p.component, DEFAULT_MINUTES) for p in predictions)
    return DurationEstimate(
        minutes=minutes,
        hours=math.ceil(minutes / 60),
        formatted=f"{minutes // 60}h {minutes % 60}m",
    )


def summarize(prediction: DiagnosisResult) -> str:
    if not prediction.predictions:
        return "Vehicle is in good condition. Continue with regular maintenance schedule."
    top = prediction.predictions[0]
    return (
        f"Detected potential issues with {', '.join(prediction.components())}. "
        f"Primary concern: {top.component} with "
        f"{math.floor(top.probability * 100)}% failure probability. "
        f"{prediction.recommended_action}"
    )
