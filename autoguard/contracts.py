"""Contracts exchanged between the orchestrator and its workers."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .scoring.models import ComponentRiskAssessment, DiagnosisResult
from .telemetry.models import VehicleProfile


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SensorAnomaly(BaseModel):
    type: str
    value: float
    threshold: float
    severity: str


class SensorAnalysis(BaseModel):
    has_anomalies: bool
    anomalies: List[SensorAnomaly] = Field(default_factory=list)
    diagnostic_codes: List[str] = Field(default_factory=list)
    readings: Dict[str, Any] = Field(default_factory=dict)


class RecurringIssue(BaseModel):
    issue: str
    count: int


class MaintenanceAnalysis(BaseModel):
    total_services: int = 0
    last_service_date: Optional[date] = None
    days_since_last_service: Optional[int] = None
    mileage_since_service: Optional[float] = None
    is_service_due: bool = True
    recurring_issues: List[RecurringIssue] = Field(default_factory=list)
    average_service_cost: Optional[float] = None


class AnalysisResult(BaseModel):
    """Outcome of the data analysis stage. Gates the diagnosis stage."""

    vehicle_id: str
    vehicle: VehicleProfile
    sensor_analysis: SensorAnalysis
    maintenance_analysis: MaintenanceAnalysis
    requires_diagnosis: bool
    timestamp: datetime = Field(default_factory=_now)


class UrgencyLevel(BaseModel):
    level: str
    message: str
    schedule_within: str


class CostEstimate(BaseModel):
    min: float = 0
    max: float = 0
    currency: str = "INR"


class DurationEstimate(BaseModel):
    minutes: int = 0
    hours: int = 0
    formatted: str = "0h 0m"


class DiagnosisReport(BaseModel):
    """Outcome of the diagnosis stage. Gates customer engagement."""

    vehicle_id: str
    maintenance_required: bool
    diagnosis: DiagnosisResult
    urgency: UrgencyLevel
    estimated_cost: CostEstimate
    estimated_duration: DurationEstimate
    summary: str
    timestamp: datetime = Field(default_factory=_now)

    @property
    def overall_risk(self) -> str:
        return self.diagnosis.overall_risk

    @property
    def predictions(self) -> List[ComponentRiskAssessment]:
        return self.diagnosis.predictions


class EngagementOutcome(BaseModel):
    """Outcome of customer engagement. Gates scheduling."""

    conversation_id: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    opening_message: str
    customer_response: Optional[str] = None
    intent: str
    customer_accepted: bool


class Appointment(BaseModel):
    id: str
    vehicle_id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    service_center_id: str
    service_center_name: str
    appointment_date: date
    time: str
    end_time: str
    estimated_duration: DurationEstimate
    estimated_cost: CostEstimate
    service_type: str
    urgency: str
    status: str = "confirmed"
    created_at: datetime = Field(default_factory=_now)


class SchedulingResult(BaseModel):
    """Outcome of scheduling. An appointment gates feedback collection."""

    service_center_id: str
    service_center_name: str
    days_with_capacity: int
    appointment: Optional[Appointment] = None


class FeedbackQuestion(BaseModel):
    id: str
    type: str
    question: str
    category: str
    scale: Optional[int] = None


class FeedbackRequest(BaseModel):
    id: str
    appointment_id: str
    vehicle_id: str
    customer_name: Optional[str] = None
    service_center_id: str
    service_center_name: str
    service_date: date
    status: str = "pending"
    questions: List[FeedbackQuestion] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)


class IssuePattern(BaseModel):
    issue: str
    occurrences: int
    affected_vehicles: List[str]
    vehicle_count: int
    dtc_codes: List[str]
    root_cause: Optional[str] = None
    corrective_action: Optional[str] = None
    preventive_action: Optional[str] = None
    severity: str = "medium"
    manufacturing_feedback: Optional[str] = None
    total_cost: float = 0
    avg_cost: int = 0
    avg_mileage: int = 0
    affected_locations: List[str] = Field(default_factory=list)
    impact: float = 0


class InsightReport(BaseModel):
    """RCA/CAPA patterns across the fleet, highest impact first."""

    total_rca_records: int = 0
    unique_issues: int = 0
    patterns: List[IssuePattern] = Field(default_factory=list)
    analysis_date: datetime = Field(default_factory=_now)
