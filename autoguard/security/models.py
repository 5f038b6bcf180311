"""Models for activity auditing and behavior monitoring."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> float:
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 1.0,
    Severity.HIGH: 0.7,
    Severity.MEDIUM: 0.4,
    Severity.LOW: 0.2,
}


class FindingType(str, Enum):
    UNAUTHORIZED_ACTION = "UNAUTHORIZED_ACTION"
    UNAUTHORIZED_DATA_ACCESS = "UNAUTHORIZED_DATA_ACCESS"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNUSUAL_TIMING = "UNUSUAL_TIMING"
    WORKFLOW_MANIPULATION = "WORKFLOW_MANIPULATION"


class ActivityEvent(BaseModel):
    """Immutable record of one action taken by an actor."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str
    action: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def workflow_id(self) -> Optional[str]:
        return self.metadata.get("workflow_id")

    @property
    def data_access(self) -> Optional[str]:
        return self.metadata.get("data_access")


class AnomalyFinding(BaseModel):
    type: FindingType
    severity: Severity
    detail: str
    event: ActivityEvent
    context: Dict[str, Any] = Field(default_factory=dict)


class MonitorResult(BaseModel):
    is_normal: bool
    findings: List[AnomalyFinding] = Field(default_factory=list)
    risk_score: float = 0.0


class AnomalyRecord(BaseModel):
    """Logged entry for an event that produced at least one finding."""

    id: str
    timestamp: datetime
    actor: str
    event: ActivityEvent
    findings: List[AnomalyFinding]
    risk_score: float
    status: str = "detected"
    action_taken: Optional[str] = None

    @property
    def is_critical(self) -> bool:
        return any(f.severity == Severity.CRITICAL for f in self.findings)


class ActorBaseline(BaseModel):
    """Running statistics for one actor. Counters only ever grow."""

    actor: str
    total_actions: int = 0
    action_frequency: Dict[str, int] = Field(default_factory=dict)
    anomaly_count: int = 0
    last_action_time: Optional[datetime] = None
    recent_timestamps: List[datetime] = Field(default_factory=list)


class ActorSummary(BaseModel):
    actor: str
    total_actions: int
    anomaly_count: int
    anomaly_rate: float
    action_breakdown: Dict[str, int]
    last_activity: Optional[datetime]
    risk_level: str


class AnomalyDigest(BaseModel):
    id: str
    actor: str
    timestamp: datetime
    risk_score: float
    finding_types: List[FindingType]


class SecurityDashboard(BaseModel):
    timestamp: datetime
    total_actors: int
    total_anomalies: int
    critical_anomalies: int
    actor_summaries: List[ActorSummary]
    recent_anomalies: List[AnomalyDigest]
