"""Activity auditing and behavior monitoring."""

from .audit import ActivityRecorder
from .models import (
    ActivityEvent,
    ActorBaseline,
    ActorSummary,
    AnomalyFinding,
    AnomalyRecord,
    FindingType,
    MonitorResult,
    SecurityDashboard,
    Severity,
)
from .monitor import BehaviorMonitor, risk_score
from .policy import DEFAULT_POLICIES, PolicyBook

__all__ = [
    "ActivityEvent",
    "ActivityRecorder",
    "ActorBaseline",
    "ActorSummary",
    "AnomalyFinding",
    "AnomalyRecord",
    "BehaviorMonitor",
    "DEFAULT_POLICIES",
    "FindingType",
    "MonitorResult",
    "PolicyBook",
    "SecurityDashboard",
    "Severity",
    "risk_score",
]
