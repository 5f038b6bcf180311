"""autoguard: predictive vehicle maintenance orchestration."""

from .config import AutoguardConfig, load_config
from .errors import (
    AlreadyTerminal,
    AutoguardError,
    ErrorKind,
    InvalidInput,
    NotFound,
    WorkerFailure,
)
from .orchestrator import Orchestrator
from .persistence import InMemoryWorkflowStore, Workflow, WorkflowStatus
from .scoring import DiagnosisResult, RiskScoringEngine, predict
from .security import ActivityRecorder, BehaviorMonitor
from .telemetry import InMemoryTelemetryProvider
from .workers import WorkerRegistry, build_default_registry

__version__ = "0.1.0"
__all__ = [
    "ActivityRecorder",
    "AlreadyTerminal",
    "AutoguardConfig",
    "AutoguardError",
    "BehaviorMonitor",
    "DiagnosisResult",
    "ErrorKind",
    "InMemoryTelemetryProvider",
    "InMemoryWorkflowStore",
    "InvalidInput",
    "NotFound",
    "Orchestrator",
    "RiskScoringEngine",
    "WorkerFailure",
    "WorkerRegistry",
    "Workflow",
    "WorkflowStatus",
    "build_default_registry",
    "load_config",
    "predict",
]
