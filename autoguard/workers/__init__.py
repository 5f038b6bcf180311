"""Pipeline workers and the registry that serves them."""

from __future__ import annotations

from typing import Optional

from ..config import AutoguardConfig
from ..constants import (
    WORKER_ANALYSIS,
    WORKER_DIAGNOSIS,
    WORKER_ENGAGEMENT,
    WORKER_FEEDBACK,
    WORKER_INSIGHTS,
    WORKER_SCHEDULING,
)
from ..scoring.engine import RiskScoringEngine
from ..telemetry.provider import TelemetryProvider
from .analysis import TelemetryAnalysisWorker
from .base import (
    AnalysisWorker,
    DiagnosisWorker,
    EngagementWorker,
    FeedbackWorker,
    InsightsWorker,
    SchedulingWorker,
    Worker,
)
from .diagnosis import PredictiveDiagnosisWorker
from .engagement import KeywordEngagementWorker
from .feedback import FeedbackCollector
from .insights import ManufacturingInsightsWorker
from .registry import WorkerRegistry
from .scheduling import ServiceCenterScheduler


def build_default_registry(
    provider: TelemetryProvider, config: Optional[AutoguardConfig] = None
) -> WorkerRegistry:
    """Register the built-in worker for every pipeline stage."""
    config = config or AutoguardConfig()
    registry = WorkerRegistry()
    registry.register(WORKER_ANALYSIS, TelemetryAnalysisWorker(provider))
    registry.register(
        WORKER_DIAGNOSIS,
        PredictiveDiagnosisWorker(provider, RiskScoringEngine(config.scoring)),
    )
    registry.register(WORKER_ENGAGEMENT, KeywordEngagementWorker())
    registry.register(WORKER_SCHEDULING, ServiceCenterScheduler())
    registry.register(WORKER_FEEDBACK, FeedbackCollector())
    registry.register(WORKER_INSIGHTS, ManufacturingInsightsWorker(provider))
    return registry


__all__ = [
    "AnalysisWorker",
    "DiagnosisWorker",
    "EngagementWorker",
    "FeedbackCollector",
    "FeedbackWorker",
    "InsightsWorker",
    "KeywordEngagementWorker",
    "ManufacturingInsightsWorker",
    "PredictiveDiagnosisWorker",
    "SchedulingWorker",
    "ServiceCenterScheduler",
    "TelemetryAnalysisWorker",
    "Worker",
    "WorkerRegistry",
    "build_default_registry",
]
