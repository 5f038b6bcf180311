"""Worker interfaces for the maintenance pipeline.

Each pipeline stage is served by one closed worker variant. Any call may
raise; the orchestrator treats every failure the same way.
"""

from __future__ import annotations

import abc

from ..contracts import (
    AnalysisResult,
    Appointment,
    DiagnosisReport,
    EngagementOutcome,
    FeedbackRequest,
    InsightReport,
    SchedulingResult,
)
from ..telemetry.models import VehicleProfile


class Worker(metaclass=abc.ABCMeta):
    """Base class for all pipeline workers."""

    name: str = "worker"


class AnalysisWorker(Worker):
    name = "analysis"

    @abc.abstractmethod
    async def analyze(self, vehicle_id: str) -> AnalysisResult:
        """Inspect telemetry and history for a vehicle."""
        raise NotImplementedError


class DiagnosisWorker(Worker):
    name = "diagnosis"

    @abc.abstractmethod
    async def diagnose(self, vehicle_id: str, analysis: AnalysisResult) -> DiagnosisReport:
        """Predict component failures for a vehicle."""
        raise NotImplementedError


class EngagementWorker(Worker):
    name = "engagement"

    @abc.abstractmethod
    async def engage(
        self, vehicle: VehicleProfile, diagnosis: DiagnosisReport
    ) -> EngagementOutcome:
        """Contact the owner and report whether they accepted service."""
        raise NotImplementedError


class SchedulingWorker(Worker):
    name = "scheduling"

    @abc.abstractmethod
    async def schedule(
        self, vehicle: VehicleProfile, diagnosis: DiagnosisReport
    ) -> SchedulingResult:
        """Book a service appointment if a slot is free."""
        raise NotImplementedError


class FeedbackWorker(Worker):
    name = "feedback"

    @abc.abstractmethod
    async def collect_feedback(self, appointment: Appointment) -> FeedbackRequest:
        """Open a post-service feedback request."""
        raise NotImplementedError


class InsightsWorker(Worker):
    name = "insights"

    @abc.abstractmethod
    async def refresh_insights(self) -> InsightReport:
        """Recompute fleet-wide manufacturing insight."""
        raise NotImplementedError
