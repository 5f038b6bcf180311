"""Maintenance pipeline orchestration."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel

from .config import AutoguardConfig
from .constants import (
    ACTION_DELEGATING,
    ACTION_STEP_COMPLETED,
    ACTION_STEP_SKIPPED,
    ACTION_WORKER_REGISTERED,
    ACTION_WORKFLOW_COMPLETED,
    ACTION_WORKFLOW_FAILED,
    ACTION_WORKFLOW_STARTED,
    ORCHESTRATOR_ACTOR,
    PIPELINE_STAGES,
    STAGE_ANALYSIS,
    STAGE_DIAGNOSIS,
    STAGE_ENGAGEMENT,
    STAGE_FEEDBACK,
    STAGE_INSIGHTS,
    STAGE_SCHEDULING,
    STAGE_WORKERS,
)
from .contracts import (
    AnalysisResult,
    DiagnosisReport,
    EngagementOutcome,
    FeedbackRequest,
    SchedulingResult,
)
from .errors import WorkerFailure
from .persistence import InMemoryWorkflowStore, Step, Workflow, WorkflowStatus, WorkflowStore
from .security import ActivityEvent, ActivityRecorder, BehaviorMonitor
from .workers import (
    AnalysisWorker,
    DiagnosisWorker,
    EngagementWorker,
    FeedbackWorker,
    InsightsWorker,
    SchedulingWorker,
    Worker,
    WorkerRegistry,
)

logger = logging.getLogger(__name__)

WorkerT = TypeVar("WorkerT", bound=Worker)
ResultT = TypeVar("ResultT", bound=BaseModel)

STAGE_LABELS = {
    STAGE_ANALYSIS: "1. Data Analysis",
    STAGE_DIAGNOSIS: "2. Diagnosis",
    STAGE_ENGAGEMENT: "3. Customer Engagement",
    STAGE_SCHEDULING: "4. Scheduling",
    STAGE_FEEDBACK: "5. Feedback Collection",
    STAGE_INSIGHTS: "6. Manufacturing Insights",
}

SKIP_NO_DIAGNOSIS = "Vehicle in good condition"
SKIP_NO_MAINTENANCE = "No maintenance required"
SKIP_DECLINED = "Customer did not accept service"
SKIP_NO_APPOINTMENT = "No appointment was booked"

# pseudo-stage reported when assembling or storing the final result fails
STAGE_FINALIZE = "FINALIZE"


def _dump(result: BaseModel) -> Dict[str, Any]:
    return result.model_dump(mode="json")


class Orchestrator:
    """Runs the maintenance pipeline for one vehicle at a time.

    Every state change goes through the workflow store and is announced as
    an activity event. Stages run strictly in order; a closed gate skips
    every later gated stage, and manufacturing insights always run.
    """

    def __init__(
        self,
        registry: Optional[WorkerRegistry] = None,
        store: Optional[WorkflowStore] = None,
        recorder: Optional[ActivityRecorder] = None,
        config: Optional[AutoguardConfig] = None,
    ) -> None:
        self.config = config or AutoguardConfig()
        self.registry = registry or WorkerRegistry()
        self.store = store or InMemoryWorkflowStore()
        self.recorder = recorder or ActivityRecorder(
            BehaviorMonitor(self.config.monitor),
            capacity=self.config.orchestrator.activity_log_capacity,
        )

    @property
    def monitor(self) -> BehaviorMonitor:
        return self.recorder.monitor

    # ------------------------------------------------------------------
    def _record(self, action: str, workflow_id: Optional[str] = None, **extra: Any) -> None:
        metadata: Dict[str, Any] = {"data_access": "workflows", **extra}
        if workflow_id is not None:
            metadata["workflow_id"] = workflow_id
        self.recorder.record(ORCHESTRATOR_ACTOR, action, metadata)

    def register_worker(self, name: str, worker: Worker) -> None:
        self.registry.register(name, worker)
        self._record(ACTION_WORKER_REGISTERED, worker=name)
        logger.info(f"Registered worker: {name}")

    async def start_workflow(
        self,
        workflow_type: Optional[str] = None,
        input_data: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Create a workflow in ``started`` state and return its id."""
        workflow = Workflow(
            id=f"WF-{uuid.uuid4()}",
            type=workflow_type or self.config.orchestrator.workflow_type,
            data=dict(input_data or {}),
        )
        await self.store.create_workflow(workflow)
        self._record(ACTION_WORKFLOW_STARTED, workflow.id, type=workflow.type)
        logger.info(f"Started workflow {workflow.id} ({workflow.type})")
        return workflow.id

    async def record_step(
        self, workflow_id: str, stage: str, result: Optional[Dict[str, Any]]
    ) -> None:
        await self.store.append_step(workflow_id, Step(stage=stage, result=result))
        self._record(ACTION_STEP_COMPLETED, workflow_id, stage=stage)
        logger.debug(f"Workflow {workflow_id}: {stage} completed")

    async def skip_step(self, workflow_id: str, stage: str, reason: str) -> None:
        await self.store.append_step(workflow_id, Step.skipped(stage, reason))
        self._record(ACTION_STEP_SKIPPED, workflow_id, stage=stage, reason=reason)
        logger.info(f"Workflow {workflow_id}: {stage} skipped ({reason})")

    async def complete_workflow(
        self, workflow_id: str, result: Optional[Dict[str, Any]] = None
    ) -> Workflow:
        workflow = await self.store.finish_workflow(
            workflow_id, WorkflowStatus.COMPLETED, result
        )
        self._record(ACTION_WORKFLOW_COMPLETED, workflow_id)
        logger.info(f"Workflow {workflow_id} completed in {workflow.duration_ms:.0f} ms")
        return workflow

    async def fail_workflow(self, workflow_id: str, error: BaseException | str) -> Workflow:
        if isinstance(error, BaseException):
            result = {"error": str(error), "error_type": type(error).__name__}
        else:
            result = {"error": error}
        workflow = await self.store.finish_workflow(
            workflow_id, WorkflowStatus.FAILED, result
        )
        self._record(ACTION_WORKFLOW_FAILED, workflow_id, error=result["error"])
        logger.error(f"Workflow {workflow_id} failed: {result['error']}")
        return workflow

    async def get_workflow(self, workflow_id: str) -> Workflow:
        return await self.store.get_workflow(workflow_id)

    async def list_active_workflows(
        self, status: Optional[WorkflowStatus] = None
    ) -> List[Workflow]:
        """Return every workflow held by the store, optionally by status."""
        return await self.store.list_workflows(status)

    def get_activity_log(self, limit: int = 100) -> List[ActivityEvent]:
        return self.recorder.get_log(limit)

    # ------------------------------------------------------------------
    async def _delegate(
        self,
        workflow_id: str,
        stage: str,
        kind: Type[WorkerT],
        call: Callable[[WorkerT], Awaitable[ResultT]],
    ) -> ResultT:
        name = STAGE_WORKERS[stage]
        self._record(ACTION_DELEGATING, workflow_id, stage=stage, worker=name)
        worker = self.registry.get_typed(name, kind)
        result = await call(worker)
        await self.record_step(workflow_id, stage, _dump(result))
        return result

    async def orchestrate(self, vehicle_id: str) -> Workflow:
        """Run the full maintenance pipeline for ``vehicle_id``.

        Raises:
            WorkerFailure: a stage or the final result assembly raised, or a
                worker is missing. The workflow is marked failed before this
                is raised.
        """
        workflow_id = await self.start_workflow(input_data={"vehicle_id": vehicle_id})
        stage = STAGE_ANALYSIS
        skip_reason: Optional[str] = None
        diagnosis: Optional[DiagnosisReport] = None
        engagement: Optional[EngagementOutcome] = None
        scheduling: Optional[SchedulingResult] = None
        feedback: Optional[FeedbackRequest] = None

        try:
            analysis: AnalysisResult = await self._delegate(
                workflow_id, stage, AnalysisWorker, lambda w: w.analyze(vehicle_id)
            )
            vehicle = analysis.vehicle
            if not analysis.requires_diagnosis:
                skip_reason = SKIP_NO_DIAGNOSIS

            stage = STAGE_DIAGNOSIS
            if skip_reason is None:
                diagnosis = await self._delegate(
                    workflow_id,
                    stage,
                    DiagnosisWorker,
                    lambda w: w.diagnose(vehicle_id, analysis),
                )
                if not diagnosis.maintenance_required:
                    skip_reason = SKIP_NO_MAINTENANCE
            else:
                await self.skip_step(workflow_id, stage, skip_reason)

            stage = STAGE_ENGAGEMENT
            if skip_reason is None:
                engagement = await self._delegate(
                    workflow_id,
                    stage,
                    EngagementWorker,
                    lambda w: w.engage(vehicle, diagnosis),
                )
                if not engagement.customer_accepted:
                    skip_reason = SKIP_DECLINED
            else:
                await self.skip_step(workflow_id, stage, skip_reason)

            stage = STAGE_SCHEDULING
            if skip_reason is None:
                scheduling = await self._delegate(
                    workflow_id,
                    stage,
                    SchedulingWorker,
                    lambda w: w.schedule(vehicle, diagnosis),
                )
                if scheduling.appointment is None:
                    skip_reason = SKIP_NO_APPOINTMENT
            else:
                await self.skip_step(workflow_id, stage, skip_reason)

            stage = STAGE_FEEDBACK
            if skip_reason is None:
                feedback = await self._delegate(
                    workflow_id,
                    stage,
                    FeedbackWorker,
                    lambda w: w.collect_feedback(scheduling.appointment),
                )
            else:
                await self.skip_step(workflow_id, stage, skip_reason)

            stage = STAGE_INSIGHTS
            insights = await self._delegate(
                workflow_id, stage, InsightsWorker, lambda w: w.refresh_insights()
            )

            stage = STAGE_FINALIZE
            current = await self.store.get_workflow(workflow_id)
            results = {
                "analysis": analysis,
                "diagnosis": diagnosis,
                "engagement": engagement,
                "scheduling": scheduling,
                "feedback": feedback,
                "manufacturing_insights": insights,
            }
            final_result = {
                "workflow_id": workflow_id,
                "vehicle_id": vehicle_id,
                "vehicle_info": {
                    "id": vehicle.id,
                    "make": vehicle.make,
                    "model": vehicle.model,
                    "owner": vehicle.owner_name,
                },
                "stages": stage_labels(current),
                "results": {
                    key: _dump(value) if value is not None else None
                    for key, value in results.items()
                },
                "summary": workflow_summary(diagnosis, engagement, scheduling, feedback),
            }
            return await self.complete_workflow(workflow_id, final_result)
        except Exception as e:
            logger.exception(f"Stage {stage} failed for workflow {workflow_id}")
            await self.fail_workflow(workflow_id, e)
            raise WorkerFailure(workflow_id, stage, e) from e


def stage_labels(workflow: Workflow) -> List[str]:
    labels = []
    for stage in PIPELINE_STAGES:
        step = workflow.step(stage)
        label = STAGE_LABELS[stage]
        labels.append(f"{label} (Skipped)" if step is None or step.is_skipped else label)
    return labels


def workflow_summary(
    diagnosis: Optional[DiagnosisReport],
    engagement: Optional[EngagementOutcome],
    scheduling: Optional[SchedulingResult],
    feedback: Optional[FeedbackRequest],
) -> str:
    """Plain-text recap of what the pipeline did."""
    lines = ["WORKFLOW COMPLETED SUCCESSFULLY"]
    if diagnosis is None or not diagnosis.maintenance_required:
        lines.append("Vehicle Health: GOOD - No maintenance required")
        return "\n".join(lines)

    lines.append(f"Vehicle Health: {diagnosis.overall_risk.upper()} RISK")
    lines.append(f"Urgency: {diagnosis.urgency.level}")
    lines.append(f"Issues: {len(diagnosis.predictions)} component(s) need attention")
    if engagement is not None:
        lines.append(
            f"Customer Engagement: {'ACCEPTED' if engagement.customer_accepted else 'DECLINED'}"
            f" (intent: {engagement.intent})"
        )
    appointment = scheduling.appointment if scheduling is not None else None
    if appointment is not None:
        lines.append(
            f"Appointment {appointment.id}: {appointment.appointment_date.isoformat()} "
            f"at {appointment.time}, {appointment.service_center_name}"
        )
    elif scheduling is not None:
        lines.append(f"No free slot at {scheduling.service_center_name}")
    if feedback is not None:
        lines.append(f"Feedback request {feedback.id}: {feedback.status}")
    return "\n".join(lines)
