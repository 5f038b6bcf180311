"""Declared per-actor behavior policies."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from ..config import ActorPolicy, MonitorConfig
from ..constants import (
    ACTION_DELEGATING,
    ACTION_STEP_COMPLETED,
    ACTION_STEP_SKIPPED,
    ACTION_WORKER_REGISTERED,
    ACTION_WORKFLOW_COMPLETED,
    ACTION_WORKFLOW_FAILED,
    ACTION_WORKFLOW_STARTED,
    ORCHESTRATOR_ACTOR,
    WORKER_ANALYSIS,
    WORKER_DIAGNOSIS,
    WORKER_ENGAGEMENT,
    WORKER_FEEDBACK,
    WORKER_INSIGHTS,
    WORKER_SCHEDULING,
)

DEFAULT_POLICIES: Dict[str, ActorPolicy] = {
    ORCHESTRATOR_ACTOR: ActorPolicy(
        allowed_actions=[
            ACTION_WORKER_REGISTERED,
            ACTION_WORKFLOW_STARTED,
            ACTION_STEP_COMPLETED,
            ACTION_STEP_SKIPPED,
            ACTION_WORKFLOW_COMPLETED,
            ACTION_WORKFLOW_FAILED,
            ACTION_DELEGATING,
        ],
        allowed_data_access=["workflows", "activity_log"],
        max_actions_per_minute=100,
    ),
    WORKER_ANALYSIS: ActorPolicy(
        allowed_actions=["Analyzing vehicle"],
        allowed_data_access=["vehicles", "sensors", "maintenance_history"],
        max_actions_per_minute=50,
    ),
    WORKER_DIAGNOSIS: ActorPolicy(
        allowed_actions=["Running diagnosis", "Diagnosis completed"],
        allowed_data_access=["vehicles", "sensors", "maintenance_history", "ml_model"],
        max_actions_per_minute=50,
    ),
    WORKER_ENGAGEMENT: ActorPolicy(
        allowed_actions=[
            "Initiating contact",
            "Conversation started",
            "Recommendation sent",
            "Customer responded",
        ],
        allowed_data_access=["vehicles", "customers", "diagnosis_results"],
        max_actions_per_minute=30,
    ),
    WORKER_SCHEDULING: ActorPolicy(
        allowed_actions=[
            "Checking availability",
            "Appointment proposed",
            "Appointment confirmed",
            "Appointment cancelled",
        ],
        allowed_data_access=["service_centers", "appointments", "customers"],
        max_actions_per_minute=40,
    ),
    WORKER_FEEDBACK: ActorPolicy(
        allowed_actions=["Feedback requested", "Feedback submitted"],
        allowed_data_access=["appointments", "feedback", "customers"],
        max_actions_per_minute=30,
    ),
    WORKER_INSIGHTS: ActorPolicy(
        allowed_actions=["Analyzing RCA patterns"],
        allowed_data_access=["maintenance_history"],
        max_actions_per_minute=20,
    ),
}


class PolicyBook:
    """Resolves the declared policy for an actor.

    Actors missing from the book have no declared policy.
    """

    def __init__(self, policies: Optional[Mapping[str, ActorPolicy]] = None) -> None:
        source = DEFAULT_POLICIES if policies is None else policies
        self._policies: Dict[str, ActorPolicy] = {
            name: policy.model_copy(deep=True) for name, policy in source.items()
        }

    @classmethod
    def from_config(cls, config: MonitorConfig) -> "PolicyBook":
        return cls(config.policies)

    def get(self, actor: str) -> Optional[ActorPolicy]:
        return self._policies.get(actor)

    def declare(self, actor: str, policy: ActorPolicy) -> None:
        self._policies[actor] = policy

    def actors(self) -> list[str]:
        return list(self._policies)
