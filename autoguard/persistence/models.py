"""Data models for workflow state."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..errors import AlreadyTerminal


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkflowStatus(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


class Step(BaseModel):
    """Record of one pipeline stage.

    A skipped stage carries no result and states why it did not run.
    """

    stage: str
    timestamp: datetime = Field(default_factory=utcnow)
    status: StepStatus = StepStatus.COMPLETED
    result: Optional[dict[str, Any]] = None
    reason: Optional[str] = None

    @classmethod
    def skipped(cls, stage: str, reason: str) -> "Step":
        return cls(stage=stage, status=StepStatus.SKIPPED, reason=reason)

    @property
    def is_skipped(self) -> bool:
        return self.status == StepStatus.SKIPPED


class Workflow(BaseModel):
    """Workflow instance data.

    Status only moves from ``started`` to ``completed`` or ``failed``. Both
    are final: appending steps or finishing again raises
    :class:`~autoguard.errors.AlreadyTerminal`.
    """

    id: str
    type: str
    status: WorkflowStatus = WorkflowStatus.STARTED
    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    data: dict[str, Any] = Field(default_factory=dict)
    steps: list[Step] = Field(default_factory=list)
    result: Optional[dict[str, Any]] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != WorkflowStatus.STARTED

    @property
    def duration_ms(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds() * 1000

    def step(self, stage: str) -> Optional[Step]:
        """Return the most recent step recorded for ``stage``."""
        for step in reversed(self.steps):
            if step.stage == stage:
                return step
        return None

    def append_step(self, step: Step) -> None:
        self._ensure_open()
        self.steps.append(step)

    def finish(self, status: WorkflowStatus, result: Optional[dict[str, Any]]) -> None:
        if status == WorkflowStatus.STARTED:
            raise ValueError("A workflow can only finish as completed or failed")
        self._ensure_open()
        self.status = status
        self.end_time = utcnow()
        self.result = result

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise AlreadyTerminal(self.id, self.status.value)
