"""Store abstraction for workflow state."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from .models import Step, Workflow, WorkflowStatus


class WorkflowStore(Protocol):
    """Protocol for workflow state backends.

    Implementations raise ``NotFound`` for unknown ids and ``AlreadyTerminal``
    when a finished workflow is mutated.
    """

    async def create_workflow(self, workflow: Workflow) -> None:
        """Persist initial workflow state."""

    async def append_step(self, workflow_id: str, step: Step) -> int:
        """Append a step and return the new step count."""

    async def finish_workflow(
        self,
        workflow_id: str,
        status: WorkflowStatus,
        result: Optional[dict[str, Any]] = None,
    ) -> Workflow:
        """Move the workflow into a terminal status."""

    async def get_workflow(self, workflow_id: str) -> Workflow:
        """Retrieve the workflow instance by id."""

    async def list_workflows(
        self, status: Optional[WorkflowStatus] = None
    ) -> list[Workflow]:
        """Return held workflows, optionally filtered by status."""
