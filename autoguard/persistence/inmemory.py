"""In-memory implementation of the workflow store."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from ..errors import NotFound
from .models import Step, Workflow, WorkflowStatus
from .repository import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Store workflow state in local memory.

    Each workflow id has its own lock, so concurrent pipelines never block
    each other. Reads return deep copies; callers cannot bypass the status
    rules by mutating a returned record. Data is not persisted across
    process restarts.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, Workflow] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    async def create_workflow(self, workflow: Workflow) -> None:
        if workflow.id in self._workflows:
            raise ValueError(f"Workflow already exists: {workflow.id}")
        self._locks[workflow.id] = asyncio.Lock()
        self._workflows[workflow.id] = workflow.model_copy(deep=True)

    async def append_step(self, workflow_id: str, step: Step) -> int:
        async with self._lock_for(workflow_id):
            wf = self._workflows[workflow_id]
            wf.append_step(step.model_copy(deep=True))
            return len(wf.steps)

    async def finish_workflow(
        self,
        workflow_id: str,
        status: WorkflowStatus,
        result: Optional[dict[str, Any]] = None,
    ) -> Workflow:
        async with self._lock_for(workflow_id):
            wf = self._workflows[workflow_id]
            wf.finish(status, result)
            return wf.model_copy(deep=True)

    async def get_workflow(self, workflow_id: str) -> Workflow:
        async with self._lock_for(workflow_id):
            return self._workflows[workflow_id].model_copy(deep=True)

    async def list_workflows(
        self, status: Optional[WorkflowStatus] = None
    ) -> list[Workflow]:
        return [
            wf.model_copy(deep=True)
            for wf in list(self._workflows.values())
            if status is None or wf.status == status
        ]

    def _lock_for(self, workflow_id: str) -> asyncio.Lock:
        lock = self._locks.get(workflow_id)
        if lock is None:
            raise NotFound("Workflow", workflow_id)
        return lock
