"""Workflow state storage for autoguard."""

from __future__ import annotations

from .inmemory import InMemoryWorkflowStore
from .models import Step, StepStatus, Workflow, WorkflowStatus
from .repository import WorkflowStore

__all__ = [
    "InMemoryWorkflowStore",
    "Step",
    "StepStatus",
    "Workflow",
    "WorkflowStatus",
    "WorkflowStore",
]
