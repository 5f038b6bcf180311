"""Error taxonomy for autoguard."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_TERMINAL = "already_terminal"
    INVALID_INPUT = "invalid_input"
    WORKER_FAILURE = "worker_failure"


class AutoguardError(Exception):
    """Base class for errors surfaced by the autoguard core."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(AutoguardError):
    """Unknown workflow, worker, actor or vehicle identifier."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class AlreadyTerminal(AutoguardError):
    """Mutation attempted on a completed or failed workflow."""

    kind = ErrorKind.ALREADY_TERMINAL

    def __init__(self, workflow_id: str, status: str) -> None:
        super().__init__(f"Workflow {workflow_id} is already {status}")
        self.workflow_id = workflow_id
        self.status = status


class InvalidInput(AutoguardError):
    """Malformed or missing scoring input."""

    kind = ErrorKind.INVALID_INPUT


class WorkerFailure(AutoguardError):
    """Wraps an error raised by a delegated worker during orchestration.

    Carries the id of the workflow that was marked failed and the stage that
    was running, so callers can inspect the failed record.
    """

    kind = ErrorKind.WORKER_FAILURE

    def __init__(
        self, workflow_id: str, stage: str, original: Optional[BaseException]
    ) -> None:
        super().__init__(f"Stage {stage} failed for workflow {workflow_id}: {original}")
        self.workflow_id = workflow_id
        self.stage = stage
        self.original = original


__all__ = [
    "AlreadyTerminal",
    "AutoguardError",
    "ErrorKind",
    "InvalidInput",
    "NotFound",
    "WorkerFailure",
]
