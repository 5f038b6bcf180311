"""Registry of pipeline workers keyed by name."""

from __future__ import annotations

import logging
from typing import Dict, Type, TypeVar

from ..errors import NotFound
from .base import Worker

logger = logging.getLogger(__name__)

WorkerT = TypeVar("WorkerT", bound=Worker)


class WorkerRegistry:
    """Maps a worker name to the instance serving it."""

    def __init__(self) -> None:
        self._workers: Dict[str, Worker] = {}

    def register(self, name: str, worker: Worker) -> None:
        if not isinstance(worker, Worker):
            raise TypeError(f"{type(worker).__name__} is not a pipeline worker")
        if name in self._workers:
            logger.info(f"Replacing worker registered as {name}")
        self._workers[name] = worker

    def get(self, name: str) -> Worker:
        worker = self._workers.get(name)
        if worker is None:
            raise NotFound("Worker", name)
        return worker

    def get_typed(self, name: str, kind: Type[WorkerT]) -> WorkerT:
        """Return the worker registered as ``name``, checking its variant."""
        worker = self.get(name)
        if not isinstance(worker, kind):
            raise TypeError(
                f"Worker {name} is a {type(worker).__name__}, expected {kind.__name__}"
            )
        return worker

    def names(self) -> list[str]:
        return list(self._workers)

    def __contains__(self, name: object) -> bool:
        return name in self._workers
