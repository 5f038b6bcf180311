"""Activity recording for orchestration events."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

from ..constants import DEFAULT_ACTIVITY_LOG_CAPACITY
from .models import ActivityEvent
from .monitor import BehaviorMonitor

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now().astimezone()


class ActivityRecorder:
    """Appends activity events to a bounded log and forwards each one to
    the behavior monitor."""

    def __init__(
        self,
        monitor: BehaviorMonitor,
        capacity: int = DEFAULT_ACTIVITY_LOG_CAPACITY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.monitor = monitor
        self._clock = clock or local_now
        self._log: Deque[ActivityEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self, actor: str, action: str, metadata: Optional[Dict[str, Any]] = None
    ) -> ActivityEvent:
        """Persist an activity event and return it."""
        event = ActivityEvent(
            timestamp=self._clock(),
            actor=actor,
            action=action,
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._log.append(event)

        result = self.monitor.evaluate(event)
        if not result.is_normal:
            logger.warning(
                f"Anomaly detected for {actor} ({action}) - "
                f"risk score: {result.risk_score:.2f}"
            )
        return event.model_copy(deep=True)

    def get_log(self, limit: int = 100) -> List[ActivityEvent]:
        """Return copies of the newest ``limit`` events, oldest first."""
        with self._lock:
            events = list(self._log)
        latest = events[-limit:] if limit > 0 else []
        return [e.model_copy(deep=True) for e in latest]
