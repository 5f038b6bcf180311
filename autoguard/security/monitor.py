"""Policy-driven behavior anomaly monitoring.

Every event is checked against the acting component's declared policy. The
checks are independent and all of them run, so one event can yield several
findings. The monitor is advisory: critical findings trigger an alert
callback but nothing is ever blocked.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..config import ActorPolicy, MonitorConfig
from ..errors import NotFound
from .models import (
    ActivityEvent,
    ActorBaseline,
    ActorSummary,
    AnomalyDigest,
    AnomalyFinding,
    AnomalyRecord,
    FindingType,
    MonitorResult,
    SecurityDashboard,
    Severity,
)
from .policy import PolicyBook

logger = logging.getLogger(__name__)

AlertCallback = Callable[[AnomalyRecord], None]


def risk_score(findings: List[AnomalyFinding]) -> float:
    """Mean severity weight of ``findings``; 0 when there are none."""
    if not findings:
        return 0.0
    return sum(f.severity.weight for f in findings) / len(findings)


def _aware(timestamp: datetime) -> datetime:
    # naive timestamps are taken as local time
    if timestamp.tzinfo is None:
        return timestamp.astimezone()
    return timestamp


def _log_alert(record: AnomalyRecord) -> None:
    logger.warning(
        f"CRITICAL ALERT: actor {record.actor} raised "
        f"{[f.type.value for f in record.findings]} (anomaly {record.id})"
    )


class BehaviorMonitor:
    """Evaluates actor events against declared policies.

    Baselines are created on an actor's first event and kept for the life of
    the monitor. Each baseline is updated under its own lock; the anomaly
    log is a bounded ring buffer whose eviction never touches counters.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        policies: Optional[PolicyBook] = None,
        on_alert: Optional[AlertCallback] = None,
    ) -> None:
        self.config = config or MonitorConfig()
        self.policies = policies or PolicyBook.from_config(self.config)
        self._on_alert = on_alert or _log_alert
        self._baselines: Dict[str, ActorBaseline] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._anomalies: Deque[AnomalyRecord] = deque(
            maxlen=self.config.anomaly_log_capacity
        )
        self._anomaly_lock = threading.Lock()

    # ------------------------------------------------------------------
    def record_event(
        self,
        actor: str,
        action: str,
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> MonitorResult:
        """Build an event for ``actor`` and evaluate it.

        Malformed input is coerced rather than rejected: the actor and
        action are stringified, unusable metadata is dropped and an
        unparseable timestamp is replaced with the current time.
        """
        now = datetime.now(timezone.utc)
        try:
            event = ActivityEvent(
                actor=actor,
                action=action,
                metadata=metadata or {},
                timestamp=timestamp or now,
            )
        except ValidationError as e:
            logger.warning(
                f"Malformed event from actor {actor!r}, coercing: "
                f"{e.error_count()} validation error(s)"
            )
            event = ActivityEvent(
                actor=str(actor),
                action=str(action),
                metadata=(
                    {str(k): v for k, v in metadata.items()}
                    if isinstance(metadata, Mapping)
                    else {}
                ),
                timestamp=timestamp if isinstance(timestamp, datetime) else now,
            )
        return self.evaluate(event)

    def evaluate(self, event: ActivityEvent) -> MonitorResult:
        """Run every check against ``event`` and update the actor baseline."""
        baseline, lock = self._baseline_for(event.actor)
        policy = self.policies.get(event.actor)
        timestamp = _aware(event.timestamp)

        with lock:
            baseline.total_actions += 1
            baseline.action_frequency[event.action] = (
                baseline.action_frequency.get(event.action, 0) + 1
            )
            baseline.last_action_time = timestamp
            actions_in_window = self._track_rate(baseline, timestamp)

            findings: List[AnomalyFinding] = []
            for check in (
                self._check_action(event, policy),
                self._check_data_access(event, policy),
                self._check_rate(event, policy, actions_in_window),
                self._check_timing(event, timestamp),
                self._check_workflow_control(event),
            ):
                if check is not None:
                    findings.append(check)

            if findings:
                baseline.anomaly_count += 1

        score = risk_score(findings)
        if findings:
            record = self._log_anomaly(event, findings, score)
            if record.is_critical:
                self._raise_alert(record)

        return MonitorResult(is_normal=not findings, findings=findings, risk_score=score)

    # ------------------------------------------------------------------
    # Checks
    def _check_action(
        self, event: ActivityEvent, policy: Optional[ActorPolicy]
    ) -> Optional[AnomalyFinding]:
        if policy is None or event.action in policy.allowed_actions:
            return None
        return AnomalyFinding(
            type=FindingType.UNAUTHORIZED_ACTION,
            severity=Severity.HIGH,
            detail=f"Actor {event.actor} performed unauthorized action: {event.action}",
            event=event,
            context={"expected_actions": list(policy.allowed_actions)},
        )

    def _check_data_access(
        self, event: ActivityEvent, policy: Optional[ActorPolicy]
    ) -> Optional[AnomalyFinding]:
        accessed = event.data_access
        if accessed is None:
            return None
        allowed = policy.allowed_data_access if policy else []
        if accessed in allowed:
            return None
        return AnomalyFinding(
            type=FindingType.UNAUTHORIZED_DATA_ACCESS,
            severity=Severity.CRITICAL,
            detail=f"Actor {event.actor} accessed unauthorized data: {accessed}",
            event=event,
            context={"allowed_data_access": list(allowed)},
        )

    def _check_rate(
        self, event: ActivityEvent, policy: Optional[ActorPolicy], actions: int
    ) -> Optional[AnomalyFinding]:
        limit = (
            policy.max_actions_per_minute
            if policy is not None
            else self.config.default_max_actions_per_minute
        )
        if limit is None or actions <= limit:
            return None
        return AnomalyFinding(
            type=FindingType.RATE_LIMIT_EXCEEDED,
            severity=Severity.MEDIUM,
            detail=(
                f"Actor {event.actor} exceeded rate limit: {actions} actions/min "
                f"(limit: {limit})"
            ),
            event=event,
            context={"current_rate": actions, "limit": limit},
        )

    def _check_timing(
        self, event: ActivityEvent, timestamp: datetime
    ) -> Optional[AnomalyFinding]:
        hour = timestamp.astimezone().hour
        if self.config.active_hours_start <= hour < self.config.active_hours_end:
            return None
        return AnomalyFinding(
            type=FindingType.UNUSUAL_TIMING,
            severity=Severity.LOW,
            detail=f"Actor {event.actor} active at unusual hour: {hour}:00",
            event=event,
            context={"hour": hour},
        )

    def _check_workflow_control(self, event: ActivityEvent) -> Optional[AnomalyFinding]:
        marker = self.config.workflow_control_marker.lower()
        if marker not in event.action.lower():
            return None
        if event.actor == self.config.orchestrator_actor:
            return None
        return AnomalyFinding(
            type=FindingType.WORKFLOW_MANIPULATION,
            severity=Severity.CRITICAL,
            detail=(
                f"Non-orchestrator actor {event.actor} attempted workflow "
                f"manipulation: {event.action}"
            ),
            event=event,
        )

    # ------------------------------------------------------------------
    def _track_rate(self, baseline: ActorBaseline, timestamp: datetime) -> int:
        """Add ``timestamp`` to the window and count events in ``(t - w, t]``."""
        window = timedelta(seconds=self.config.rate_window_seconds)
        baseline.recent_timestamps.append(timestamp)
        newest = max(baseline.recent_timestamps)
        baseline.recent_timestamps = [
            t for t in baseline.recent_timestamps if t > newest - window
        ]
        cutoff = timestamp - window
        return sum(1 for t in baseline.recent_timestamps if cutoff < t <= timestamp)

    def _baseline_for(self, actor: str) -> Tuple[ActorBaseline, threading.Lock]:
        with self._registry_lock:
            baseline = self._baselines.get(actor)
            if baseline is None:
                baseline = ActorBaseline(actor=actor)
                self._baselines[actor] = baseline
                self._locks[actor] = threading.Lock()
                logger.debug(f"Created behavior baseline for actor {actor}")
            return baseline, self._locks[actor]

    def _log_anomaly(
        self, event: ActivityEvent, findings: List[AnomalyFinding], score: float
    ) -> AnomalyRecord:
        # stored records share no objects with the caller's event or findings
        record = AnomalyRecord(
            id=f"ANOM-{uuid.uuid4()}",
            timestamp=datetime.now(timezone.utc),
            actor=event.actor,
            event=event,
            findings=findings,
            risk_score=score,
        ).model_copy(deep=True)
        with self._anomaly_lock:
            self._anomalies.append(record)

        for finding in findings:
            logger.info(
                f"Anomaly for {event.actor}: [{finding.severity.value}] "
                f"{finding.type.value}: {finding.detail}"
            )
        return record

    def _raise_alert(self, record: AnomalyRecord) -> None:
        record.action_taken = "ALERT_SENT"
        try:
            self._on_alert(record.model_copy(deep=True))
        except Exception:
            logger.exception(f"Alert callback failed for anomaly {record.id}")

    # ------------------------------------------------------------------
    # Views
    def get_baseline(self, actor: str) -> ActorBaseline:
        with self._registry_lock:
            baseline = self._baselines.get(actor)
            lock = self._locks.get(actor)
        if baseline is None:
            raise NotFound("Actor", actor)
        with lock:
            return baseline.model_copy(deep=True)

    def get_actor_summary(self, actor: str) -> ActorSummary:
        baseline = self.get_baseline(actor)
        rate = (
            round(baseline.anomaly_count / baseline.total_actions * 100, 2)
            if baseline.total_actions
            else 0.0
        )
        if baseline.anomaly_count > 5:
            level = "high"
        elif baseline.anomaly_count > 2:
            level = "medium"
        else:
            level = "low"
        return ActorSummary(
            actor=actor,
            total_actions=baseline.total_actions,
            anomaly_count=baseline.anomaly_count,
            anomaly_rate=rate,
            action_breakdown=dict(baseline.action_frequency),
            last_activity=baseline.last_action_time,
            risk_level=level,
        )

    def get_anomaly_report(self, limit: int = 50) -> List[AnomalyRecord]:
        """Return copies of the newest ``limit`` anomaly records, oldest first."""
        with self._anomaly_lock:
            records = list(self._anomalies)
        latest = records[-limit:] if limit > 0 else []
        return [r.model_copy(deep=True) for r in latest]

    def get_security_dashboard(self, recent: Optional[int] = None) -> SecurityDashboard:
        recent = self.config.dashboard_recent if recent is None else recent
        with self._registry_lock:
            actors = list(self._baselines)
        with self._anomaly_lock:
            records = list(self._anomalies)

        latest = records[-recent:] if recent > 0 else []
        return SecurityDashboard(
            timestamp=datetime.now(timezone.utc),
            total_actors=len(actors),
            total_anomalies=len(records),
            critical_anomalies=sum(1 for r in records if r.is_critical),
            actor_summaries=[self.get_actor_summary(a) for a in actors],
            recent_anomalies=[
                AnomalyDigest(
                    id=r.id,
                    actor=r.actor,
                    timestamp=r.timestamp,
                    risk_score=r.risk_score,
                    finding_types=[f.type for f in r.findings],
                )
                for r in latest
            ],
        )
