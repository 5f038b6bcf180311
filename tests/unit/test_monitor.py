"""Tests for the behavior monitor."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from autoguard.config import ActorPolicy, MonitorConfig
from autoguard.errors import NotFound
from autoguard.security import (
    AnomalyFinding,
    BehaviorMonitor,
    FindingType,
    PolicyBook,
    Severity,
    risk_score,
)
from autoguard.security.models import ActivityEvent


def _types(result):
    return {f.type for f in result.findings}


def test_allowed_action_is_normal(at_noon):
    monitor = BehaviorMonitor()
    result = monitor.record_event(
        "analysis",
        "Analyzing vehicle",
        {"data_access": "sensors"},
        timestamp=at_noon,
    )

    assert result.is_normal
    assert result.findings == []
    assert result.risk_score == 0.0
    assert monitor.get_anomaly_report() == []


def test_unauthorized_action(at_noon):
    monitor = BehaviorMonitor()
    result = monitor.record_event("analysis", "Deleting records", timestamp=at_noon)

    assert not result.is_normal
    assert _types(result) == {FindingType.UNAUTHORIZED_ACTION}
    assert result.findings[0].severity == Severity.HIGH
    assert result.risk_score == pytest.approx(0.7)


def test_unauthorized_data_access_raises_alert(at_noon):
    alerts = []
    monitor = BehaviorMonitor(on_alert=alerts.append)
    result = monitor.record_event(
        "engagement", "Initiating contact", {"data_access": "payments"}, timestamp=at_noon
    )

    assert _types(result) == {FindingType.UNAUTHORIZED_DATA_ACCESS}
    assert result.findings[0].severity == Severity.CRITICAL
    assert len(alerts) == 1
    assert alerts[0].action_taken == "ALERT_SENT"
    assert monitor.get_anomaly_report()[0].action_taken == "ALERT_SENT"


def test_failing_alert_callback_does_not_propagate(at_noon):
    def boom(record):
        raise RuntimeError("pager down")

    monitor = BehaviorMonitor(on_alert=boom)
    result = monitor.record_event(
        "feedback", "Feedback requested", {"data_access": "engine_ecu"}, timestamp=at_noon
    )

    assert not result.is_normal


def test_rate_limit_boundary(at_noon):
    policies = PolicyBook(
        {"worker": ActorPolicy(allowed_actions=["tick"], max_actions_per_minute=3)}
    )
    monitor = BehaviorMonitor(policies=policies)

    results = [
        monitor.record_event("worker", "tick", timestamp=at_noon + timedelta(seconds=i))
        for i in range(3)
    ]
    assert all(r.is_normal for r in results)

    over = monitor.record_event("worker", "tick", timestamp=at_noon + timedelta(seconds=3))
    assert _types(over) == {FindingType.RATE_LIMIT_EXCEEDED}
    assert over.findings[0].context == {"current_rate": 4, "limit": 3}


def test_rate_window_slides(at_noon):
    policies = PolicyBook(
        {"worker": ActorPolicy(allowed_actions=["tick"], max_actions_per_minute=2)}
    )
    monitor = BehaviorMonitor(policies=policies)

    monitor.record_event("worker", "tick", timestamp=at_noon)
    monitor.record_event("worker", "tick", timestamp=at_noon + timedelta(seconds=10))
    # the first event falls out of the trailing 60 second window
    late = monitor.record_event("worker", "tick", timestamp=at_noon + timedelta(seconds=60))

    assert late.is_normal


def test_unusual_timing(at_noon):
    monitor = BehaviorMonitor()
    late_night = at_noon.replace(hour=2)
    result = monitor.record_event("analysis", "Analyzing vehicle", timestamp=late_night)

    assert _types(result) == {FindingType.UNUSUAL_TIMING}
    assert result.findings[0].severity == Severity.LOW
    assert result.findings[0].context == {"hour": 2}


def test_active_hours_boundaries(at_noon):
    monitor = BehaviorMonitor()
    assert monitor.record_event(
        "analysis", "Analyzing vehicle", timestamp=at_noon.replace(hour=6)
    ).is_normal
    assert not monitor.record_event(
        "analysis", "Analyzing vehicle", timestamp=at_noon.replace(hour=23)
    ).is_normal


def test_naive_timestamp_taken_as_local():
    monitor = BehaviorMonitor()
    result = monitor.record_event(
        "analysis", "Analyzing vehicle", timestamp=datetime(2024, 5, 1, 12, 0)
    )

    assert result.is_normal


def test_workflow_manipulation_by_worker(at_noon):
    alerts = []
    monitor = BehaviorMonitor(on_alert=alerts.append)
    result = monitor.record_event("scheduling", "Workflow completed", timestamp=at_noon)

    assert FindingType.WORKFLOW_MANIPULATION in _types(result)
    assert FindingType.UNAUTHORIZED_ACTION in _types(result)
    assert len(alerts) == 1


def test_orchestrator_may_control_workflows(at_noon):
    monitor = BehaviorMonitor()
    result = monitor.record_event(
        "orchestrator",
        "Workflow completed",
        {"workflow_id": "WF-1", "data_access": "workflows"},
        timestamp=at_noon,
    )

    assert result.is_normal


def test_unknown_actor_only_checked_for_data_access(at_noon):
    monitor = BehaviorMonitor()
    assert monitor.record_event("intruder", "Anything", timestamp=at_noon).is_normal

    result = monitor.record_event(
        "intruder", "Anything", {"data_access": "vehicles"}, timestamp=at_noon
    )
    assert _types(result) == {FindingType.UNAUTHORIZED_DATA_ACCESS}


def test_default_rate_limit_applies_to_unknown_actors(at_noon):
    monitor = BehaviorMonitor(MonitorConfig(default_max_actions_per_minute=1))
    monitor.record_event("intruder", "Anything", timestamp=at_noon)
    result = monitor.record_event("intruder", "Anything", timestamp=at_noon)

    assert _types(result) == {FindingType.RATE_LIMIT_EXCEEDED}


def test_risk_score_is_mean_severity_weight(at_noon):
    event = ActivityEvent(actor="a", action="b", timestamp=at_noon)

    def finding(severity):
        return AnomalyFinding(
            type=FindingType.UNUSUAL_TIMING, severity=severity, detail="", event=event
        )

    assert risk_score([]) == 0.0
    assert risk_score([finding(Severity.CRITICAL), finding(Severity.LOW)]) == pytest.approx(0.6)
    scores = [
        risk_score([finding(s)])
        for s in (Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL)
    ]
    assert scores == sorted(scores)


def test_baseline_counters(at_noon):
    monitor = BehaviorMonitor()
    monitor.record_event("analysis", "Analyzing vehicle", timestamp=at_noon)
    monitor.record_event("analysis", "Analyzing vehicle", timestamp=at_noon)
    monitor.record_event("analysis", "Rebooting", timestamp=at_noon)

    baseline = monitor.get_baseline("analysis")
    assert baseline.total_actions == 3
    assert baseline.anomaly_count == 1
    assert baseline.action_frequency == {"Analyzing vehicle": 2, "Rebooting": 1}
    assert baseline.last_action_time == at_noon

    with pytest.raises(NotFound):
        monitor.get_baseline("nobody")


def test_anomaly_log_eviction_keeps_counters(at_noon):
    monitor = BehaviorMonitor(MonitorConfig(anomaly_log_capacity=2))
    for i in range(5):
        monitor.record_event("analysis", f"Rogue action {i}", timestamp=at_noon)

    report = monitor.get_anomaly_report()
    assert len(report) == 2
    assert report[-1].event.action == "Rogue action 4"
    assert monitor.get_baseline("analysis").anomaly_count == 5


def test_actor_summary_risk_levels(at_noon):
    monitor = BehaviorMonitor()
    for i in range(3):
        monitor.record_event("insights", f"Export {i}", timestamp=at_noon)
    monitor.record_event("insights", "Analyzing RCA patterns", timestamp=at_noon)

    summary = monitor.get_actor_summary("insights")
    assert summary.risk_level == "medium"
    assert summary.anomaly_rate == 75.0
    assert summary.total_actions == 4

    for i in range(3):
        monitor.record_event("insights", f"Export again {i}", timestamp=at_noon)
    assert monitor.get_actor_summary("insights").risk_level == "high"


def test_security_dashboard(at_noon):
    monitor = BehaviorMonitor()
    monitor.record_event("analysis", "Analyzing vehicle", timestamp=at_noon)
    monitor.record_event("scheduling", "Workflow started", timestamp=at_noon)
    monitor.record_event("diagnosis", "Running diagnosis", timestamp=at_noon.replace(hour=3))

    dashboard = monitor.get_security_dashboard()
    assert dashboard.total_actors == 3
    assert dashboard.total_anomalies == 2
    assert dashboard.critical_anomalies == 1
    assert {s.actor for s in dashboard.actor_summaries} == {
        "analysis",
        "scheduling",
        "diagnosis",
    }
    assert [a.actor for a in dashboard.recent_anomalies] == ["scheduling", "diagnosis"]

    assert len(monitor.get_security_dashboard(recent=1).recent_anomalies) == 1


def test_malformed_input_is_coerced(at_noon, caplog):
    monitor = BehaviorMonitor()

    result = monitor.record_event("analysis", None, timestamp=at_noon)
    assert _types(result) == {FindingType.UNAUTHORIZED_ACTION}
    assert result.findings[0].event.action == "None"

    result = monitor.record_event(
        "analysis", "Analyzing vehicle", ["not", "a", "mapping"], timestamp="not-a-time"
    )
    assert result.findings == [] or _types(result) == {FindingType.UNUSUAL_TIMING}

    baseline = monitor.get_baseline("analysis")
    assert baseline.total_actions == 2
    assert baseline.action_frequency == {"None": 1, "Analyzing vehicle": 1}
    assert "Malformed event from actor 'analysis'" in caplog.text


def test_anomaly_report_cannot_be_rewritten(at_noon):
    monitor = BehaviorMonitor()
    event = ActivityEvent(
        actor="engagement",
        action="Initiating contact",
        metadata={"data_access": "payments"},
        timestamp=at_noon,
    )
    result = monitor.evaluate(event)

    event.metadata["data_access"] = "customers"
    result.findings[0].event.metadata["data_access"] = "customers"
    monitor.get_anomaly_report()[0].event.metadata["data_access"] = "customers"

    assert monitor.get_anomaly_report()[0].event.data_access == "payments"


def test_concurrent_events_keep_exact_counters(at_noon):
    capacity = 16
    events = 200
    monitor = BehaviorMonitor(
        MonitorConfig(anomaly_log_capacity=capacity), on_alert=lambda record: None
    )

    def send(i):
        return monitor.record_event(
            "rogue", f"Reading batch {i % 4}", {"data_access": "payments"}, timestamp=at_noon
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(send, range(events)))

    assert all(not r.is_normal for r in results)
    baseline = monitor.get_baseline("rogue")
    assert baseline.total_actions == events
    assert baseline.anomaly_count == events
    assert sum(baseline.action_frequency.values()) == events
    assert len(monitor.get_anomaly_report(limit=events)) == capacity
    assert monitor.get_security_dashboard().total_anomalies == capacity
