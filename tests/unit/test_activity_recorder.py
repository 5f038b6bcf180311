"""Tests for activity recording."""

import logging

import pytest
from pydantic import ValidationError

from autoguard.security import ActivityRecorder, BehaviorMonitor


def test_record_forwards_to_monitor(recorder):
    event = recorder.record("analysis", "Analyzing vehicle", {"data_access": "sensors"})

    assert event.actor == "analysis"
    assert event.data_access == "sensors"
    assert recorder.monitor.get_baseline("analysis").total_actions == 1


def test_events_are_frozen(recorder):
    event = recorder.record("analysis", "Analyzing vehicle")

    with pytest.raises(ValidationError):
        event.action = "changed"


def test_metadata_is_copied(recorder):
    metadata = {"workflow_id": "WF-1"}
    event = recorder.record("orchestrator", "Workflow started", metadata)
    metadata["workflow_id"] = "WF-2"

    assert event.workflow_id == "WF-1"


def test_logged_events_cannot_be_rewritten(recorder):
    returned = recorder.record("orchestrator", "Workflow started", {"workflow_id": "WF-1"})
    returned.metadata["workflow_id"] = "WF-2"
    recorder.get_log()[0].metadata["workflow_id"] = "WF-3"
    recorder.get_log()[0].metadata["data_access"] = "payments"

    logged = recorder.get_log()[0]
    assert logged.workflow_id == "WF-1"
    assert logged.data_access is None


def test_anomalous_event_logs_warning(recorder, caplog):
    with caplog.at_level(logging.WARNING, logger="autoguard.security.audit"):
        recorder.record("analysis", "Dropping tables")

    assert "Anomaly detected for analysis" in caplog.text


def test_get_log_returns_newest_oldest_first(recorder):
    for i in range(5):
        recorder.record("orchestrator", "Workflow started", {"n": i})

    log = recorder.get_log(limit=3)
    assert [e.metadata["n"] for e in log] == [2, 3, 4]
    assert recorder.get_log(limit=0) == []


def test_log_capacity_is_bounded(at_noon):
    recorder = ActivityRecorder(BehaviorMonitor(), capacity=3, clock=lambda: at_noon)
    for i in range(10):
        recorder.record("orchestrator", "Workflow started", {"n": i})

    assert [e.metadata["n"] for e in recorder.get_log()] == [7, 8, 9]
    # monitor counters are independent of log retention
    assert recorder.monitor.get_baseline("orchestrator").total_actions == 10
