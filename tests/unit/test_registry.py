"""Tests for the worker registry."""

import pytest

from autoguard.errors import NotFound
from autoguard.workers import (
    AnalysisWorker,
    DiagnosisWorker,
    FeedbackCollector,
    WorkerRegistry,
    build_default_registry,
)


def test_register_and_get():
    registry = WorkerRegistry()
    collector = FeedbackCollector()
    registry.register("feedback", collector)

    assert registry.get("feedback") is collector
    assert "feedback" in registry
    assert registry.names() == ["feedback"]


def test_unknown_worker_not_found():
    with pytest.raises(NotFound) as exc:
        WorkerRegistry().get("diagnosis")
    assert exc.value.identifier == "diagnosis"


def test_rejects_non_workers():
    with pytest.raises(TypeError):
        WorkerRegistry().register("analysis", object())


def test_get_typed_checks_variant():
    registry = WorkerRegistry()
    registry.register("analysis", FeedbackCollector())

    with pytest.raises(TypeError):
        registry.get_typed("analysis", AnalysisWorker)


def test_re_register_replaces():
    registry = WorkerRegistry()
    first, second = FeedbackCollector(), FeedbackCollector()
    registry.register("feedback", first)
    registry.register("feedback", second)

    assert registry.get("feedback") is second


def test_default_registry_covers_every_stage(provider):
    registry = build_default_registry(provider)

    assert set(registry.names()) == {
        "analysis",
        "diagnosis",
        "engagement",
        "scheduling",
        "feedback",
        "insights",
    }
    assert isinstance(registry.get_typed("diagnosis", DiagnosisWorker), DiagnosisWorker)


def test_abstract_worker_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AnalysisWorker()
