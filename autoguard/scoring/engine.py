"""Deterministic component failure scoring.

Each component's probability is the clamped sum of independent terms:

* a threshold deviation term (how far a sensor sits past its limit, scaled
  by a fixed divisor),
* a mileage term (a constant once mileage passes a cutoff; for the oil
  system the distance since the last oil service is used instead),
* a recurrence term (prior matching issues times a fixed increment),
* for the engine, a bonus when a current trouble code is engine related.

Components at or below the inclusion threshold are left out of the result.
The engine performs no I/O and keeps no state between calls.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import ComponentRule, ScoringConfig
from ..errors import InvalidInput
from ..telemetry.models import (
    MaintenanceRecord,
    SensorReadings,
    SensorSnapshot,
    VehicleProfile,
)
from .models import (
    ComponentRiskAssessment,
    DiagnosisResult,
    FailurePattern,
    RemainingUsefulLife,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], value: Any, label: str) -> ModelT:
    if value is None:
        raise InvalidInput(f"{label} is required")
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise InvalidInput(f"Invalid {label}: {e}") from e


class RiskScoringEngine:
    """Converts telemetry and history into a :class:`DiagnosisResult`."""

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()

    # ------------------------------------------------------------------
    def predict(
        self,
        vehicle: VehicleProfile | Dict[str, Any],
        sensor_snapshot: SensorSnapshot | Dict[str, Any],
        history: Optional[Iterable[MaintenanceRecord | Dict[str, Any]]] = None,
    ) -> DiagnosisResult:
        """Score every component and build the diagnosis.

        Raises:
            InvalidInput: If the vehicle or sensor snapshot is missing or
                malformed, including missing sensor channels.
        """
        vehicle = _coerce(VehicleProfile, vehicle, "vehicle profile")
        snapshot = _coerce(SensorSnapshot, sensor_snapshot, "sensor snapshot")
        records = [
            _coerce(MaintenanceRecord, record, "maintenance record")
            for record in (history or [])
        ]

        mileage = vehicle.current_mileage
        sensors = snapshot.sensors
        assessments = [
            self.engine_risk(sensors, snapshot.diagnostic_codes, mileage, records),
            self.brake_risk(sensors, mileage, records),
            self.battery_risk(sensors, mileage, records),
            self.oil_risk(sensors, mileage, records),
        ]
        predictions = sorted(
            (a for a in assessments if a.probability > self.config.include_threshold),
            key=lambda a: a.probability,
            reverse=True,
        )

        return DiagnosisResult(
            vehicle_id=vehicle.id,
            predictions=predictions,
            overall_risk=self.overall_risk(predictions),
            remaining_useful_life=self.remaining_useful_life(predictions, mileage),
            recommended_action=self.recommended_action(predictions),
        )

    # ------------------------------------------------------------------
    # Component scores
    def engine_risk(
        self,
        sensors: SensorReadings,
        diagnostic_codes: Sequence[str],
        mileage: float,
        history: List[MaintenanceRecord],
    ) -> ComponentRiskAssessment:
        cfg = self.config
        rule = cfg.engine
        deviation = 0.0
        if sensors.engine_temp > cfg.engine_temp_limit:
            deviation = (sensors.engine_temp - cfg.engine_temp_limit) / cfg.engine_temp_divisor
        issues = self._recurrence(rule, history)
        dtc_detected = any(code in rule.dtc_codes for code in diagnostic_codes)
        terms = [
            deviation,
            self._mileage_bonus(rule, mileage),
            issues * rule.recurrence_increment,
            rule.dtc_bonus if dtc_detected else 0.0,
        ]
        return self._assess(
            rule,
            terms,
            {
                "temperature": sensors.engine_temp,
                "mileage": mileage,
                "historical_issues": issues,
                "dtc_detected": dtc_detected,
            },
        )

    def brake_risk(
        self, sensors: SensorReadings, mileage: float, history: List[MaintenanceRecord]
    ) -> ComponentRiskAssessment:
        cfg = self.config
        rule = cfg.brake
        deviation = 0.0
        if sensors.brake_health < cfg.brake_health_limit:
            deviation = (cfg.brake_health_limit - sensors.brake_health) / cfg.brake_health_divisor
        issues = self._recurrence(rule, history)
        terms = [
            deviation,
            self._mileage_bonus(rule, mileage),
            issues * rule.recurrence_increment,
        ]
        return self._assess(
            rule,
            terms,
            {
                "brake_health": sensors.brake_health,
                "mileage": mileage,
                "historical_issues": issues,
            },
        )

    def battery_risk(
        self, sensors: SensorReadings, mileage: float, history: List[MaintenanceRecord]
    ) -> ComponentRiskAssessment:
        cfg = self.config
        rule = cfg.battery
        deviation = 0.0
        if sensors.battery_voltage < cfg.battery_voltage_limit:
            deviation = (
                cfg.battery_voltage_limit - sensors.battery_voltage
            ) / cfg.battery_voltage_divisor
        issues = self._recurrence(rule, history)
        terms = [
            deviation,
            self._mileage_bonus(rule, mileage),
            issues * rule.recurrence_increment,
        ]
        return self._assess(
            rule,
            terms,
            {
                "voltage": sensors.battery_voltage,
                "mileage": mileage,
                "historical_issues": issues,
            },
        )

    def oil_risk(
        self, sensors: SensorReadings, mileage: float, history: List[MaintenanceRecord]
    ) -> ComponentRiskAssessment:
        cfg = self.config
        rule = cfg.oil
        deviation = 0.0
        if sensors.oil_pressure < cfg.oil_pressure_limit:
            deviation = (cfg.oil_pressure_limit - sensors.oil_pressure) / cfg.oil_pressure_divisor

        oil_services = [
            r for r in history if r.service_type and "oil" in r.service_type.lower()
        ]
        since_service: Optional[float] = None
        if oil_services:
            last = max(
                oil_services,
                key=lambda r: (r.service_date or date.min, r.mileage_at_service or 0),
            )
            if last.mileage_at_service is not None:
                since_service = mileage - last.mileage_at_service
            interval_term = (
                cfg.oil_overdue_bonus
                if since_service is not None and since_service > cfg.oil_service_interval
                else 0.0
            )
        else:
            interval_term = cfg.oil_unrecorded_bonus

        issues = self._recurrence(rule, history)
        terms = [deviation, interval_term, issues * rule.recurrence_increment]
        return self._assess(
            rule,
            terms,
            {
                "oil_pressure": sensors.oil_pressure,
                "mileage": mileage,
                "mileage_since_oil_service": since_service,
                "oil_service_on_record": bool(oil_services),
            },
        )

    # ------------------------------------------------------------------
    # Aggregates
    def bucket(self, probability: float) -> str:
        cfg = self.config
        if probability > cfg.critical_threshold:
            return "critical"
        if probability > cfg.high_threshold:
            return "high"
        if probability > cfg.include_threshold:
            return "medium"
        return "low"

    def overall_risk(self, predictions: Sequence[ComponentRiskAssessment]) -> str:
        if not predictions:
            return "low"
        return self.bucket(_mean(p.probability for p in predictions))

    def remaining_useful_life(
        self, predictions: Sequence[ComponentRiskAssessment], mileage: float
    ) -> RemainingUsefulLife:
        cfg = self.config
        if not predictions:
            return RemainingUsefulLife(
                estimated_distance=mileage + cfg.default_rul_distance,
                estimated_days=cfg.default_rul_days,
                confidence="low",
            )

        min_days = min(p.estimated_days_to_failure for p in predictions)
        avg_probability = _mean(p.probability for p in predictions)
        return RemainingUsefulLife(
            estimated_distance=mileage + min_days * cfg.daily_usage,
            estimated_days=min_days,
            confidence="high" if avg_probability > cfg.confidence_threshold else "medium",
        )

    def recommended_action(self, predictions: Sequence[ComponentRiskAssessment]) -> str:
        if not predictions:
            return "Continue regular maintenance schedule"

        critical = [p.component for p in predictions if p.severity == "critical"]
        if critical:
            return f"URGENT: Schedule immediate service for {', '.join(critical)}"

        high = [p.component for p in predictions if p.severity == "high"]
        if high:
            return f"Schedule service within 7 days for {', '.join(high)}"

        top = predictions[0]
        return (
            f"Schedule maintenance for {top.component} "
            f"within {top.estimated_days_to_failure} days"
        )

    # ------------------------------------------------------------------
    def _assess(
        self, rule: ComponentRule, terms: Sequence[float], factors: Dict[str, Any]
    ) -> ComponentRiskAssessment:
        probability = round(min(max(sum(terms), 0.0), 1.0), self.config.precision)
        days = math.floor(round((1 - probability) * rule.window_days, 6))
        severity = self.bucket(probability)
        return ComponentRiskAssessment(
            component=rule.component,
            probability=probability,
            severity="medium" if severity == "low" else severity,
            estimated_days_to_failure=days,
            factors=factors,
        )

    @staticmethod
    def _mileage_bonus(rule: ComponentRule, mileage: float) -> float:
        if rule.mileage_cutoff is not None and mileage > rule.mileage_cutoff:
            return rule.mileage_bonus
        return 0.0

    @staticmethod
    def _recurrence(rule: ComponentRule, history: List[MaintenanceRecord]) -> int:
        if not rule.history_keyword:
            return 0
        return sum(1 for r in history if r.mentions(rule.history_keyword))


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values)


def extract_failure_patterns(
    records: Iterable[MaintenanceRecord | Dict[str, Any]],
) -> Dict[str, FailurePattern]:
    """Summarise reported issues across a set of maintenance records."""
    patterns: Dict[str, FailurePattern] = {}
    totals: Dict[str, float] = {}
    codes: Dict[str, set] = {}

    for raw in records:
        record = _coerce(MaintenanceRecord, raw, "maintenance record")
        if not record.has_issue:
            continue
        issue = record.issue_reported
        pattern = patterns.get(issue)
        if pattern is None:
            pattern = FailurePattern(
                issue=issue,
                severity=record.rca_data.severity if record.rca_data else "medium",
            )
            patterns[issue] = pattern
            totals[issue] = 0.0
            codes[issue] = set()
        pattern.occurrences += 1
        totals[issue] += record.mileage_at_service or 0
        codes[issue].update(record.diagnostic_codes)

    for issue, pattern in patterns.items():
        pattern.avg_mileage = math.floor(totals[issue] / pattern.occurrences)
        pattern.dtc_codes = sorted(codes[issue])
    return patterns


_default_engine = RiskScoringEngine()


def predict(
    vehicle: VehicleProfile | Dict[str, Any],
    sensor_snapshot: SensorSnapshot | Dict[str, Any],
    history: Optional[Iterable[MaintenanceRecord | Dict[str, Any]]] = None,
) -> DiagnosisResult:
    """Score with the default policy values."""
    return _default_engine.predict(vehicle, sensor_snapshot, history)
