"""Telemetry and maintenance-history analysis worker."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Callable, List, Optional

from ..contracts import (
    AnalysisResult,
    MaintenanceAnalysis,
    RecurringIssue,
    SensorAnalysis,
    SensorAnomaly,
)
from ..telemetry.models import MaintenanceRecord, SensorSnapshot, VehicleProfile
from ..telemetry.provider import TelemetryProvider
from .base import AnalysisWorker

logger = logging.getLogger(__name__)

SERVICE_INTERVAL_DAYS = 90
SERVICE_INTERVAL_DISTANCE = 5000

# (anomaly type, reading, limit, "above"/"below", severity)
SENSOR_LIMITS = [
    ("HIGH_ENGINE_TEMP", "engine_temp", 100.0, "above", "high"),
    ("LOW_OIL_PRESSURE", "oil_pressure", 70.0, "below", "high"),
    ("LOW_BRAKE_HEALTH", "brake_health", 70.0, "below", "medium"),
    ("LOW_BATTERY_VOLTAGE", "battery_voltage", 12.0, "below", "medium"),
    ("LOW_TIRE_PRESSURE", "tire_pressure", 28.0, "below", "low"),
]


class TelemetryAnalysisWorker(AnalysisWorker):
    """Flags out-of-range sensor readings and overdue service.

    Diagnosis is required when any reading is out of range, a trouble code is
    present, or the vehicle is due for service.
    """

    def __init__(
        self,
        provider: TelemetryProvider,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._provider = provider
        self._today = today or date.today

    async def analyze(self, vehicle_id: str) -> AnalysisResult:
        logger.info(f"Analyzing vehicle {vehicle_id}")
        vehicle = self._provider.get_vehicle(vehicle_id)
        snapshot = self._provider.get_latest_snapshot(vehicle_id)
        history = self._provider.get_maintenance_history(vehicle_id)

        sensor_analysis = self.analyze_sensors(snapshot)
        maintenance_analysis = self.analyze_maintenance(history, vehicle)
        requires_diagnosis = (
            sensor_analysis.has_anomalies
            or bool(sensor_analysis.diagnostic_codes)
            or maintenance_analysis.is_service_due
        )
        logger.debug(
            f"Analysis for {vehicle_id}: {len(sensor_analysis.anomalies)} anomalies, "
            f"service due={maintenance_analysis.is_service_due}"
        )
        return AnalysisResult(
            vehicle_id=vehicle_id,
            vehicle=vehicle,
            sensor_analysis=sensor_analysis,
            maintenance_analysis=maintenance_analysis,
            requires_diagnosis=requires_diagnosis,
        )

    @staticmethod
    def analyze_sensors(snapshot: SensorSnapshot) -> SensorAnalysis:
        readings = snapshot.sensors.model_dump()
        anomalies: List[SensorAnomaly] = []
        for kind, field, limit, direction, severity in SENSOR_LIMITS:
            value = readings[field]
            out_of_range = value > limit if direction == "above" else value < limit
            if out_of_range:
                anomalies.append(
                    SensorAnomaly(type=kind, value=value, threshold=limit, severity=severity)
                )
        return SensorAnalysis(
            has_anomalies=bool(anomalies),
            anomalies=anomalies,
            diagnostic_codes=list(snapshot.diagnostic_codes),
            readings=readings,
        )

    def analyze_maintenance(
        self, history: List[MaintenanceRecord], vehicle: VehicleProfile
    ) -> MaintenanceAnalysis:
        if not history:
            return MaintenanceAnalysis(total_services=0, is_service_due=True)

        last = max(
            history,
            key=lambda r: (r.service_date or date.min, r.mileage_at_service or 0),
        )
        days_since = (
            (self._today() - last.service_date).days if last.service_date else None
        )
        mileage_since = (
            vehicle.current_mileage - last.mileage_at_service
            if last.mileage_at_service is not None
            else None
        )
        is_due = (days_since is None or days_since > SERVICE_INTERVAL_DAYS) or (
            mileage_since is not None and mileage_since > SERVICE_INTERVAL_DISTANCE
        )

        counts = Counter(r.issue_reported for r in history if r.has_issue)
        recurring = [
            RecurringIssue(issue=issue, count=count)
            for issue, count in counts.items()
            if count > 1
        ]
        return MaintenanceAnalysis(
            total_services=len(history),
            last_service_date=last.service_date,
            days_since_last_service=days_since,
            mileage_since_service=mileage_since,
            is_service_due=is_due,
            recurring_issues=recurring,
            average_service_cost=sum(r.cost for r in history) // len(history),
        )
