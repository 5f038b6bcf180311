"""Read-only access to vehicle profiles, sensor snapshots and history."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Protocol

import yaml

from ..errors import NotFound
from .models import MaintenanceRecord, SensorSnapshot, VehicleProfile

logger = logging.getLogger(__name__)


class TelemetryProvider(Protocol):
    """Protocol for vehicle data sources consumed by the workers."""

    def get_vehicle(self, vehicle_id: str) -> VehicleProfile:
        """Return the vehicle profile or raise ``NotFound``."""

    def get_latest_snapshot(self, vehicle_id: str) -> SensorSnapshot:
        """Return the newest sensor snapshot or raise ``NotFound``."""

    def get_maintenance_history(self, vehicle_id: str) -> list[MaintenanceRecord]:
        """Return the maintenance records for a vehicle."""

    def list_maintenance_records(self) -> list[MaintenanceRecord]:
        """Return every maintenance record across the fleet."""


class InMemoryTelemetryProvider(TelemetryProvider):
    """Serve telemetry from data held in local memory.

    Useful for tests, the CLI and demos. Snapshots are kept per vehicle and
    the newest one (by timestamp) is treated as current.
    """

    def __init__(
        self,
        vehicles: Iterable[VehicleProfile] = (),
        snapshots: Iterable[SensorSnapshot] = (),
        records: Iterable[MaintenanceRecord] = (),
    ) -> None:
        self._vehicles: Dict[str, VehicleProfile] = {v.id: v for v in vehicles}
        self._snapshots: Dict[str, List[SensorSnapshot]] = {}
        for snapshot in snapshots:
            self._snapshots.setdefault(snapshot.vehicle_id, []).append(snapshot)
        self._records: List[MaintenanceRecord] = list(records)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "InMemoryTelemetryProvider":
        """Build a provider from a fleet document.

        The document holds ``vehicles``, ``sensors`` and ``maintenance`` lists
        of camelCase or snake_case records.
        """
        vehicles = [VehicleProfile.model_validate(v) for v in data.get("vehicles") or []]
        snapshots = [SensorSnapshot.model_validate(s) for s in data.get("sensors") or []]
        records = [
            MaintenanceRecord.model_validate(r) for r in data.get("maintenance") or []
        ]
        return cls(vehicles, snapshots, records)

    @classmethod
    def from_file(cls, path: str | Path) -> "InMemoryTelemetryProvider":
        """Load a YAML or JSON fleet document."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        provider = cls.from_mapping(data)
        logger.info(
            f"Loaded fleet data from {path}: {len(provider._vehicles)} vehicles, "
            f"{len(provider._records)} maintenance records"
        )
        return provider

    # ------------------------------------------------------------------
    def get_vehicle(self, vehicle_id: str) -> VehicleProfile:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise NotFound("Vehicle", vehicle_id)
        return vehicle

    def get_latest_snapshot(self, vehicle_id: str) -> SensorSnapshot:
        self.get_vehicle(vehicle_id)
        snapshots = self._snapshots.get(vehicle_id)
        if not snapshots:
            raise NotFound("Sensor snapshot", vehicle_id)
        return max(
            snapshots,
            key=lambda s: s.timestamp.timestamp() if s.timestamp else float("-inf"),
        )

    def get_maintenance_history(self, vehicle_id: str) -> list[MaintenanceRecord]:
        self.get_vehicle(vehicle_id)
        return [r for r in self._records if r.vehicle_id == vehicle_id]

    def list_maintenance_records(self) -> list[MaintenanceRecord]:
        return list(self._records)

    def list_vehicle_ids(self) -> list[str]:
        return list(self._vehicles)
