"""Vehicle telemetry inputs and providers."""

from .models import (
    MaintenanceRecord,
    RcaData,
    SensorReadings,
    SensorSnapshot,
    VehicleProfile,
)
from .provider import InMemoryTelemetryProvider, TelemetryProvider

__all__ = [
    "InMemoryTelemetryProvider",
    "MaintenanceRecord",
    "RcaData",
    "SensorReadings",
    "SensorSnapshot",
    "TelemetryProvider",
    "VehicleProfile",
]
