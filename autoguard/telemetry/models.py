"""Data models for vehicle telemetry and maintenance history."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TelemetryModel(BaseModel):
    """Accepts both camelCase feed keys and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VehicleProfile(TelemetryModel):
    id: str
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    current_mileage: float = Field(ge=0)
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    owner_phone: Optional[str] = None
    city: Optional[str] = None


class SensorReadings(TelemetryModel):
    """Instantaneous sensor values. The five scored channels are required."""

    model_config = ConfigDict(allow_inf_nan=False)

    engine_temp: float
    oil_pressure: float
    brake_health: float
    battery_voltage: float
    tire_pressure: float
    fuel_level: Optional[float] = None
    rpm: Optional[float] = None
    speed: Optional[float] = None


class SensorSnapshot(TelemetryModel):
    vehicle_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    mileage: Optional[float] = None
    sensors: SensorReadings
    diagnostic_codes: List[str] = Field(default_factory=list)
    alerts: List[str] = Field(default_factory=list)


class RcaData(TelemetryModel):
    """Root-cause and corrective/preventive action notes for a repair."""

    root_cause: Optional[str] = None
    corrective_action: Optional[str] = None
    preventive_action: Optional[str] = None
    severity: str = "medium"
    manufacturing_feedback: Optional[str] = None


class MaintenanceRecord(TelemetryModel):
    vehicle_id: Optional[str] = None
    service_date: Optional[date] = None
    service_type: Optional[str] = None
    issue_reported: Optional[str] = None
    mileage_at_service: Optional[float] = None
    cost: float = 0.0
    diagnostic_codes: List[str] = Field(default_factory=list)
    service_center_location: Optional[str] = None
    rca_data: Optional[RcaData] = None

    @field_validator("service_date", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    def mentions(self, keyword: str) -> bool:
        """Return ``True`` if the reported issue mentions ``keyword``."""
        issue = self.issue_reported
        if not issue or issue == "None":
            return False
        return keyword.lower() in issue.lower()

    @property
    def has_issue(self) -> bool:
        return bool(self.issue_reported) and self.issue_reported != "None"
