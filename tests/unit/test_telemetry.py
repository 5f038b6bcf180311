"""Tests for telemetry models and the in-memory provider."""

from datetime import date

import pytest

from autoguard.errors import NotFound
from autoguard.telemetry import InMemoryTelemetryProvider, MaintenanceRecord, VehicleProfile


def test_camel_and_snake_case_keys():
    camel = VehicleProfile.model_validate({"id": "V9", "currentMileage": 100, "ownerName": "A"})
    snake = VehicleProfile(id="V9", current_mileage=100, owner_name="A")

    assert camel == snake


def test_service_date_truncated():
    record = MaintenanceRecord.model_validate({"serviceDate": "2024-03-05T10:15:00Z"})
    assert record.service_date == date(2024, 3, 5)


def test_none_issue_is_not_an_issue():
    record = MaintenanceRecord(issue_reported="None")

    assert not record.has_issue
    assert not record.mentions("none")
    assert MaintenanceRecord(issue_reported="Engine misfire").mentions("ENGINE")


def test_latest_snapshot_by_timestamp(provider):
    snapshot = provider.get_latest_snapshot("V002")
    assert snapshot.sensors.engine_temp == 130


def test_unknown_vehicle(provider):
    with pytest.raises(NotFound):
        provider.get_vehicle("V999")
    with pytest.raises(NotFound):
        provider.get_latest_snapshot("V999")
    with pytest.raises(NotFound):
        provider.get_maintenance_history("V999")


def test_vehicle_without_snapshot():
    provider = InMemoryTelemetryProvider(vehicles=[VehicleProfile(id="V9", current_mileage=0)])

    with pytest.raises(NotFound) as exc:
        provider.get_latest_snapshot("V9")
    assert exc.value.entity == "Sensor snapshot"


def test_history_and_records(provider):
    assert len(provider.get_maintenance_history("V003")) == 2
    assert provider.get_maintenance_history("V002") == []
    assert len(provider.list_maintenance_records()) == 3
    assert provider.list_vehicle_ids() == ["V001", "V002", "V003"]


def test_from_file(fleet_file):
    provider = InMemoryTelemetryProvider.from_file(fleet_file)

    assert provider.get_vehicle("V003").city == "Pune"
    assert provider.get_latest_snapshot("V003").diagnostic_codes == ["P0300"]
