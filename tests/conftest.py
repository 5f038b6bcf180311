"""Shared fleet data and wiring for autoguard tests.

Vehicles:

* ``V001``: healthy, recently serviced; needs no diagnosis.
* ``V002``: hot engine and low oil pressure at 85000 km, no history.
* ``V003``: worn brakes, weak battery, a misfire code and two prior brake
  repairs with RCA notes.
"""

from datetime import date, datetime, time, timedelta

import pytest
import yaml

from autoguard import (
    ActivityRecorder,
    BehaviorMonitor,
    InMemoryTelemetryProvider,
    Orchestrator,
    build_default_registry,
)


def _days_ago(days: int) -> str:
    return (date.today() - timedelta(days=days)).isoformat()


def noon() -> datetime:
    """Fixed clock inside active hours."""
    return datetime.combine(date.today(), time(12, 0)).astimezone()


@pytest.fixture
def fleet_data():
    return {
        "vehicles": [
            {
                "id": "V001",
                "make": "Maruti",
                "model": "Swift",
                "year": 2022,
                "currentMileage": 20000,
                "ownerId": "C001",
                "ownerName": "Asha Rao",
                "ownerPhone": "+91-9000000001",
                "city": "Mumbai",
            },
            {
                "id": "V002",
                "make": "Tata",
                "model": "Nexon",
                "year": 2018,
                "currentMileage": 85000,
                "ownerId": "C002",
                "ownerName": "Vikram Singh",
                "ownerPhone": "+91-9000000002",
                "city": "Delhi",
            },
            {
                "id": "V003",
                "make": "Hyundai",
                "model": "Creta",
                "year": 2020,
                "currentMileage": 60000,
                "ownerId": "C003",
                "ownerName": "Meera Iyer",
                "ownerPhone": "+91-9000000003",
                "city": "Pune",
            },
        ],
        "sensors": [
            {
                "vehicleId": "V001",
                "timestamp": "2024-05-01T08:00:00+00:00",
                "mileage": 20000,
                "sensors": {
                    "engineTemp": 90,
                    "oilPressure": 80,
                    "brakeHealth": 90,
                    "batteryVoltage": 12.6,
                    "tirePressure": 32,
                },
            },
            {
                # older reading, superseded by the next one
                "vehicleId": "V002",
                "timestamp": "2024-05-01T07:00:00+00:00",
                "sensors": {
                    "engineTemp": 92,
                    "oilPressure": 75,
                    "brakeHealth": 90,
                    "batteryVoltage": 12.8,
                    "tirePressure": 32,
                },
            },
            {
                "vehicleId": "V002",
                "timestamp": "2024-05-01T09:00:00+00:00",
                "sensors": {
                    "engineTemp": 130,
                    "oilPressure": 50,
                    "brakeHealth": 90,
                    "batteryVoltage": 12.8,
                    "tirePressure": 32,
                },
            },
            {
                "vehicleId": "V003",
                "timestamp": "2024-05-01T08:30:00+00:00",
                "sensors": {
                    "engineTemp": 95,
                    "oilPressure": 75,
                    "brakeHealth": 60,
                    "batteryVoltage": 11.5,
                    "tirePressure": 30,
                },
                "diagnosticCodes": ["P0300"],
            },
        ],
        "maintenance": [
            {
                "vehicleId": "V001",
                "serviceDate": _days_ago(10),
                "serviceType": "Oil Change",
                "issueReported": "None",
                "mileageAtService": 19000,
                "cost": 1500,
                "serviceCenterLocation": "Mumbai",
            },
            {
                "vehicleId": "V003",
                "serviceDate": _days_ago(200),
                "serviceType": "Brake Repair",
                "issueReported": "Brake pad wear",
                "mileageAtService": 40000,
                "cost": 4000,
                "diagnosticCodes": ["C0035"],
                "serviceCenterLocation": "Pune",
                "rcaData": {
                    "rootCause": "Pad compound below spec",
                    "correctiveAction": "Replace pads",
                    "preventiveAction": "Supplier audit",
                    "severity": "high",
                    "manufacturingFeedback": "Review supplier quality",
                },
            },
            {
                "vehicleId": "V003",
                "serviceDate": _days_ago(30),
                "serviceType": "Brake Repair",
                "issueReported": "Brake pad wear",
                "mileageAtService": 55000,
                "cost": 4000,
                "diagnosticCodes": ["C0035", "C0040"],
                "serviceCenterLocation": "Pune",
                "rcaData": {
                    "rootCause": "Pad compound below spec",
                    "severity": "high",
                },
            },
        ],
    }


@pytest.fixture
def provider(fleet_data):
    return InMemoryTelemetryProvider.from_mapping(fleet_data)


@pytest.fixture
def fleet_file(tmp_path, fleet_data):
    path = tmp_path / "fleet.yaml"
    path.write_text(yaml.safe_dump(fleet_data))
    return path


@pytest.fixture
def recorder():
    return ActivityRecorder(BehaviorMonitor(), clock=noon)


@pytest.fixture
def orchestrator(provider, recorder):
    return Orchestrator(registry=build_default_registry(provider), recorder=recorder)


@pytest.fixture
def at_noon():
    return noon()
