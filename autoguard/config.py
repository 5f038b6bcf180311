from __future__ import annotations

import os
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_ACTIVITY_LOG_CAPACITY,
    DEFAULT_ANOMALY_LOG_CAPACITY,
    DEFAULT_WORKFLOW_TYPE,
    ORCHESTRATOR_ACTOR,
)


class ComponentRule(BaseModel):
    """Scoring weights for one vehicle component."""

    component: str
    window_days: int
    mileage_cutoff: Optional[float] = None
    mileage_bonus: float = 0.0
    history_keyword: Optional[str] = None
    recurrence_increment: float = 0.0
    dtc_codes: List[str] = Field(default_factory=list)
    dtc_bonus: float = 0.0


class ScoringConfig(BaseModel):
    """Policy values for the risk scoring engine."""

    include_threshold: float = 0.3
    high_threshold: float = 0.5
    critical_threshold: float = 0.7
    confidence_threshold: float = 0.6
    daily_usage: float = 15.0
    precision: int = 2
    default_rul_distance: float = 10000.0
    default_rul_days: int = 120

    engine_temp_limit: float = 100.0
    engine_temp_divisor: float = 50.0
    brake_health_limit: float = 70.0
    brake_health_divisor: float = 70.0
    battery_voltage_limit: float = 12.0
    battery_voltage_divisor: float = 2.0
    oil_pressure_limit: float = 70.0
    oil_pressure_divisor: float = 70.0
    oil_service_interval: float = 5000.0
    oil_overdue_bonus: float = 0.3
    oil_unrecorded_bonus: float = 0.4

    engine: ComponentRule = ComponentRule(
        component="Engine",
        window_days=60,
        mileage_cutoff=80000,
        mileage_bonus=0.2,
        history_keyword="engine",
        recurrence_increment=0.1,
        dtc_codes=["P0300", "P0420", "P0171", "P0128", "P0217", "P0118"],
        dtc_bonus=0.25,
    )
    brake: ComponentRule = ComponentRule(
        component="Brake System",
        window_days=45,
        mileage_cutoff=50000,
        mileage_bonus=0.15,
        history_keyword="brake",
        recurrence_increment=0.15,
    )
    battery: ComponentRule = ComponentRule(
        component="Battery",
        window_days=30,
        mileage_cutoff=60000,
        mileage_bonus=0.3,
        history_keyword="battery",
        recurrence_increment=0.2,
    )
    oil: ComponentRule = ComponentRule(component="Oil System", window_days=40)


class ActorPolicy(BaseModel):
    """Declared behavior for one actor."""

    allowed_actions: List[str] = Field(default_factory=list)
    allowed_data_access: List[str] = Field(default_factory=list)
    max_actions_per_minute: Optional[int] = None


class MonitorConfig(BaseModel):
    """Behavior monitor settings."""

    orchestrator_actor: str = ORCHESTRATOR_ACTOR
    anomaly_log_capacity: int = DEFAULT_ANOMALY_LOG_CAPACITY
    rate_window_seconds: float = 60.0
    default_max_actions_per_minute: Optional[int] = None
    active_hours_start: int = 6
    active_hours_end: int = 23
    workflow_control_marker: str = "workflow"
    dashboard_recent: int = 10
    # ``None`` means the built-in policy set is used
    policies: Optional[Dict[str, ActorPolicy]] = None


class OrchestratorConfig(BaseModel):
    """Orchestrator settings."""

    workflow_type: str = DEFAULT_WORKFLOW_TYPE
    activity_log_capacity: int = DEFAULT_ACTIVITY_LOG_CAPACITY


class AutoguardConfig(BaseModel):
    """Top-level configuration model."""

    scoring: ScoringConfig = ScoringConfig()
    monitor: MonitorConfig = MonitorConfig()
    orchestrator: OrchestratorConfig = OrchestratorConfig()
    fleet_path: Optional[str] = None


def load_config(path: Optional[str] = None) -> AutoguardConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to AUTOGUARD_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("AUTOGUARD_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = AutoguardConfig(**data)
    else:
        config = AutoguardConfig()

    env_fleet_path = os.getenv("AUTOGUARD_FLEET_PATH")
    if env_fleet_path:
        config.fleet_path = env_fleet_path
    return config
