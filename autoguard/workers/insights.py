"""Fleet-wide RCA/CAPA pattern analysis for manufacturing."""

from __future__ import annotations

import logging
from typing import Dict, List

from ..contracts import InsightReport, IssuePattern
from ..telemetry.models import MaintenanceRecord
from ..telemetry.provider import TelemetryProvider
from .base import InsightsWorker

logger = logging.getLogger(__name__)

SEVERITY_WEIGHTS = {"critical": 1.0, "high": 0.7, "medium": 0.4, "low": 0.2}
UNKNOWN_SEVERITY_WEIGHT = 0.5


def impact_score(occurrences: int, vehicle_count: int, total_cost: float, severity: str) -> float:
    """Weighted impact of a pattern in [0, 1]; each term saturates at 1."""
    occurrence_score = min(occurrences / 10, 1.0)
    vehicle_score = min(vehicle_count / 5, 1.0)
    cost_score = min(total_cost / 50000, 1.0)
    weight = SEVERITY_WEIGHTS.get(severity, UNKNOWN_SEVERITY_WEIGHT)
    return round(
        occurrence_score * 0.3 + vehicle_score * 0.2 + cost_score * 0.2 + weight * 0.3, 2
    )


def aggregate_patterns(records: List[MaintenanceRecord]) -> List[IssuePattern]:
    """Group RCA-bearing records by reported issue, highest impact first."""
    groups: Dict[str, List[MaintenanceRecord]] = {}
    for record in records:
        if record.rca_data is None:
            continue
        groups.setdefault(record.issue_reported or "Unknown", []).append(record)

    patterns = []
    for issue, group in groups.items():
        # Root cause notes come from the first record of the group
        rca = group[0].rca_data
        vehicles = list(dict.fromkeys(r.vehicle_id for r in group if r.vehicle_id))
        codes = list(dict.fromkeys(c for r in group for c in r.diagnostic_codes))
        locations = list(
            dict.fromkeys(r.service_center_location for r in group if r.service_center_location)
        )
        total_cost = sum(r.cost for r in group)
        total_mileage = sum(r.mileage_at_service or 0 for r in group)
        patterns.append(
            IssuePattern(
                issue=issue,
                occurrences=len(group),
                affected_vehicles=vehicles,
                vehicle_count=len(vehicles),
                dtc_codes=codes,
                root_cause=rca.root_cause,
                corrective_action=rca.corrective_action,
                preventive_action=rca.preventive_action,
                severity=rca.severity,
                manufacturing_feedback=rca.manufacturing_feedback,
                total_cost=total_cost,
                avg_cost=int(total_cost // len(group)),
                avg_mileage=int(total_mileage // len(group)),
                affected_locations=locations,
                impact=impact_score(len(group), len(vehicles), total_cost, rca.severity),
            )
        )
    patterns.sort(key=lambda p: p.impact, reverse=True)
    return patterns


class ManufacturingInsightsWorker(InsightsWorker):
    def __init__(self, provider: TelemetryProvider) -> None:
        self._provider = provider

    async def refresh_insights(self) -> InsightReport:
        logger.info("Analyzing RCA patterns")
        records = self._provider.list_maintenance_records()
        rca_records = [r for r in records if r.rca_data is not None]
        patterns = aggregate_patterns(rca_records)
        logger.info(
            f"Analyzed {len(patterns)} unique issue patterns from {len(rca_records)} records"
        )
        return InsightReport(
            total_rca_records=len(rca_records),
            unique_issues=len(patterns),
            patterns=patterns,
        )
