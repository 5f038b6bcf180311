"""Example running the maintenance pipeline for every vehicle in a fleet file."""

import asyncio
import logging
import sys

from autoguard import (
    InMemoryTelemetryProvider,
    Orchestrator,
    WorkerFailure,
    build_default_registry,
    load_config,
)


async def main():
    fleet_path = sys.argv[1] if len(sys.argv) > 1 else "guides/fleet_example.yaml"

    config = load_config()
    provider = InMemoryTelemetryProvider.from_file(fleet_path)
    orchestrator = Orchestrator(registry=build_default_registry(provider, config), config=config)

    for vehicle_id in provider.list_vehicle_ids():
        try:
            workflow = await orchestrator.orchestrate(vehicle_id)
        except WorkerFailure as e:
            print(f"{vehicle_id}: failed at {e.stage}: {e.original}")
            continue
        print(f"{vehicle_id}: {workflow.status.value}")
        print(workflow.result["summary"])
        print()

    dashboard = orchestrator.monitor.get_security_dashboard()
    print(f"Anomalies recorded: {dashboard.total_anomalies}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
