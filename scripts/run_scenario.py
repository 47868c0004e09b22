"""CLI for running offline LiftBank scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from simulation import BankConfig, Building, ScheduledCall, Simulation


def build_simulation(config: Dict) -> Simulation:
    bank = BankConfig.from_dict(config.get("building", {}))
    building = Building(bank)

    calls = [
        ScheduledCall(
            time=c.get("time", 0),
            floor=c["floor"],
            direction=c.get("direction"),
        )
        for c in config.get("calls", [])
    ]

    return Simulation(
        building=building,
        arrival_rate_per_floor=config.get("arrival_rate_per_floor", 0.0),
        scheduled_calls=calls,
        random_seed=config.get("random_seed"),
        metrics_hook_interval=config.get("metrics_hook_interval", 10),
    )


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    duration = config.get("duration")
    snapshots: List[Dict] = []
    simulation.on_event("metrics", lambda payload: snapshots.append(asdict(payload["metrics"])))

    if duration is None:
        simulation.run_until_idle(config.get("max_ticks", 10_000))
    else:
        simulation.run(duration)
    return snapshots


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write metrics snapshots as JSON",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = json.loads(args.config.read_text())
    try:
        simulation = build_simulation(config)
    except (KeyError, ValueError) as exc:
        parser.error(f"invalid scenario {args.config}: {exc}")
    snapshots = run_simulation(simulation, config)

    final_metrics = asdict(simulation.metrics.snapshot(simulation.current_time))
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "duration": simulation.current_time,
        "selector": simulation.building.selector_name,
        "final_metrics": final_metrics,
        "final_state": simulation.building.snapshot(),
        "metrics_over_time": snapshots,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Selector: {results['selector']}")
    print(f"Duration: {results['duration']} ticks")
    print("Final metrics:")
    for key, value in final_metrics.items():
        print(f"  {key}: {value}")
    if args.output:
        print(f"Saved metrics to {args.output}")


if __name__ == "__main__":
    main()
