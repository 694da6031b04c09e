"""Headless simulation engine driven from YAML run configs."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from toc_sim.loader import ConfigLoader, ResolvedConfig, RunConfig
from toc_sim.models import LineConfig
from toc_sim.random_service import Sampler
from toc_sim.simulation import Simulation

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Runs a line at a fixed frame size and collects telemetry."""

    def __init__(self, config_dir: Path | str = "config"):
        """Initialize the simulation engine.

        Args:
            config_dir: Path to configuration directory
        """
        self.loader = ConfigLoader(config_dir)

    def run(self, run_name: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Run simulation by run config name and return (telemetry_df, stations_df)."""
        resolved = self.loader.resolve_run(run_name)
        return self.run_resolved(resolved)

    def run_resolved(self, resolved: ResolvedConfig) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Run simulation from a fully resolved configuration."""
        line_config = self.loader.build_line_config(resolved)
        return self.run_config(resolved.run, line_config)

    def run_config(
        self,
        run: RunConfig,
        line_config: LineConfig,
        random_service: Optional[Sampler] = None,
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Run simulation from a RunConfig and a pre-built LineConfig (programmatic use)."""
        # Fields may have been edited since construction
        run.validate()
        sim = Simulation(line_config, random_service=random_service, seed=run.random_seed)
        sim.start()

        duration_ms = run.duration_sec * 1000.0
        telemetry: List[dict] = []
        prev = {"entered": 0, "shipped": 0}
        next_sample = 0.0

        logger.info(
            "Starting simulation: %s (%s, %.0f s, %.0f ms frames)",
            run.name,
            line_config.name,
            run.duration_sec,
            run.frame_ms,
        )

        # 1. Initial state
        telemetry.append(self._snapshot(sim, prev))
        next_sample += run.telemetry_interval_ms

        # 2. Frame loop
        while sim.line.elapsed_ms < duration_ms and not sim.is_over:
            delta = min(run.frame_ms, duration_ms - sim.line.elapsed_ms)
            sim.step(delta)
            if sim.line.elapsed_ms >= next_sample:
                telemetry.append(self._snapshot(sim, prev))
                while next_sample <= sim.line.elapsed_ms:
                    next_sample += run.telemetry_interval_ms

        # 3. Closing row (end of run or moment of insolvency)
        if telemetry[-1]["time_ms"] != sim.line.elapsed_ms:
            telemetry.append(self._snapshot(sim, prev))

        if sim.is_over:
            logger.info("Run %s went insolvent at %.1f s", run.name, sim.line.elapsed_ms / 1000.0)
        else:
            logger.info(
                "Run %s finished: %d shipped, cash %.2f",
                run.name,
                sim.line.total_completed,
                sim.ledger.cash,
            )

        return self._compile_results(sim, telemetry)

    def _snapshot(self, sim: Simulation, prev: Dict[str, int]) -> dict:
        """Capture one telemetry row (incremental flow, current levels)."""
        line = sim.line
        metrics = sim.metrics.get_metrics(include_samples=False)
        ledger = sim.ledger

        snapshot = {
            "time_ms": line.elapsed_ms,
            "time_sec": round(line.elapsed_ms / 1000.0, 3),
        }

        # Flow (delta from previous row)
        snapshot["units_entered"] = line.total_entered - prev["entered"]
        snapshot["units_shipped"] = line.total_completed - prev["shipped"]
        prev["entered"] = line.total_entered
        prev["shipped"] = line.total_completed

        snapshot["total_shipped"] = line.total_completed
        snapshot["wip"] = metrics.total_wip
        snapshot["throughput_per_min"] = round(metrics.throughput_per_minute, 3)
        snapshot["p50_lead_time_ms"] = metrics.lead_time.p50_lead_time
        snapshot["p90_lead_time_ms"] = metrics.lead_time.p90_lead_time

        # Economics (running totals)
        snapshot["cash"] = round(ledger.cash, 2)
        snapshot["revenue"] = round(ledger.total_revenue, 2)
        snapshot["material_cost"] = round(ledger.total_material_cost, 2)
        snapshot["operating_cost"] = round(ledger.total_operating_cost, 2)
        snapshot["cash_status"] = ledger.cash_status().value

        # Buffer levels and station states (current values)
        for buf in line.buffers:
            snapshot[f"{buf.label}_level"] = buf.count
        for station in line.stations:
            snapshot[f"S{station.index + 1}_state"] = station.state.value

        return snapshot

    def _compile_results(
        self, sim: Simulation, telemetry: List[dict]
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Compile DataFrames from simulation data."""
        # 1. Telemetry (time series)
        df_telemetry = pd.DataFrame(telemetry)

        # 2. Per-station summary
        rows = []
        for station in sim.line.stations:
            i = station.index
            rows.append(
                {
                    "station": f"S{i + 1}",
                    "rate_per_minute": station.rate_per_minute,
                    "variance_percent": station.variance_percent,
                    "busy_pct": sim.metrics.get_utilization(i),
                    "starved_pct": sim.metrics.get_starved_percent(i),
                    "blocked_pct": sim.metrics.get_blocked_percent(i),
                    "items_processed": sim.metrics.get_items_processed(i),
                    "throughput_per_min": sim.metrics.get_station_throughput(i),
                    "avg_queue_in": sim.metrics.get_avg_buffer_length(i),
                    "max_queue_in": sim.metrics.get_max_buffer_length(i),
                }
            )
        df_stations = pd.DataFrame(rows)

        return df_telemetry, df_stations
