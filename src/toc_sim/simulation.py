"""Simulation facade: one line, its metrics and its ledger, kept in lockstep."""

import logging
from typing import Optional

from toc_sim.ledger import Ledger
from toc_sim.line import FrameResult, Line
from toc_sim.metrics import MetricsTracker
from toc_sim.models import FrameSnapshot, LineConfig, StationView
from toc_sim.random_service import RandomService, Sampler

logger = logging.getLogger(__name__)


class Simulation:
    """Runs the Line / MetricsTracker / Ledger trio for a host.

    The host calls ``step`` once per frame and reads ``snapshot()``; it never
    touches the components' state directly. ``reset`` reinitializes all
    three together.
    """

    def __init__(
        self,
        config: Optional[LineConfig] = None,
        random_service: Optional[Sampler] = None,
        seed: Optional[int] = None,
    ):
        self.config = config or LineConfig()
        self.random = random_service or RandomService(seed)
        self.metrics = MetricsTracker(
            num_stations=self.config.station_count,
            num_buffers=self.config.station_count + 1,
            sample_interval_ms=self.config.sample_interval_ms,
        )
        self.ledger = Ledger(self.config.economics)
        self.line = Line(self.config, metrics=self.metrics, random_service=self.random)
        self.is_running = False

    @property
    def is_over(self) -> bool:
        return self.ledger.is_insolvent

    def start(self) -> None:
        if not self.is_over:
            self.is_running = True

    def stop(self) -> None:
        self.is_running = False

    def toggle(self) -> bool:
        """Flip between running and paused. Returns the new running flag."""
        if self.is_running:
            self.stop()
        else:
            self.start()
        return self.is_running

    def step(self, delta_ms: float) -> FrameResult:
        """Advance one frame if running; halts everything on insolvency."""
        if not self.is_running or self.is_over:
            return FrameResult(buffer_counts=self.line.buffer_counts())

        frame = self.line.update(delta_ms)
        if frame.delta_ms <= 0:
            return frame

        self.ledger.update(frame.delta_ms, frame.items_entered, frame.items_completed_at_sink)
        if self.ledger.is_insolvent:
            self.line.halt()
            self.is_running = False
        return frame

    def reset(self) -> None:
        self.line.reset()
        self.metrics.reset()
        self.ledger.reset()
        self.is_running = False

    def snapshot(self) -> FrameSnapshot:
        stations = [
            StationView(
                index=s.index,
                state=s.state,
                is_processing=s.is_processing,
                progress=s.progress,
                rate_per_minute=s.rate_per_minute,
                variance_percent=s.variance_percent,
                utilization_pct=self.metrics.get_utilization(s.index),
                throughput_per_minute=self.metrics.get_station_throughput(s.index),
            )
            for s in self.line.stations
        ]
        return FrameSnapshot(
            elapsed_ms=self.line.elapsed_ms,
            is_running=self.is_running,
            is_over=self.is_over,
            buffer_counts=self.line.buffer_counts(),
            stations=stations,
            cash=self.ledger.cash,
            cash_status=self.ledger.cash_status(),
            total_revenue=self.ledger.total_revenue,
            total_material_cost=self.ledger.total_material_cost,
            total_operating_cost=self.ledger.total_operating_cost,
            metrics=self.metrics.get_metrics(include_samples=False),
        )
