"""Serial production line: N stations interleaved with N+1 buffers.

    SOURCE -> [S0] -> B1 -> [S1] -> ... -> [S(N-1)] -> SINK

Buffers only hold counts. Lead time is still measured per unit because the
line is strictly FIFO: every unit leaving the source pushes one entry
timestamp, and every unit reaching the sink pops the oldest one.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from toc_sim.buffer import Buffer
from toc_sim.metrics import MetricsTracker
from toc_sim.models import LineConfig, StationState
from toc_sim.random_service import RandomService, Sampler
from toc_sim.station import Station, StationUpdate

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Per-frame output consumed by the metrics tracker and the ledger."""

    delta_ms: float = 0.0
    items_entered: int = 0
    items_completed_at_sink: int = 0
    station_updates: List[StationUpdate] = field(default_factory=list)
    buffer_counts: List[int] = field(default_factory=list)
    lead_times: List[float] = field(default_factory=list)


class Line:
    """Owns the stations and buffers of one line and the frame ordering."""

    def __init__(
        self,
        config: Optional[LineConfig] = None,
        metrics: Optional[MetricsTracker] = None,
        random_service: Optional[Sampler] = None,
    ):
        """Build the line.

        Args:
            config: Station list, source stock and service-time floor
            metrics: Tracker fed with station states, completions and lead times
            random_service: Sampler shared by all stations (fresh RandomService if None)
        """
        self.config = config or LineConfig()
        if not self.config.stations:
            raise ValueError("a line needs at least one station")

        self.metrics = metrics
        self.random = random_service or RandomService()

        n = len(self.config.stations)
        self.buffers: List[Buffer] = [
            Buffer(index=i, is_source=(i == 0), is_sink=(i == n)) for i in range(n + 1)
        ]
        self.stations: List[Station] = []
        for i, station_cfg in enumerate(self.config.stations):
            station = Station(
                index=i,
                config=station_cfg,
                random_service=self.random,
                min_service_ms=self.config.min_service_ms,
            )
            # Last station feeds the sink, which is never full
            if i == n - 1:
                station.set_output_capacity(0)
            station.connect(self.buffers[i], self.buffers[i + 1])
            self.stations.append(station)

        self._entry_times: Deque[float] = deque()
        self.reset()

    # --- Accessors ---

    @property
    def source(self) -> Buffer:
        return self.buffers[0]

    @property
    def sink(self) -> Buffer:
        return self.buffers[-1]

    def station(self, index: int) -> Station:
        if not 0 <= index < len(self.stations):
            raise ValueError(f"no station {index} (line has {len(self.stations)})")
        return self.stations[index]

    def buffer(self, index: int) -> Buffer:
        if not 0 <= index < len(self.buffers):
            raise ValueError(f"no buffer {index} (line has {len(self.buffers)})")
        return self.buffers[index]

    def buffer_counts(self) -> List[int]:
        return [b.count for b in self.buffers]

    def station_states(self) -> List[StationState]:
        return [s.state for s in self.stations]

    @property
    def in_process(self) -> int:
        """Units currently held by a station (in service or blocked)."""
        return sum(1 for s in self.stations if s.is_processing)

    @property
    def pending_entries(self) -> int:
        """Entry timestamps not yet paired with a sink arrival."""
        return len(self._entry_times)

    @property
    def is_halted(self) -> bool:
        return self._halted

    # --- Lifecycle ---

    def halt(self) -> None:
        """Freeze the line; updates are ignored until reset()."""
        if not self._halted:
            logger.info("line halted at %.0f ms", self.elapsed_ms)
        self._halted = True

    def reset(self) -> None:
        """Restore the source stock and clear every buffer, station and clock."""
        for buf in self.buffers:
            buf.count = 0
        self.source.count = self.config.starting_inventory
        for station in self.stations:
            station.reset()
        self.elapsed_ms = 0.0
        self._entry_times.clear()
        self.total_entered = 0
        self.total_completed = 0
        self._halted = False
        logger.debug(
            "line reset: %d stations, %d units at source",
            len(self.stations),
            self.source.count,
        )

    # --- Frame ---

    def update(self, delta_ms: float) -> FrameResult:
        """Advance every station by one frame, in index order."""
        if self._halted or delta_ms <= 0:
            return FrameResult(buffer_counts=self.buffer_counts())

        # Entry and sink timestamps both use the end of this frame
        now = self.elapsed_ms + delta_ms
        source_before = self.source.count
        result = FrameResult(delta_ms=delta_ms)
        last = len(self.stations) - 1

        for station in self.stations:
            update = station.update(delta_ms)
            result.station_updates.append(update)

            if self.metrics is not None:
                self.metrics.record_station_state(station.index, delta_ms, update.state)
                if update.item_completed:
                    self.metrics.record_item_processed(station.index)

            if update.item_completed and station.index == last:
                result.items_completed_at_sink += 1
                if self._entry_times:
                    lead_time = now - self._entry_times.popleft()
                    result.lead_times.append(lead_time)
                    if self.metrics is not None:
                        self.metrics.record_lead_time(lead_time)

        result.items_entered = source_before - self.source.count
        self._entry_times.extend([now] * result.items_entered)
        self.total_entered += result.items_entered
        self.total_completed += result.items_completed_at_sink

        self.elapsed_ms = now
        result.buffer_counts = self.buffer_counts()

        if self.metrics is not None:
            self.metrics.update(delta_ms, result.buffer_counts, self.in_process)

        return result
