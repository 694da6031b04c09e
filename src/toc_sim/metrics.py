"""Flow metrics for the production line.

Aggregates per-frame station states, completions and buffer snapshots into:
- utilization / starved / blocked percentages per station
- average and maximum queue length per buffer (sampled once per interval)
- throughput (units shipped per minute) and WIP
- lead-time average, P50 and P90

Pure aggregation: nothing in here mutates simulation state.
"""

import bisect
import logging
import math
from typing import List, Sequence

from toc_sim.models import (
    BufferMetrics,
    LeadTimeMetrics,
    SimulationMetrics,
    StationMetrics,
    StationState,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_INTERVAL_MS = 1000.0


def percentile(sorted_values: Sequence[float], fraction: float) -> float:
    """Element at floor(n * fraction) of an ascending sequence.

    Falls back to the last element when the index runs past the end.
    Returns 0.0 for an empty sequence.
    """
    if not sorted_values:
        return 0.0
    index = math.floor(len(sorted_values) * fraction)
    return sorted_values[min(index, len(sorted_values) - 1)]


def format_time(ms: float) -> str:
    """Format milliseconds as '12.3s' under a minute, 'm:ss' above."""
    seconds = ms / 1000.0
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}:{remaining:02d}"


class MetricsTracker:
    """Accumulates flow metrics for one run of a line."""

    def __init__(
        self,
        num_stations: int,
        num_buffers: int,
        sample_interval_ms: float = DEFAULT_SAMPLE_INTERVAL_MS,
    ):
        self.num_stations = num_stations
        self.num_buffers = num_buffers
        self.sample_interval_ms = sample_interval_ms
        self._last_sample_time = 0.0
        self._sorted_lead_times: List[float] = []
        self._lead_time_sum = 0.0
        self._metrics = self._fresh_metrics()

    def _fresh_metrics(self) -> SimulationMetrics:
        return SimulationMetrics(
            stations=[StationMetrics(station_index=i) for i in range(self.num_stations)],
            buffers=[BufferMetrics(buffer_index=i) for i in range(self.num_buffers)],
        )

    def reset(self) -> None:
        """Clear every accumulator."""
        self._last_sample_time = 0.0
        self._sorted_lead_times = []
        self._lead_time_sum = 0.0
        self._metrics = self._fresh_metrics()
        logger.debug("metrics reset (%d stations, %d buffers)", self.num_stations, self.num_buffers)

    # --- Recording (called by the line) ---

    def record_station_state(self, station_index: int, delta_ms: float, state: StationState) -> None:
        """Add delta_ms to the bucket matching the station's state."""
        if not 0 <= station_index < self.num_stations:
            return
        station = self._metrics.stations[station_index]
        if state == StationState.BUSY:
            station.busy_time += delta_ms
        elif state == StationState.STARVED:
            station.starved_time += delta_ms
        elif state == StationState.BLOCKED:
            station.blocked_time += delta_ms

    def record_item_processed(self, station_index: int) -> None:
        if 0 <= station_index < self.num_stations:
            self._metrics.stations[station_index].items_processed += 1

    def record_lead_time(self, lead_time_ms: float) -> None:
        """Register a unit that reached the sink after lead_time_ms."""
        self._metrics.total_shipped += 1
        self._metrics.lead_time.completed.append(lead_time_ms)
        bisect.insort(self._sorted_lead_times, lead_time_ms)
        self._lead_time_sum += lead_time_ms
        self._recalculate_lead_time()

    def update(self, delta_ms: float, buffer_lengths: Sequence[int], in_process: int = 0) -> None:
        """Advance the clock and refresh buffer, throughput and WIP figures.

        Args:
            delta_ms: Simulated time covered by the frame
            buffer_lengths: Count of every buffer, source first, sink last
            in_process: Units currently in service at a station
        """
        m = self._metrics
        m.elapsed_time += delta_ms

        if m.elapsed_time - self._last_sample_time >= self.sample_interval_ms:
            self._last_sample_time = m.elapsed_time
            for i, length in enumerate(buffer_lengths[: self.num_buffers]):
                buf = m.buffers[i]
                buf.samples.append(length)
                buf.current_length = length
                buf.max_length = max(buf.max_length, length)

        if m.elapsed_time > 0:
            m.throughput_per_minute = (m.total_shipped / m.elapsed_time) * 60000.0

        # Source and sink are outside the system
        m.buffered_wip = sum(buffer_lengths[1:-1])
        m.total_wip = m.buffered_wip + in_process

    def _recalculate_lead_time(self) -> None:
        lead = self._metrics.lead_time
        ordered = self._sorted_lead_times
        if not ordered:
            return
        lead.avg_lead_time = self._lead_time_sum / len(ordered)
        lead.p50_lead_time = percentile(ordered, 0.5)
        lead.p90_lead_time = percentile(ordered, 0.9)

    # --- Queries ---

    def get_metrics(self, include_samples: bool = True) -> SimulationMetrics:
        """Return a copy of the current aggregates.

        With include_samples=False the per-unit lead times and per-interval
        buffer samples are left empty, so per-frame snapshots stay constant
        size as a run grows.
        """
        m = self._metrics
        if include_samples:
            return m.model_copy(deep=True)
        return m.model_copy(
            update={
                "lead_time": m.lead_time.model_copy(update={"completed": []}),
                "stations": [s.model_copy() for s in m.stations],
                "buffers": [b.model_copy(update={"samples": []}) for b in m.buffers],
            }
        )

    @property
    def elapsed_time(self) -> float:
        return self._metrics.elapsed_time

    @property
    def lead_times(self) -> List[float]:
        return list(self._metrics.lead_time.completed)

    def _station_share(self, station_index: int, field_name: str) -> float:
        if not 0 <= station_index < self.num_stations or self._metrics.elapsed_time == 0:
            return 0.0
        value = getattr(self._metrics.stations[station_index], field_name)
        return (value / self._metrics.elapsed_time) * 100.0

    def get_utilization(self, station_index: int) -> float:
        """Busy time as a percentage of elapsed time."""
        return self._station_share(station_index, "busy_time")

    def get_starved_percent(self, station_index: int) -> float:
        return self._station_share(station_index, "starved_time")

    def get_blocked_percent(self, station_index: int) -> float:
        return self._station_share(station_index, "blocked_time")

    def get_avg_buffer_length(self, buffer_index: int) -> float:
        if not 0 <= buffer_index < self.num_buffers:
            return 0.0
        samples = self._metrics.buffers[buffer_index].samples
        if not samples:
            return 0.0
        return sum(samples) / len(samples)

    def get_max_buffer_length(self, buffer_index: int) -> int:
        if not 0 <= buffer_index < self.num_buffers:
            return 0
        return self._metrics.buffers[buffer_index].max_length

    def get_station_throughput(self, station_index: int) -> float:
        """Units completed by a station per minute of elapsed time."""
        if not 0 <= station_index < self.num_stations or self._metrics.elapsed_time == 0:
            return 0.0
        processed = self._metrics.stations[station_index].items_processed
        return (processed / self._metrics.elapsed_time) * 60000.0

    def get_items_processed(self, station_index: int) -> int:
        if not 0 <= station_index < self.num_stations:
            return 0
        return self._metrics.stations[station_index].items_processed
