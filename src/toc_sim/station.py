"""Single-server line station with stochastic service time.

Each frame a station runs one pass of a three-state machine:

1. FINISH: if a unit is in service, count down; at zero push it to the output
   buffer, or hold it (BLOCKED) while the output buffer is at capacity
2. PULL: if idle and the input buffer holds a unit, take it and draw a
   service time (BUSY)
3. otherwise STARVED

The transition is the pure function ``step_station``; ``Station`` applies its
result to the buffers and draws service times.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from toc_sim.buffer import Buffer
from toc_sim.models import StationConfig, StationState
from toc_sim.random_service import RandomService, Sampler

logger = logging.getLogger(__name__)

DEFAULT_MIN_SERVICE_MS = 100.0


@dataclass(frozen=True)
class StationStep:
    """Outcome of one station transition."""

    state: StationState
    is_processing: bool
    time_remaining: float
    item_completed: bool = False
    pull_input: bool = False  # Take one unit and draw a service time


@dataclass(frozen=True)
class StationUpdate:
    """What a station reports to the line after a frame."""

    state: StationState
    item_completed: bool


def step_station(
    is_processing: bool,
    time_remaining: float,
    delta_ms: float,
    input_count: int,
    output_full: bool,
) -> StationStep:
    """Compute the next station state from its timer and buffer snapshots."""
    item_completed = False

    if is_processing:
        time_remaining -= delta_ms
        if time_remaining > 0:
            return StationStep(StationState.BUSY, True, time_remaining)
        if output_full:
            # Finished unit stays in the station until the output frees up
            return StationStep(StationState.BLOCKED, True, 0.0)
        item_completed = True

    if input_count > 0:
        return StationStep(
            StationState.BUSY, True, 0.0, item_completed=item_completed, pull_input=True
        )
    return StationStep(StationState.STARVED, False, 0.0, item_completed=item_completed)


class Station:
    """A process stage holding at most one unit in service."""

    def __init__(
        self,
        index: int,
        config: Optional[StationConfig] = None,
        random_service: Optional[Sampler] = None,
        min_service_ms: float = DEFAULT_MIN_SERVICE_MS,
    ):
        """Initialize station.

        Args:
            index: Position in the line
            config: Rate, variance and output buffer capacity
            random_service: Service-time sampler (a fresh RandomService if None)
            min_service_ms: Floor applied to every drawn service time
        """
        config = config or StationConfig()
        self.index = index
        self.rate_per_minute = config.rate_per_minute
        self.variance_percent = config.variance_percent
        self.output_capacity = config.buffer_capacity
        self.min_service_ms = min_service_ms
        self.random = random_service or RandomService()

        self.input: Optional[Buffer] = None
        self.output: Optional[Buffer] = None

        self.is_processing = False
        self.time_remaining = 0.0
        self.total_service_time = 0.0
        self.state = StationState.STARVED

    def connect(self, input_buffer: Buffer, output_buffer: Buffer) -> None:
        self.input = input_buffer
        self.output = output_buffer

    def set_rate(self, rate_per_minute: float) -> None:
        """Change the rate used by the next service-time draw."""
        self.rate_per_minute = rate_per_minute

    def set_variance(self, variance_percent: float) -> None:
        """Change the variance used by the next service-time draw."""
        self.variance_percent = variance_percent

    def set_output_capacity(self, capacity: int) -> None:
        self.output_capacity = capacity

    @property
    def base_time_ms(self) -> float:
        return 60000.0 / self.rate_per_minute

    @property
    def progress(self) -> float:
        """Fraction of the current unit's service completed (0 when idle)."""
        if not self.is_processing or self.total_service_time <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self.time_remaining / self.total_service_time))

    def draw_service_time(self) -> float:
        base = self.base_time_ms
        std_dev = (self.variance_percent / 100.0) * base
        return max(self.min_service_ms, self.random.sample(base, std_dev))

    def update(self, delta_ms: float) -> StationUpdate:
        """Advance the station by one frame."""
        step = step_station(
            self.is_processing,
            self.time_remaining,
            delta_ms,
            self.input.count,
            self.output.is_full(self.output_capacity),
        )

        if step.item_completed:
            self.output.put()

        self.is_processing = step.is_processing
        self.time_remaining = step.time_remaining

        if step.pull_input:
            self.input.take()
            self.total_service_time = self.draw_service_time()
            self.time_remaining = self.total_service_time
            logger.debug(
                "station %d drew %.1f ms (rate=%.2f/min var=%.0f%%)",
                self.index,
                self.total_service_time,
                self.rate_per_minute,
                self.variance_percent,
            )
        elif step.state == StationState.BLOCKED and self.state != StationState.BLOCKED:
            logger.debug("station %d blocked on buffer %d", self.index, self.output.index)

        self.state = step.state
        return StationUpdate(state=step.state, item_completed=step.item_completed)

    def reset(self) -> None:
        self.is_processing = False
        self.time_remaining = 0.0
        self.total_service_time = 0.0
        self.state = StationState.STARVED
