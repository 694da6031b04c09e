"""Manually operated batch machine ("start and walk away").

States:
- IDLE: fewer than batch_size parts queued
- READY_TO_START: a full batch is queued, waiting for an operator start
- PROCESSING: running on its own timer
- OUTPUT_READY: finished parts waiting for pickup
- BLOCKED: timer done but the output slots cannot take the whole batch

A machine configured with a sale_price is a sale point instead: it stays
IDLE and sells the oldest queued part every frame.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from toc_sim.models import BatchMachineConfig, BatchState, Part
from toc_sim.random_service import RandomService, Sampler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchStep:
    """Outcome of one batch-machine transition."""

    state: BatchState
    time_remaining: float
    complete_batch: bool = False  # Materialize the in-flight batch as output


def step_batch(
    state: BatchState,
    time_remaining: float,
    delta_sec: float,
    input_count: int,
    output_count: int,
    batch_size: int,
    output_slots: int,
) -> BatchStep:
    """Compute the next batch-machine state from its timer and slot counts."""
    fits = output_count + batch_size <= output_slots

    if state == BatchState.IDLE:
        if input_count >= batch_size:
            return BatchStep(BatchState.READY_TO_START, time_remaining)
        return BatchStep(BatchState.IDLE, time_remaining)

    if state == BatchState.READY_TO_START:
        if input_count < batch_size:
            return BatchStep(BatchState.IDLE, time_remaining)
        return BatchStep(BatchState.READY_TO_START, time_remaining)

    if state == BatchState.PROCESSING:
        time_remaining -= delta_sec
        if time_remaining > 0:
            return BatchStep(BatchState.PROCESSING, time_remaining)
        if fits:
            return BatchStep(BatchState.OUTPUT_READY, 0.0, complete_batch=True)
        return BatchStep(BatchState.BLOCKED, 0.0)

    if state == BatchState.BLOCKED:
        if fits:
            return BatchStep(BatchState.OUTPUT_READY, 0.0, complete_batch=True)
        return BatchStep(BatchState.BLOCKED, 0.0)

    # OUTPUT_READY
    if output_count > 0:
        return BatchStep(BatchState.OUTPUT_READY, time_remaining)
    if input_count >= batch_size:
        return BatchStep(BatchState.READY_TO_START, time_remaining)
    return BatchStep(BatchState.IDLE, time_remaining)


class BatchMachine:
    """A single machine with input/output slots and an operator-gated start."""

    def __init__(self, config: BatchMachineConfig, random_service: Optional[Sampler] = None):
        self.config = config
        self.random = random_service or RandomService()
        self.reset()

    def reset(self) -> None:
        self.state = BatchState.IDLE
        self.input_queue: List[Part] = []
        self.output_queue: List[Part] = []
        self.batch: List[Part] = []
        self.time_remaining = 0.0
        self.total_processing_time = 0.0
        self.elapsed_sec = 0.0
        self.earnings = 0.0
        self.units_sold = 0
        self.last_sale: Optional[Part] = None  # Part sold in the latest frame

    # --- Slots ---

    def accepts(self, part: Part) -> bool:
        return self.config.input_kind is None or part.kind == self.config.input_kind

    def has_input_room(self) -> bool:
        return len(self.input_queue) < self.config.input_slots

    def add_input(self, part: Part) -> bool:
        """Queue a part. Returns False (and changes nothing) if it is refused."""
        if not self.has_input_room() or not self.accepts(part):
            return False
        self.input_queue.append(part)
        return True

    def remove_input(self) -> Optional[Part]:
        """Take back the most recently queued input part."""
        if not self.input_queue:
            return None
        return self.input_queue.pop()

    def has_output(self) -> bool:
        return bool(self.output_queue)

    def take_output(self) -> Optional[Part]:
        """Pick up the oldest finished part, or None if there is none."""
        if not self.output_queue:
            return None
        return self.output_queue.pop(0)

    # --- Operation ---

    def can_start(self) -> bool:
        return self.state == BatchState.READY_TO_START

    def start_processing(self) -> bool:
        """Operator start. Returns True if a batch went into processing."""
        if self.state != BatchState.READY_TO_START:
            return False
        if len(self.input_queue) < self.config.batch_size:
            return False

        size = self.config.batch_size
        self.batch = self.input_queue[:size]
        del self.input_queue[:size]

        self.total_processing_time = self.random.sample(
            self.config.processing_time_sec, self.config.variance_sec
        )
        self.time_remaining = self.total_processing_time
        self.state = BatchState.PROCESSING
        logger.debug(
            "%s started batch of %d (%.1f s)", self.config.id, size, self.total_processing_time
        )
        return True

    @property
    def progress(self) -> float:
        if self.state != BatchState.PROCESSING or self.total_processing_time <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self.time_remaining / self.total_processing_time))

    def update(self, delta_ms: float) -> BatchState:
        """Advance the machine by one frame."""
        self.elapsed_sec += delta_ms / 1000.0
        if self.config.is_sale_point:
            self._sell()
            return self.state

        step = step_batch(
            self.state,
            self.time_remaining,
            delta_ms / 1000.0,
            len(self.input_queue),
            len(self.output_queue),
            self.config.batch_size,
            self.config.output_slots,
        )
        if step.complete_batch:
            self._complete_batch()
        elif step.state == BatchState.BLOCKED and self.state != BatchState.BLOCKED:
            logger.debug("%s blocked: output slots full", self.config.id)

        self.state = step.state
        self.time_remaining = step.time_remaining
        return self.state

    def _complete_batch(self) -> None:
        self.batch = []
        if self.config.output_kind is None:
            return
        for _ in range(self.config.batch_size):
            self.output_queue.append(Part(kind=self.config.output_kind, created_at=self.elapsed_sec))

    def _sell(self) -> None:
        self.last_sale = None
        if not self.input_queue:
            return
        part = self.input_queue.pop(0)
        self.earnings += self.config.sale_price
        self.units_sold += 1
        self.last_sale = part
        logger.debug("%s sold %s for %.2f", self.config.id, part.uid, self.config.sale_price)
