"""Pydantic schemas for simulation models."""

import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class StationState(str, Enum):
    """Per-frame status of a line station."""

    BUSY = "busy"
    STARVED = "starved"
    BLOCKED = "blocked"


class BatchState(str, Enum):
    """States of a manually operated batch machine."""

    IDLE = "idle"
    READY_TO_START = "ready_to_start"
    PROCESSING = "processing"
    OUTPUT_READY = "output_ready"
    BLOCKED = "blocked"


class CashStatus(str, Enum):
    """Health band of the ledger's cash position."""

    HEALTHY = "healthy"
    DRAINING = "draining"
    CRITICAL = "critical"
    INSOLVENT = "insolvent"


class PartKind(str, Enum):
    """Part kinds handled by the batch machines."""

    RAW_METAL = "raw_metal"
    STAMPED_PIECE = "stamped_piece"
    BRACKET = "bracket"


class Part(BaseModel):
    """A physical part moving between batch machines."""

    uid: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    kind: PartKind
    created_at: float = 0.0


# --- Line configuration ---


class StationConfig(BaseModel):
    """Rate and variability of one line station."""

    rate_per_minute: float = Field(default=6.0, gt=0)  # Units per minute
    variance_percent: float = Field(default=20.0, ge=0, le=100)  # % of base time
    buffer_capacity: int = Field(default=0, ge=0)  # Output buffer cap, 0 = unlimited

    @property
    def base_time_ms(self) -> float:
        """Mean service time in milliseconds (derived from rate)."""
        return 60000.0 / self.rate_per_minute


class EconomicsConfig(BaseModel):
    """Cash model parameters."""

    starting_capital: float = 1000.0
    material_unit_cost: float = Field(default=10.0, ge=0)  # $ per unit leaving the source
    op_expense_per_sec: float = Field(default=2.0, ge=0)  # $ per simulated second
    unit_revenue: float = Field(default=20.0, ge=0)  # $ per unit reaching the sink
    cash_warning_threshold: float = 200.0


class LineConfig(BaseModel):
    """Complete line configuration: stations, source stock and economics."""

    name: str = "line"
    starting_inventory: int = Field(default=100, ge=0)
    stations: List[StationConfig] = Field(
        default_factory=lambda: [StationConfig() for _ in range(6)]
    )
    economics: EconomicsConfig = Field(default_factory=EconomicsConfig)
    min_service_ms: float = Field(default=100.0, ge=0)
    sample_interval_ms: float = Field(default=1000.0, gt=0)

    @property
    def station_count(self) -> int:
        return len(self.stations)


class BatchMachineConfig(BaseModel):
    """Configuration of a manually operated batch machine."""

    id: str
    name: str
    processing_time_sec: float = Field(default=10.0, ge=0)  # Mean per batch
    variance_sec: float = Field(default=0.0, ge=0)  # Gaussian sigma
    input_kind: Optional[PartKind] = None  # None accepts any part
    output_kind: Optional[PartKind] = None
    input_slots: int = Field(default=1, ge=0)
    output_slots: int = Field(default=1, ge=0)
    batch_size: int = Field(default=1, ge=1)
    sale_price: Optional[float] = Field(default=None, ge=0)  # Set for a sale point

    @property
    def is_sale_point(self) -> bool:
        """Sale points sell each queued part instead of batching it."""
        return self.sale_price is not None


# --- Metrics snapshots ---


class StationMetrics(BaseModel):
    """Time-in-state accumulators for one station (milliseconds)."""

    station_index: int
    busy_time: float = 0.0
    starved_time: float = 0.0
    blocked_time: float = 0.0
    items_processed: int = 0


class BufferMetrics(BaseModel):
    """Queue-length statistics for one buffer."""

    buffer_index: int
    samples: List[int] = Field(default_factory=list)
    max_length: int = 0
    current_length: int = 0


class LeadTimeMetrics(BaseModel):
    """Lead-time distribution over completed units (milliseconds)."""

    completed: List[float] = Field(default_factory=list)
    avg_lead_time: float = 0.0
    p50_lead_time: float = 0.0
    p90_lead_time: float = 0.0


class SimulationMetrics(BaseModel):
    """Aggregate flow metrics for a run."""

    elapsed_time: float = 0.0  # ms
    total_shipped: int = 0
    throughput_per_minute: float = 0.0
    total_wip: int = 0  # Intermediate buffers plus units in service
    buffered_wip: int = 0  # Intermediate buffers only
    lead_time: LeadTimeMetrics = Field(default_factory=LeadTimeMetrics)
    stations: List[StationMetrics] = Field(default_factory=list)
    buffers: List[BufferMetrics] = Field(default_factory=list)


class StationView(BaseModel):
    """Read-only view of one station for presentation."""

    index: int
    state: StationState
    is_processing: bool
    progress: float
    rate_per_minute: float
    variance_percent: float
    utilization_pct: float
    throughput_per_minute: float


class FrameSnapshot(BaseModel):
    """Read-only view of the whole simulation after a frame."""

    elapsed_ms: float
    is_running: bool
    is_over: bool
    buffer_counts: List[int]
    stations: List[StationView]
    cash: float
    cash_status: CashStatus
    total_revenue: float
    total_material_cost: float
    total_operating_cost: float
    metrics: SimulationMetrics
