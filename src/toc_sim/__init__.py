"""Frame-driven production line simulation for Theory-of-Constraints teaching."""

from toc_sim.batch import BatchMachine, BatchStep, step_batch
from toc_sim.buffer import Buffer
from toc_sim.cli import configure
from toc_sim.config import (
    BatchMachineConfig,
    ConfigLoader,
    DefaultsConfig,
    EconomicsConfig,
    LineConfig,
    ResolvedConfig,
    RunConfig,
    ScenarioConfig,
    StationConfig,
    StationOverride,
)
from toc_sim.engine import SimulationEngine
from toc_sim.ledger import Ledger
from toc_sim.line import FrameResult, Line
from toc_sim.metrics import MetricsTracker, format_time, percentile
from toc_sim.models import (
    BatchState,
    BufferMetrics,
    CashStatus,
    FrameSnapshot,
    LeadTimeMetrics,
    Part,
    PartKind,
    SimulationMetrics,
    StationMetrics,
    StationState,
    StationView,
)
from toc_sim.random_service import RandomService, Sampler
from toc_sim.run import run_simulation
from toc_sim.simulation import Simulation
from toc_sim.station import Station, StationStep, StationUpdate, step_station

__all__ = [
    # Models
    "StationState",
    "BatchState",
    "CashStatus",
    "PartKind",
    "Part",
    "StationMetrics",
    "BufferMetrics",
    "LeadTimeMetrics",
    "SimulationMetrics",
    "StationView",
    "FrameSnapshot",
    # Config
    "ConfigLoader",
    "DefaultsConfig",
    "RunConfig",
    "ScenarioConfig",
    "StationOverride",
    "ResolvedConfig",
    "LineConfig",
    "StationConfig",
    "EconomicsConfig",
    "BatchMachineConfig",
    # Core
    "RandomService",
    "Sampler",
    "Buffer",
    "Station",
    "StationStep",
    "StationUpdate",
    "step_station",
    "Line",
    "FrameResult",
    "MetricsTracker",
    "percentile",
    "format_time",
    "Ledger",
    "Simulation",
    # Manual variant
    "BatchMachine",
    "BatchStep",
    "step_batch",
    # CLI
    "configure",
    # Engine
    "SimulationEngine",
    # Entry point
    "run_simulation",
]
