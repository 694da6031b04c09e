"""Configuration schemas - re-exports from loader and models for convenience."""

# Re-export config types from loader
from toc_sim.loader import (
    ConfigLoader,
    DefaultsConfig,
    ResolvedConfig,
    RunConfig,
    ScenarioConfig,
    StationOverride,
)
from toc_sim.models import (
    BatchMachineConfig,
    EconomicsConfig,
    LineConfig,
    StationConfig,
)

__all__ = [
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
]
