"""Shared test fixtures for toc-sim tests."""

from pathlib import Path
from typing import List, Tuple

import pandas as pd
import pytest

from toc_sim import ConfigLoader, SimulationEngine


class MeanSampler:
    """Sampler stub that always returns the mean (zero variability)."""

    def __init__(self):
        self.calls: List[Tuple[float, float]] = []

    def sample(self, mean: float, std_dev: float) -> float:
        self.calls.append((mean, std_dev))
        return mean


class ScriptedSampler:
    """Sampler stub that replays a fixed list of values."""

    def __init__(self, values: List[float]):
        self.values = list(values)

    def sample(self, mean: float, std_dev: float) -> float:
        return self.values.pop(0)


@pytest.fixture
def config_dir() -> Path:
    """Path to the shipped config directory."""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def loader(config_dir: Path) -> ConfigLoader:
    """ConfigLoader instance."""
    return ConfigLoader(config_dir)


@pytest.fixture
def engine(config_dir: Path) -> SimulationEngine:
    """SimulationEngine instance."""
    return SimulationEngine(str(config_dir))


@pytest.fixture
def mean_sampler() -> MeanSampler:
    """Deterministic sampler: every service time equals its mean."""
    return MeanSampler()


@pytest.fixture
def scripted_sampler():
    """Factory for samplers that replay given service times."""
    return ScriptedSampler


@pytest.fixture
def deterministic_run(engine: SimulationEngine) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Run the single-station, zero-variance config for 60 s."""
    return engine.run("deterministic_1min")
