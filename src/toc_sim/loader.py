"""YAML configuration loader with name-based resolution."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from toc_sim.models import BatchMachineConfig, EconomicsConfig, LineConfig, StationConfig


@dataclass
class DefaultsConfig:
    """Global defaults loaded from config/defaults.yaml."""

    line: Dict[str, Any] = field(default_factory=dict)
    station: Dict[str, Any] = field(default_factory=dict)
    economics: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)
    simulation: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StationOverride:
    """Per-station settings that differ from the station defaults."""

    index: int
    values: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads and resolves YAML configuration files."""

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)
        # Load global defaults on init
        self.defaults = self.load_defaults()

    def load_defaults(self) -> DefaultsConfig:
        """Load global defaults from config/defaults.yaml."""
        path = self.config_dir / "defaults.yaml"
        if not path.exists():
            return DefaultsConfig()
        data = self._load_yaml(path)
        return DefaultsConfig(
            line=data.get("line", {}),
            station=data.get("station", {}),
            economics=data.get("economics", {}),
            metrics=data.get("metrics", {}),
            simulation=data.get("simulation", {}),
        )

    def load_run(self, name: str) -> "RunConfig":
        """Load a run configuration by name."""
        path = self.config_dir / "runs" / f"{name}.yaml"
        data = self._load_yaml(path)

        # Use defaults from defaults.yaml
        sim_defaults = self.defaults.simulation
        return RunConfig(
            name=data["name"],
            scenario=data["scenario"],
            duration_sec=data.get("duration_sec", sim_defaults.get("duration_sec", 300.0)),
            frame_ms=data.get("frame_ms", sim_defaults.get("frame_ms", 50.0)),
            random_seed=data.get("random_seed", sim_defaults.get("random_seed", 42)),
            telemetry_interval_ms=data.get(
                "telemetry_interval_ms",
                sim_defaults.get("telemetry_interval_ms", 1000.0),
            ),
        )

    def load_scenario(self, name: str) -> "ScenarioConfig":
        """Load a scenario configuration by name."""
        path = self.config_dir / "scenarios" / f"{name}.yaml"
        data = self._load_yaml(path)
        line_defaults = self.defaults.line
        overrides = [
            StationOverride(
                index=s["index"],
                values={k: v for k, v in s.items() if k != "index"},
            )
            for s in data.get("stations", [])
        ]
        return ScenarioConfig(
            name=data["name"],
            description=data.get("description", ""),
            station_count=data.get(
                "station_count", line_defaults.get("station_count", 6)
            ),
            starting_inventory=data.get(
                "starting_inventory", line_defaults.get("starting_inventory", 100)
            ),
            stations=overrides,
            economics=data.get("economics", {}),
        )

    def load_machine(self, name: str) -> BatchMachineConfig:
        """Load a batch machine configuration by name."""
        path = self.config_dir / "machines" / f"{name.lower()}.yaml"
        data = self._load_yaml(path)
        return BatchMachineConfig(**data)

    def resolve_run(self, run_name: str) -> "ResolvedConfig":
        """Fully resolve a run config into all its components."""
        run = self.load_run(run_name)
        scenario = self.load_scenario(run.scenario)
        return ResolvedConfig(run=run, scenario=scenario)

    def build_line_config(self, resolved: "ResolvedConfig") -> LineConfig:
        """Build the LineConfig for a resolved run."""
        scenario = resolved.scenario
        if scenario.station_count < 1:
            raise ValueError(f"Scenario {scenario.name} needs at least one station")

        stations = [StationConfig(**self.defaults.station) for _ in range(scenario.station_count)]
        for override in scenario.stations:
            if not 0 <= override.index < scenario.station_count:
                raise ValueError(
                    f"Scenario {scenario.name} overrides station {override.index}, "
                    f"but the line has {scenario.station_count}"
                )
            merged = {**self.defaults.station, **override.values}
            stations[override.index] = StationConfig(**merged)

        economics = EconomicsConfig(**{**self.defaults.economics, **scenario.economics})

        line_defaults = self.defaults.line
        return LineConfig(
            name=scenario.name,
            starting_inventory=scenario.starting_inventory,
            stations=stations,
            economics=economics,
            min_service_ms=line_defaults.get("min_service_ms", 100.0),
            sample_interval_ms=self.defaults.metrics.get("sample_interval_ms", 1000.0),
        )

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return yaml.safe_load(f) or {}


# --- Config dataclasses ---


@dataclass
class RunConfig:
    """Run-level configuration."""

    name: str
    scenario: str
    duration_sec: float = 300.0
    frame_ms: float = 50.0
    random_seed: Optional[int] = 42
    telemetry_interval_ms: float = 1000.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Reject settings that would stall the frame loop."""
        if self.frame_ms <= 0:
            raise ValueError(f"Run {self.name}: frame_ms must be > 0, got {self.frame_ms}")
        if self.telemetry_interval_ms <= 0:
            raise ValueError(
                f"Run {self.name}: telemetry_interval_ms must be > 0, "
                f"got {self.telemetry_interval_ms}"
            )
        if self.duration_sec < 0:
            raise ValueError(
                f"Run {self.name}: duration_sec must be >= 0, got {self.duration_sec}"
            )


@dataclass
class ScenarioConfig:
    """Scenario configuration."""

    name: str
    description: str = ""
    station_count: int = 6
    starting_inventory: int = 100
    stations: List[StationOverride] = field(default_factory=list)
    economics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ResolvedConfig:
    """Fully resolved configuration ready for simulation."""

    run: RunConfig
    scenario: ScenarioConfig
