"""Configure command: Resolve and validate a run config from YAML."""

from toc_sim.loader import ConfigLoader
from toc_sim.models import LineConfig


def configure(run_name: str, config_dir: str = "config") -> LineConfig:
    """Resolve a run config and print the line it describes.

    Args:
        run_name: Name of the run config (without .yaml extension)
        config_dir: Path to config directory

    Returns:
        The validated LineConfig

    Raises:
        FileNotFoundError: If the run or its scenario file is missing
        ValueError: If a station override does not fit the line
    """
    loader = ConfigLoader(config_dir)
    resolved = loader.resolve_run(run_name)
    line_config = loader.build_line_config(resolved)

    print(f"Resolving configuration for run: {run_name}")
    print(f"  Scenario: {resolved.scenario.name}")
    if resolved.scenario.description:
        print(f"            {resolved.scenario.description}")
    print(f"  Duration: {resolved.run.duration_sec:g} s in {resolved.run.frame_ms:g} ms frames")
    print(f"  Seed:     {resolved.run.random_seed}")
    print(f"  Source:   {line_config.starting_inventory} units")
    for i, station in enumerate(line_config.stations):
        cap = station.buffer_capacity or "unlimited"
        print(
            f"  S{i + 1}: {station.rate_per_minute:g}/min, "
            f"{station.variance_percent:g}% variance, output cap {cap}"
        )
    econ = line_config.economics
    print(
        f"  Economics: capital ${econ.starting_capital:,.0f}, "
        f"material ${econ.material_unit_cost:g}/unit, "
        f"opex ${econ.op_expense_per_sec:g}/s, "
        f"revenue ${econ.unit_revenue:g}/unit"
    )
    print("\nConfiguration is valid.")

    return line_config
