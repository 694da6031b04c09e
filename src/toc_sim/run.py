"""Entry point for running simulations."""

import argparse
import logging

import pandas as pd

from toc_sim.cli.configure import configure as configure_func
from toc_sim.engine import SimulationEngine
from toc_sim.metrics import format_time


def run_simulation(
    run_name: str = "baseline_5min",
    config_dir: str = "config",
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Run a simulation with the given run config name.

    Args:
        run_name: Name of the run config (without .yaml extension)
        config_dir: Path to config directory

    Returns:
        Tuple of (telemetry_df, stations_df)
    """
    engine = SimulationEngine(config_dir)
    df_ts, df_st = engine.run(run_name)

    # Report
    print("\n--- SIMULATION COMPLETE ---")
    print(f"Telemetry Records: {len(df_ts)}")

    if not df_ts.empty:
        last = df_ts.iloc[-1]
        print(f"Simulated Time:    {format_time(last['time_ms'])}")

        print("\n--- PRODUCTION SUMMARY ---")
        print(f"Units Released:    {int(df_ts['units_entered'].sum()):,}")
        print(f"Units Shipped:     {int(df_ts['units_shipped'].sum()):,}")
        print(f"Throughput:        {last['throughput_per_min']:.2f}/min")
        print(f"WIP at End:        {int(last['wip'])}")
        if last["p50_lead_time_ms"] > 0:
            print(f"Lead Time P50:     {format_time(last['p50_lead_time_ms'])}")
            print(f"Lead Time P90:     {format_time(last['p90_lead_time_ms'])}")

        print("\n--- ECONOMIC SUMMARY ---")
        print(f"Revenue:          ${last['revenue']:,.2f}")
        print(f"Material Cost:    ${last['material_cost']:,.2f}")
        print(f"Operating Cost:   ${last['operating_cost']:,.2f}")
        print(f"{'─' * 30}")
        print(f"Cash:             ${last['cash']:,.2f}")
        if last["cash_status"] == "insolvent":
            print("Cash depleted - the line went bankrupt.")

    if not df_st.empty:
        print("\n--- STATION STATES (% of time) ---")
        cols = ["station", "busy_pct", "starved_pct", "blocked_pct", "throughput_per_min"]
        print(df_st[cols].set_index("station").round(1))

    return df_ts, df_st


def _run_command(args: argparse.Namespace) -> None:
    """Handle 'run' subcommand."""
    run_simulation(args.run, args.config)


def _configure_command(args: argparse.Namespace) -> None:
    """Handle 'configure' subcommand."""
    configure_func(run_name=args.run, config_dir=args.config)


def main():
    """CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        description="Theory-of-Constraints production line simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run         Run a simulation from config (default behavior)
  configure   Resolve and validate a run config

Examples:
  python -m toc_sim run --run bottleneck_5min
  python -m toc_sim configure --run capped_2min
        """,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # === 'run' subcommand (default behavior) ===
    run_parser = subparsers.add_parser(
        "run",
        help="Run simulation from config",
        description="Run a simulation from YAML configuration files.",
    )
    run_parser.add_argument(
        "--run",
        default="baseline_5min",
        help="Run config name (default: baseline_5min)",
    )
    run_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    run_parser.set_defaults(func=_run_command)

    # === 'configure' subcommand ===
    configure_parser = subparsers.add_parser(
        "configure",
        help="Resolve and validate a run config",
        description="Resolve a run config and print the line it describes.",
    )
    configure_parser.add_argument(
        "--run",
        required=True,
        help="Run config name (required)",
    )
    configure_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    configure_parser.set_defaults(func=_configure_command)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Handle no subcommand (default to run)
    if args.command is None:
        _run_command(argparse.Namespace(run="baseline_5min", config="config"))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
