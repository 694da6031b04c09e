"""CLI commands for toc-sim."""

from toc_sim.cli.configure import configure

__all__ = [
    "configure",
]
