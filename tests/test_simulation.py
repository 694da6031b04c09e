"""Tests for the Simulation facade (line, metrics and ledger in lockstep)."""

import pytest

from toc_sim import (
    CashStatus,
    EconomicsConfig,
    LineConfig,
    Simulation,
    StationConfig,
    StationState,
)


@pytest.fixture
def sim(mean_sampler) -> Simulation:
    """Three deterministic stations at 60/min with default economics."""
    config = LineConfig(stations=[StationConfig(rate_per_minute=60) for _ in range(3)])
    return Simulation(config, random_service=mean_sampler)


@pytest.fixture
def doomed(mean_sampler) -> Simulation:
    """$10 of capital burning $2/s with nothing to sell for 10 s."""
    config = LineConfig(
        stations=[StationConfig(rate_per_minute=6)],
        economics=EconomicsConfig(
            starting_capital=10, material_unit_cost=0, op_expense_per_sec=2, unit_revenue=0
        ),
    )
    return Simulation(config, random_service=mean_sampler)


class TestRunControl:
    """Start, stop and toggle."""

    def test_paused_by_default(self, sim: Simulation):
        sim.step(1000)

        assert not sim.is_running
        assert sim.line.elapsed_ms == 0
        assert sim.ledger.cash == 1000

    def test_toggle(self, sim: Simulation):
        assert sim.toggle() is True
        assert sim.toggle() is False

    def test_step_advances_all_three(self, sim: Simulation):
        sim.start()

        frame = sim.step(1000)

        assert frame.items_entered == 1
        assert sim.line.elapsed_ms == 1000
        assert sim.metrics.elapsed_time == 1000
        assert sim.ledger.total_material_cost == 10.0
        assert sim.ledger.total_operating_cost == pytest.approx(2.0)

    def test_zero_frame_is_idempotent(self, sim: Simulation):
        sim.start()
        for _ in range(5):
            sim.step(1000)
        before = sim.snapshot()

        sim.step(0)

        assert sim.snapshot() == before


class TestInsolvency:
    """Running out of cash halts the line."""

    def test_halts_when_cash_hits_zero(self, doomed: Simulation):
        doomed.start()
        for _ in range(4):
            doomed.step(1000)
        assert not doomed.is_over

        doomed.step(1000)

        assert doomed.is_over
        assert doomed.ledger.cash == pytest.approx(0.0)
        assert not doomed.is_running
        assert doomed.line.is_halted

    def test_nothing_moves_after_insolvency(self, doomed: Simulation):
        doomed.start()
        for _ in range(5):
            doomed.step(1000)
        frozen = doomed.snapshot()

        doomed.start()
        for _ in range(5):
            doomed.step(1000)

        assert not doomed.is_running
        assert doomed.snapshot() == frozen

    def test_reset_revives(self, doomed: Simulation):
        doomed.start()
        for _ in range(5):
            doomed.step(1000)

        doomed.reset()

        snap = doomed.snapshot()
        assert not snap.is_over
        assert not snap.is_running
        assert snap.cash == 10
        assert snap.cash_status == CashStatus.CRITICAL  # $10 sits below the $200 warning line
        assert snap.elapsed_ms == 0
        assert snap.buffer_counts == [100, 0]
        assert snap.metrics.elapsed_time == 0
        assert not doomed.line.is_halted


class TestSnapshot:
    """Read-only view for the host."""

    def test_snapshot_fields(self, sim: Simulation):
        sim.start()
        for _ in range(3):
            sim.step(1000)

        snap = sim.snapshot()

        assert snap.is_running
        assert snap.elapsed_ms == 3000
        assert snap.buffer_counts == [97, 0, 0, 0]
        assert [s.state for s in snap.stations] == [StationState.BUSY] * 3
        assert snap.stations[0].utilization_pct == pytest.approx(100.0)
        assert snap.stations[2].progress == 0.0
        assert snap.total_material_cost == 30.0
        assert snap.metrics.total_wip == 3

    def test_snapshot_omits_raw_samples(self, sim: Simulation):
        sim.start()
        for _ in range(10):
            sim.step(1000)

        snap = sim.snapshot()

        assert snap.metrics.total_shipped > 0
        assert snap.metrics.lead_time.completed == []
        assert all(b.samples == [] for b in snap.metrics.buffers)
        assert sim.metrics.lead_times
