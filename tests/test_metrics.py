"""Tests for flow metrics aggregation."""

import pytest

from toc_sim import MetricsTracker, StationState, format_time, percentile


@pytest.fixture
def tracker() -> MetricsTracker:
    """Tracker for a two-station line."""
    return MetricsTracker(num_stations=2, num_buffers=3, sample_interval_ms=1000)


class TestPercentile:
    """Floor-index percentile."""

    def test_empty(self):
        assert percentile([], 0.5) == 0.0

    def test_single_value(self):
        assert percentile([5.0], 0.5) == 5.0
        assert percentile([5.0], 0.9) == 5.0

    def test_floor_index(self):
        values = [10.0, 20.0, 30.0, 40.0]

        assert percentile(values, 0.5) == 30.0
        assert percentile(values, 0.9) == 40.0

    def test_index_clamped_to_last(self):
        assert percentile([1.0, 2.0], 1.0) == 2.0


class TestLeadTime:
    """Lead-time distribution."""

    def test_stats_from_unsorted_input(self, tracker: MetricsTracker):
        for value in (30.0, 10.0, 40.0, 20.0):
            tracker.record_lead_time(value)

        lead = tracker.get_metrics().lead_time
        assert lead.avg_lead_time == pytest.approx(25.0)
        assert lead.p50_lead_time == 30.0
        assert lead.p90_lead_time == 40.0

    def test_single_completion(self, tracker: MetricsTracker):
        tracker.record_lead_time(1234.0)

        lead = tracker.get_metrics().lead_time
        assert lead.p50_lead_time == lead.p90_lead_time == 1234.0

    def test_percentiles_never_drop_when_values_grow(self, tracker: MetricsTracker):
        previous = (0.0, 0.0)
        for value in range(1, 50):
            tracker.record_lead_time(float(value * 100))
            lead = tracker.get_metrics().lead_time
            current = (lead.p50_lead_time, lead.p90_lead_time)
            assert current[0] >= previous[0]
            assert current[1] >= previous[1]
            assert lead.p50_lead_time <= lead.p90_lead_time
            previous = current

    def test_completion_counts_as_shipped(self, tracker: MetricsTracker):
        tracker.record_lead_time(100.0)
        tracker.record_lead_time(200.0)

        assert tracker.get_metrics().total_shipped == 2


class TestStationTime:
    """Time-in-state accounting."""

    def test_percentages(self, tracker: MetricsTracker):
        tracker.record_station_state(0, 750, StationState.BUSY)
        tracker.record_station_state(0, 250, StationState.STARVED)
        tracker.update(1000, [0, 0, 0])

        assert tracker.get_utilization(0) == pytest.approx(75.0)
        assert tracker.get_starved_percent(0) == pytest.approx(25.0)
        assert tracker.get_blocked_percent(0) == 0.0

    def test_shares_sum_to_hundred(self, tracker: MetricsTracker):
        states = [StationState.BUSY, StationState.BLOCKED, StationState.STARVED, StationState.BUSY]
        for state in states:
            tracker.record_station_state(1, 50, state)
            tracker.update(50, [0, 0, 0])

        total = (
            tracker.get_utilization(1)
            + tracker.get_starved_percent(1)
            + tracker.get_blocked_percent(1)
        )
        assert total == pytest.approx(100.0)
        assert tracker.get_blocked_percent(1) == pytest.approx(25.0)

    def test_no_elapsed_time_reads_zero(self, tracker: MetricsTracker):
        tracker.record_station_state(0, 500, StationState.BUSY)

        assert tracker.get_utilization(0) == 0.0

    def test_out_of_range_indices_read_zero(self, tracker: MetricsTracker):
        tracker.record_station_state(5, 500, StationState.BUSY)
        tracker.record_item_processed(-1)
        tracker.update(1000, [0, 0, 0])

        assert tracker.get_utilization(5) == 0.0
        assert tracker.get_items_processed(7) == 0
        assert tracker.get_avg_buffer_length(9) == 0.0
        assert tracker.get_max_buffer_length(9) == 0

    def test_station_throughput(self, tracker: MetricsTracker):
        for _ in range(3):
            tracker.record_item_processed(0)
        tracker.update(30000, [0, 0, 0])

        assert tracker.get_items_processed(0) == 3
        assert tracker.get_station_throughput(0) == pytest.approx(6.0)


class TestSampling:
    """Buffer sampling, throughput and WIP."""

    def test_samples_once_per_interval(self, tracker: MetricsTracker):
        tracker.update(400, [5, 1, 0])
        tracker.update(400, [5, 2, 0])
        assert tracker.get_metrics().buffers[1].samples == []

        tracker.update(400, [5, 3, 0])
        tracker.update(400, [5, 9, 0])

        buf = tracker.get_metrics().buffers[1]
        assert buf.samples == [3]
        assert buf.max_length == 3
        assert buf.current_length == 3

    def test_average_and_max_queue(self, tracker: MetricsTracker):
        for length in (2, 4, 6):
            tracker.update(1000, [0, length, 0])

        assert tracker.get_avg_buffer_length(1) == pytest.approx(4.0)
        assert tracker.get_max_buffer_length(1) == 6

    def test_throughput_per_minute(self, tracker: MetricsTracker):
        for _ in range(3):
            tracker.record_lead_time(1000.0)
        tracker.update(60000, [0, 0, 3])

        assert tracker.get_metrics().throughput_per_minute == pytest.approx(3.0)

    def test_wip_excludes_source_and_sink(self):
        tracker = MetricsTracker(num_stations=3, num_buffers=4)

        tracker.update(100, [50, 2, 3, 7], in_process=2)

        metrics = tracker.get_metrics()
        assert metrics.buffered_wip == 5
        assert metrics.total_wip == 7

    def test_get_metrics_returns_copy(self, tracker: MetricsTracker):
        tracker.record_lead_time(100.0)
        snapshot = tracker.get_metrics()
        snapshot.lead_time.completed.append(999.0)
        snapshot.total_shipped = 50

        assert tracker.lead_times == [100.0]
        assert tracker.get_metrics().total_shipped == 1

    def test_reset(self, tracker: MetricsTracker):
        tracker.record_lead_time(100.0)
        tracker.record_station_state(0, 1000, StationState.BUSY)
        tracker.update(1000, [1, 2, 3], in_process=1)

        tracker.reset()

        metrics = tracker.get_metrics()
        assert metrics.elapsed_time == 0.0
        assert metrics.total_shipped == 0
        assert metrics.lead_time.completed == []
        assert metrics.stations[0].busy_time == 0.0
        assert metrics.buffers[1].samples == []


class TestFormatTime:
    def test_seconds(self):
        assert format_time(12345) == "12.3s"

    def test_minutes(self):
        assert format_time(125000) == "2:05"


class TestIncrementalLeadTime:
    """Lead-time stats kept in order as completions arrive."""

    def test_matches_full_sort(self, tracker: MetricsTracker):
        values = [float((i * 7919) % 1000) for i in range(1, 300)]
        for value in values:
            tracker.record_lead_time(value)

        ordered = sorted(values)
        lead = tracker.get_metrics().lead_time
        assert lead.p50_lead_time == percentile(ordered, 0.5)
        assert lead.p90_lead_time == percentile(ordered, 0.9)
        assert lead.avg_lead_time == pytest.approx(sum(values) / len(values))
        # Raw completions stay in arrival order
        assert tracker.lead_times == values

    def test_reset_clears_running_stats(self, tracker: MetricsTracker):
        tracker.record_lead_time(5000.0)
        tracker.reset()

        tracker.record_lead_time(10.0)

        lead = tracker.get_metrics().lead_time
        assert lead.avg_lead_time == pytest.approx(10.0)
        assert lead.p90_lead_time == 10.0


class TestCompactMetrics:
    """get_metrics(include_samples=False) for per-frame snapshots."""

    def test_drops_raw_lists_keeps_figures(self, tracker: MetricsTracker):
        tracker.record_lead_time(300.0)
        tracker.record_station_state(0, 1000, StationState.BUSY)
        tracker.update(1000, [4, 2, 1], in_process=1)

        compact = tracker.get_metrics(include_samples=False)

        assert compact.lead_time.completed == []
        assert compact.buffers[1].samples == []
        assert compact.buffers[1].max_length == 2
        assert compact.lead_time.p50_lead_time == 300.0
        assert compact.stations[0].busy_time == 1000
        assert compact.total_wip == 3

    def test_does_not_touch_tracker(self, tracker: MetricsTracker):
        tracker.record_lead_time(300.0)
        tracker.update(1000, [4, 2, 1])

        compact = tracker.get_metrics(include_samples=False)
        compact.stations[0].busy_time = 99.0

        full = tracker.get_metrics()
        assert full.lead_time.completed == [300.0]
        assert full.buffers[1].samples == [2]
        assert full.stations[0].busy_time == 0.0
