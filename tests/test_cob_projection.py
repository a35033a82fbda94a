"""Tests for COB/IOB projections and single-entry timelines."""

from datetime import timedelta

import pytest

from conftest import NOW, make_entry
from glucosemonitor.core.cob_engine import aggregate, entry_timeline, project


class TestProject:
    def test_four_points_fifteen_minutes_apart(self, scenario_config):
        entries = [make_entry(60, carbs=60, insulin=6)]

        points = project(entries, scenario_config, NOW, steps=4, step_minutes=15)

        assert len(points) == 4
        assert [p.time for p in points] == [NOW + timedelta(minutes=15 * i) for i in range(4)]
        assert all(b.time > a.time for a, b in zip(points, points[1:]))

    def test_first_point_is_current_status(self, default_config):
        entries = [make_entry(30, carbs=45, insulin=4)]

        first = project(entries, default_config, NOW, steps=1)[0]
        carbs, insulin, _ = aggregate(entries, NOW, default_config)

        assert first.cob == carbs
        assert first.iob == insulin

    def test_default_is_six_hours(self, default_config):
        points = project([], default_config, NOW)
        assert len(points) == 24
        assert points[-1].time - points[0].time == timedelta(minutes=23 * 15)

    @pytest.mark.parametrize("steps", [0, -1, -24])
    def test_non_positive_steps_empty(self, default_config, steps):
        assert project([make_entry(10, carbs=10)], default_config, NOW, steps=steps) == []

    def test_non_positive_step_minutes_rejected(self, default_config):
        with pytest.raises(ValueError, match="step_minutes"):
            project([], default_config, NOW, steps=4, step_minutes=0)

    def test_values_decline_without_new_entries(self, default_config):
        entries = [make_entry(0, carbs=60, insulin=6)]

        points = project(entries, default_config, NOW, steps=20, step_minutes=15)

        for earlier, later in zip(points, points[1:]):
            assert later.cob <= earlier.cob
            assert later.iob <= earlier.iob
        assert points[-1].cob == 0.0
        assert points[-1].iob == 0.0

    def test_future_entry_appears_when_its_time_comes(self, default_config):
        """A meal logged ahead of time is zero until its timestamp is reached."""
        entries = [make_entry(-30, carbs=40)]

        points = project(entries, default_config, NOW, steps=4, step_minutes=15)

        assert [p.cob for p in points[:2]] == [0.0, 0.0]
        assert points[2].cob == 40.0
        assert 0 < points[3].cob < 40

    def test_snapshot_taken_once(self, default_config):
        """A generator of entries is consumed once and reused for every point."""
        entries = (make_entry(m, carbs=20) for m in (10, 40))

        points = project(entries, default_config, NOW, steps=3, step_minutes=15)

        assert all(p.cob > 0 for p in points)

    def test_repeatable(self, default_config):
        entries = [make_entry(30, carbs=45, insulin=4), make_entry(100, insulin=2)]

        first = project(entries, default_config, NOW, steps=12)
        second = project(entries, default_config, NOW, steps=12)

        assert first == second


class TestEntryTimeline:
    def test_covers_longest_duration(self, scenario_config):
        entry = make_entry(0, carbs=60, insulin=6)

        timeline = entry_timeline(entry, scenario_config)

        assert len(timeline) == 240 // 15 + 1
        assert timeline[0].time == entry.timestamp
        assert timeline[0].carbs_percent == 100.0
        assert timeline[0].insulin_percent == 100.0
        assert timeline[-1].carbs_remaining == 0.0
        assert timeline[-1].insulin_remaining == 0.0

    def test_peak_flag_around_insulin_peak(self, scenario_config):
        entry = make_entry(0, insulin=4)

        timeline = entry_timeline(entry, scenario_config)
        peaks = [p.elapsed_minutes for p in timeline if p.is_insulin_peak]

        assert peaks == [60, 75, 90]

    def test_no_peak_flag_without_insulin(self, scenario_config):
        timeline = entry_timeline(make_entry(0, carbs=30), scenario_config)
        assert not any(p.is_insulin_peak for p in timeline)
        assert all(p.insulin_percent == 0.0 for p in timeline)

    def test_custom_step_and_duration(self, default_config):
        entry = make_entry(0, carbs=30)

        timeline = entry_timeline(entry, default_config, step_minutes=30, duration_minutes=120)

        assert [p.elapsed_minutes for p in timeline] == [0, 30, 60, 90, 120]

    def test_percent_matches_remaining(self, default_config):
        entry = make_entry(0, carbs=50, insulin=5)

        for point in entry_timeline(entry, default_config):
            assert point.carbs_percent == pytest.approx(point.carbs_remaining / 50 * 100)
            assert point.insulin_percent == pytest.approx(point.insulin_remaining / 5 * 100)

    def test_rejects_non_positive_step(self, default_config):
        with pytest.raises(ValueError):
            entry_timeline(make_entry(0, carbs=10), default_config, step_minutes=0)


class TestEntryTimelineEnd:
    def test_ends_at_duration_when_step_does_not_divide_it(self, default_config):
        entry = make_entry(0, carbs=30, insulin=3)

        timeline = entry_timeline(entry, default_config, step_minutes=7)

        assert timeline[-2].elapsed_minutes == 238
        assert timeline[-1].elapsed_minutes == 240
        assert timeline[-1].carbs_remaining == 0.0
        assert timeline[-1].insulin_remaining == 0.0
        assert timeline[-1].time == entry.timestamp + timedelta(minutes=240)

    def test_no_duplicate_end_point_when_step_divides(self, default_config):
        timeline = entry_timeline(make_entry(0, carbs=30), default_config, step_minutes=60)
        assert [p.elapsed_minutes for p in timeline] == [0, 60, 120, 180, 240]
