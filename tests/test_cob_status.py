"""Tests for the current COB/IOB status snapshot."""

import logging
from datetime import timedelta

import pytest

from conftest import NOW, make_entry
from glucosemonitor.core.cob_engine import (
    CarbsLevel,
    EngineConfig,
    InsulinPhase,
    aggregate,
    compute_status,
)
from glucosemonitor.core.cob_engine.status import (
    carbs_level,
    describe_iob,
    estimated_glucose_impact,
    insulin_phase,
    time_to_zero,
)


class TestComputeStatus:
    def test_empty_input(self, default_config):
        status = compute_status([], default_config, NOW)

        assert status.current_cob == 0
        assert status.insulin_on_board == 0
        assert status.active_entries == []
        assert status.time_to_zero == 0
        assert status.estimated_glucose_impact == 0
        assert status.carbs_level == CarbsLevel.none
        assert status.insulin_phase == InsulinPhase.none
        assert status.cob_description == "No carbs on board"
        assert status.iob_description == "No active insulin"

    def test_scenario_one_hour_after_meal(self, scenario_config):
        entry = make_entry(60, carbs=60, insulin=6)

        status = compute_status([entry], scenario_config, NOW)

        assert 0 < status.current_cob < 60
        assert 0 < status.insulin_on_board < 6
        assert len(status.active_entries) == 1
        assert status.evaluated_at == NOW

    def test_scenario_after_both_durations(self, scenario_config):
        """Evaluated 300 minutes later, everything has cleared."""
        entry = make_entry(60, carbs=60, insulin=6)
        later = NOW + timedelta(minutes=300)

        status = compute_status([entry], scenario_config, later)

        assert status.current_cob == 0
        assert status.insulin_on_board == 0
        assert status.active_entries == []
        assert status.time_to_zero == 0

    def test_glucose_impact_combines_carbs_and_insulin(self, scenario_config):
        entry = make_entry(60, carbs=60, insulin=6)

        status = compute_status([entry], scenario_config, NOW)

        expected = status.current_cob * 0.05 - status.insulin_on_board * 2.0
        assert status.estimated_glucose_impact == pytest.approx(expected)

    def test_glucose_impact_can_be_negative(self, scenario_config):
        """A correction dose alone has a net lowering effect."""
        entry = make_entry(10, insulin=2, meal_type="Correction")
        status = compute_status([entry], scenario_config, NOW)
        assert status.estimated_glucose_impact < 0

    def test_glucose_impact_positive_for_carbs_only(self, scenario_config):
        entry = make_entry(10, carbs=40, meal_type="Snack")
        status = compute_status([entry], scenario_config, NOW)
        assert status.estimated_glucose_impact > 0

    def test_matches_aggregate(self, default_config):
        entries = [make_entry(20, carbs=50, insulin=5), make_entry(140, carbs=30)]

        status = compute_status(entries, default_config, NOW)
        carbs, insulin, active = aggregate(entries, NOW, default_config)

        assert status.current_cob == carbs
        assert status.insulin_on_board == insulin
        assert status.active_entries == active

    def test_idempotent(self, default_config):
        entries = [
            make_entry(20, carbs=50, insulin=5),
            make_entry(95, carbs=15, insulin=1),
            make_entry(-10, carbs=30),
        ]

        first = compute_status(entries, default_config, NOW)
        second = compute_status(entries, default_config, NOW)

        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_does_not_mutate_entries(self, default_config):
        entries = [make_entry(95, carbs=15, insulin=1), make_entry(20, carbs=50)]
        before = list(entries)

        compute_status(entries, default_config, NOW)

        assert entries == before

    def test_malformed_entry_logged_and_clamped(self, default_config, caplog):
        entries = [make_entry(30, carbs=-20, entry_id="broken"), make_entry(30, carbs=20)]

        with caplog.at_level(logging.WARNING, logger="glucosemonitor.core.cob_engine.status"):
            status = compute_status(entries, default_config, NOW)

        assert status.current_cob > 0
        assert "negative quantity" in caplog.text
        assert len(status.active_entries) == 1


class TestTimeToZero:
    def test_zero_without_entries(self, default_config):
        assert time_to_zero([], default_config, NOW) == 0.0

    def test_uses_longest_axis(self, scenario_config):
        """Carbs clear at 180, insulin at 240; the later one wins."""
        entry = make_entry(60, carbs=60, insulin=6)
        assert time_to_zero([entry], scenario_config, NOW) == pytest.approx(180)

    def test_carbs_only_entry_clears_with_carb_window(self, scenario_config):
        entry = make_entry(60, carbs=60)
        assert time_to_zero([entry], scenario_config, NOW) == pytest.approx(120)

    def test_most_recent_entry_decides(self, scenario_config):
        entries = [make_entry(200, carbs=10, insulin=1), make_entry(30, carbs=20, insulin=2)]
        assert time_to_zero(entries, scenario_config, NOW) == pytest.approx(210)

    def test_future_entry_not_counted(self, scenario_config):
        entry = make_entry(-30, carbs=60, insulin=6)
        assert time_to_zero([entry], scenario_config, NOW) == 0.0

    def test_aggregate_is_zero_at_time_to_zero(self, scenario_config):
        entries = [make_entry(45, carbs=60, insulin=6), make_entry(100, carbs=25)]

        minutes = time_to_zero(entries, scenario_config, NOW)
        at_zero = aggregate(entries, NOW + timedelta(minutes=minutes), scenario_config)
        just_before = aggregate(entries, NOW + timedelta(minutes=minutes - 1), scenario_config)

        assert at_zero.carbs_remaining == 0.0
        assert at_zero.insulin_remaining == 0.0
        assert just_before.carbs_remaining + just_before.insulin_remaining > 0


class TestCarbsLevel:
    @pytest.mark.parametrize(
        "cob,expected",
        [
            (0, CarbsLevel.none),
            (0.5, CarbsLevel.low),
            (4.99, CarbsLevel.low),
            (5, CarbsLevel.moderate),
            (14.9, CarbsLevel.moderate),
            (15, CarbsLevel.high),
            (80, CarbsLevel.high),
        ],
    )
    def test_thresholds(self, cob, expected):
        assert carbs_level(cob) == expected


class TestInsulinPhase:
    def config(self) -> EngineConfig:
        return EngineConfig(insulin_peak_minutes=75)

    @pytest.mark.parametrize(
        "minutes_ago,expected",
        [
            (10, InsulinPhase.rising),
            (59, InsulinPhase.rising),
            (60, InsulinPhase.peak),
            (75, InsulinPhase.peak),
            (89, InsulinPhase.peak),
            (90, InsulinPhase.falling),
            (180, InsulinPhase.falling),
        ],
    )
    def test_phase_of_most_recent_dose(self, minutes_ago, expected):
        entries = [make_entry(minutes_ago, insulin=3)]
        assert insulin_phase(entries, self.config(), NOW, iob=1.0) == expected

    def test_most_recent_dose_wins(self):
        entries = [make_entry(150, insulin=4), make_entry(20, insulin=1)]
        assert insulin_phase(entries, self.config(), NOW, iob=2.0) == InsulinPhase.rising

    def test_carb_only_entries_ignored(self):
        entries = [make_entry(150, insulin=4), make_entry(5, carbs=40)]
        assert insulin_phase(entries, self.config(), NOW, iob=2.0) == InsulinPhase.falling

    def test_none_without_insulin_on_board(self):
        entries = [make_entry(20, insulin=1)]
        assert insulin_phase(entries, self.config(), NOW, iob=0.0) == InsulinPhase.none

    def test_future_dose_ignored(self):
        entries = [make_entry(-20, insulin=1)]
        assert insulin_phase(entries, self.config(), NOW, iob=1.0) == InsulinPhase.none

    def test_status_reports_phase_and_description(self):
        entries = [make_entry(75, insulin=3)]

        status = compute_status(entries, self.config(), NOW)

        assert status.insulin_phase == InsulinPhase.peak
        assert status.iob_description.startswith("Insulin at peak - ")
        assert status.iob_description.endswith("u active")


class TestDescriptions:
    def test_describe_iob(self):
        assert describe_iob(InsulinPhase.falling, 2.345) == "Insulin falling - 2.3u active"
        assert describe_iob(InsulinPhase.rising, 0.0) == "No active insulin"
        assert describe_iob(InsulinPhase.none, 1.0) == "No active insulin"

    def test_estimated_glucose_impact(self, scenario_config):
        assert estimated_glucose_impact(40, 1, scenario_config) == pytest.approx(0.0)
        assert estimated_glucose_impact(0, 0, scenario_config) == 0.0


class TestStatusLogging:
    def test_debug_summary_logged_when_enabled(self, default_config, caplog):
        with caplog.at_level(logging.DEBUG, logger="glucosemonitor.core.cob_engine.status"):
            compute_status([make_entry(30, carbs=20)], default_config, NOW)

        record = next(r for r in caplog.records if r.message == "Computed COB status")
        assert record.extra_fields["active"] == 1

    def test_debug_summary_skipped_above_debug(self, default_config, caplog):
        with caplog.at_level(logging.INFO, logger="glucosemonitor.core.cob_engine.status"):
            compute_status([make_entry(30, carbs=20)], default_config, NOW)

        assert "Computed COB status" not in caplog.text
