"""Tests for the data models."""

from datetime import date

import pytest

from barplanner.models import (
    DEFAULT_INTERVALS,
    DEFAULT_TASK_COLOR,
    DayWindow,
    HourWindow,
    MultiScaleSchedule,
    Project,
    Scale,
    ScaleInterval,
    Task,
    Trade,
    WorkdayRules,
)


class TestHourWindow:
    """Tests for the HourWindow model."""

    def test_defaults(self):
        """Test the default 8:00-18:00 window."""
        window = HourWindow()
        assert window.start_minutes == 480
        assert window.end_minutes == 1080

    def test_full_day(self):
        """Test that 0-24 is a valid window."""
        window = HourWindow(0, 24)
        assert window.end_minutes == 1440

    @pytest.mark.parametrize("start, end", [(10, 10), (12, 9), (-1, 5), (0, 25)])
    def test_invalid_windows(self, start, end):
        """Test that inverted or out-of-range windows are rejected."""
        with pytest.raises(ValueError):
            HourWindow(start, end)


class TestDayWindow:
    """Tests for the DayWindow model."""

    def test_length_for(self):
        """Test per-scale window lengths."""
        window = DayWindow(day_length=5, week_length=14, month_length=90)
        assert window.length_for(Scale.DAY) == 5
        assert window.length_for(Scale.WEEK) == 14
        assert window.length_for(Scale.MONTH) == 90

    def test_hour_scale_has_no_length(self):
        """Test that asking for an hour-scale length fails."""
        with pytest.raises(ValueError):
            DayWindow().length_for(Scale.HOUR)

    def test_non_positive_length(self):
        """Test that zero-day windows are rejected."""
        with pytest.raises(ValueError):
            DayWindow(day_length=0)


class TestMultiScaleSchedule:
    """Tests for the MultiScaleSchedule model."""

    def test_default_intervals(self):
        """Test the built-in default schedule."""
        schedule = MultiScaleSchedule.default()
        assert schedule.get(Scale.HOUR) == ScaleInterval(480, 540)
        assert schedule.get(Scale.DAY) == ScaleInterval(1, 3)
        assert schedule.get(Scale.WEEK) == ScaleInterval(1, 7)
        assert schedule.get(Scale.MONTH) == ScaleInterval(1, 14)

    def test_empty_schedule_has_no_entries(self):
        """Test that an empty schedule reports every scale as absent."""
        schedule = MultiScaleSchedule()
        assert all(schedule.get(scale) is None for scale in Scale)

    def test_with_interval_fills_missing_scales(self):
        """Test that touching one scale populates all four."""
        schedule = MultiScaleSchedule().with_interval(Scale.WEEK, ScaleInterval(3, 9))

        assert schedule.get(Scale.WEEK) == ScaleInterval(3, 9)
        for scale in (Scale.HOUR, Scale.DAY, Scale.MONTH):
            assert schedule.get(scale) == DEFAULT_INTERVALS[scale]

    def test_with_interval_keeps_other_entries(self):
        """Test that other scales keep their stored values."""
        schedule = MultiScaleSchedule(day=ScaleInterval(2, 5))
        updated = schedule.with_interval(Scale.HOUR, ScaleInterval(600, 660))

        assert updated.get(Scale.DAY) == ScaleInterval(2, 5)
        assert updated.get(Scale.HOUR) == ScaleInterval(600, 660)
        assert schedule.get(Scale.HOUR) is None  # original untouched


class TestWorkdayRules:
    """Tests for the WorkdayRules model."""

    def test_defaults(self):
        """Test the default rules skip Sundays and holidays only."""
        rules = WorkdayRules()
        assert not rules.saturday_non_working
        assert rules.sunday_non_working
        assert rules.holidays_non_working
        assert rules.non_working_dates == frozenset()
        assert rules.working_dates == frozenset()

    def test_add_and_remove_overrides(self):
        """Test override helpers return new rules."""
        rules = WorkdayRules()
        added = rules.with_non_working_date("2024-04-10").with_working_date("2024-04-07")

        assert "2024-04-10" in added.non_working_dates
        assert "2024-04-07" in added.working_dates
        assert rules.non_working_dates == frozenset()

        removed = added.without_non_working_date("2024-04-10").without_working_date("2024-04-07")
        assert removed.non_working_dates == frozenset()
        assert removed.working_dates == frozenset()


class TestTask:
    """Tests for the Task model."""

    def test_display_color_explicit(self):
        """Test that an explicit color wins over the trade color."""
        trades = [Trade("tr1", "電気工事", "#10B981")]
        task = Task("t1", "p1", "配線", color="#EF4444", trade_id="tr1")
        assert task.display_color(trades) == "#EF4444"

    def test_display_color_from_trade(self):
        """Test falling back to the trade color."""
        trades = [Trade("tr1", "電気工事", "#10B981")]
        task = Task("t1", "p1", "配線", trade_id="tr1")
        assert task.display_color(trades) == "#10B981"

    def test_display_color_default(self):
        """Test the default color for unknown or missing trades."""
        assert Task("t1", "p1", "配線").display_color([]) == DEFAULT_TASK_COLOR
        assert Task("t1", "p1", "配線", trade_id="gone").display_color([]) == DEFAULT_TASK_COLOR


class TestProject:
    """Tests for the Project model."""

    def test_project_creation(self):
        """Test basic project creation with default settings."""
        project = Project("p1", "Site", date(2024, 4, 1), date(2024, 5, 1))
        assert project.scale is Scale.DAY
        assert project.hour_window == HourWindow()
        assert project.day_window == DayWindow()
        assert not project.provisional
