"""Tests for grid unit generation."""

from datetime import date

from barplanner.grid import (
    MonthGroup,
    build_cells,
    generate,
    group_by_month,
    minutes_to_time,
    month_groups_for,
    time_to_minutes,
    unit_label,
)
from barplanner.models import DayWindow, HourWindow, Project, Scale, WorkdayRules
from barplanner.workdays import Holiday


class FakeHolidays:
    """Holiday lookup over a fixed set of dates."""

    def __init__(self, days=None):
        self.days = dict(days or {})

    def is_national_holiday(self, day):
        return day in self.days

    def holiday_name(self, day):
        return self.days.get(day)

    def holidays_in_range(self, start, end):
        return [Holiday(d, n) for d, n in sorted(self.days.items()) if start <= d <= end]


def make_project(scale=Scale.DAY, provisional=False, **fields):
    return Project(
        id="p1",
        name="Site",
        start_date=date(2024, 4, 1),
        end_date=date(2024, 5, 1),
        scale=scale,
        provisional=provisional,
        **fields,
    )


class TestGenerate:
    """Tests for per-scale unit generation."""

    def test_hour_scale(self):
        """Test 5-minute slots from 8:00 to 18:00 inclusive."""
        units = generate(Scale.HOUR, date(2024, 4, 1), HourWindow(8, 18), DayWindow())
        assert len(units) == 121
        assert units[0] == 480
        assert units[-1] == 1080
        assert all(b - a == 5 for a, b in zip(units, units[1:]))

    def test_day_scale(self):
        """Test seven consecutive dates from the anchor."""
        units = generate(Scale.DAY, date(2024, 4, 1), HourWindow(), DayWindow(day_length=7))
        assert units == [date(2024, 4, d) for d in range(1, 8)]

    def test_week_and_month_lengths(self):
        """Test that week and month windows use their own lengths."""
        window = DayWindow(day_length=7, week_length=14, month_length=60)
        anchor = date(2024, 4, 1)
        assert len(generate(Scale.WEEK, anchor, HourWindow(), window)) == 14
        month = generate(Scale.MONTH, anchor, HourWindow(), window)
        assert len(month) == 60
        assert month[-1] == date(2024, 5, 30)


class TestGroupByMonth:
    """Tests for month header grouping."""

    def test_groups_across_months(self):
        """Test a run spanning the end of March into April."""
        dates = generate(Scale.DAY, date(2024, 3, 28), HourWindow(), DayWindow(day_length=7))
        assert group_by_month(dates) == [
            MonthGroup("2024年3月", 4),
            MonthGroup("2024年4月", 3),
        ]

    def test_counts_cover_all_dates(self):
        """Test that group counts add up to the number of dates."""
        dates = generate(Scale.MONTH, date(2024, 1, 15), HourWindow(), DayWindow(month_length=90))
        groups = group_by_month(dates)
        assert sum(g.count for g in groups) == 90
        assert [g.label for g in groups] == ["2024年1月", "2024年2月", "2024年3月", "2024年4月"]

    def test_provisional_has_no_groups(self):
        """Test that provisional projects produce no month headers."""
        dates = generate(Scale.DAY, date(2024, 4, 1), HourWindow(), DayWindow())
        assert group_by_month(dates, provisional=True) == []

    def test_empty(self):
        """Test grouping no dates."""
        assert group_by_month([]) == []

    def test_hour_scale_project(self):
        """Test that the hour scale has no month header."""
        assert month_groups_for(make_project(scale=Scale.HOUR)) == []


class TestBuildCells:
    """Tests for header cell construction."""

    def test_day_cells_flags(self):
        """Test weekend, holiday and non-working flags on real dates."""
        calendar = FakeHolidays({date(2024, 4, 3): "Test Holiday"})
        project = make_project(workday_rules=WorkdayRules(saturday_non_working=True))
        cells = build_cells(project, calendar)

        assert [c.label for c in cells] == ["1", "2", "3", "4", "5", "6", "7"]
        assert cells[0].sub_label == "月"
        assert cells[2].sunday_or_holiday and cells[2].non_working
        assert cells[5].saturday and cells[5].non_working
        assert cells[6].sunday_or_holiday and cells[6].non_working
        assert not cells[1].non_working

    def test_provisional_cells(self):
        """Test relative day labels with a Monday-first weekday cycle."""
        project = make_project(provisional=True, day_window=DayWindow(day_length=10))
        cells = build_cells(project, FakeHolidays())

        assert [c.label for c in cells] == [str(i) for i in range(1, 11)]
        assert cells[0].sub_label == "月"
        assert cells[7].sub_label == "月"
        assert cells[6].sunday_or_holiday and cells[6].non_working
        assert cells[5].saturday and not cells[5].non_working

    def test_hour_cells(self):
        """Test that only whole hours carry a label."""
        cells = build_cells(make_project(scale=Scale.HOUR))
        assert len(cells) == 121
        assert cells[0].label == "8時"
        assert cells[1].label == ""
        assert cells[12].label == "9時"
        assert cells[-1].label == "18時"


class TestLabels:
    """Tests for time and unit labels."""

    def test_minutes_to_time(self):
        """Test H:MM formatting."""
        assert minutes_to_time(480) == "8:00"
        assert minutes_to_time(575) == "9:35"
        assert minutes_to_time(1440) == "24:00"

    def test_time_to_minutes(self):
        """Test parsing H:MM and bare hours."""
        assert time_to_minutes("9:30") == 570
        assert time_to_minutes(" 8 ") == 480

    def test_unit_label(self):
        """Test labels per scale and project kind."""
        assert unit_label(570, Scale.HOUR) == "9:30"
        assert unit_label(3, Scale.DAY) == "3日"
        assert unit_label(3, Scale.DAY, make_project()) == "4/3"
        assert unit_label(3, Scale.WEEK, make_project(provisional=True)) == "3日"
