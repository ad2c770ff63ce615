"""Grid unit generation for each display scale."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Union

from barplanner.models import DayWindow, HourWindow, Project, Scale
from barplanner.workdays import (
    WEEKDAY_LABELS,
    HolidayCalendar,
    is_holiday,
    is_non_working,
)


# Minutes per hour-scale cell
MINUTE_STEP = 5

# Cell width in pixels for each scale
CELL_WIDTHS = {
    Scale.HOUR: 24,
    Scale.DAY: 32,
    Scale.WEEK: 20,
    Scale.MONTH: 14,
}

GridUnit = Union[int, date]


@dataclass(frozen=True)
class MonthGroup:
    """A run of consecutive grid dates within the same calendar month."""

    label: str
    count: int


@dataclass(frozen=True)
class GridCell:
    """One column of the chart grid with its header labels.

    Attributes:
        index: 0-based column index
        value: Minute of day (hour scale) or calendar date
        label: Main header text
        sub_label: Secondary header text (weekday), empty for the hour scale
        saturday: Column falls on a Saturday
        sunday_or_holiday: Column falls on a Sunday or national holiday
        non_working: Column is a non-working day under the project's rules
    """

    index: int
    value: GridUnit
    label: str
    sub_label: str = ""
    saturday: bool = False
    sunday_or_holiday: bool = False
    non_working: bool = False


def minutes_to_time(minutes: int) -> str:
    """Format minutes of the day as ``H:MM``."""
    hours, rest = divmod(minutes, 60)
    return f"{hours}:{rest:02d}"


def time_to_minutes(text: str) -> int:
    """Parse an ``H:MM`` (or bare ``H``) string into minutes of the day."""
    hours, _, minutes = text.strip().partition(":")
    return int(hours) * 60 + (int(minutes) if minutes else 0)


def hour_slots(hour_window: HourWindow) -> list[int]:
    """Every 5-minute mark from the window start to its end, inclusive."""
    return list(range(hour_window.start_minutes, hour_window.end_minutes + 1, MINUTE_STEP))


def date_range(anchor: date, length: int) -> list[date]:
    """``length`` consecutive calendar dates starting at ``anchor``."""
    return [anchor + timedelta(days=offset) for offset in range(length)]


def generate(
    scale: Scale,
    anchor: date,
    hour_window: HourWindow,
    day_window: DayWindow,
) -> list[GridUnit]:
    """Generate the ordered grid units for a scale.

    The hour scale yields minutes of the day on the 5-minute grid; the day,
    week and month scales all yield one calendar date per column and differ
    only in how many days their window covers.

    Args:
        scale: Display scale
        anchor: Project anchor (start) date
        hour_window: Visible hours for the hour scale
        day_window: Window lengths for the day-based scales

    Returns:
        List of minutes (hour scale) or dates (other scales)
    """
    if scale is Scale.HOUR:
        return hour_slots(hour_window)
    return date_range(anchor, day_window.length_for(scale))


def group_by_month(dates: list[date], provisional: bool = False) -> list[MonthGroup]:
    """Run-length encode dates by calendar month for the month header row.

    Provisional projects have placeholder dates, so no groups are produced.
    """
    if provisional:
        return []

    groups: list[MonthGroup] = []
    current_label = None
    count = 0
    for d in dates:
        label = f"{d.year}年{d.month}月"
        if label != current_label:
            if current_label is not None:
                groups.append(MonthGroup(current_label, count))
            current_label = label
            count = 1
        else:
            count += 1

    if current_label is not None:
        groups.append(MonthGroup(current_label, count))

    return groups


def project_units(project: Project) -> list[GridUnit]:
    """Grid units for the project's active scale."""
    return generate(project.scale, project.start_date, project.hour_window, project.day_window)


def month_groups_for(project: Project) -> list[MonthGroup]:
    """Month header groups for the project's active scale."""
    if project.scale is Scale.HOUR:
        return []
    return group_by_month(project_units(project), provisional=project.provisional)


def build_cells(
    project: Project,
    calendar: Optional[HolidayCalendar] = None,
) -> list[GridCell]:
    """Build header cells for the project's active scale.

    Provisional projects label columns with relative day numbers and a
    weekday cycle starting on Monday instead of real calendar dates.
    """
    units = project_units(project)
    rules = project.workday_rules

    if project.scale is Scale.HOUR:
        return [
            GridCell(
                index=i,
                value=minutes,
                label=f"{minutes // 60}時" if minutes % 60 == 0 else "",
            )
            for i, minutes in enumerate(units)
        ]

    cells = []
    for i, d in enumerate(units):
        if project.provisional:
            weekday = i % 7
            saturday = weekday == 5
            sunday = weekday == 6
            cells.append(
                GridCell(
                    index=i,
                    value=d,
                    label=str(i + 1),
                    sub_label=WEEKDAY_LABELS[weekday],
                    saturday=saturday,
                    sunday_or_holiday=sunday,
                    non_working=(saturday and rules.saturday_non_working)
                    or (sunday and rules.sunday_non_working),
                )
            )
        else:
            cells.append(
                GridCell(
                    index=i,
                    value=d,
                    label=str(d.day),
                    sub_label=WEEKDAY_LABELS[d.weekday()],
                    saturday=d.weekday() == 5,
                    sunday_or_holiday=d.weekday() == 6 or is_holiday(d, calendar),
                    non_working=is_non_working(d, rules, calendar),
                )
            )

    return cells


def unit_label(value: int, scale: Scale, project: Optional[Project] = None) -> str:
    """Human-readable label for a schedule value on a scale.

    Hour values render as ``H:MM``; day offsets render as ``N日``, or as the
    calendar date they fall on when a non-provisional project is given.
    """
    if scale is Scale.HOUR:
        return minutes_to_time(value)
    if project is not None and not project.provisional:
        d = project.start_date + timedelta(days=value - 1)
        return f"{d.month}/{d.day}"
    return f"{value}日"
