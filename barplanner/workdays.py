"""Working-day rules and Japanese national holiday lookup."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Protocol, Union

import holidays

from barplanner.models import WorkdayRules


DateLike = Union[date, datetime, str]

WEEKDAY_LABELS = ["月", "火", "水", "木", "金", "土", "日"]


@dataclass(frozen=True)
class Holiday:
    """A gazetted national holiday."""

    date: date
    name: str


class HolidayCalendar(Protocol):
    """Lookup of national holidays used by the workday rules."""

    def is_national_holiday(self, day: date) -> bool:
        ...

    def holiday_name(self, day: date) -> Optional[str]:
        ...

    def holidays_in_range(self, start: date, end: date) -> list[Holiday]:
        ...


class JapaneseHolidays:
    """Japanese national holidays, backed by the ``holidays`` package."""

    def __init__(self):
        self._calendar = holidays.country_holidays("JP")

    def is_national_holiday(self, day: date) -> bool:
        return day in self._calendar

    def holiday_name(self, day: date) -> Optional[str]:
        return self._calendar.get(day)

    def holidays_in_range(self, start: date, end: date) -> list[Holiday]:
        """List holidays between start and end (inclusive), in date order."""
        if end < start:
            return []
        in_years = holidays.country_holidays("JP", years=range(start.year, end.year + 1))
        return sorted(
            (Holiday(d, name) for d, name in in_years.items() if start <= d <= end),
            key=lambda h: h.date,
        )


_default_calendar: Optional[JapaneseHolidays] = None


def default_holidays() -> JapaneseHolidays:
    """Shared Japanese holiday calendar."""
    global _default_calendar
    if _default_calendar is None:
        _default_calendar = JapaneseHolidays()
    return _default_calendar


def as_date(value: DateLike) -> date:
    """Reduce a date, datetime or ISO string to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def is_holiday(day: DateLike, calendar: Optional[HolidayCalendar] = None) -> bool:
    """Check if a date is a national holiday."""
    calendar = calendar or default_holidays()
    return calendar.is_national_holiday(as_date(day))


def is_non_working(
    day: DateLike,
    rules: WorkdayRules,
    calendar: Optional[HolidayCalendar] = None,
) -> bool:
    """Decide whether a date is a non-working day under the given rules.

    Rules are evaluated in precedence order and the first match wins:

    1. Explicit working-date override: working
    2. Explicit non-working date: non-working
    3. Saturday, when Saturdays are skipped
    4. Sunday, when Sundays are skipped
    5. National holiday, when holidays are skipped

    Args:
        day: The date to check
        rules: Workday rules of the project
        calendar: Holiday lookup (defaults to Japanese national holidays)

    Returns:
        True if the date is not a working day
    """
    day = as_date(day)
    key = day.isoformat()

    if key in rules.working_dates:
        return False

    if key in rules.non_working_dates:
        return True

    if rules.saturday_non_working and day.weekday() == 5:
        return True

    if rules.sunday_non_working and day.weekday() == 6:
        return True

    if rules.holidays_non_working and is_holiday(day, calendar):
        return True

    return False


def count_working_days(
    start: DateLike,
    end: DateLike,
    rules: WorkdayRules,
    calendar: Optional[HolidayCalendar] = None,
) -> int:
    """Count working days between start and end dates (inclusive)."""
    start = as_date(start)
    end = as_date(end)
    if end < start:
        return 0

    total_days = (end - start).days + 1
    return sum(
        1
        for offset in range(total_days)
        if not is_non_working(start + timedelta(days=offset), rules, calendar)
    )


def add_working_days(
    start: DateLike,
    workdays: int,
    rules: WorkdayRules,
    calendar: Optional[HolidayCalendar] = None,
) -> date:
    """Return the date on which the ``workdays``-th working day after start falls.

    The start date itself is never counted, and is returned unchanged when
    ``workdays`` is 0 whether or not it is a working day.

    Raises:
        ValueError: If workdays is negative
    """
    if workdays < 0:
        raise ValueError(f"workdays must not be negative, got {workdays}")

    current = as_date(start)
    count = 0
    while count < workdays:
        current = current + timedelta(days=1)
        if not is_non_working(current, rules, calendar):
            count += 1

    return current


def weekday_label(day: DateLike) -> str:
    """Japanese single-character weekday name."""
    return WEEKDAY_LABELS[as_date(day).weekday()]


def week_number(day: DateLike) -> int:
    """Week number with weeks starting on Monday."""
    return as_date(day).isocalendar()[1]
