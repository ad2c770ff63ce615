"""Data models for the multi-scale bar chart planner."""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Optional


class Scale(Enum):
    """Display granularity of the chart."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# Selectable window lengths offered by the scale selector
HOUR_OPTIONS = tuple(range(0, 25))
DAY_LENGTH_OPTIONS = (3, 5, 7, 10, 14, 21, 28, 30)
WEEK_LENGTH_OPTIONS = (7, 14, 21, 28, 30, 45, 60, 90)
MONTH_LENGTH_OPTIONS = (30, 45, 60, 90, 120, 180, 365)

DEFAULT_TASK_COLOR = "#3B82F6"


@dataclass(frozen=True)
class HourWindow:
    """Visible time-of-day range for the hour scale.

    Attributes:
        start_hour: First visible hour (0-23)
        end_hour: Last visible hour (1-24), exclusive of anything after it
    """

    start_hour: int = 8
    end_hour: int = 18

    def __post_init__(self):
        if not 0 <= self.start_hour <= 23:
            raise ValueError(f"start_hour must be within 0-23, got {self.start_hour}")
        if not 1 <= self.end_hour <= 24:
            raise ValueError(f"end_hour must be within 1-24, got {self.end_hour}")
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})"
            )

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60


@dataclass(frozen=True)
class DayWindow:
    """Number of calendar days shown by each day-based scale.

    Attributes:
        day_length: Days shown on the day scale
        week_length: Days shown on the week scale
        month_length: Days shown on the month scale
    """

    day_length: int = 7
    week_length: int = 30
    month_length: int = 60

    def __post_init__(self):
        for name in ("day_length", "week_length", "month_length"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be a positive number of days, got {value}")

    def length_for(self, scale: Scale) -> int:
        """Window length in days for a day-based scale."""
        if scale is Scale.DAY:
            return self.day_length
        if scale is Scale.WEEK:
            return self.week_length
        if scale is Scale.MONTH:
            return self.month_length
        raise ValueError("The hour scale has no day window")


@dataclass(frozen=True)
class WorkdayRules:
    """Business-day policy of a project.

    Override sets hold ISO ``YYYY-MM-DD`` strings. A date listed in
    ``working_dates`` is always a working day; a date listed in
    ``non_working_dates`` is a non-working day unless it is also a working
    override.
    """

    saturday_non_working: bool = False
    sunday_non_working: bool = True
    holidays_non_working: bool = True
    non_working_dates: frozenset = field(default_factory=frozenset)
    working_dates: frozenset = field(default_factory=frozenset)
    display_only_working_days: bool = False

    def with_non_working_date(self, iso_date: str) -> "WorkdayRules":
        return replace(self, non_working_dates=self.non_working_dates | {iso_date})

    def without_non_working_date(self, iso_date: str) -> "WorkdayRules":
        return replace(self, non_working_dates=self.non_working_dates - {iso_date})

    def with_working_date(self, iso_date: str) -> "WorkdayRules":
        return replace(self, working_dates=self.working_dates | {iso_date})

    def without_working_date(self, iso_date: str) -> "WorkdayRules":
        return replace(self, working_dates=self.working_dates - {iso_date})


@dataclass(frozen=True)
class ScaleInterval:
    """A start/end pair in the units of one scale.

    Hour scale units are minutes of the day; the other scales use 1-based
    day offsets from the project's anchor date.
    """

    start: int
    end: int


DEFAULT_INTERVALS = {
    Scale.HOUR: ScaleInterval(480, 540),  # 8:00-9:00
    Scale.DAY: ScaleInterval(1, 3),
    Scale.WEEK: ScaleInterval(1, 7),
    Scale.MONTH: ScaleInterval(1, 14),
}


@dataclass(frozen=True)
class MultiScaleSchedule:
    """The four independent intervals a task carries, one per scale."""

    hour: Optional[ScaleInterval] = None
    day: Optional[ScaleInterval] = None
    week: Optional[ScaleInterval] = None
    month: Optional[ScaleInterval] = None

    @classmethod
    def default(cls) -> "MultiScaleSchedule":
        return cls(
            hour=DEFAULT_INTERVALS[Scale.HOUR],
            day=DEFAULT_INTERVALS[Scale.DAY],
            week=DEFAULT_INTERVALS[Scale.WEEK],
            month=DEFAULT_INTERVALS[Scale.MONTH],
        )

    def get(self, scale: Scale) -> Optional[ScaleInterval]:
        return {
            Scale.HOUR: self.hour,
            Scale.DAY: self.day,
            Scale.WEEK: self.week,
            Scale.MONTH: self.month,
        }[scale]

    def with_interval(self, scale: Scale, interval: ScaleInterval) -> "MultiScaleSchedule":
        """Return a fully populated copy with ``scale`` set to ``interval``."""
        filled = self.filled()
        return replace(filled, **{scale.value: interval})

    def filled(self) -> "MultiScaleSchedule":
        """Return a copy where every missing scale holds its default."""
        return MultiScaleSchedule(
            **{
                scale.value: self.get(scale)
                if isinstance(self.get(scale), ScaleInterval)
                else DEFAULT_INTERVALS[scale]
                for scale in Scale
            }
        )


@dataclass(frozen=True)
class Trade:
    """A construction trade used to categorize and color tasks."""

    id: str
    name: str
    color: str
    order: int = 0


DEFAULT_TRADES = [
    ("電気工事", "#3B82F6"),  # Electrical
    ("配管工事", "#10B981"),  # Plumbing
    ("大工工事", "#F59E0B"),  # Carpentry
    ("塗装工事", "#EF4444"),  # Painting
    ("内装工事", "#8B5CF6"),  # Interior
    ("外構工事", "#EC4899"),  # Exterior
    ("その他", "#6B7280"),  # Other
]


@dataclass(frozen=True)
class Task:
    """A process row on the chart.

    Attributes:
        id: Unique task id
        project_id: Id of the owning project
        name: Task name
        assignee: Person or company in charge
        color: Explicit bar color, overriding the trade color
        trade_id: Optional trade reference
        order: Display position, dense within the project
        schedule: Per-scale intervals (None until first touched)
    """

    id: str
    project_id: str
    name: str
    assignee: str = ""
    color: Optional[str] = None
    trade_id: Optional[str] = None
    order: int = 0
    schedule: Optional[MultiScaleSchedule] = None

    def display_color(self, trades: list[Trade]) -> str:
        """Explicit color, else the trade's color, else the default blue."""
        if self.color:
            return self.color
        if self.trade_id:
            for trade in trades:
                if trade.id == self.trade_id:
                    return trade.color
        return DEFAULT_TASK_COLOR


@dataclass(frozen=True)
class Project:
    """Scheduling-relevant project record.

    Attributes:
        id: Unique project id
        name: Construction name
        start_date: Anchor date the day-based grids start from
        end_date: Overall project end date
        provisional: Dates are placeholders; only relative day numbers matter
        scale: Currently active display scale
        hour_window: Visible hours for the hour scale
        day_window: Visible day counts for the day-based scales
        workday_rules: Business-day policy
    """

    id: str
    name: str
    start_date: date
    end_date: date
    address: str = ""
    manager: str = ""
    remarks: str = ""
    provisional: bool = False
    scale: Scale = Scale.DAY
    hour_window: HourWindow = field(default_factory=HourWindow)
    day_window: DayWindow = field(default_factory=DayWindow)
    workday_rules: WorkdayRules = field(default_factory=WorkdayRules)
    created_at: str = ""
    updated_at: str = ""
