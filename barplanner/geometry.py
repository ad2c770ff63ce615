"""Conversion between schedule intervals and bar pixel geometry."""

import math
from dataclasses import dataclass
from typing import Optional

from barplanner.grid import CELL_WIDTHS, MINUTE_STEP
from barplanner.models import DayWindow, HourWindow, Project, Scale, ScaleInterval

# Pixels trimmed from every bar so neighbouring cell borders stay visible
BAR_GAP = 4


@dataclass(frozen=True)
class BarGeometry:
    """Horizontal placement of a bar inside its row."""

    offset: float
    width: float

    @property
    def right(self) -> float:
        return self.offset + self.width


class GeometryMapper:
    """Map intervals to bar geometry and pointer positions back to values."""

    def __init__(
        self,
        cell_width: float,
        hour_window: Optional[HourWindow] = None,
        gap: float = BAR_GAP,
    ):
        if cell_width <= 0:
            raise ValueError(f"cell_width must be positive, got {cell_width}")
        self.cell_width = cell_width
        self.hour_window = hour_window or HourWindow()
        self.gap = gap

    @classmethod
    def for_project(cls, project: Project, cell_width: Optional[float] = None) -> "GeometryMapper":
        width = cell_width if cell_width is not None else CELL_WIDTHS[project.scale]
        return cls(width, project.hour_window)

    def to_geometry(self, interval: ScaleInterval, scale: Scale) -> BarGeometry:
        """Offset and width of the bar drawn for an interval.

        The width never drops below one cell (minus the gap), even for a
        zero or negative duration.
        """
        if scale is Scale.HOUR:
            start_cells = (interval.start - self.hour_window.start_minutes) / MINUTE_STEP
            duration_cells = (interval.end - interval.start) / MINUTE_STEP + 1
        else:
            start_cells = interval.start - 1
            duration_cells = interval.end - interval.start + 1

        return BarGeometry(
            offset=max(0, start_cells) * self.cell_width,
            width=max(1, duration_cells) * self.cell_width - self.gap,
        )

    def cell_span(self, interval: ScaleInterval, scale: Scale) -> range:
        """Indices of the grid cells a bar covers, matching ``to_geometry``."""
        geometry = self.to_geometry(interval, scale)
        first = int(geometry.offset // self.cell_width)
        count = int((geometry.width + self.gap) // self.cell_width)
        return range(first, first + count)

    def unit_index(self, pixel_x: float) -> int:
        """0-based index of the grid cell under a horizontal position."""
        return math.floor(pixel_x / self.cell_width)

    def from_position(self, pixel_x: float, scale: Scale) -> int:
        """Raw (unclamped) schedule value for the cell under a position."""
        index = self.unit_index(pixel_x)
        if scale is Scale.HOUR:
            return self.hour_window.start_minutes + index * MINUTE_STEP
        return index + 1

    def cell_count(self, scale: Scale, day_window: DayWindow) -> int:
        """Number of grid columns a scale displays."""
        if scale is Scale.HOUR:
            hours = self.hour_window.end_hour - self.hour_window.start_hour
            return hours * (60 // MINUTE_STEP) + 1
        return day_window.length_for(scale)

    def total_width(self, scale: Scale, day_window: DayWindow) -> float:
        """Width of the full grid in pixels."""
        return self.cell_count(scale, day_window) * self.cell_width
