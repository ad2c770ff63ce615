"""Per-scale task schedule resolution, clamping and task ordering."""

import math
import uuid
from dataclasses import dataclass, replace
from typing import Optional

from barplanner.models import (
    DEFAULT_INTERVALS,
    DayWindow,
    HourWindow,
    MultiScaleSchedule,
    Project,
    Scale,
    ScaleInterval,
    Task,
)


@dataclass(frozen=True)
class ScaleSpec:
    """Constants governing one display scale.

    Attributes:
        unit: Smallest schedule increment (minutes or days)
        day_based: Values are 1-based day offsets rather than minutes
    """

    unit: int
    day_based: bool


SCALE_SPECS = {
    Scale.HOUR: ScaleSpec(unit=5, day_based=False),
    Scale.DAY: ScaleSpec(unit=1, day_based=True),
    Scale.WEEK: ScaleSpec(unit=1, day_based=True),
    Scale.MONTH: ScaleSpec(unit=1, day_based=True),
}

FIELDS = ("start", "end")

# Length of a task appended on the hour scale
NEW_HOUR_TASK_MINUTES = 60


def quantize(value: float, unit: int) -> int:
    """Round to the nearest multiple of ``unit``, halves rounding up."""
    return int(math.floor(value / unit + 0.5)) * unit


class ScheduleModel:
    """Resolve and update the scale-specific intervals of tasks.

    Every scale is handled by the same code path, parameterized by
    ``SCALE_SPECS`` and the project's hour and day windows.
    """

    def __init__(
        self,
        hour_window: Optional[HourWindow] = None,
        day_window: Optional[DayWindow] = None,
    ):
        """Initialize the model.

        Args:
            hour_window: Visible hours bounding hour-scale values
            day_window: Window lengths bounding day-based values
        """
        self.hour_window = hour_window or HourWindow()
        self.day_window = day_window or DayWindow()

    @classmethod
    def for_project(cls, project: Project) -> "ScheduleModel":
        return cls(project.hour_window, project.day_window)

    def bounds(self, scale: Scale) -> tuple[int, int]:
        """Smallest and largest value a field may take on a scale."""
        if SCALE_SPECS[scale].day_based:
            return 1, self.day_window.length_for(scale)
        return self.hour_window.start_minutes, self.hour_window.end_minutes

    def clamp(self, value: float, scale: Scale) -> int:
        """Quantize a raw value to the scale's unit and bound it to the window."""
        spec = SCALE_SPECS[scale]
        low, high = self.bounds(scale)
        quantized = quantize(value, spec.unit) if spec.unit > 1 else int(value)
        return max(low, min(high, quantized))

    def resolve(self, task: Task, scale: Scale) -> ScaleInterval:
        """Return the task's interval on a scale, or the scale's default."""
        interval = task.schedule.get(scale) if task.schedule is not None else None
        if not isinstance(interval, ScaleInterval):
            return DEFAULT_INTERVALS[scale]
        return interval

    def update(self, task: Task, scale: Scale, field: str, raw_value: float) -> Task:
        """Return a copy of the task with one field of one scale replaced.

        The value is clamped for the scale. The other field and the other
        scales are left as they are; keeping ``start <= end`` is the
        caller's responsibility.

        Args:
            task: Task to update
            scale: Scale whose interval changes
            field: ``"start"`` or ``"end"``
            raw_value: Unclamped value

        Returns:
            The updated task

        Raises:
            ValueError: If field is not ``"start"`` or ``"end"``
        """
        if field not in FIELDS:
            raise ValueError(f"Unknown schedule field: {field}. Use 'start' or 'end'.")

        interval = replace(self.resolve(task, scale), **{field: self.clamp(raw_value, scale)})
        return self.set_interval(task, scale, interval)

    def set_interval(self, task: Task, scale: Scale, interval: ScaleInterval) -> Task:
        """Return a copy of the task with both fields of one scale replaced."""
        schedule = task.schedule or MultiScaleSchedule()
        return replace(task, schedule=schedule.with_interval(scale, interval))

    def is_ordered(self, interval: ScaleInterval, scale: Scale) -> bool:
        """Hour intervals need ``start < end``; day offsets may cover a single day."""
        if SCALE_SPECS[scale].day_based:
            return interval.start <= interval.end
        return interval.start < interval.end

    def is_valid(self, interval: ScaleInterval, scale: Scale) -> bool:
        """Check ordering, window bounds and grid alignment of an interval."""
        low, high = self.bounds(scale)
        unit = SCALE_SPECS[scale].unit
        return (
            self.is_ordered(interval, scale)
            and low <= interval.start and interval.end <= high
            and interval.start % unit == 0
            and interval.end % unit == 0
        )


def sorted_tasks(tasks: list[Task]) -> list[Task]:
    """Tasks in display order."""
    return sorted(tasks, key=lambda t: t.order)


def renumber(tasks: list[Task]) -> list[Task]:
    """Reassign dense 0-based orders following the current display order."""
    return [
        task if task.order == index else replace(task, order=index)
        for index, task in enumerate(sorted_tasks(tasks))
    ]


def new_task(
    project: Project,
    existing: list[Task],
    name: str,
    assignee: str = "",
    trade_id: Optional[str] = None,
    color: Optional[str] = None,
    task_id: Optional[str] = None,
) -> Task:
    """Create a task appended after the project's existing tasks.

    On the hour scale the new task starts where the last task ends and lasts
    an hour, trimmed to the visible window. When the window has no room left
    (or on any other scale) the task starts with no schedule and resolves to
    the built-in defaults.

    Args:
        project: Owning project
        existing: The project's current tasks
        name: Task name
        assignee: Person in charge
        trade_id: Optional trade reference
        color: Optional explicit color
        task_id: Id to use (a new uuid4 if not given)

    Returns:
        The new task

    Raises:
        ValueError: If the name is blank
    """
    if not name.strip():
        raise ValueError("Task name must not be empty.")

    schedule = None
    if project.scale is Scale.HOUR and existing:
        model = ScheduleModel.for_project(project)
        last = sorted_tasks(existing)[-1]
        start = model.clamp(model.resolve(last, Scale.HOUR).end, Scale.HOUR)
        end = min(start + NEW_HOUR_TASK_MINUTES, project.hour_window.end_minutes)
        if start < end:
            schedule = MultiScaleSchedule.default().with_interval(
                Scale.HOUR, ScaleInterval(start, end)
            )

    return Task(
        id=task_id or str(uuid.uuid4()),
        project_id=project.id,
        name=name.strip(),
        assignee=assignee,
        color=color,
        trade_id=trade_id,
        order=len(existing),
        schedule=schedule,
    )


def reorder(tasks: list[Task], moved_id: str, target_id: str) -> list[Task]:
    """Move one task to the position of another and renumber densely.

    Unknown ids, or moving a task onto itself, leave the order unchanged.

    Returns:
        All tasks in their new display order
    """
    ordered = sorted_tasks(tasks)
    ids = [t.id for t in ordered]
    if moved_id == target_id or moved_id not in ids or target_id not in ids:
        return ordered

    moved_index = ids.index(moved_id)
    target_index = ids.index(target_id)
    moved = ordered.pop(moved_index)
    ordered.insert(target_index, moved)

    return [
        task if task.order == index else replace(task, order=index)
        for index, task in enumerate(ordered)
    ]


def reorder_by_ids(tasks: list[Task], task_ids: list[str]) -> list[Task]:
    """Assign each listed task its position in ``task_ids`` as its order.

    Tasks not listed keep their current order.
    """
    positions = {task_id: index for index, task_id in enumerate(task_ids)}
    return [
        replace(task, order=positions[task.id]) if task.id in positions else task
        for task in tasks
    ]
