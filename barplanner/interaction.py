"""Drag and resize gesture handling for task bars."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from barplanner.geometry import GeometryMapper
from barplanner.models import Project, Scale, ScaleInterval, Task
from barplanner.schedule import SCALE_SPECS, ScheduleModel


class DragMode(Enum):
    """What a drag gesture changes."""

    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


# Bar regions a gesture can start on
HANDLE_MODES = {
    "body": DragMode.MOVE,
    "left": DragMode.RESIZE_START,
    "right": DragMode.RESIZE_END,
}


@dataclass(frozen=True)
class DragState:
    """An active gesture.

    Attributes:
        mode: Move or resize
        origin: Task interval captured when the gesture started
        task: Task as of the last accepted frame
    """

    mode: DragMode
    origin: ScaleInterval
    task: Task


class InteractionController:
    """State machine turning pointer motion into schedule updates.

    The controller is idle until ``press`` starts a gesture. Each ``move``
    either commits one clamped update and returns the updated task, or skips
    the frame and returns None when the result would leave the interval
    degenerate. ``release`` ends the gesture and keeps the last accepted
    value.
    """

    def __init__(self, model: ScheduleModel, mapper: GeometryMapper, scale: Scale):
        self.model = model
        self.mapper = mapper
        self.scale = scale
        self._state: Optional[DragState] = None

    @classmethod
    def for_project(
        cls, project: Project, cell_width: Optional[float] = None
    ) -> "InteractionController":
        return cls(
            ScheduleModel.for_project(project),
            GeometryMapper.for_project(project, cell_width),
            project.scale,
        )

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is not None

    def press(self, task: Task, mode: DragMode) -> None:
        """Start a gesture on a task bar.

        Raises:
            RuntimeError: If a gesture is already in progress
        """
        if self._state is not None:
            raise RuntimeError("A drag gesture is already in progress")
        origin = self.model.resolve(task, self.scale)
        self._state = DragState(mode=mode, origin=origin, task=task)

    def press_target(self, task: Task, target: str) -> None:
        """Start a gesture from the bar body or one of its handles."""
        try:
            mode = HANDLE_MODES[target]
        except KeyError:
            raise ValueError(
                f"Unknown drag target: {target}. Use one of {', '.join(HANDLE_MODES)}."
            ) from None
        self.press(task, mode)

    def move(self, pixel_x: float) -> Optional[Task]:
        """Handle pointer motion to a position relative to the row start.

        Returns:
            The updated task, or None if the frame was skipped

        Raises:
            RuntimeError: If no gesture is in progress
        """
        if self._state is None:
            raise RuntimeError("No drag gesture in progress")

        state = self._state
        candidate = self.mapper.from_position(pixel_x, self.scale)
        low, high = self.model.bounds(self.scale)
        current = self.model.resolve(state.task, self.scale)

        if state.mode is DragMode.MOVE:
            duration = state.origin.end - state.origin.start
            if duration > high - low:
                interval = ScaleInterval(low, high)
            else:
                start = max(low, min(high - duration, candidate))
                interval = ScaleInterval(start, start + duration)
            updated = self.model.set_interval(state.task, self.scale, interval)
        elif state.mode is DragMode.RESIZE_START:
            if not (low <= candidate < current.end):
                return None
            updated = self.model.update(state.task, self.scale, "start", candidate)
        else:
            end = candidate + SCALE_SPECS[self.scale].unit
            if not (current.start < end <= high):
                return None
            updated = self.model.update(state.task, self.scale, "end", end)

        self._state = DragState(mode=state.mode, origin=state.origin, task=updated)
        return updated

    def release(self) -> Optional[Task]:
        """End the gesture, returning the task as of the last accepted frame."""
        if self._state is None:
            return None
        task = self._state.task
        self._state = None
        return task

    def lose_capture(self) -> Optional[Task]:
        """Pointer capture lost; treated exactly like a release."""
        return self.release()
