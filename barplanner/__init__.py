"""Multi-scale construction bar chart planner."""

from barplanner.geometry import GeometryMapper
from barplanner.interaction import DragMode, InteractionController
from barplanner.models import Project, Scale, ScaleInterval, Task, WorkdayRules
from barplanner.schedule import ScheduleModel

__all__ = [
    "DragMode",
    "GeometryMapper",
    "InteractionController",
    "Project",
    "Scale",
    "ScaleInterval",
    "ScheduleModel",
    "Task",
    "WorkdayRules",
]
