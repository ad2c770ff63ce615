"""JSON persistence of projects, tasks and trades."""

import calendar
import json
import uuid
import warnings
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from barplanner.models import (
    DEFAULT_TRADES,
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
from barplanner.schedule import new_task, renumber, reorder, reorder_by_ids, sorted_tasks


DEFAULT_STORE_FILE = "barchart.json"


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _add_one_month(d: date) -> date:
    year, month = (d.year + 1, 1) if d.month == 12 else (d.year, d.month + 1)
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def default_trades() -> list[Trade]:
    """Fresh copies of the built-in trades with new ids."""
    return [
        Trade(id=str(uuid.uuid4()), name=name, color=color, order=i)
        for i, (name, color) in enumerate(DEFAULT_TRADES)
    ]


# --- Serialization ---------------------------------------------------------


def schedule_to_dict(schedule: Optional[MultiScaleSchedule]) -> Optional[dict]:
    if schedule is None:
        return None
    result = {}
    for scale in Scale:
        interval = schedule.get(scale)
        if interval is not None:
            result[scale.value] = {"start": int(interval.start), "end": int(interval.end)}
    return result


def _interval_from_dict(data) -> Optional[ScaleInterval]:
    if not isinstance(data, dict):
        return None
    start, end = data.get("start"), data.get("end")
    if isinstance(start, bool) or isinstance(end, bool):
        return None
    if not isinstance(start, int) or not isinstance(end, int):
        return None
    return ScaleInterval(start, end)


def schedule_from_dict(data: Optional[dict], task_id: str = "") -> Optional[MultiScaleSchedule]:
    """Parse a stored schedule, dropping entries that are not valid intervals.

    Dropped entries resolve to the scale defaults later on.
    """
    if not data:
        return None

    intervals = {}
    for scale in Scale:
        if scale.value not in data:
            continue
        interval = _interval_from_dict(data[scale.value])
        if interval is None:
            warnings.warn(
                f"Task '{task_id}' has a malformed {scale.value} schedule entry "
                f"({data[scale.value]!r}); using the default interval.",
                category=UserWarning,
                stacklevel=2,
            )
            continue
        intervals[scale.value] = interval

    return MultiScaleSchedule(**intervals)


def rules_to_dict(rules: WorkdayRules) -> dict:
    return {
        "skip_saturday": rules.saturday_non_working,
        "skip_sunday": rules.sunday_non_working,
        "skip_holidays": rules.holidays_non_working,
        "custom_holidays": sorted(rules.non_working_dates),
        "custom_workdays": sorted(rules.working_dates),
        "show_only_workdays": rules.display_only_working_days,
    }


def rules_from_dict(data: Optional[dict]) -> WorkdayRules:
    if not data:
        return WorkdayRules()
    defaults = WorkdayRules()
    return WorkdayRules(
        saturday_non_working=bool(data.get("skip_saturday", defaults.saturday_non_working)),
        sunday_non_working=bool(data.get("skip_sunday", defaults.sunday_non_working)),
        holidays_non_working=bool(data.get("skip_holidays", defaults.holidays_non_working)),
        non_working_dates=frozenset(data.get("custom_holidays", [])),
        working_dates=frozenset(data.get("custom_workdays", [])),
        display_only_working_days=bool(data.get("show_only_workdays", False)),
    )


def project_to_dict(project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "address": project.address,
        "manager": project.manager,
        "start_date": project.start_date.isoformat(),
        "end_date": project.end_date.isoformat(),
        "remarks": project.remarks,
        "provisional": project.provisional,
        "scale": project.scale.value,
        "hour_window": {
            "start_hour": project.hour_window.start_hour,
            "end_hour": project.hour_window.end_hour,
        },
        "day_window": {
            "day_length": project.day_window.day_length,
            "week_length": project.day_window.week_length,
            "month_length": project.day_window.month_length,
        },
        "workday_rules": rules_to_dict(project.workday_rules),
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


def project_from_dict(data: dict) -> Project:
    """Build a project from its stored form.

    Missing window settings fall back to the defaults.
    """
    return Project(
        id=data["id"],
        name=data["name"],
        address=data.get("address", ""),
        manager=data.get("manager", ""),
        start_date=date.fromisoformat(data["start_date"]),
        end_date=date.fromisoformat(data.get("end_date") or data["start_date"]),
        remarks=data.get("remarks", ""),
        provisional=bool(data.get("provisional", False)),
        scale=Scale(data.get("scale", Scale.DAY.value)),
        hour_window=HourWindow(**data["hour_window"]) if data.get("hour_window") else HourWindow(),
        day_window=DayWindow(**data["day_window"]) if data.get("day_window") else DayWindow(),
        workday_rules=rules_from_dict(data.get("workday_rules")),
        created_at=data.get("created_at", ""),
        updated_at=data.get("updated_at", ""),
    )


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "project_id": task.project_id,
        "name": task.name,
        "assignee": task.assignee,
        "color": task.color,
        "trade_id": task.trade_id,
        "order": task.order,
        "schedule": schedule_to_dict(task.schedule),
    }


def task_from_dict(data: dict) -> Task:
    return Task(
        id=data["id"],
        project_id=data["project_id"],
        name=data.get("name", ""),
        assignee=data.get("assignee", ""),
        color=data.get("color"),
        trade_id=data.get("trade_id"),
        order=int(data.get("order", 0)),
        schedule=schedule_from_dict(data.get("schedule"), task_id=data["id"]),
    )


def trade_to_dict(trade: Trade) -> dict:
    return {"id": trade.id, "name": trade.name, "color": trade.color, "order": trade.order}


def trade_from_dict(data: dict) -> Trade:
    return Trade(
        id=data["id"],
        name=data["name"],
        color=data["color"],
        order=int(data.get("order", 0)),
    )


# --- Store -----------------------------------------------------------------


class ProjectStore:
    """In-memory collections of projects, tasks and trades backed by a JSON file.

    Expected format:
    {
        "projects": [{"id": "...", "name": "...", "start_date": "2024-04-01", ...}],
        "tasks": [{"id": "...", "project_id": "...", "schedule": {"day": {"start": 1, "end": 3}}}],
        "trades": [{"id": "...", "name": "電気工事", "color": "#3B82F6", "order": 0}]
    }
    """

    def __init__(
        self,
        path: Optional[str] = None,
        projects: Optional[list[Project]] = None,
        tasks: Optional[list[Task]] = None,
        trades: Optional[list[Trade]] = None,
    ):
        self.path = path
        self.projects: list[Project] = list(projects or [])
        self.tasks: list[Task] = list(tasks or [])
        self.trades: list[Trade] = list(trades) if trades is not None else default_trades()

    @classmethod
    def load(cls, path: str = DEFAULT_STORE_FILE) -> "ProjectStore":
        """Load a store from a JSON file, or start an empty one if it doesn't exist."""
        file_path = Path(path)
        if not file_path.exists():
            return cls(path=path)

        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)

        trades = data.get("trades")
        return cls(
            path=path,
            projects=[project_from_dict(p) for p in data.get("projects", [])],
            tasks=[task_from_dict(t) for t in data.get("tasks", [])],
            trades=[trade_from_dict(t) for t in trades] if trades is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            "projects": [project_to_dict(p) for p in self.projects],
            "tasks": [task_to_dict(t) for t in self.tasks],
            "trades": [trade_to_dict(t) for t in self.trades],
        }

    def save(self, path: Optional[str] = None) -> None:
        """Write the store to its JSON file."""
        target = path or self.path or DEFAULT_STORE_FILE
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    # Projects

    def get_project(self, key: str) -> Project:
        """Find a project by id, or by name when no id matches.

        Raises:
            KeyError: If no project matches
        """
        for project in self.projects:
            if project.id == key:
                return project
        matches = [p for p in self.projects if p.name == key]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise KeyError(f"Project name '{key}' is ambiguous; use the project id.")
        raise KeyError(f"Project '{key}' not found.")

    def add_project(
        self,
        name: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        provisional: bool = True,
        **fields,
    ) -> Project:
        """Create a project.

        New projects start today, run for one month and are provisional
        unless told otherwise.
        """
        start = start_date or date.today()
        now = _now()
        project = Project(
            id=str(uuid.uuid4()),
            name=name.strip(),
            start_date=start,
            end_date=end_date or _add_one_month(start),
            provisional=provisional,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.projects.append(project)
        return project

    def update_project(self, project_id: str, **changes) -> Project:
        project = self.get_project(project_id)
        updated = replace(project, updated_at=_now(), **changes)
        self.projects = [updated if p.id == project.id else p for p in self.projects]
        return updated

    def set_scale(self, project_id: str, scale: Scale) -> Project:
        """Switch the active scale; task schedules are left untouched."""
        return self.update_project(project_id, scale=scale)

    def delete_project(self, project_id: str) -> None:
        """Delete a project together with its tasks."""
        project = self.get_project(project_id)
        self.projects = [p for p in self.projects if p.id != project.id]
        self.tasks = [t for t in self.tasks if t.project_id != project.id]

    # Tasks

    def project_tasks(self, project_id: str) -> list[Task]:
        """Tasks of a project in display order."""
        return sorted_tasks([t for t in self.tasks if t.project_id == project_id])

    def get_task(self, key: str, project_id: Optional[str] = None) -> Task:
        """Find a task by id, or by name within a project.

        Raises:
            KeyError: If no task matches
        """
        for task in self.tasks:
            if task.id == key:
                return task
        candidates = self.tasks if project_id is None else self.project_tasks(project_id)
        matches = [t for t in candidates if t.name == key]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise KeyError(f"Task name '{key}' is ambiguous; use the task id.")
        raise KeyError(f"Task '{key}' not found.")

    def add_task(self, project_id: str, name: str, **fields) -> Task:
        project = self.get_project(project_id)
        task = new_task(project, self.project_tasks(project.id), name, **fields)
        self.tasks.append(task)
        return task

    def put_task(self, task: Task) -> Task:
        """Store a task returned by the schedule engine, replacing the old copy."""
        if not any(t.id == task.id for t in self.tasks):
            raise KeyError(f"Task '{task.id}' not found.")
        self.tasks = [task if t.id == task.id else t for t in self.tasks]
        return task

    def update_task(self, task_id: str, **changes) -> Task:
        return self.put_task(replace(self.get_task(task_id), **changes))

    def delete_task(self, task_id: str) -> None:
        """Delete a task and close the gap it leaves in the display order."""
        task = self.get_task(task_id)
        remaining = [t for t in self.project_tasks(task.project_id) if t.id != task.id]
        self._replace_project_tasks(task.project_id, renumber(remaining))

    def move_task(self, moved_id: str, target_id: str) -> list[Task]:
        """Move a task to another task's position."""
        moved = self.get_task(moved_id)
        reordered = reorder(self.project_tasks(moved.project_id), moved.id, target_id)
        self._replace_project_tasks(moved.project_id, reordered)
        return reordered

    def reorder_tasks(self, project_id: str, task_ids: list[str]) -> list[Task]:
        """Set the display order of a project's tasks from a list of ids."""
        reordered = renumber(reorder_by_ids(self.project_tasks(project_id), task_ids))
        self._replace_project_tasks(project_id, reordered)
        return reordered

    def _replace_project_tasks(self, project_id: str, tasks: list[Task]) -> None:
        self.tasks = [t for t in self.tasks if t.project_id != project_id] + list(tasks)

    # Trades

    def get_trade(self, trade_id: str) -> Trade:
        for trade in self.trades:
            if trade.id == trade_id or trade.name == trade_id:
                return trade
        raise KeyError(f"Trade '{trade_id}' not found.")

    def add_trade(self, name: str, color: str) -> Trade:
        trade = Trade(id=str(uuid.uuid4()), name=name.strip(), color=color, order=len(self.trades))
        self.trades.append(trade)
        return trade

    def update_trade(self, trade_id: str, **changes) -> Trade:
        trade = self.get_trade(trade_id)
        updated = replace(trade, **changes)
        self.trades = [updated if t.id == trade.id else t for t in self.trades]
        return updated

    def delete_trade(self, trade_id: str) -> None:
        """Delete a trade and clear it from the tasks that referenced it."""
        trade = self.get_trade(trade_id)
        self.trades = [t for t in self.trades if t.id != trade.id]
        self.tasks = [
            replace(t, trade_id=None) if t.trade_id == trade.id else t for t in self.tasks
        ]
