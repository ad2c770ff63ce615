"""Terminal rendering of bar charts."""

from datetime import timedelta
from io import StringIO
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from barplanner.geometry import GeometryMapper
from barplanner.grid import build_cells, minutes_to_time, month_groups_for, unit_label
from barplanner.models import Project, Scale, Task, Trade
from barplanner.schedule import ScheduleModel, sorted_tasks
from barplanner.workdays import HolidayCalendar, count_working_days, default_holidays

NAME_WIDTH = 16
SLOTS_PER_HOUR = 12

SCALE_NAMES = {
    Scale.HOUR: "時間",
    Scale.DAY: "日",
    Scale.WEEK: "週",
    Scale.MONTH: "月",
}


def _capture(renderables: list, width: int = 80) -> str:
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=True, width=width, highlight=False)
    for renderable in renderables:
        console.print(renderable)
    return buffer.getvalue()


def _tile_width(scale: Scale) -> int:
    """Characters per grid cell: one per 5-minute slot, two per day."""
    return 1 if scale is Scale.HOUR else 2


def _pad(text: str, width: int) -> str:
    return text[:width].ljust(width)


def render_chart(
    project: Project,
    tasks: list[Task],
    trades: list[Trade],
    calendar: Optional[HolidayCalendar] = None,
) -> str:
    """Render the project's chart at its active scale as colored text.

    Each task is a row; covered cells show as a colored block, non-working
    days as a shaded tile and other cells as blanks.

    Args:
        project: Project to render
        tasks: The project's tasks
        trades: Trades used for bar colors
        calendar: Holiday lookup for non-working day shading

    Returns:
        String representation of the chart
    """
    if not tasks:
        return "No tasks to display."

    cells = build_cells(project, calendar)
    tile = _tile_width(project.scale)
    lines: list[Text] = []

    # Month header
    groups = month_groups_for(project)
    if groups:
        header = Text(" " * (NAME_WIDTH + 1))
        for group in groups:
            header.append(_pad(group.label, group.count * tile), style="bold")
        lines.append(header)

    # Unit header
    labels = Text(" " * (NAME_WIDTH + 1))
    weekdays = Text(" " * (NAME_WIDTH + 1))
    if project.scale is Scale.HOUR:
        for cell in cells[::SLOTS_PER_HOUR]:
            width = min(SLOTS_PER_HOUR, len(cells) - cell.index)
            labels.append(_pad(minutes_to_time(cell.value), width))
    else:
        for cell in cells:
            style = ""
            if cell.sunday_or_holiday:
                style = "red"
            elif cell.saturday:
                style = "blue"
            labels.append(cell.label[-2:].rjust(tile), style=style)
            # Full-width weekday names fill a two-column tile
            weekdays.append(cell.sub_label, style=style)
    lines.append(labels)
    if project.scale is not Scale.HOUR:
        lines.append(weekdays)

    # Bars
    model = ScheduleModel.for_project(project)
    mapper = GeometryMapper.for_project(project, cell_width=1)
    for task in sorted_tasks(tasks):
        interval = model.resolve(task, project.scale)
        covered = set(mapper.cell_span(interval, project.scale))
        color = task.display_color(trades)

        row = Text(_pad(task.name or "(工程名なし)", NAME_WIDTH) + " ")
        for cell in cells:
            if cell.index in covered:
                row.append("█" * tile, style=color)
            elif cell.non_working:
                row.append("░" * tile, style="dim")
            else:
                row.append(" " * tile)
        lines.append(row)

    width = NAME_WIDTH + 1 + len(cells) * tile + 2
    return _capture(lines, width=max(80, width))


def render_task_table(
    project: Project,
    tasks: list[Task],
    trades: list[Trade],
    calendar: Optional[HolidayCalendar] = None,
) -> str:
    """Render a table of tasks with their interval on the active scale."""
    model = ScheduleModel.for_project(project)
    day_based = project.scale is not Scale.HOUR
    show_workdays = day_based and not project.provisional

    table = Table(
        title=f"{project.name} ({SCALE_NAMES[project.scale]})",
        box=box.ROUNDED,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Task", style="cyan", no_wrap=True)
    table.add_column("Assignee", style="white")
    table.add_column("Trade", style="magenta")
    table.add_column("Start", justify="right", style="green")
    table.add_column("End", justify="right", style="green")
    if show_workdays:
        table.add_column("Workdays", justify="right", style="blue")

    trade_names = {t.id: t.name for t in trades}
    for task in sorted_tasks(tasks):
        interval = model.resolve(task, project.scale)
        color = task.display_color(trades)
        row = [
            str(task.order + 1),
            Text.assemble(("██", color), f" {task.name}"),
            task.assignee or "-",
            trade_names.get(task.trade_id, "-") if task.trade_id else "-",
            unit_label(interval.start, project.scale, project),
            unit_label(interval.end, project.scale, project),
        ]
        if show_workdays:
            start = project.start_date + timedelta(days=interval.start - 1)
            end = project.start_date + timedelta(days=interval.end - 1)
            row.append(str(count_working_days(start, end, project.workday_rules, calendar)))
        table.add_row(*row)

    return _capture([table])


def render_workday_summary(
    project: Project,
    calendar: Optional[HolidayCalendar] = None,
) -> str:
    """Summarize working days and holidays in the displayed window."""
    if project.scale is Scale.HOUR:
        return (
            f"Hours {project.hour_window.start_hour}:00-{project.hour_window.end_hour}:00 "
            f"({project.hour_window.end_hour - project.hour_window.start_hour}h)"
        )

    calendar = calendar or default_holidays()
    length = project.day_window.length_for(project.scale)
    start = project.start_date
    end = start + timedelta(days=length - 1)
    rules = project.workday_rules

    renderables: list = []
    if project.provisional:
        renderables.append(f"[bold cyan]Window:[/bold cyan] {length} days (provisional)")
    else:
        working = count_working_days(start, end, rules, calendar)
        renderables.append(
            f"[bold cyan]Window:[/bold cyan] {start.isoformat()} - {end.isoformat()} "
            f"({length} days, {working} working)"
        )

        holiday_list = calendar.holidays_in_range(start, end)
        if holiday_list:
            table = Table(title="Holidays", box=box.SIMPLE)
            table.add_column("Date", style="red")
            table.add_column("Name")
            for holiday in holiday_list:
                table.add_row(holiday.date.isoformat(), holiday.name)
            renderables.append(table)

    skipped = []
    if rules.saturday_non_working:
        skipped.append("土")
    if rules.sunday_non_working:
        skipped.append("日")
    if rules.holidays_non_working:
        skipped.append("祝")
    renderables.append(f"[dim]Non-working: {', '.join(skipped) or '-'}[/dim]")
    if rules.non_working_dates:
        renderables.append(f"[dim]Extra holidays: {', '.join(sorted(rules.non_working_dates))}[/dim]")
    if rules.working_dates:
        renderables.append(f"[dim]Extra workdays: {', '.join(sorted(rules.working_dates))}[/dim]")

    return _capture(renderables)
