"""Command-line interface for the bar chart planner."""

import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from barplanner.analysis import create_chart_figure, save_chart_html
from barplanner.config import (
    DEFAULT_CONFIG_FILE,
    ORIENTATIONS,
    PAPER_SIZES,
    cell_width_for,
    load_config,
    save_default_config,
)
from barplanner.export import export_to_excel
from barplanner.grid import time_to_minutes, unit_label
from barplanner.interaction import HANDLE_MODES, InteractionController
from barplanner.models import (
    DAY_LENGTH_OPTIONS,
    HOUR_OPTIONS,
    MONTH_LENGTH_OPTIONS,
    WEEK_LENGTH_OPTIONS,
    DayWindow,
    HourWindow,
    Scale,
)
from barplanner.schedule import ScheduleModel
from barplanner.store import ProjectStore
from barplanner.visualization import render_chart, render_task_table, render_workday_summary


console = Console()

SCALE_CHOICES = [s.value for s in Scale]


def _error_message(error: Exception) -> str:
    if isinstance(error, KeyError) and error.args:
        return str(error.args[0])
    return str(error)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {_error_message(error)}")
    sys.exit(1)


def _store(ctx) -> ProjectStore:
    return ProjectStore.load(ctx.obj["store_path"])


def _choices(options) -> list[str]:
    return [str(n) for n in options]


def _parse_value(text: str, scale: Scale) -> int:
    """Accept ``H:MM`` for the hour scale and plain integers everywhere."""
    if scale is Scale.HOUR and ":" in text:
        return time_to_minutes(text)
    return int(text)


@click.group()
@click.option(
    "-c", "--config",
    default=DEFAULT_CONFIG_FILE,
    help="Path to configuration file",
    show_default=True,
)
@click.option(
    "-s", "--store",
    default=None,
    help="Path to the project store (overrides the configuration)",
)
@click.pass_context
def cli(ctx, config, store):
    """Multi-scale construction bar chart planner."""
    ctx.ensure_object(dict)
    try:
        settings = load_config(config)
    except ValueError as e:
        _fail(e)
    ctx.obj["config"] = settings
    ctx.obj["store_path"] = store or settings["store_path"]


@cli.command()
@click.option("--force", is_flag=True, help="Overwrite existing store file")
@click.pass_context
def init(ctx, force):
    """Initialize a store with a sample project."""
    store_path = Path(ctx.obj["store_path"])

    if store_path.exists() and not force:
        console.print(f"[yellow]Store file '{store_path}' already exists.[/yellow]")
        console.print("[dim]Use --force to overwrite.[/dim]")
        return

    store = ProjectStore(path=str(store_path))
    project = store.add_project("Sample Renovation", start_date=date.today(), provisional=False)
    trades = store.trades
    store.add_task(project.id, "解体", assignee="山田", trade_id=trades[6].id)
    store.add_task(project.id, "配管", assignee="佐藤", trade_id=trades[1].id)
    store.add_task(project.id, "内装仕上げ", assignee="鈴木", trade_id=trades[4].id)
    store.save()

    console.print(f"[green]Created sample store:[/green] {store_path}")
    console.print("[dim]Run 'barplanner projects' to list projects.[/dim]")


@cli.command()
@click.pass_context
def projects(ctx):
    """List projects."""
    store = _store(ctx)
    if not store.projects:
        console.print("[yellow]No projects found in store.[/yellow]")
        return

    table = Table(title=f"{len(store.projects)} projects", box=box.ROUNDED)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Project", style="cyan")
    table.add_column("Start", style="magenta")
    table.add_column("Scale", style="green")
    table.add_column("Tasks", justify="right")

    for project in store.projects:
        table.add_row(
            project.id[:8],
            project.name + (" (仮)" if project.provisional else ""),
            project.start_date.isoformat(),
            project.scale.value,
            str(len(store.project_tasks(project.id))),
        )

    console.print(table)


@cli.command(name="new-project")
@click.argument("name")
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), help="Anchor date")
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Project end date")
@click.option("--fixed", is_flag=True, help="Dates are real calendar dates, not placeholders")
@click.option("--address", default="", help="Site address")
@click.option("--manager", default="", help="Site manager")
@click.pass_context
def new_project(ctx, name, start, end, fixed, address, manager):
    """Create a project."""
    store = _store(ctx)
    project = store.add_project(
        name,
        start_date=start.date() if start else None,
        end_date=end.date() if end else None,
        provisional=not fixed,
        address=address,
        manager=manager,
    )
    store.save()
    console.print(f"[green]Created project[/green] {project.name} [dim]({project.id})[/dim]")


@cli.command()
@click.argument("project_key")
@click.pass_context
def show(ctx, project_key):
    """Display a project's chart at its active scale."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
    except KeyError as e:
        _fail(e)

    tasks = store.project_tasks(project.id)

    console.print(Panel(
        f"[bold]{project.name}[/bold]\n[dim]Scale: {project.scale.value.upper()}[/dim]",
        border_style="blue",
        box=box.DOUBLE,
    ))
    console.print(render_chart(project, tasks, store.trades))
    console.print(render_task_table(project, tasks, store.trades))
    console.print(render_workday_summary(project))


@cli.command()
@click.argument("project_key")
@click.argument("scale", type=click.Choice(SCALE_CHOICES, case_sensitive=False))
@click.pass_context
def scale(ctx, project_key, scale):
    """Switch the active display scale."""
    store = _store(ctx)
    try:
        project = store.set_scale(store.get_project(project_key).id, Scale(scale.lower()))
    except KeyError as e:
        _fail(e)
    store.save()
    console.print(f"[green]{project.name}[/green] now shows the {project.scale.value} scale")


@cli.command()
@click.argument("project_key")
@click.argument("start_hour", type=click.IntRange(HOUR_OPTIONS[0], HOUR_OPTIONS[-1]))
@click.argument("end_hour", type=click.IntRange(HOUR_OPTIONS[0], HOUR_OPTIONS[-1]))
@click.pass_context
def hours(ctx, project_key, start_hour, end_hour):
    """Set the visible hours of the hour scale."""
    store = _store(ctx)
    try:
        window = HourWindow(start_hour, end_hour)
        project = store.update_project(store.get_project(project_key).id, hour_window=window)
    except (KeyError, ValueError) as e:
        _fail(e)
    store.save()
    console.print(f"[green]{project.name}[/green] hours: {start_hour}:00-{end_hour}:00")


@cli.command()
@click.argument("project_key")
@click.option("--day", type=click.Choice(_choices(DAY_LENGTH_OPTIONS)),
              help="Days shown on the day scale")
@click.option("--week", type=click.Choice(_choices(WEEK_LENGTH_OPTIONS)),
              help="Days shown on the week scale")
@click.option("--month", type=click.Choice(_choices(MONTH_LENGTH_OPTIONS)),
              help="Days shown on the month scale")
@click.pass_context
def window(ctx, project_key, day, week, month):
    """Set how many days each day-based scale shows."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        current = project.day_window
        new_window = DayWindow(
            day_length=int(day) if day is not None else current.day_length,
            week_length=int(week) if week is not None else current.week_length,
            month_length=int(month) if month is not None else current.month_length,
        )
        project = store.update_project(project.id, day_window=new_window)
    except (KeyError, ValueError) as e:
        _fail(e)
    store.save()
    console.print(
        f"[green]{project.name}[/green] window: day {new_window.day_length}, "
        f"week {new_window.week_length}, month {new_window.month_length}"
    )


@cli.command(name="add-task")
@click.argument("project_key")
@click.argument("name")
@click.option("--assignee", default="", help="Person in charge")
@click.option("--trade", default=None, help="Trade id or name")
@click.option("--color", default=None, help="Explicit bar color (#RRGGBB)")
@click.pass_context
def add_task(ctx, project_key, name, assignee, trade, color):
    """Append a task to a project."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        trade_id = store.get_trade(trade).id if trade else None
        task = store.add_task(project.id, name, assignee=assignee, trade_id=trade_id, color=color)
    except (KeyError, ValueError) as e:
        _fail(e)
    store.save()
    console.print(f"[green]Added task[/green] {task.name} [dim]({task.id})[/dim]")


@cli.command(name="set")
@click.argument("project_key")
@click.argument("task_key")
@click.argument("field", type=click.Choice(["start", "end"]))
@click.argument("value")
@click.option(
    "--scale", "scale_name",
    type=click.Choice(SCALE_CHOICES, case_sensitive=False),
    default=None,
    help="Scale to edit (defaults to the active scale)",
)
@click.pass_context
def set_value(ctx, project_key, task_key, field, value, scale_name):
    """Set a task's start or end on one scale (value is clamped)."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        task = store.get_task(task_key, project.id)
        target = Scale(scale_name.lower()) if scale_name else project.scale
        model = ScheduleModel.for_project(project)
        updated = model.update(task, target, field, _parse_value(value, target))
        interval = model.resolve(updated, target)
        if not model.is_ordered(interval, target):
            raise ValueError(
                f"{field} {unit_label(getattr(interval, field), target)} would leave the "
                "start at or after the end; change the other field first."
            )
    except (KeyError, ValueError) as e:
        _fail(e)

    store.put_task(updated)
    store.save()
    console.print(
        f"[green]{updated.name}[/green] {target.value}: "
        f"{unit_label(interval.start, target, project)} 〜 {unit_label(interval.end, target, project)}"
    )


@cli.command()
@click.argument("project_key")
@click.argument("task_key")
@click.option(
    "--target",
    type=click.Choice(list(HANDLE_MODES)),
    default="body",
    show_default=True,
    help="Bar region the drag starts on",
)
@click.option("--to", "positions", type=float, multiple=True, required=True,
              help="Pointer x positions (pixels from the row start), in order")
@click.pass_context
def drag(ctx, project_key, task_key, target, positions):
    """Replay a drag gesture on a task bar at the active scale."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        task = store.get_task(task_key, project.id)
    except KeyError as e:
        _fail(e)

    controller = InteractionController.for_project(
        project, cell_width_for(ctx.obj["config"], project.scale)
    )
    controller.press_target(task, target)
    skipped = 0
    for x in positions:
        if controller.move(x) is None:
            skipped += 1
    final = controller.release()

    store.put_task(final)
    store.save()

    interval = controller.model.resolve(final, project.scale)
    console.print(
        f"[green]{final.name}[/green]: {unit_label(interval.start, project.scale, project)} 〜 "
        f"{unit_label(interval.end, project.scale, project)}"
    )
    if skipped:
        console.print(f"[dim]{skipped} frame(s) skipped[/dim]")


@cli.command()
@click.argument("project_key")
@click.argument("task_key")
@click.argument("target_key")
@click.pass_context
def reorder(ctx, project_key, task_key, target_key):
    """Move a task to another task's position."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        moved = store.get_task(task_key, project.id)
        target = store.get_task(target_key, project.id)
        tasks = store.move_task(moved.id, target.id)
    except KeyError as e:
        _fail(e)
    store.save()
    for task in tasks:
        console.print(f"{task.order + 1:>3}. {task.name}")


@cli.command(name="delete-task")
@click.argument("project_key")
@click.argument("task_key")
@click.pass_context
def delete_task(ctx, project_key, task_key):
    """Delete a task."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        task = store.get_task(task_key, project.id)
        store.delete_task(task.id)
    except KeyError as e:
        _fail(e)
    store.save()
    console.print(f"[green]Deleted task[/green] {task.name}")


def _toggle_override(ctx, project_key, day, remove, working):
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
        rules = project.workday_rules
        key = day.date().isoformat()
        if working:
            rules = rules.without_working_date(key) if remove else rules.with_working_date(key)
        else:
            rules = rules.without_non_working_date(key) if remove else rules.with_non_working_date(key)
        store.update_project(project.id, workday_rules=rules)
    except KeyError as e:
        _fail(e)
    store.save()
    kind = "workday" if working else "holiday"
    action = "Removed" if remove else "Added"
    console.print(f"[green]{action} {kind}[/green] {key}")


@cli.command()
@click.argument("project_key")
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--remove", is_flag=True, help="Remove the date instead of adding it")
@click.pass_context
def holiday(ctx, project_key, day, remove):
    """Mark a date as an extra non-working day."""
    _toggle_override(ctx, project_key, day, remove, working=False)


@cli.command()
@click.argument("project_key")
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--remove", is_flag=True, help="Remove the date instead of adding it")
@click.pass_context
def workday(ctx, project_key, day, remove):
    """Mark a date as a working day regardless of other rules."""
    _toggle_override(ctx, project_key, day, remove, working=True)


@cli.command()
@click.argument("project_key")
@click.option("--saturday/--no-saturday", default=None, help="Treat Saturdays as non-working")
@click.option("--sunday/--no-sunday", default=None, help="Treat Sundays as non-working")
@click.option("--holidays/--no-holidays", "skip_holidays", default=None,
              help="Treat national holidays as non-working")
@click.option("--only-workdays/--all-days", default=None, help="Display only working days")
@click.pass_context
def rules(ctx, project_key, saturday, sunday, skip_holidays, only_workdays):
    """Show or change a project's workday rules."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
    except KeyError as e:
        _fail(e)

    changes = {
        "saturday_non_working": saturday,
        "sunday_non_working": sunday,
        "holidays_non_working": skip_holidays,
        "display_only_working_days": only_workdays,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if changes:
        project = store.update_project(
            project.id, workday_rules=replace(project.workday_rules, **changes)
        )
        store.save()

    console.print(render_workday_summary(project))


@cli.command()
@click.argument("project_key")
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--paper", type=click.Choice(PAPER_SIZES), default=None, help="Paper size")
@click.option("--orientation", type=click.Choice(ORIENTATIONS), default=None, help="Orientation")
@click.option("--no-header", is_flag=True, help="Omit the project information block")
@click.option("--no-legend", is_flag=True, help="Omit the trade legend")
@click.pass_context
def export(ctx, project_key, output, paper, orientation, no_header, no_legend):
    """Export a project's chart to an Excel workbook."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
    except KeyError as e:
        _fail(e)

    settings = dict(ctx.obj["config"]["export"])
    if paper:
        settings["paper_size"] = paper
    if orientation:
        settings["orientation"] = orientation
    if no_header:
        settings["show_header"] = False
    if no_legend:
        settings["show_legend"] = False

    try:
        with console.status("[bold green]Writing workbook...", spinner="dots"):
            path = export_to_excel(
                project, store.project_tasks(project.id), store.trades, output, settings
            )
    except OSError as e:
        _fail(e)

    console.print(f"[green]Exported to:[/green] {path}")


@cli.command()
@click.argument("project_key")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def figure(ctx, project_key, output):
    """Write the chart as an interactive HTML figure."""
    store = _store(ctx)
    try:
        project = store.get_project(project_key)
    except KeyError as e:
        _fail(e)

    fig = create_chart_figure(project, store.project_tasks(project.id), store.trades)
    if fig is None:
        console.print("[yellow]No tasks to plot.[/yellow]")
        return

    save_chart_html(fig, output)
    console.print(f"[green]Figure saved to:[/green] {output}")


@cli.command(name="init-config")
@click.option("--force", is_flag=True, help="Overwrite existing configuration file")
@click.argument("config_file", default=DEFAULT_CONFIG_FILE)
def init_config(config_file, force):
    """Initialize a sample configuration file."""
    config_path = Path(config_file)

    if config_path.exists() and not force:
        console.print(f"[yellow]Configuration file '{config_file}' already exists.[/yellow]")
        console.print("[dim]Use --force to overwrite.[/dim]")
        return

    save_default_config(config_file)
    console.print(f"[green]Created sample configuration file:[/green] {config_file}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    try:
        cli(obj={}, args=argv)
        return 0
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
