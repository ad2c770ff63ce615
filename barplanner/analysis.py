"""Tabular and plotly views of a project's bar chart."""

from typing import Optional

import pandas as pd
import plotly.graph_objects as go

from barplanner.geometry import GeometryMapper
from barplanner.grid import build_cells, minutes_to_time, unit_label
from barplanner.models import Project, Scale, Task, Trade
from barplanner.schedule import ScheduleModel, sorted_tasks
from barplanner.workdays import HolidayCalendar

TASK_COLUMNS = [
    "task_id",
    "order",
    "name",
    "assignee",
    "trade",
    "color",
    "start",
    "end",
    "start_label",
    "end_label",
    "first_cell",
    "cell_count",
    "offset",
    "width",
]


def tasks_dataframe(
    project: Project,
    tasks: list[Task],
    trades: list[Trade],
    cell_width: Optional[float] = None,
) -> pd.DataFrame:
    """Resolve every task on the project's active scale into one row.

    Args:
        project: Project whose active scale and windows apply
        tasks: The project's tasks
        trades: Trades used for names and colors
        cell_width: Pixel width of a cell (defaults to the scale's width)

    Returns:
        DataFrame with one row per task in display order
    """
    if not tasks:
        return pd.DataFrame(columns=TASK_COLUMNS)

    model = ScheduleModel.for_project(project)
    mapper = GeometryMapper.for_project(project, cell_width)
    cell_mapper = GeometryMapper.for_project(project, cell_width=1)
    trade_names = {t.id: t.name for t in trades}

    data = []
    for task in sorted_tasks(tasks):
        interval = model.resolve(task, project.scale)
        geometry = mapper.to_geometry(interval, project.scale)
        span = cell_mapper.cell_span(interval, project.scale)
        data.append(
            {
                "task_id": task.id,
                "order": task.order,
                "name": task.name,
                "assignee": task.assignee,
                "trade": trade_names.get(task.trade_id, "") if task.trade_id else "",
                "color": task.display_color(trades),
                "start": interval.start,
                "end": interval.end,
                "start_label": unit_label(interval.start, project.scale, project),
                "end_label": unit_label(interval.end, project.scale, project),
                "first_cell": span.start,
                "cell_count": len(span),
                "offset": geometry.offset,
                "width": geometry.width,
            }
        )

    return pd.DataFrame(data, columns=TASK_COLUMNS)


def create_chart_figure(
    project: Project,
    tasks: list[Task],
    trades: list[Trade],
    calendar: Optional[HolidayCalendar] = None,
) -> Optional[go.Figure]:
    """Create a horizontal bar chart of the project at its active scale.

    The x axis counts grid cells; non-working days are shaded.

    Returns:
        Plotly Figure object or None if there are no tasks
    """
    df = tasks_dataframe(project, tasks, trades)
    if df.empty:
        return None

    cells = build_cells(project, calendar)

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            y=df["name"],
            x=df["cell_count"],
            base=df["first_cell"],
            orientation="h",
            marker_color=df["color"],
            customdata=df[["start_label", "end_label", "assignee"]],
            hovertemplate="<b>%{y}</b><br>%{customdata[0]} 〜 %{customdata[1]}"
            "<br>%{customdata[2]}<extra></extra>",
        )
    )

    for cell in cells:
        if cell.non_working:
            fig.add_vrect(
                x0=cell.index,
                x1=cell.index + 1,
                fillcolor="#fee2e2",
                opacity=0.5,
                line_width=0,
                layer="below",
            )

    if project.scale is Scale.HOUR:
        ticks = [c for c in cells if c.label]
        ticktext = [minutes_to_time(c.value) for c in ticks]
    else:
        ticks = cells
        ticktext = [f"{c.label}<br>{c.sub_label}" for c in cells]

    fig.update_layout(
        title=dict(
            text=project.name,
            font=dict(size=20, family="Inter, sans-serif", color="#111827"),
        ),
        xaxis=dict(
            range=[0, len(cells)],
            tickmode="array",
            tickvals=[c.index + 0.5 for c in ticks],
            ticktext=ticktext,
            showgrid=False,
        ),
        yaxis=dict(autorange="reversed", title=""),
        bargap=0.35,
        height=max(250, 60 + 36 * len(df)),
        plot_bgcolor="white",
        showlegend=False,
    )

    return fig


def save_chart_html(fig: go.Figure, output_path: str) -> None:
    """Write a figure as a standalone HTML page."""
    fig.write_html(output_path, include_plotlyjs="cdn")
