"""Excel export of the bar chart."""

from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from barplanner.config import DEFAULT_CHART_CONFIG
from barplanner.geometry import GeometryMapper
from barplanner.grid import build_cells, minutes_to_time, month_groups_for, unit_label
from barplanner.models import Project, Scale, Task, Trade
from barplanner.schedule import ScheduleModel, sorted_tasks
from barplanner.workdays import HolidayCalendar


# Excel paper size codes
PAPER_SIZE_CODES = {"A4": 9, "A3": 8, "B4": 12}

SATURDAY_FILL = "FFE0E0FF"
SUNDAY_HOLIDAY_FILL = "FFFFE0E0"

FIRST_UNIT_COLUMN = 5

THIN = Side(style="thin")
CELL_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


def hex_to_argb(color: str) -> str:
    """Convert ``#RRGGBB`` to an opaque Excel ARGB string."""
    hex_part = color.lstrip("#")
    if len(hex_part) == 3:
        hex_part = "".join(c * 2 for c in hex_part)
    return f"FF{hex_part.upper()}"


def _solid(argb: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=argb, end_color=argb)


def export_to_excel(
    project: Project,
    tasks: list[Task],
    trades: list[Trade],
    output_path: str,
    settings: Optional[dict] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> Path:
    """Write the project's chart at its active scale to an Excel workbook.

    Args:
        project: Project to export
        tasks: The project's tasks
        trades: Trades used for bar colors and the legend
        output_path: Destination ``.xlsx`` path
        settings: Export settings (paper_size, orientation, show_header,
            show_legend); defaults from the chart configuration
        calendar: Holiday lookup for weekend/holiday shading

    Returns:
        Path of the written workbook
    """
    settings = {**DEFAULT_CHART_CONFIG["export"], **(settings or {})}

    wb = Workbook()
    ws = wb.active
    ws.title = "工程表"

    ws.page_setup.paperSize = PAPER_SIZE_CODES.get(settings["paper_size"], 9)
    ws.page_setup.orientation = settings["orientation"]
    ws.sheet_properties.pageSetUpPr.fitToPage = True
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0

    cells = build_cells(project, calendar)
    last_column = FIRST_UNIT_COLUMN + len(cells) - 1
    row = 1

    if settings["show_header"]:
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=10)
        title = ws.cell(row=row, column=1, value="工 程 管 理 表")
        title.font = Font(size=16, bold=True)
        title.alignment = Alignment(horizontal="center", vertical="center")
        row += 1

        ws.cell(row=row, column=1, value="工事名称:")
        ws.cell(row=row, column=2, value=project.name or "-")
        ws.cell(row=row, column=5, value="現場住所:")
        ws.cell(row=row, column=6, value=project.address or "-")
        row += 1

        ws.cell(row=row, column=1, value="全体工期:")
        ws.cell(
            row=row,
            column=2,
            value=f"{project.start_date.isoformat()} 〜 {project.end_date.isoformat()}",
        )
        ws.cell(row=row, column=5, value="現場管理者:")
        ws.cell(row=row, column=6, value=project.manager or "-")
        row += 1

        if project.remarks:
            ws.cell(row=row, column=1, value="備考:")
            ws.merge_cells(start_row=row, start_column=2, end_row=row, end_column=10)
            ws.cell(row=row, column=2, value=project.remarks)
            row += 1

        row += 1

    table_top = row

    # Month header
    groups = month_groups_for(project)
    if groups:
        column = FIRST_UNIT_COLUMN
        for group in groups:
            if group.count > 1:
                ws.merge_cells(
                    start_row=row,
                    start_column=column,
                    end_row=row,
                    end_column=column + group.count - 1,
                )
            cell = ws.cell(row=row, column=column, value=group.label)
            cell.alignment = Alignment(horizontal="center")
            column += group.count
        row += 1

    # Column header
    is_hour = project.scale is Scale.HOUR
    headers = ["工程名", "担当"]
    if is_hour:
        headers += ["開始時間", "終了時間"]
    elif project.provisional:
        headers += ["開始日", "終了日"]
    else:
        headers += ["開始", "終了"]
    for column, text in enumerate(headers, start=1):
        ws.cell(row=row, column=column, value=text)

    for grid_cell in cells:
        column = FIRST_UNIT_COLUMN + grid_cell.index
        if is_hour:
            text = minutes_to_time(grid_cell.value) if grid_cell.label else ""
        else:
            text = f"{grid_cell.label}\n{grid_cell.sub_label}"
        cell = ws.cell(row=row, column=column, value=text)
        cell.alignment = Alignment(horizontal="center", wrap_text=True)
        if grid_cell.sunday_or_holiday:
            cell.fill = _solid(SUNDAY_HOLIDAY_FILL)
        elif grid_cell.saturday:
            cell.fill = _solid(SATURDAY_FILL)

    for column in range(1, last_column + 1):
        ws.cell(row=row, column=column).font = Font(bold=True)
    row += 1

    # Task rows
    model = ScheduleModel.for_project(project)
    mapper = GeometryMapper.for_project(project, cell_width=1)
    for task in sorted_tasks(tasks):
        interval = model.resolve(task, project.scale)
        ws.cell(row=row, column=1, value=task.name)
        ws.cell(row=row, column=2, value=task.assignee or "-")
        ws.cell(row=row, column=3, value=unit_label(interval.start, project.scale, project))
        ws.cell(row=row, column=4, value=unit_label(interval.end, project.scale, project))

        fill = _solid(hex_to_argb(task.display_color(trades)))
        for index in mapper.cell_span(interval, project.scale):
            if 0 <= index < len(cells):
                ws.cell(row=row, column=FIRST_UNIT_COLUMN + index).fill = fill
        row += 1

    for table_row in ws.iter_rows(
        min_row=table_top, max_row=row - 1, min_col=1, max_col=last_column
    ):
        for cell in table_row:
            cell.border = CELL_BORDER

    # Column widths
    ws.column_dimensions["A"].width = 20
    for column in range(2, FIRST_UNIT_COLUMN):
        ws.column_dimensions[get_column_letter(column)].width = 12
    for column in range(FIRST_UNIT_COLUMN, last_column + 1):
        ws.column_dimensions[get_column_letter(column)].width = 3

    # Legend
    if settings["show_legend"] and trades:
        row += 1
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=10)
        ws.cell(row=row, column=1, value="凡例").font = Font(bold=True)
        row += 1
        for trade in sorted(trades, key=lambda t: t.order):
            ws.cell(row=row, column=1, value=trade.name)
            ws.cell(row=row, column=2).fill = _solid(hex_to_argb(trade.color))
            row += 1

    path = Path(output_path)
    wb.save(path)
    return path
