"""
Rendering of schedules and graphs.

- Schedules become one weekly rich Table per term (console or plain text)
- Graphs become a mermaid flowchart wrapped in a markdown file

Rendering only reads the Schedule / CourseGraph; it never changes them.
"""

from __future__ import annotations

import io
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from degreeplan.config import EARLIEST_TIME, LATEST_TIME, RENDER_TIME_INCREMENT_MINUTES
from degreeplan.graph import CourseGraph, Relation
from degreeplan.model import Weekday
from degreeplan.schedule import Schedule

CELL_COLORS = ["blue", "red", "yellow", "green", "violet"]


def _time_rows(increment: int = RENDER_TIME_INCREMENT_MINUTES) -> list[time]:
    rows: list[time] = []
    current = datetime.combine(date.min, EARLIEST_TIME)
    last = datetime.combine(date.min, LATEST_TIME)
    while current <= last:
        rows.append(current.time())
        current += timedelta(minutes=increment)
    return rows


def term_table(schedule: Schedule, index: int) -> Table:
    """
    Build the weekly table for one term.

    A cell shows a course if one of its chosen section's occurrences covers
    the row's time (start <= row < end).
    """
    table = Table(
        title=f"Term {index} - {schedule.term_type(index).value} Schedule",
        box=box.ROUNDED,
        show_lines=True,
    )
    table.add_column("Time")
    for day in Weekday:
        table.add_column(day.label)

    placements = schedule.placements(index)
    for row_time in _time_rows():
        cells: list[Text] = [Text("") for _ in Weekday]
        for slot_index, slot in enumerate(placements):
            for occ in slot.section.occurrences:
                if occ.start <= row_time < occ.end:
                    color = CELL_COLORS[slot_index % len(CELL_COLORS)]
                    cells[occ.day] = Text(slot.course.name, style=f"on {color}")
        table.add_row(Text(f"{row_time:%H:%M}"), *cells)
    return table


def schedule_tables(schedule: Schedule) -> list[Table]:
    return [term_table(schedule, i) for i in range(schedule.term_count)]


def print_schedule(schedule: Schedule, console: Optional[Console] = None) -> None:
    out = console if console is not None else Console()
    for table in schedule_tables(schedule):
        out.print(table)


def schedule_to_text(schedule: Schedule, width: int = 140) -> str:
    """
    Render all term tables as plain text (no colors, no ANSI codes).
    """
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, color_system=None, force_terminal=False)
    print_schedule(schedule, console)
    return buffer.getvalue()


def schedule_summary(schedule: Schedule) -> str:
    """
    Short term-by-term listing, e.g. "Term 0 (Fall): 1010 [Mon 09:00-10:00]".
    """
    lines: list[str] = []
    for index in range(schedule.term_count):
        parts = [f"{slot.course.name} [{slot.section}]" for slot in schedule.placements(index)]
        lines.append(f"Term {index} ({schedule.term_type(index).value}): " + "; ".join(parts))
    return "\n".join(lines)


def write_schedule(schedule: Schedule, path: str | Path) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    body = schedule_to_text(schedule)
    out.write_text(f"# Schedule\n\n{schedule_summary(schedule)}\n\n```\n{body}```\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Graph diagram
# ---------------------------------------------------------------------------


def _node_id(name: str) -> str:
    # mermaid ids cannot contain spaces or punctuation
    return "n" + "".join(ch if ch.isalnum() else "_" for ch in name)


def graph_to_mermaid(graph: CourseGraph) -> str:
    """
    Mermaid flowchart of the graph (https://mermaid.js.org/).
    Degree courses get a thick dashed border.
    """
    lines = [
        "%%{init: {'flowchart': {'nodeSpacing': 80, 'rankSpacing': 80}}}%%",
        "flowchart TB",
    ]
    courses = graph.courses()
    for course in courses:
        label = course.name.replace('"', "'")
        lines.append(f'  {_node_id(course.name)}["{label}"]')
    for edge in graph.edges():
        label = "Prereq" if edge.relation is Relation.PREREQ else "Coreq"
        lines.append(f"  {_node_id(edge.source.name)} -->|{label}| {_node_id(edge.target.name)}")
    for course in courses:
        if not course.is_root:
            continue
        lines.append(f"  style {_node_id(course.name)} stroke:#000,stroke-width:4px")
        lines.append(f"  style {_node_id(course.name)} stroke-dasharray: 10,5")
    return "\n".join(lines) + "\n"


def write_graph(graph: CourseGraph, path: str | Path) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(f"# Course Graph\n\n```mermaid\n{graph_to_mermaid(graph)}```\n", encoding="utf-8")
