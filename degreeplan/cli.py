"""
CLI (Command Line Interface).

    degreeplan schedule <catalog.json> --degree NAME --credits N [--term-size N] [-o out.md]
    degreeplan courses <catalog.json>
    degreeplan graph <catalog.json> <out.md>
    degreeplan require <catalog.json> --degree NAME <course>
    degreeplan ingest <raw.json> <catalog.json>

Note:
- Scheduling logic lives in degreeplan/scheduler.py, this module only wires
  files and options to it
- Planner errors are reported as one red line and exit code 1
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from degreeplan.config import DEFAULT_START_TERM, DEFAULT_TERM_CAPACITY, INGEST_SEED, default_output_dir
from degreeplan.errors import PlannerError
from degreeplan.graph import CourseGraph
from degreeplan.ingest import ingest_file
from degreeplan.model import CourseData, TermType
from degreeplan.render import print_schedule, write_graph, write_schedule
from degreeplan.scheduler import build_schedule
from degreeplan.storage import load_course_data, save_course_data

console = Console()


def _emit_error(message: str) -> None:
    console.print(f"[red bold]Error: {escape(message)}.[/]")


def _emit_warning(message: str) -> None:
    console.print(f"[medium_orchid]Warning: {escape(message)}.[/]")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_graph(catalog: Path) -> tuple[CourseData, CourseGraph]:
    data = load_course_data(catalog)
    return data, CourseGraph.from_course_data(data)


def _cmd_schedule(args: argparse.Namespace) -> int:
    """
    Build a schedule for one degree and write it as markdown.
    """
    data, graph = _load_graph(args.catalog)

    degree = data.get_degree_by_name(args.degree)
    if degree is None:
        _emit_error(f"Degree `{args.degree}` does not exist")
        return 1

    credits = min(args.credits, len(data.courses))
    if credits < args.credits:
        _emit_warning(f"Desired credit count is impossible as only `{credits}` courses exist in the graph")

    started = time.perf_counter()
    schedule = build_schedule(
        graph,
        term_capacity=args.term_size,
        target_credits=credits,
        degree=degree,
        start_term=TermType.parse(args.start_term),
        max_terms=args.max_terms,
    )
    elapsed_ms = (time.perf_counter() - started) * 1000

    if args.show:
        print_schedule(schedule, console)
    if args.debug:
        console.print(f"Elapsed Time: {elapsed_ms:.2f} ms")

    out = args.output if args.output is not None else default_output_dir() / "schedule.md"
    write_schedule(schedule, out)
    console.print(f"[green]Wrote schedule information to `{escape(str(out))}`.[/]")

    if args.graph_output is not None:
        write_graph(graph, args.graph_output)
        console.print(f"[green]Wrote graph information to `{escape(str(args.graph_output))}`.[/]")

    console.print(
        f"[green]Successfully scheduled {schedule.course_count} courses over {schedule.term_count} terms.[/]"
    )
    return 0


def _cmd_courses(args: argparse.Namespace) -> int:
    """
    List degrees and courses of a catalog (after graph validation).
    """
    _, graph = _load_graph(args.catalog)
    partition = graph.get_course_data()

    print(f"Degrees ({len(partition.degrees)}):")
    for degree in partition.degrees:
        required = ", ".join(degree.prerequisites) if degree.prerequisites else "(none)"
        print(f"  {degree.name} | requires: {required}")

    print(f"Courses ({len(partition.courses)}):")
    for course in partition.courses:
        terms = sorted({o.term_type.value for o in course.offerings})
        print(f"  {course.name} | offered: {'/'.join(terms)}")
    return 0


def _cmd_graph(args: argparse.Namespace) -> int:
    _, graph = _load_graph(args.catalog)
    write_graph(graph, args.out)
    console.print(f"[green]Wrote graph information to `{escape(str(args.out))}`.[/]")
    return 0


def _cmd_require(args: argparse.Namespace) -> int:
    """
    Toggle whether a degree requires a course and save the catalog.
    """
    _, graph = _load_graph(args.catalog)
    degree = graph.get(args.degree)
    course = graph.get(args.course)
    if degree is None or not degree.is_root:
        _emit_error(f"Degree `{args.degree}` does not exist")
        return 1
    if course is None:
        _emit_error(f"Course `{args.course}` does not exist")
        return 1

    required = graph.toggle_required(course, degree)
    save_course_data(graph.get_course_data(), args.catalog)
    state = "now required" if required else "no longer required"
    print(f"{course.name} is {state} by {degree.name}")
    return 0


def _cmd_ingest(args: argparse.Namespace) -> int:
    data = ingest_file(args.src, args.dest, seed=args.seed)
    print(f"Ingested {len(data.courses)} courses and {len(data.degrees)} degrees into {args.dest}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="degreeplan", description="Degree planner CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_schedule = sub.add_parser("schedule", help="Build a term-by-term schedule for a degree")
    p_schedule.add_argument("catalog", type=Path, help="Catalog JSON file")
    p_schedule.add_argument("--degree", required=True, help="Name of the degree course")
    p_schedule.add_argument("--credits", type=int, required=True, help="Number of courses to schedule")
    p_schedule.add_argument(
        "--term-size", type=int, default=DEFAULT_TERM_CAPACITY, help="Maximum courses per term"
    )
    p_schedule.add_argument(
        "--start-term",
        default=DEFAULT_START_TERM,
        choices=[t.value for t in TermType],
        help="Term type of the first term",
    )
    p_schedule.add_argument("--max-terms", type=int, default=None, help="Give up on courses beyond this many terms")
    p_schedule.add_argument("-o", "--output", type=Path, default=None, help="Markdown file for the schedule")
    p_schedule.add_argument("--graph-output", type=Path, default=None, help="Markdown file for the graph diagram")
    p_schedule.add_argument("--show", action="store_true", help="Print the schedule tables to the console")
    p_schedule.add_argument("--debug", action="store_true", help="Verbose logging and timing")

    p_courses = sub.add_parser("courses", help="List degrees and courses in a catalog")
    p_courses.add_argument("catalog", type=Path, help="Catalog JSON file")

    p_graph = sub.add_parser("graph", help="Write the course graph as a mermaid diagram")
    p_graph.add_argument("catalog", type=Path, help="Catalog JSON file")
    p_graph.add_argument("out", type=Path, help="Output markdown file")

    p_require = sub.add_parser("require", help="Toggle a degree requirement")
    p_require.add_argument("catalog", type=Path, help="Catalog JSON file (updated in place)")
    p_require.add_argument("--degree", required=True, help="Name of the degree course")
    p_require.add_argument("course", help="Course name")

    p_ingest = sub.add_parser("ingest", help="Convert a raw section export into a catalog")
    p_ingest.add_argument("src", type=Path, help="Raw section export (JSON)")
    p_ingest.add_argument("dest", type=Path, help="Catalog JSON to write")
    p_ingest.add_argument("--seed", type=int, default=INGEST_SEED, help="Seed for synthetic requisites")

    return parser


COMMANDS = {
    "schedule": _cmd_schedule,
    "courses": _cmd_courses,
    "graph": _cmd_graph,
    "require": _cmd_require,
    "ingest": _cmd_ingest,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(getattr(args, "debug", False))

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args)
    except FileNotFoundError as exc:
        _emit_error(f"File `{exc.filename}` does not exist")
        code = 1
    except PlannerError as exc:
        _emit_error(str(exc))
        code = 1
    raise SystemExit(code)
