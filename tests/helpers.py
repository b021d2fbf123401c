"""
Builders for catalog entities used across the test modules.

Edge direction reminder: add_edge(A, B) means B is a pre-/co-requisite of A
(A depends on B).
"""

from __future__ import annotations

from datetime import time

from degreeplan.conflicts import sections_overlap
from degreeplan.graph import CourseGraph, Relation
from degreeplan.model import Course, Section, TermType, TimetableOffering, Weekday, WeeklyOccurrence
from degreeplan.schedule import Schedule


def occ(day: Weekday, start: str, end: str) -> WeeklyOccurrence:
    sh, sm = (int(x) for x in start.split(":"))
    eh, em = (int(x) for x in end.split(":"))
    return WeeklyOccurrence(day, time(sh, sm), time(eh, em))


def section(*occurrences: WeeklyOccurrence) -> Section:
    return Section(tuple(occurrences))


def every_hour_offerings() -> tuple[TimetableOffering, ...]:
    """
    One single-hour section at every hour of every weekday, in every term type.
    """
    offerings = []
    for term in TermType:
        sections = []
        for day in (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY):
            for hour in range(8, 22):
                sections.append(Section((WeeklyOccurrence(day, time(hour, 0), time(hour + 1, 0)),)))
        offerings.append(TimetableOffering(term, tuple(sections)))
    return tuple(offerings)


def fixed_offerings(*sections: Section, terms=tuple(TermType)) -> tuple[TimetableOffering, ...]:
    return tuple(TimetableOffering(term, tuple(sections)) for term in terms)


def course(name: str, prereqs=(), coreqs=(), offerings=None) -> Course:
    return Course(
        name=name,
        prerequisites=tuple(prereqs),
        corequisites=tuple(coreqs),
        offerings=offerings if offerings is not None else every_hour_offerings(),
    )


def degree(name: str, requires=()) -> Course:
    return Course(name=name, prerequisites=tuple(requires), is_root=True)


def graph_of(*courses: Course) -> CourseGraph:
    g = CourseGraph()
    for c in courses:
        g.add_vertex(c)
    return g


def edge_set(graph: CourseGraph) -> set[tuple[str, str, Relation]]:
    return {(e.source.name, e.target.name, e.relation) for e in graph.edges()}


def schedule_violations(graph: CourseGraph, schedule: Schedule) -> list[str]:
    """
    Check precedence, capacity and timetable collisions of a built schedule.
    Returns human readable violations (empty list = valid).
    """
    problems: list[str] = []
    for edge in graph.edges():
        if edge.source.is_root:
            continue
        src = schedule.term_for(edge.source)
        dst = schedule.term_for(edge.target)
        if src is None:
            continue
        if dst is None:
            problems.append(f"{edge.source.name} scheduled but dependency {edge.target.name} is not")
        elif edge.relation is Relation.PREREQ and not src > dst:
            problems.append(f"prereq {edge.source.name}@{src} not after {edge.target.name}@{dst}")
        elif edge.relation is Relation.COREQ and not src >= dst:
            problems.append(f"coreq {edge.source.name}@{src} before {edge.target.name}@{dst}")

    for index in range(schedule.term_count):
        slots = schedule.placements(index)
        if len(slots) > schedule.term_capacity:
            problems.append(f"term {index} over capacity")
        for i in range(len(slots)):
            for j in range(i + 1, len(slots)):
                if sections_overlap(slots[i].section, slots[j].section):
                    problems.append(f"term {index}: {slots[i].course.name} collides with {slots[j].course.name}")
    return problems
