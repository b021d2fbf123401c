"""
degreeplan: term-by-term study plans from a course catalog.

The public entry points are re-exported here; see the individual modules
for details.
"""

from degreeplan.errors import (
    ConfigurationError,
    DataValidityError,
    InvariantError,
    PlacementError,
    PlannerError,
    StructuralViolation,
)
from degreeplan.graph import CourseGraph, Edge, Relation
from degreeplan.model import Course, CourseData, Section, TermType, TimetableOffering, Weekday, WeeklyOccurrence
from degreeplan.schedule import Schedule, Slot
from degreeplan.scheduler import TermScheduler, build_schedule

__all__ = [
    "ConfigurationError",
    "Course",
    "CourseData",
    "CourseGraph",
    "DataValidityError",
    "Edge",
    "InvariantError",
    "PlacementError",
    "PlannerError",
    "Relation",
    "Schedule",
    "Section",
    "Slot",
    "StructuralViolation",
    "TermScheduler",
    "TermType",
    "TimetableOffering",
    "Weekday",
    "WeeklyOccurrence",
    "build_schedule",
]
