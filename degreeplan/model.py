"""
Central catalog entities used across the project.

This module defines the canonical, immutable value types so that:
- the graph, the resolver and the scheduler share the same objects
- invalid timetable data is rejected once, at construction time
- nothing downstream has to re-validate a Course after it was built

A Course is identified by its name alone: two Course objects with the same
name compare equal and hash the same.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from enum import Enum, IntEnum
from typing import Iterable, Optional

from degreeplan.config import EARLIEST_TIME, LATEST_TIME, NON_INSTRUCTIONAL_DAYS
from degreeplan.errors import DataValidityError


class TermType(Enum):
    """
    Recurring term category. Declaration order is the cycle order.
    """

    FALL = "Fall"
    WINTER = "Winter"

    @classmethod
    def parse(cls, text: str) -> "TermType":
        key = str(text).strip().lower()
        for member in cls:
            if member.value.lower() == key or member.name.lower() == key:
                return member
        raise DataValidityError(f"Unknown term type: {text!r}")

    def shifted(self, offset: int) -> "TermType":
        members = list(TermType)
        return members[(members.index(self) + offset) % len(members)]


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, text: str) -> "Weekday":
        key = str(text).strip().upper()
        for member in cls:
            # accept full names and 3-letter abbreviations ("Mon")
            if member.name == key or member.name[:3] == key:
                return member
        raise DataValidityError(f"Unknown weekday: {text!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()


def parse_hhmm(hhmm: str) -> time:
    """
    Convert 'HH:MM' to a datetime.time.
    Raises DataValidityError for invalid formats.
    """
    parts = str(hhmm).strip().split(":")
    if len(parts) != 2:
        raise DataValidityError(f"Invalid time format: {hhmm!r}")
    try:
        h = int(parts[0])
        m = int(parts[1])
    except ValueError:
        raise DataValidityError(f"Invalid time format: {hhmm!r}") from None
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise DataValidityError(f"Invalid time value: {hhmm!r}")
    return time(h, m)


@dataclass(frozen=True)
class WeeklyOccurrence:
    """
    One recurring meeting: a weekday plus a [start, end) time window.
    """

    day: Weekday
    start: time
    end: time

    def __post_init__(self) -> None:
        if not isinstance(self.day, Weekday):
            raise DataValidityError(f"day must be a Weekday, got {self.day!r}")
        if self.start >= self.end:
            raise DataValidityError(f"Occurrence start {self.start} must be before end {self.end}")
        if self.start < EARLIEST_TIME or self.end > LATEST_TIME:
            raise DataValidityError(
                f"Occurrence {self.start:%H:%M}-{self.end:%H:%M} must lie between "
                f"{EARLIEST_TIME:%H:%M} and {LATEST_TIME:%H:%M}"
            )
        if self.day.name in NON_INSTRUCTIONAL_DAYS:
            raise DataValidityError(f"Courses cannot meet on {self.day.label}")

    def __str__(self) -> str:
        return f"{self.day.label[:3]} {self.start:%H:%M}-{self.end:%H:%M}"


@dataclass(frozen=True)
class Section:
    """
    A set of weekly occurrences that are taken together
    (e.g. Mon/Wed/Fri 09:00-10:00).
    """

    occurrences: tuple[WeeklyOccurrence, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "occurrences", tuple(self.occurrences))
        if not self.occurrences:
            raise DataValidityError("A section needs at least one occurrence")

    def __str__(self) -> str:
        return ", ".join(str(o) for o in self.occurrences)


@dataclass(frozen=True)
class TimetableOffering:
    """
    The alternative sections a course provides in one term type.
    """

    term_type: TermType
    sections: tuple[Section, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", tuple(self.sections))
        if not isinstance(self.term_type, TermType):
            raise DataValidityError(f"term_type must be a TermType, got {self.term_type!r}")
        if not self.sections:
            raise DataValidityError("An offering needs at least one section")


@dataclass(frozen=True, eq=False)
class Course:
    """
    Represents one catalog course, or a degree placeholder when is_root is set.

    Degree (root) courses carry no timetable and no corequisites; the courses
    listed in their prerequisites are the degree requirements.
    """

    name: str
    prerequisites: tuple[str, ...] = ()
    corequisites: tuple[str, ...] = ()
    offerings: tuple[TimetableOffering, ...] = ()
    is_root: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name).strip())
        object.__setattr__(self, "prerequisites", tuple(self.prerequisites))
        object.__setattr__(self, "corequisites", tuple(self.corequisites))
        object.__setattr__(self, "offerings", tuple(self.offerings))

        if not self.name:
            raise DataValidityError("Course name must not be empty")
        if self.is_root:
            if self.offerings:
                raise DataValidityError(f"Degree course {self.name!r} cannot have timetable offerings")
            if self.corequisites:
                raise DataValidityError(f"Degree course {self.name!r} cannot have corequisites")
        elif not self.offerings:
            raise DataValidityError(f"Course {self.name!r} needs at least one timetable offering")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Course):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        kind = "Degree" if self.is_root else "Course"
        return f"{kind}({self.name!r})"

    def offerings_for(self, term_type: TermType) -> tuple[TimetableOffering, ...]:
        return tuple(o for o in self.offerings if o.term_type == term_type)


@dataclass
class CourseData:
    """
    A catalog bundle: degree (root) courses plus ordinary courses.
    """

    degrees: list[Course] = field(default_factory=list)
    courses: list[Course] = field(default_factory=list)

    def get_course_by_name(self, name: str) -> Optional[Course]:
        for course in self.courses:
            if course.name == name:
                return course
        return None

    def get_degree_by_name(self, name: str) -> Optional[Course]:
        for degree in self.degrees:
            if degree.name == name:
                return degree
        return None

    def all_courses(self) -> Iterable[Course]:
        yield from self.degrees
        yield from self.courses
