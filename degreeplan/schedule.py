"""
Schedule store.

A Schedule is a growable list of terms. Each term has a fixed number of
slots; an occupied slot holds the course, the offerings it runs with in that
term's type, and the section currently chosen for it.

Term index 0 has the starting term type, later terms cycle through TermType
(Fall, Winter, Fall, ...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from degreeplan.conflicts import SlotInput, TimetableResolver
from degreeplan.errors import ConfigurationError, InvariantError, PlacementError
from degreeplan.model import Course, Section, TermType, TimetableOffering

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    course: Course
    offerings: tuple[TimetableOffering, ...]
    section: Section

    def as_input(self) -> SlotInput:
        return (self.course, self.offerings)


class Schedule:
    def __init__(
        self,
        term_capacity: int,
        start_term: TermType = TermType.FALL,
        resolver: Optional[TimetableResolver] = None,
    ) -> None:
        if term_capacity <= 0:
            raise ConfigurationError(f"Term capacity must be positive, got {term_capacity}")
        self.term_capacity = term_capacity
        self.start_term = start_term
        # each schedule owns its resolver, so the memo is never shared
        self.resolver = resolver if resolver is not None else TimetableResolver()
        self._terms: list[list[Optional[Slot]]] = []
        self._term_by_course: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    @property
    def course_count(self) -> int:
        return len(self._term_by_course)

    @property
    def term_count(self) -> int:
        return len(self._terms)

    def term_type(self, index: int) -> TermType:
        return self.start_term.shifted(index)

    def is_term_full(self, index: int) -> bool:
        if index >= len(self._terms):
            return False
        return all(slot is not None for slot in self._terms[index])

    def term_for(self, course: Course) -> Optional[int]:
        """
        The term index a course is scheduled in, or None if unscheduled.
        """
        return self._term_by_course.get(course.name)

    def terms(self) -> tuple[tuple[Optional[Slot], ...], ...]:
        return tuple(tuple(term) for term in self._terms)

    def placements(self, index: int) -> list[Slot]:
        if index >= len(self._terms):
            return []
        return [slot for slot in self._terms[index] if slot is not None]

    def offerings_for(self, course: Course, index: int) -> tuple[TimetableOffering, ...]:
        return course.offerings_for(self.term_type(index))

    def _term_inputs(self, index: int) -> list[SlotInput]:
        if index >= len(self._terms):
            return [None] * self.term_capacity
        return [slot.as_input() if slot is not None else None for slot in self._terms[index]]

    def can_place(self, course: Course, index: int) -> bool:
        """
        Check whether a course fits a term:
        - the term has a free slot
        - the course is offered in the term's type
        - the term still has a collision-free timetable with it
        """
        if course.is_root:
            raise PlacementError(f"Cannot schedule degree course {course.name!r}")
        if index < 0:
            raise PlacementError(f"Term index must not be negative, got {index}")
        if self.is_term_full(index):
            return False
        offerings = self.offerings_for(course, index)
        if not offerings:
            return False
        return self.resolver.can_course_join_term(course, offerings, self._term_inputs(index))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_course(self, course: Course, index: int) -> None:
        """
        Place a course into a term.

        Raises PlacementError if the course is already scheduled or does not
        fit the term. Sections of the courses already in the term may be
        re-chosen so that the whole term stays collision free.
        """
        if course.name in self._term_by_course:
            raise PlacementError(f"{course.name!r} is already scheduled in term {self._term_by_course[course.name]}")
        if not self.can_place(course, index):
            raise PlacementError(f"{course.name!r} cannot be placed in term {index}")

        while len(self._terms) <= index:
            self._terms.append([None] * self.term_capacity)

        offerings = self.offerings_for(course, index)
        inputs = self._term_inputs(index)
        free = inputs.index(None)
        inputs[free] = (course, offerings)

        # same query can_place just made, so this is answered from the memo
        result = self.resolver.find_feasible_combinations(inputs, limit=1)
        if not result.combinations:
            raise InvariantError(f"Term {index} has no valid timetable after placing {course.name!r}")
        chosen = {c.name: section for c, section in result.combinations[0]}

        term = self._terms[index]
        term[free] = Slot(course, offerings, chosen[course.name])
        for i, slot in enumerate(term):
            if slot is not None and slot.section != chosen[slot.course.name]:
                term[i] = Slot(slot.course, slot.offerings, chosen[slot.course.name])
        self._term_by_course[course.name] = index
        log.debug("placed %s in term %d (%s)", course.name, index, self.term_type(index).value)
