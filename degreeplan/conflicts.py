"""
Timetable conflict resolution.

Given the courses of one term, each with the sections it could be taken in,
find the ways to pick exactly one section per course so that nothing
overlaps.

Overlap rule (same weekday only):
    start < other_end AND other_start < end
Touching endpoints (end == start) is not a conflict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Iterator, Optional, Sequence

from degreeplan.model import Course, Section, TimetableOffering, WeeklyOccurrence

log = logging.getLogger(__name__)

# One term slot: empty, or a course with its offerings for the term's type
SlotInput = Optional[tuple[Course, Sequence[TimetableOffering]]]
# One feasible choice: (course, section) per occupied slot, in slot order
Combination = tuple[tuple[Course, Section], ...]


def occurrences_overlap(a: WeeklyOccurrence, b: WeeklyOccurrence) -> bool:
    return a.day == b.day and a.start < b.end and b.start < a.end


def sections_overlap(a: Section, b: Section) -> bool:
    """
    True if any occurrence of `a` collides with any occurrence of `b`.
    """
    for occ_a in a.occurrences:
        for occ_b in b.occurrences:
            if occurrences_overlap(occ_a, occ_b):
                return True
    return False


def candidate_sections(offerings: Sequence[TimetableOffering]) -> list[Section]:
    return [section for offering in offerings for section in offering.sections]


@dataclass
class TimetableResult:
    """
    Output of one resolver query.

    combinations: feasible choices (empty if none exist)
    slots: the slot list the query was made with

    A query without any occupied slot has no combinations but still counts
    as feasible: there is nothing that could collide.
    """

    combinations: list[Combination]
    slots: tuple[SlotInput, ...]

    @property
    def feasible(self) -> bool:
        return bool(self.combinations) or all(s is None for s in self.slots)


def fingerprint(slots: Sequence[SlotInput], limit: Optional[int] = None) -> int:
    """
    Deterministic hash over the ordered (course, offerings) of every slot.
    """
    key: list[Hashable] = [len(slots), limit]
    for slot in slots:
        if slot is None:
            key.append(None)
            continue
        course, offerings = slot
        key.append((course.name, tuple(offerings)))
    return hash(tuple(key))


@dataclass
class SlotMemo:
    """
    Single-entry cache: holds the last (fingerprint, result) pair only.

    Tuned for "ask about the same term again while filling it"; storing a
    new fingerprint evicts the previous one.
    """

    key: Optional[int] = None
    result: Optional[TimetableResult] = None
    hits: int = 0
    misses: int = 0

    def lookup(self, key: int) -> Optional[TimetableResult]:
        if self.result is not None and self.key == key:
            self.hits += 1
            return self.result
        self.misses += 1
        return None

    def store(self, key: int, result: TimetableResult) -> None:
        self.key = key
        self.result = result

    def clear(self) -> None:
        self.key = None
        self.result = None


@dataclass
class TimetableResolver:
    memo: SlotMemo = field(default_factory=SlotMemo)

    def find_feasible_combinations(
        self, slots: Sequence[SlotInput], limit: Optional[int] = None
    ) -> TimetableResult:
        """
        Return every non-overlapping choice of one section per occupied slot,
        in cartesian-product order (first slot varies slowest).

        `limit` stops the search after that many combinations; pass 1 when
        only existence matters.
        """
        slot_tuple = tuple(slots)
        if not slot_tuple:
            return TimetableResult([], slot_tuple)

        key = fingerprint(slot_tuple, limit)
        cached = self.memo.lookup(key)
        if cached is not None:
            return cached

        occupied = [
            (course, candidate_sections(offerings)) for course, offerings in (s for s in slot_tuple if s is not None)
        ]
        combos: list[Combination] = []
        if occupied:
            for combo in _search(occupied, []):
                combos.append(combo)
                if limit is not None and len(combos) >= limit:
                    break

        result = TimetableResult(combos, slot_tuple)
        self.memo.store(key, result)
        log.debug("resolved %d slots: %d combinations", len(occupied), len(combos))
        return result

    def can_course_join_term(
        self,
        course: Course,
        offerings: Sequence[TimetableOffering],
        term_slots: Sequence[SlotInput],
    ) -> bool:
        """
        Would the term still have a feasible timetable with `course` added?
        """
        hypothetical = _with_course(term_slots, course, offerings)
        return self.find_feasible_combinations(hypothetical, limit=1).feasible


def _with_course(
    term_slots: Sequence[SlotInput], course: Course, offerings: Sequence[TimetableOffering]
) -> list[SlotInput]:
    # put the course in the first empty slot, append if there is none
    slots = list(term_slots)
    new_slot = (course, tuple(offerings))
    for i, slot in enumerate(slots):
        if slot is None:
            slots[i] = new_slot
            return slots
    slots.append(new_slot)
    return slots


def _search(
    occupied: list[tuple[Course, list[Section]]],
    chosen: list[tuple[Course, Section]],
) -> Iterator[Combination]:
    # Depth-first walk of the cartesian product. A branch is cut as soon as the
    # newest pick collides with an earlier one, which yields exactly the
    # combinations a full enumeration + filter would, in the same order.
    depth = len(chosen)
    if depth == len(occupied):
        yield tuple(chosen)
        return
    course, sections = occupied[depth]
    for section in sections:
        if any(sections_overlap(section, other) for _, other in chosen):
            continue
        chosen.append((course, section))
        yield from _search(occupied, chosen)
        chosen.pop()
