"""
Greedy term scheduler.

Strategy:
1. Required chains first. The degree's direct requirements are ordered by
   the cost heuristic (longest weighted dependency chain) and the deepest
   chain is placed first, dependencies before dependants.
2. Filler courses next. Any other course, deepest first, until the target
   credit count is reached. A filler chain that cannot be placed is dropped
   and the next one is tried.

Each course goes into the earliest term that is legal for it:
- strictly after every prerequisite
- no earlier than every corequisite
- the term has a free slot, offers the course, and stays collision free
"""

from __future__ import annotations

import logging
from typing import Optional

from degreeplan.errors import ConfigurationError, InvariantError, PlacementError
from degreeplan.graph import CourseGraph, Relation
from degreeplan.model import Course, TermType
from degreeplan.schedule import Schedule

log = logging.getLogger(__name__)


class TermScheduler:
    def __init__(
        self,
        graph: CourseGraph,
        term_capacity: int,
        target_credits: int,
        degree: Course,
        start_term: TermType = TermType.FALL,
        max_terms: Optional[int] = None,
    ) -> None:
        self.graph = graph
        self.term_capacity = term_capacity
        self.target_credits = target_credits
        self.degree = degree
        self.start_term = start_term
        self.max_terms = max_terms
        self.schedule: Optional[Schedule] = None

    def _validate(self) -> None:
        if self.term_capacity <= 0:
            raise ConfigurationError(f"Term capacity must be positive, got {self.term_capacity}")
        if self.max_terms is not None and self.max_terms <= 0:
            raise ConfigurationError(f"max_terms must be positive, got {self.max_terms}")
        available = sum(1 for c in self.graph.courses() if not c.is_root)
        if self.target_credits < 0:
            raise ConfigurationError(f"Credit count must not be negative, got {self.target_credits}")
        if self.target_credits > available:
            raise ConfigurationError(
                f"Impossible to fill {self.target_credits} credits, only {available} courses exist"
            )
        if self.degree not in self.graph:
            raise ConfigurationError(f"Degree {self.degree.name!r} must be in the graph")
        if not self.graph.get(self.degree.name).is_root:
            raise ConfigurationError(f"{self.degree.name!r} is not a degree course")

    def build(self) -> Schedule:
        self._validate()
        degree = self.graph.get(self.degree.name)
        schedule = Schedule(self.term_capacity, start_term=self.start_term)
        self.schedule = schedule

        other_roots = [c for c in self.graph.source_vertices() if c != degree]
        log.debug("degree %s, %d other source courses", degree.name, len(other_roots))

        # ---- required chains ----
        costs = self.graph.compute_costs(degree)
        required = sorted(self.graph.required_courses(degree), key=lambda c: costs[c.name])
        self._place_chains(required, catch_errors=False)

        # ---- filler ----
        # Costs over the whole graph: identical to the degree-rooted ones
        # below the degree, and meaningful for courses outside it.
        all_costs = self.graph.compute_costs()
        filler = sorted(
            (c for c in self.graph.courses() if not c.is_root and schedule.term_for(c) is None),
            key=lambda c: all_costs[c.name],
        )
        self._place_chains(filler, catch_errors=True)

        if schedule.course_count < self.target_credits:
            message = (
                f"Failed to hit credit count: placed {schedule.course_count} "
                f"of {self.target_credits} courses"
            )
            if self.max_terms is not None:
                raise PlacementError(f"{message} within {self.max_terms} terms")
            raise InvariantError(message)

        log.info(
            "scheduled %d courses over %d terms for %s",
            schedule.course_count,
            schedule.term_count,
            degree.name,
        )
        return schedule

    def _place_chains(self, stack: list[Course], catch_errors: bool) -> None:
        # `stack` is sorted by ascending cost, pop() hands out the deepest chain
        schedule = self.schedule
        while stack and schedule.course_count < self.target_credits:
            chain_root = stack.pop()
            if schedule.term_for(chain_root) is not None:
                continue
            if catch_errors:
                try:
                    self._place_chain(chain_root)
                except PlacementError as exc:
                    log.warning("skipping filler course %s: %s", chain_root.name, exc)
                    continue
            else:
                self._place_chain(chain_root)
            if schedule.term_for(chain_root) is None:
                raise InvariantError(f"Failed to place required course {chain_root.name!r}")

    def _place_chain(self, chain_root: Course) -> None:
        for course in self.graph.topological_order(chain_root):
            if course.is_root or self.schedule.term_for(course) is not None:
                continue
            self._place_course(course)

    def earliest_term(self, course: Course) -> int:
        """
        First term index the course's requisites allow.
        """
        earliest = 0
        for dep, relation in self.graph.dependencies(course):
            term = self.schedule.term_for(dep)
            if term is None:
                # topological order places dependencies first
                raise InvariantError(f"{course.name!r} visited before its dependency {dep.name!r}")
            if relation is Relation.PREREQ:
                earliest = max(earliest, term + 1)
            else:
                earliest = max(earliest, term)
        return earliest

    def _place_course(self, course: Course) -> None:
        schedule = self.schedule
        index = self.earliest_term(course)
        # Past the last existing term every term is empty, and within
        # len(TermType) of them each term type comes up once.
        bound = max(index, schedule.term_count) + len(TermType)
        while True:
            if self.max_terms is not None and index >= self.max_terms:
                raise PlacementError(f"No term within {self.max_terms} terms admits {course.name!r}")
            if index > bound:
                raise InvariantError(f"Forward scan for {course.name!r} passed term {bound}")
            if schedule.can_place(course, index):
                schedule.add_course(course, index)
                return
            index += 1


def build_schedule(
    graph: CourseGraph,
    term_capacity: int,
    target_credits: int,
    degree: Course,
    start_term: TermType = TermType.FALL,
    max_terms: Optional[int] = None,
) -> Schedule:
    """
    Build a term-by-term schedule for a degree. See TermScheduler.
    """
    scheduler = TermScheduler(
        graph,
        term_capacity=term_capacity,
        target_credits=target_credits,
        degree=degree,
        start_term=start_term,
        max_terms=max_terms,
    )
    return scheduler.build()
