"""
Prerequisite graph.

Vertices are courses, edges point from a course to something it depends on:

    add_edge(A, B, Relation.PREREQ)   ->   B must be taken before A
    add_edge(A, B, Relation.COREQ)    ->   B must be taken before or with A

The graph is a DAG at all times. Every edge insertion first checks whether
the source is already reachable from the target and refuses the edge if so,
so a cycle is never stored and never has to be detected afterwards.

Storage layout:
- all vertices live in one dict keyed by course name (insertion ordered)
- a vertex keeps its outgoing edges as {target name: Relation}
- traversal scratch state (visited sets, costs) is local to each call
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional

from degreeplan.config import COREQ_WEIGHT, PREREQ_WEIGHT
from degreeplan.errors import DataValidityError, StructuralViolation
from degreeplan.model import Course, CourseData

log = logging.getLogger(__name__)


class Relation(Enum):
    PREREQ = "Prereq"
    COREQ = "Coreq"

    @property
    def weight(self) -> float:
        return PREREQ_WEIGHT if self is Relation.PREREQ else COREQ_WEIGHT


@dataclass(frozen=True)
class Edge:
    """
    Read-only view of one edge, handed out to renderers and tests.
    """

    source: Course
    target: Course
    relation: Relation


@dataclass
class _Vertex:
    course: Course
    # target name -> relation, in insertion order
    edges: dict[str, Relation] = field(default_factory=dict)


class CourseGraph:
    def __init__(self) -> None:
        self._vertices: dict[str, _Vertex] = {}

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def __contains__(self, course: object) -> bool:
        return isinstance(course, Course) and course.name in self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    def get(self, name: str) -> Optional[Course]:
        vertex = self._vertices.get(name)
        return vertex.course if vertex is not None else None

    def courses(self) -> list[Course]:
        return [v.course for v in self._vertices.values()]

    def edges(self) -> Iterator[Edge]:
        for vertex in self._vertices.values():
            for target, relation in vertex.edges.items():
                yield Edge(vertex.course, self._vertices[target].course, relation)

    def dependencies(self, course: Course) -> list[tuple[Course, Relation]]:
        """
        Outgoing edges of a course as (dependency, relation) pairs.
        Returns [] if the course is not in the graph.
        """
        vertex = self._vertices.get(course.name)
        if vertex is None:
            return []
        return [(self._vertices[t].course, rel) for t, rel in vertex.edges.items()]

    def has_edge(self, source: Course, target: Course) -> bool:
        vertex = self._vertices.get(source.name)
        return vertex is not None and target.name in vertex.edges

    def relation(self, source: Course, target: Course) -> Optional[Relation]:
        vertex = self._vertices.get(source.name)
        if vertex is None:
            return None
        return vertex.edges.get(target.name)

    def required_courses(self, degree: Course) -> list[Course]:
        """
        The courses a degree requires directly.
        """
        return [dep for dep, _ in self.dependencies(degree)]

    def source_vertices(self) -> list[Course]:
        """
        Courses with no incoming edges (nothing depends on them).
        """
        targeted: set[str] = set()
        for vertex in self._vertices.values():
            targeted.update(vertex.edges)
        return [v.course for name, v in self._vertices.items() if name not in targeted]

    def get_course_data(self) -> CourseData:
        """
        Partition the graph into degree (root) courses and ordinary courses.

        Requisite name lists are rebuilt from the current edges, so edits made
        through the graph (toggle_required, remove_vertex, ...) survive a save.
        """
        data = CourseData()
        for vertex in self._vertices.values():
            prereqs = tuple(t for t, rel in vertex.edges.items() if rel is Relation.PREREQ)
            coreqs = tuple(t for t, rel in vertex.edges.items() if rel is Relation.COREQ)
            course = replace(vertex.course, prerequisites=prereqs, corequisites=coreqs)
            if course.is_root:
                data.degrees.append(course)
            else:
                data.courses.append(course)
        return data

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_vertex(self, course: Course) -> None:
        """
        Add a vertex for the course. Duplicates are ignored.
        """
        if course.name in self._vertices:
            return
        self._vertices[course.name] = _Vertex(course)
        log.debug("added vertex %s", course.name)

    def remove_vertex(self, course: Course) -> None:
        """
        Remove a course and rewire around it.

        If B is removed, every course that depended on B inherits B's own
        dependencies (with the relation B had to them), so anything reachable
        through B stays reachable.
        """
        removed = self._vertices.get(course.name)
        if removed is None:
            return
        inherited = list(removed.edges.items())
        for vertex in list(self._vertices.values()):
            if course.name not in vertex.edges:
                continue
            del vertex.edges[course.name]
            for target, relation in inherited:
                self.add_edge(vertex.course, self._vertices[target].course, relation)
        del self._vertices[course.name]
        log.debug("removed vertex %s (rewired %d dependencies)", course.name, len(inherited))

    def add_edge(self, source: Course, target: Course, relation: Relation) -> None:
        """
        Make `target` a dependency of `source`.

        Raises StructuralViolation if the target is a degree course or if the
        edge would close a cycle. Missing vertices and duplicate edges are
        ignored. Nothing is modified when an error is raised.
        """
        if target.is_root:
            raise StructuralViolation(f"Degree course {target.name!r} cannot be a dependency")
        source_vertex = self._vertices.get(source.name)
        target_vertex = self._vertices.get(target.name)
        if source_vertex is None or target_vertex is None:
            return
        if target.name in source_vertex.edges:
            return
        if self._reachable(target.name, source.name):
            raise StructuralViolation(
                f"Edge {source.name!r} -> {target.name!r} would create a cycle"
            )
        source_vertex.edges[target.name] = relation
        log.debug("added edge %s -[%s]-> %s", source.name, relation.value, target.name)

    def remove_edge(self, source: Course, target: Course) -> None:
        source_vertex = self._vertices.get(source.name)
        if source_vertex is None or target.name not in self._vertices:
            return
        if source_vertex.edges.pop(target.name, None) is not None:
            log.debug("removed edge %s -> %s", source.name, target.name)

    def toggle_required(self, course: Course, degree: Course) -> bool:
        """
        Toggle whether a degree requires a course.

        Returns True if the course is required afterwards.
        """
        if not degree.is_root:
            raise StructuralViolation(f"{degree.name!r} is not a degree course")
        if course.is_root:
            raise StructuralViolation(f"{course.name!r} is a degree course, expected a course")
        degree_vertex = self._vertices.get(degree.name)
        if degree_vertex is None:
            return False
        if course.name in degree_vertex.edges:
            del degree_vertex.edges[course.name]
            return False
        self.add_edge(degree, course, Relation.PREREQ)
        return course.name in degree_vertex.edges

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _reachable(self, start: str, goal: str) -> bool:
        # iterative DFS, visited set is local to this call
        stack = [start]
        visited: set[str] = set()
        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self._vertices[current].edges)
        return False

    def topological_order(self, root: Optional[Course] = None) -> Iterator[Course]:
        """
        Yield courses so that every course comes after all of its dependencies.

        With a root only the courses reachable from it are visited (the root
        itself is yielded last); without one the whole graph is walked,
        starting from each source vertex in insertion order.

        This is a generator: each call returns a new, independent traversal.
        It relies on the graph being acyclic, which add_edge guarantees.
        """
        if root is None:
            starts = [c.name for c in self.source_vertices()]
        elif root.name in self._vertices:
            starts = [root.name]
        else:
            starts = []

        done: set[str] = set()
        for start in starts:
            if start in done:
                continue
            # (vertex name, iterator over its dependency names)
            stack = [(start, iter(self._vertices[start].edges))]
            on_stack = {start}
            while stack:
                name, deps = stack[-1]
                for dep in deps:
                    if dep not in done and dep not in on_stack:
                        stack.append((dep, iter(self._vertices[dep].edges)))
                        on_stack.add(dep)
                        break
                else:
                    stack.pop()
                    on_stack.discard(name)
                    done.add(name)
                    yield self._vertices[name].course

    def compute_costs(self, root: Optional[Course] = None) -> dict[str, float]:
        """
        Weighted longest-chain distance from each course to its furthest leaf
        dependency (prerequisite = 1.0, corequisite = 0.05).

        Every vertex starts at 0; only vertices reachable from `root` (or from
        any source vertex when root is None) are raised above it.
        """
        costs = {name: 0.0 for name in self._vertices}
        for course in self.topological_order(root):
            vertex = self._vertices[course.name]
            for dep, relation in vertex.edges.items():
                costs[course.name] = max(costs[course.name], costs[dep] + relation.weight)
        return costs

    # ------------------------------------------------------------------
    # Bulk construction
    # ------------------------------------------------------------------

    @classmethod
    def from_course_data(cls, data: CourseData) -> "CourseGraph":
        """
        Build a fully connected graph from a catalog bundle.

        Raises DataValidityError if a requisite name is unknown or a degree
        declares corequisites. Names are checked before anything is built.
        """
        by_name: dict[str, Course] = {}
        for course in data.all_courses():
            by_name.setdefault(course.name, course)

        for degree in data.degrees:
            if degree.corequisites:
                raise DataValidityError(f"Degree {degree.name!r} cannot declare corequisites")
        for course in data.all_courses():
            for name in (*course.prerequisites, *course.corequisites):
                if name not in by_name:
                    raise DataValidityError(f"{course.name!r} references unknown course {name!r}")

        graph = cls()
        for course in data.all_courses():
            graph.add_vertex(course)

        for degree in data.degrees:
            for name in degree.prerequisites:
                graph.add_edge(degree, by_name[name], Relation.PREREQ)
        for course in data.courses:
            for name in course.corequisites:
                graph.add_edge(course, by_name[name], Relation.COREQ)
            for name in course.prerequisites:
                graph.add_edge(course, by_name[name], Relation.PREREQ)
        return graph
