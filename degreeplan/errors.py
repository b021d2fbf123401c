"""
Error taxonomy.

Every failure raised by the planner derives from PlannerError so callers
(the CLI in particular) can catch the whole family in one place.

- ConfigurationError: bad scheduling parameters, detected before any work
- StructuralViolation: a graph edit would break the DAG / root rules
- DataValidityError: invalid catalog values or unresolved course names
- PlacementError: no legal term exists for a course
- InvariantError: a state the algorithm proves cannot happen
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for all degreeplan errors."""


class ConfigurationError(PlannerError, ValueError):
    pass


class StructuralViolation(PlannerError, ValueError):
    pass


class DataValidityError(PlannerError, ValueError):
    pass


class PlacementError(PlannerError):
    pass


class InvariantError(PlannerError, RuntimeError):
    pass
