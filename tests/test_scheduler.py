"""
Tests for the greedy term scheduler.

Scenarios:
- A: single required course lands in term 0
- B: prerequisite pushes the dependant to a later term
- C: corequisites may share a term unless their sections collide
- D: impossible credit counts fail before any placement
plus ordering, filler and horizon behavior.
"""

import unittest

from degreeplan.errors import ConfigurationError, PlacementError
from degreeplan.graph import CourseGraph
from degreeplan.model import CourseData, TermType, Weekday
from degreeplan.scheduler import TermScheduler, build_schedule

from helpers import course, degree, fixed_offerings, occ, schedule_violations, section

MON, TUE, WED = Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY


def _build(data: CourseData, degree_name: str, credits: int, capacity: int = 5, **kwargs):
    graph = CourseGraph.from_course_data(data)
    deg = data.get_degree_by_name(degree_name)
    return graph, build_schedule(graph, term_capacity=capacity, target_credits=credits, degree=deg, **kwargs)


class TestScenarios(unittest.TestCase):
    def test_single_course(self) -> None:
        data = CourseData(degrees=[degree("COIS", ["1010"])], courses=[course("1010")])
        graph, schedule = _build(data, "COIS", credits=1)
        self.assertEqual(schedule.term_for(graph.get("1010")), 0)
        self.assertEqual(schedule.course_count, 1)

    def test_prerequisite_chain(self) -> None:
        data = CourseData(
            degrees=[degree("COIS", ["1020"])],
            courses=[course("1010"), course("1020", prereqs=["1010"])],
        )
        graph, schedule = _build(data, "COIS", credits=2)
        self.assertEqual(schedule.term_for(graph.get("1010")), 0)
        self.assertEqual(schedule.term_for(graph.get("1020")), 1)
        self.assertEqual(schedule_violations(graph, schedule), [])

    def test_corequisite_shares_term(self) -> None:
        data = CourseData(
            degrees=[degree("COIS", ["1020"])],
            courses=[course("1010"), course("1020", coreqs=["1010"])],
        )
        graph, schedule = _build(data, "COIS", credits=2)
        self.assertEqual(schedule.term_for(graph.get("1010")), 0)
        self.assertEqual(schedule.term_for(graph.get("1020")), 0)
        self.assertEqual(schedule_violations(graph, schedule), [])

    def test_colliding_corequisite_deferred(self) -> None:
        only = fixed_offerings(section(occ(MON, "09:00", "10:00")))
        data = CourseData(
            degrees=[degree("COIS", ["1020"])],
            courses=[course("1010", offerings=only), course("1020", coreqs=["1010"], offerings=only)],
        )
        graph, schedule = _build(data, "COIS", credits=2)
        self.assertEqual(schedule.term_for(graph.get("1010")), 0)
        self.assertEqual(schedule.term_for(graph.get("1020")), 1)

    def test_colliding_corequisite_waits_for_its_term_type(self) -> None:
        sec = section(occ(MON, "09:00", "10:00"))
        data = CourseData(
            degrees=[degree("COIS", ["1020"])],
            courses=[
                course("1010", offerings=fixed_offerings(sec)),
                course("1020", coreqs=["1010"], offerings=fixed_offerings(sec, terms=(TermType.FALL,))),
            ],
        )
        graph, schedule = _build(data, "COIS", credits=2)
        self.assertEqual(schedule.term_for(graph.get("1020")), 2)

    def test_too_many_credits(self) -> None:
        data = CourseData(degrees=[degree("COIS", ["1010"])], courses=[course("1010")])
        graph = CourseGraph.from_course_data(data)
        scheduler = TermScheduler(graph, term_capacity=5, target_credits=2, degree=data.degrees[0])
        with self.assertRaises(ConfigurationError):
            scheduler.build()
        self.assertIsNone(scheduler.schedule)


class TestConfiguration(unittest.TestCase):
    def setUp(self) -> None:
        self.data = CourseData(degrees=[degree("COIS", ["1010"])], courses=[course("1010")])
        self.graph = CourseGraph.from_course_data(self.data)

    def test_bad_capacity(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_schedule(self.graph, term_capacity=0, target_credits=1, degree=self.data.degrees[0])

    def test_unknown_degree(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_schedule(self.graph, term_capacity=5, target_credits=1, degree=degree("MATH"))

    def test_degree_must_be_root(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_schedule(self.graph, term_capacity=5, target_credits=1, degree=course("1010"))

    def test_bad_horizon(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_schedule(self.graph, 5, 1, self.data.degrees[0], max_terms=0)


class TestOrderingAndFiller(unittest.TestCase):
    def test_deepest_chain_first(self) -> None:
        # Y needs Z, X stands alone. With one slot per term the deeper chain
        # (Z, Y) takes terms 0 and 1 and X comes after.
        data = CourseData(
            degrees=[degree("COIS", ["X", "Y"])],
            courses=[course("X"), course("Y", prereqs=["Z"]), course("Z")],
        )
        graph, schedule = _build(data, "COIS", credits=3, capacity=1)
        self.assertEqual(schedule.term_for(graph.get("Z")), 0)
        self.assertEqual(schedule.term_for(graph.get("Y")), 1)
        self.assertEqual(schedule.term_for(graph.get("X")), 2)

    def test_filler_reaches_target(self) -> None:
        data = CourseData(
            degrees=[degree("COIS", ["A"])],
            courses=[course("A"), course("B"), course("C", prereqs=["B"])],
        )
        graph, schedule = _build(data, "COIS", credits=3, capacity=2)
        self.assertEqual(schedule.course_count, 3)
        self.assertEqual(schedule_violations(graph, schedule), [])

    def test_stops_at_target(self) -> None:
        data = CourseData(
            degrees=[degree("COIS", ["A"])],
            courses=[course("A"), course("B"), course("C")],
        )
        _, schedule = _build(data, "COIS", credits=1)
        self.assertEqual(schedule.course_count, 1)

    def test_required_course_beyond_horizon_fails(self) -> None:
        winter_only = fixed_offerings(section(occ(TUE, "09:00", "10:00")), terms=(TermType.WINTER,))
        data = CourseData(degrees=[degree("COIS", ["W"])], courses=[course("W", offerings=winter_only)])
        with self.assertRaises(PlacementError):
            _build(data, "COIS", credits=1, max_terms=1)

    def test_filler_beyond_horizon_is_skipped(self) -> None:
        winter_only = fixed_offerings(section(occ(TUE, "09:00", "10:00")), terms=(TermType.WINTER,))
        data = CourseData(
            degrees=[degree("COIS", ["A"])],
            # equal costs: the filler stack pops the last course first, so W is tried before B
            courses=[course("A"), course("B"), course("W", offerings=winter_only)],
        )
        with self.assertLogs("degreeplan.scheduler", level="WARNING") as logs:
            graph, schedule = _build(data, "COIS", credits=2, max_terms=1)
        self.assertIsNone(schedule.term_for(graph.get("W")))
        self.assertEqual(schedule.term_for(graph.get("B")), 0)
        self.assertTrue(any("W" in line for line in logs.output))

    def test_unsatisfiable_within_horizon(self) -> None:
        winter_only = fixed_offerings(section(occ(TUE, "09:00", "10:00")), terms=(TermType.WINTER,))
        data = CourseData(
            degrees=[degree("COIS", ["A"])],
            courses=[course("A"), course("W", offerings=winter_only)],
        )
        with self.assertRaises(PlacementError):
            _build(data, "COIS", credits=2, max_terms=1)


class TestScheduleProperties(unittest.TestCase):
    def test_mixed_catalog_is_valid(self) -> None:
        mw9 = section(occ(MON, "09:00", "10:00"), occ(WED, "09:00", "10:00"))
        mw10 = section(occ(MON, "10:00", "11:00"), occ(WED, "10:00", "11:00"))
        t9 = section(occ(TUE, "09:00", "10:30"))
        data = CourseData(
            degrees=[degree("COIS", ["3000", "2100", "1500"])],
            courses=[
                course("1000", offerings=fixed_offerings(mw9, mw10)),
                course("1100", offerings=fixed_offerings(mw9)),
                course("1500", coreqs=["1100"], offerings=fixed_offerings(mw9, t9)),
                course("2000", prereqs=["1000", "1100"], offerings=fixed_offerings(mw10, t9)),
                course("2100", prereqs=["1000"], coreqs=["2000"], offerings=fixed_offerings(mw9, mw10)),
                course("3000", prereqs=["2000"], offerings=fixed_offerings(t9, terms=(TermType.WINTER,))),
                course("1200", offerings=fixed_offerings(t9)),
                course("2200", prereqs=["1200"], offerings=fixed_offerings(mw10)),
            ],
        )
        graph, schedule = _build(data, "COIS", credits=8, capacity=2)
        self.assertEqual(schedule.course_count, 8)
        self.assertEqual(schedule_violations(graph, schedule), [])
        for index in range(schedule.term_count):
            self.assertLessEqual(len(schedule.placements(index)), 2)
        self.assertEqual(schedule.term_type(schedule.term_for(graph.get("3000"))), TermType.WINTER)


if __name__ == "__main__":
    unittest.main()
