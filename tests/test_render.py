import tempfile
import unittest
from pathlib import Path

from degreeplan.graph import CourseGraph
from degreeplan.model import CourseData, Weekday
from degreeplan.render import graph_to_mermaid, schedule_summary, schedule_to_text, write_graph, write_schedule
from degreeplan.scheduler import build_schedule

from helpers import course, degree, fixed_offerings, occ, section


def _scheduled():
    mw = section(occ(Weekday.MONDAY, "09:00", "10:00"), occ(Weekday.WEDNESDAY, "09:00", "10:00"))
    data = CourseData(
        degrees=[degree("Bachelor of Science", ["1020"])],
        courses=[course("1010", offerings=fixed_offerings(mw)), course("1020", prereqs=["1010"], offerings=fixed_offerings(mw))],
    )
    graph = CourseGraph.from_course_data(data)
    schedule = build_schedule(graph, term_capacity=3, target_credits=2, degree=data.degrees[0])
    return graph, schedule


class TestRender(unittest.TestCase):
    def test_schedule_text(self) -> None:
        _, schedule = _scheduled()
        text = schedule_to_text(schedule)
        self.assertIn("Term 0 - Fall Schedule", text)
        self.assertIn("Term 1 - Winter Schedule", text)
        self.assertIn("1010", text)
        self.assertIn("Wednesday", text)
        self.assertNotIn("\x1b[", text)

    def test_summary(self) -> None:
        _, schedule = _scheduled()
        self.assertEqual(
            schedule_summary(schedule).splitlines(),
            [
                "Term 0 (Fall): 1010 [Mon 09:00-10:00, Wed 09:00-10:00]",
                "Term 1 (Winter): 1020 [Mon 09:00-10:00, Wed 09:00-10:00]",
            ],
        )

    def test_mermaid(self) -> None:
        graph, _ = _scheduled()
        text = graph_to_mermaid(graph)
        self.assertIn("flowchart TB", text)
        self.assertIn('nBachelor_of_Science["Bachelor of Science"]', text)
        self.assertIn("n1020 -->|Prereq| n1010", text)
        self.assertIn("style nBachelor_of_Science stroke-dasharray: 10,5", text)
        self.assertNotIn("style n1010", text)

    def test_write_files(self) -> None:
        graph, schedule = _scheduled()
        with tempfile.TemporaryDirectory() as d:
            sched_path = Path(d) / "out" / "schedule.md"
            graph_path = Path(d) / "graph.md"
            write_schedule(schedule, sched_path)
            write_graph(graph, graph_path)
            self.assertTrue(sched_path.read_text(encoding="utf-8").startswith("# Schedule"))
            self.assertIn("```mermaid", graph_path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
