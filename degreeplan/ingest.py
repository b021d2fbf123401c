"""
Ingestion (registrar section export -> catalog JSON).

- Reads a raw export of course sections:
    {"Sections": [{"TermCode": "2025FA", "Subject": "COIS",
                   "CourseName": "COIS-1010H",
                   "Meetings": [{"Days": [1, 3], "StartTime": "09:00", "EndTime": "10:30"}]}]}
- Groups sections by course name: 1 section = 1 TimetableOffering,
  1 meeting = 1 Section (one occurrence per meeting day)
- The export carries no requisite information, so requisites are
  generated synthetically (seeded, reproducible)
- Adds one degree course per subject

Day numbers follow the export: 0 = Sunday, 1 = Monday, ... 6 = Saturday,
7 = Sunday.
"""

from __future__ import annotations

import json
import logging
import random
from datetime import datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

from degreeplan.config import EARLIEST_TIME, INGEST_SEED, LATEST_TIME, NON_INSTRUCTIONAL_DAYS
from degreeplan.errors import DataValidityError
from degreeplan.model import Course, CourseData, Section, TermType, TimetableOffering, Weekday, WeeklyOccurrence
from degreeplan.storage import save_course_data

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Degree names
# ---------------------------------------------------------------------------

DEGREE_NAMES: Dict[str, str] = {
    "COIS": "Bachelor of Computer Science",
    "ADMN": "Bachelor of Business Admin",
    "PSYC": "Bachelor of Science (Psych)",
    "BIOL": "Bachelor of Science (Biology)",
    "CHEM": "Bachelor of Science (Chem)",
    "PHYS": "Bachelor of Science (Physics)",
    "MATH": "Bachelor of Science (Math)",
    "HIST": "Bachelor of Arts (History)",
    "ENGL": "Bachelor of Arts (English)",
    "SOCI": "Bachelor of Arts (Sociology)",
    "ANTH": "Bachelor of Arts (Anthro)",
    "PHIL": "Bachelor of Arts (Phil)",
    "ECON": "Bachelor of Economics",
}


def degree_name(subject: str) -> str:
    return DEGREE_NAMES.get(subject.strip().upper(), f"Bachelor of {subject.strip()}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_term_code(term_code: Optional[str]) -> TermType:
    """
    Term codes ending in 'WI' are Winter terms, everything else is Fall.
    """
    if term_code and term_code.strip().upper().endswith("WI"):
        return TermType.WINTER
    return TermType.FALL


def _parse_clock(text: Any) -> Optional[time]:
    # Exports use "09:00", "09:00:00" or "9:00 AM" depending on the system
    raw = str(text or "").strip().upper()
    for fmt in ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M:%S %p"):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    return None


def _weekday(day_number: Any) -> Optional[Weekday]:
    try:
        n = int(day_number)
    except (TypeError, ValueError):
        return None
    if n < 0 or n > 7:
        return None
    # 0 and 7 are Sunday, 1..6 Monday..Saturday
    day = Weekday.SUNDAY if n in (0, 7) else Weekday(n - 1)
    if day.name in NON_INSTRUCTIONAL_DAYS:
        return None
    return day


def parse_meeting(meeting: Dict[str, Any]) -> Optional[Section]:
    """
    Parses exactly one meeting into one section.
    Returns None if the meeting has no usable day or time.
    """
    start = _parse_clock(meeting.get("StartTime"))
    end = _parse_clock(meeting.get("EndTime"))
    if start is None or end is None:
        return None

    # Same checks WeeklyOccurrence enforces, but skip instead of failing
    if start >= end or start < EARLIEST_TIME or end > LATEST_TIME:
        return None

    days = meeting.get("Days") or []
    occurrences: List[WeeklyOccurrence] = []
    for day_number in days:
        day = _weekday(day_number)
        if day is not None:
            occurrences.append(WeeklyOccurrence(day, start, end))

    if not occurrences:
        return None
    return Section(tuple(occurrences))


def course_level(course_name: str) -> int:
    """
    'COIS-2020H' -> 2. Names without a numeric part count as level 1.
    """
    parts = course_name.split("-")
    if len(parts) < 2 or not parts[1] or not parts[1][0].isdigit():
        return 1
    return int(parts[1][0])


def _department(course_name: str) -> str:
    return course_name.split("-")[0]


# ---------------------------------------------------------------------------
# Synthetic requisites
# ---------------------------------------------------------------------------


def generate_requisites(
    course_names: List[str], rand: random.Random
) -> Dict[str, tuple[List[str], List[str]]]:
    """
    Invent (prerequisites, corequisites) for every course.

    Prerequisites come from lower levels of the same department, plus the odd
    same-level course. Same-level links only ever point to a course that sorts
    earlier, so the result is always acyclic.
    """
    ordered = sorted(course_names)
    position = {name: i for i, name in enumerate(ordered)}
    by_department: Dict[str, List[str]] = {}
    for name in ordered:
        by_department.setdefault(_department(name), []).append(name)

    requisites: Dict[str, tuple[List[str], List[str]]] = {}
    for name in ordered:
        peers = by_department[_department(name)]
        level = course_level(name)
        lower = [c for c in peers if course_level(c) < level]
        same = [c for c in peers if course_level(c) == level and position[c] < position[name]]

        prereqs: List[str] = []
        coreqs: List[str] = []
        for c in rand.sample(lower, min(len(lower), rand.randint(0, 3))):
            prereqs.append(c)
        for c in rand.sample(same, min(len(same), rand.randint(0, 2))):
            if rand.random() > 0.5 and c not in prereqs:
                prereqs.append(c)
        for c in rand.sample(same, min(len(same), rand.randint(0, 1))):
            if c not in prereqs and c not in coreqs:
                coreqs.append(c)
        requisites[name] = (prereqs, coreqs)
    return requisites


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_course_data(raw: Any, seed: int = INGEST_SEED) -> CourseData:
    """
    Convert a raw section export into a catalog bundle.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("Sections"), list):
        raise DataValidityError("Input JSON has no 'Sections' list")

    # Group offerings by course name (and remember the subjects we saw)
    offerings_by_course: Dict[str, List[TimetableOffering]] = {}
    subjects: List[str] = []
    for section in raw["Sections"]:
        if not isinstance(section, dict):
            continue
        name = str(section.get("CourseName") or "").strip().upper()
        if not name:
            continue

        subject = str(section.get("Subject") or "").strip()
        if subject and subject.upper() not in (s.upper() for s in subjects):
            subjects.append(subject)

        sections = [s for s in (parse_meeting(m) for m in section.get("Meetings") or [] if isinstance(m, dict)) if s]
        offerings_by_course.setdefault(name, [])
        if sections:
            offerings_by_course[name].append(TimetableOffering(parse_term_code(section.get("TermCode")), tuple(sections)))

    usable = sorted(name for name, offerings in offerings_by_course.items() if offerings)
    dropped = len(offerings_by_course) - len(usable)
    if dropped:
        log.info("dropped %d courses without a usable meeting", dropped)

    requisites = generate_requisites(usable, random.Random(seed))
    courses = [
        Course(
            name=name,
            prerequisites=tuple(requisites[name][0]),
            corequisites=tuple(requisites[name][1]),
            offerings=tuple(offerings_by_course[name]),
        )
        for name in usable
    ]
    degrees = [Course(name=degree_name(subject), is_root=True) for subject in subjects]
    return CourseData(degrees=degrees, courses=courses)


def ingest_file(src: str | Path, dest: str | Path, seed: int = INGEST_SEED) -> CourseData:
    """
    Read a raw export from `src` and write the catalog JSON to `dest`.
    """
    src_path = Path(src)
    try:
        raw = json.loads(src_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DataValidityError(f"{src_path}: not valid JSON ({exc})") from exc

    data = build_course_data(raw, seed=seed)
    save_course_data(data, dest)
    return data

