"""
Persistent storage for course catalogs.

A catalog file holds degrees and courses in one JSON document:

    {
      "degrees": [{"name": "COIS", "prerequisites": ["1020"]}],
      "courses": [
        {
          "name": "1020",
          "prerequisites": ["1010"],
          "corequisites": [],
          "offerings": [
            {"term": "Fall",
             "sections": [[{"day": "Monday", "start": "09:00", "end": "10:00"}]]}
          ]
        }
      ]
    }

Each entry in "sections" is one section: the list of weekly occurrences that
meet together.

Unlike a user preference file, a broken catalog is an error: loading raises
DataValidityError instead of silently returning an empty catalog.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from degreeplan.errors import DataValidityError
from degreeplan.model import (
    Course,
    CourseData,
    Section,
    TermType,
    TimetableOffering,
    Weekday,
    WeeklyOccurrence,
    parse_hhmm,
)


def _names(raw: Any, field_name: str, owner: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise DataValidityError(f"{owner}: {field_name!r} must be a list")
    return tuple(str(x).strip() for x in raw if str(x).strip())


def _occurrence_from_dict(raw: Any) -> WeeklyOccurrence:
    if not isinstance(raw, dict):
        raise DataValidityError(f"Occurrence must be an object, got {raw!r}")
    try:
        return WeeklyOccurrence(
            day=Weekday.parse(raw["day"]),
            start=parse_hhmm(raw["start"]),
            end=parse_hhmm(raw["end"]),
        )
    except KeyError as exc:
        raise DataValidityError(f"Occurrence is missing {exc.args[0]!r}") from None


def _offering_from_dict(raw: Any, owner: str) -> TimetableOffering:
    if not isinstance(raw, dict):
        raise DataValidityError(f"{owner}: offering must be an object")
    sections_raw = raw.get("sections", [])
    if not isinstance(sections_raw, list):
        raise DataValidityError(f"{owner}: 'sections' must be a list")
    sections = []
    for section_raw in sections_raw:
        if not isinstance(section_raw, list):
            raise DataValidityError(f"{owner}: a section must be a list of occurrences")
        sections.append(Section(tuple(_occurrence_from_dict(o) for o in section_raw)))
    return TimetableOffering(TermType.parse(raw.get("term", "")), tuple(sections))


def course_from_dict(raw: Any, is_root: bool = False) -> Course:
    if not isinstance(raw, dict) or not str(raw.get("name", "")).strip():
        raise DataValidityError(f"Course entry needs a name, got {raw!r}")
    name = str(raw["name"]).strip()
    offerings_raw = raw.get("offerings", [])
    if not isinstance(offerings_raw, list):
        raise DataValidityError(f"{name}: 'offerings' must be a list")
    return Course(
        name=name,
        prerequisites=_names(raw.get("prerequisites"), "prerequisites", name),
        corequisites=_names(raw.get("corequisites"), "corequisites", name),
        offerings=tuple(_offering_from_dict(o, name) for o in offerings_raw),
        is_root=is_root,
    )


def course_to_dict(course: Course) -> dict[str, Any]:
    out: dict[str, Any] = {"name": course.name, "prerequisites": list(course.prerequisites)}
    if course.is_root:
        return out
    out["corequisites"] = list(course.corequisites)
    out["offerings"] = [
        {
            "term": offering.term_type.value,
            "sections": [
                [
                    {"day": o.day.label, "start": f"{o.start:%H:%M}", "end": f"{o.end:%H:%M}"}
                    for o in section.occurrences
                ]
                for section in offering.sections
            ],
        }
        for offering in course.offerings
    ]
    return out


def course_data_from_dict(raw: Any) -> CourseData:
    if not isinstance(raw, dict):
        raise DataValidityError("Catalog must be a JSON object with 'degrees' and 'courses'")
    degrees_raw = raw.get("degrees", [])
    courses_raw = raw.get("courses", [])
    if not isinstance(degrees_raw, list) or not isinstance(courses_raw, list):
        raise DataValidityError("'degrees' and 'courses' must be lists")
    return CourseData(
        degrees=[course_from_dict(d, is_root=True) for d in degrees_raw],
        courses=[course_from_dict(c) for c in courses_raw],
    )


def course_data_to_dict(data: CourseData) -> dict[str, Any]:
    return {
        "degrees": [course_to_dict(d) for d in data.degrees],
        "courses": [course_to_dict(c) for c in data.courses],
    }


def load_course_data(path: str | Path) -> CourseData:
    """
    Load a catalog from JSON.

    Raises FileNotFoundError if the file is missing and DataValidityError if
    it is not a valid catalog.
    """
    catalog_path = Path(path)
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DataValidityError(f"{catalog_path}: not valid JSON ({exc})") from exc
    return course_data_from_dict(raw)


def save_course_data(data: CourseData, path: str | Path) -> None:
    """
    Save a catalog to JSON. Creates parent directories if needed.
    """
    catalog_path = Path(path)
    catalog_path.parent.mkdir(parents=True, exist_ok=True)
    payload = course_data_to_dict(data)
    catalog_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
