"""
Configuration constants.

Centralizes the values that shape validation, the cost heuristic and the
command line defaults, so they can be adjusted in one place.
"""

from __future__ import annotations

from datetime import time
from pathlib import Path

# ---------------------------------------------------------------------------
# Timetable window
# ---------------------------------------------------------------------------

# Every weekly occurrence must lie inside [EARLIEST_TIME, LATEST_TIME]
EARLIEST_TIME = time(8, 0)
LATEST_TIME = time(22, 0)

# Weekday names (see model.Weekday) on which no course may meet
NON_INSTRUCTIONAL_DAYS = frozenset({"SATURDAY", "SUNDAY"})


# ---------------------------------------------------------------------------
# Cost heuristic
# ---------------------------------------------------------------------------

# A prerequisite adds one full level to a chain.
PREREQ_WEIGHT = 1.0
# A corequisite only breaks ties: among equally deep courses the one with
# an attached corequisite is scheduled first.
COREQ_WEIGHT = 0.05


# ---------------------------------------------------------------------------
# Scheduling / CLI defaults
# ---------------------------------------------------------------------------

DEFAULT_TERM_CAPACITY = 5
DEFAULT_START_TERM = "Fall"

# Row granularity of the rendered weekly tables
RENDER_TIME_INCREMENT_MINUTES = 60

# Seed for the synthetic requisites generated during ingestion
INGEST_SEED = 55


def default_output_dir() -> Path:
    """
    Return the directory used when the CLI is not given explicit output paths.
    """
    return Path.cwd() / "output"
