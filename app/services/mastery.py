"""
Mastery Classification

Single source of the mastery thresholds. Every place that buckets a mastery
value (per-competency status, color code, distribution tally, gap report)
goes through ``classify_mastery``.
"""

import enum

MASTERY_THRESHOLD = 80
PROFICIENT_THRESHOLD = 60


class MasteryLevel(str, enum.Enum):
    MASTERY = "mastery"
    PROFICIENT = "proficient"
    NEEDS_ATTENTION = "needsAttention"


_COLOR_CODES = {
    MasteryLevel.MASTERY: "green",
    MasteryLevel.PROFICIENT: "yellow",
    MasteryLevel.NEEDS_ATTENTION: "red",
}

_STATUS_LABELS = {
    MasteryLevel.MASTERY: "Mastered",
    MasteryLevel.PROFICIENT: "Proficient",
    MasteryLevel.NEEDS_ATTENTION: "Needs Work",
}


def classify_mastery(value: float) -> MasteryLevel:
    """Bucket a 0-100 value; lower bounds are inclusive."""
    if value >= MASTERY_THRESHOLD:
        return MasteryLevel.MASTERY
    if value >= PROFICIENT_THRESHOLD:
        return MasteryLevel.PROFICIENT
    return MasteryLevel.NEEDS_ATTENTION


def is_mastered(value: float) -> bool:
    return classify_mastery(value) == MasteryLevel.MASTERY


def color_code(value: float) -> str:
    """Traffic-light color: green, yellow or red."""
    return _COLOR_CODES[classify_mastery(value)]


def status_label(value: float) -> str:
    """Display status: Mastered, Proficient or Needs Work."""
    return _STATUS_LABELS[classify_mastery(value)]
