"""Grade derivation rules applied to every recorded score."""
from typing import Optional, Tuple

# (minimum percentage, letter, display band), highest first
GRADE_SCALE = (
    (90.0, "A", "success"),
    (80.0, "B", "primary"),
    (70.0, "C", "warning"),
    (60.0, "D", "error"),
)
FAILING = ("F", "error")

SCORELESS_STATUSES = frozenset({"missing", "excused"})


def percentage(score: Optional[float], max_score: float) -> Optional[float]:
    if score is None or not max_score:
        return None
    return score / max_score * 100


def letter_grade(score: Optional[float], max_score: float) -> Optional[str]:
    """A >= 90, B >= 80, C >= 70, D >= 60, otherwise F. None when there is no score."""
    pct = percentage(score, max_score)
    if pct is None:
        return None
    return letter_for_percentage(pct)


def letter_for_percentage(pct: float) -> str:
    for minimum, letter, _ in GRADE_SCALE:
        if pct >= minimum:
            return letter
    return FAILING[0]


def score_band(score: Optional[float], max_score: float) -> Optional[str]:
    pct = percentage(score, max_score)
    if pct is None:
        return None
    for minimum, _, band in GRADE_SCALE[:3]:
        if pct >= minimum:
            return band
    return FAILING[1]


def normalize_grade(
    score: Optional[float],
    status: str,
    max_score: float,
) -> Tuple[Optional[float], str, Optional[str]]:
    """
    Apply the recording rules to one entry and return (score, status, letter_grade).

    Missing and excused work carries no score. A score outside [0, max_score] is rejected.
    """
    if status in SCORELESS_STATUSES:
        return None, status, None
    if score is not None and not (0 <= score <= max_score):
        raise ValueError(f"Score must be between 0 and {max_score:g}")
    return score, status, letter_grade(score, max_score)
