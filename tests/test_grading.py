import pytest

from eduwise.core.grading import letter_for_percentage, letter_grade, normalize_grade, percentage, score_band


@pytest.mark.parametrize(
    "score, expected",
    [(100, "A"), (90, "A"), (89.99, "B"), (80, "B"), (79.5, "C"), (70, "C"), (69, "D"), (60, "D"), (59.9, "F"), (0, "F")],
)
def test_letter_boundaries(score, expected) -> None:
    assert letter_grade(score, 100) == expected


def test_letter_scales_with_max_score() -> None:
    assert letter_grade(45, 50) == "A"
    assert letter_grade(29, 50) == "F"
    assert letter_for_percentage(75.0) == "C"


def test_no_score_no_letter() -> None:
    assert letter_grade(None, 100) is None
    assert percentage(None, 100) is None


@pytest.mark.parametrize(
    "score, band",
    [(95, "success"), (85, "primary"), (72, "warning"), (65, "error"), (10, "error")],
)
def test_score_band(score, band) -> None:
    assert score_band(score, 100) == band


def test_missing_and_excused_drop_score() -> None:
    assert normalize_grade(88, "missing", 100) == (None, "missing", None)
    assert normalize_grade(88, "excused", 100) == (None, "excused", None)


def test_submitted_keeps_score_and_derives_letter() -> None:
    assert normalize_grade(18, "submitted", 20) == (18, "submitted", "A")


def test_incomplete_without_score() -> None:
    assert normalize_grade(None, "incomplete", 100) == (None, "incomplete", None)


def test_score_above_max_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_grade(21, "submitted", 20)
