import pytest

from reprise.application.grading import auto_grade, grading_details
from reprise.domain.models import ReviewOutcome


@pytest.mark.parametrize(
    "answer,expected",
    [
        ("Where is the station?", ReviewOutcome.OK),
        ("where is the station", ReviewOutcome.OK),
        ("Where is the statoin", ReviewOutcome.MAYBE),
        ("Where is a bus", ReviewOutcome.NG),
        ("", ReviewOutcome.NG),
        ("   ", ReviewOutcome.NG),
    ],
)
def test_auto_grade(answer, expected):
    assert auto_grade(answer, "Where is the station?") is expected


def test_blank_answer_is_ng_even_for_blank_target():
    assert auto_grade("", "") is ReviewOutcome.NG


def test_grading_details():
    details = grading_details("Coffee, please!", "coffee please")
    assert details.outcome is ReviewOutcome.OK
    assert details.similarity == 1.0
    assert details.normalized_answer == "coffee please"
    assert details.normalized_expected == "coffee please"
