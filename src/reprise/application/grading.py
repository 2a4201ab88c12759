"""
Auto-grading of typed answers.

Maps the similarity between a typed answer and the expected target onto the
three review outcomes, so typing practice can feed the scheduler directly.
"""

from reprise.application.utils.text import normalize_answer, similarity
from reprise.domain.constants import GRADE_MAYBE_THRESHOLD, GRADE_OK_THRESHOLD
from reprise.domain.models import GradingDetails, ReviewOutcome


def auto_grade(user_answer: str, correct_answer: str) -> ReviewOutcome:
    """
    Grade an answer: blank is NG, >= 95% similar is OK, >= 75% is MAYBE, else NG.
    """
    if not user_answer.strip():
        return ReviewOutcome.NG

    score = similarity(user_answer, correct_answer)
    if score >= GRADE_OK_THRESHOLD:
        return ReviewOutcome.OK
    if score >= GRADE_MAYBE_THRESHOLD:
        return ReviewOutcome.MAYBE
    return ReviewOutcome.NG


def grading_details(user_answer: str, correct_answer: str) -> GradingDetails:
    return GradingDetails(
        outcome=auto_grade(user_answer, correct_answer),
        similarity=similarity(user_answer, correct_answer),
        normalized_answer=normalize_answer(user_answer),
        normalized_expected=normalize_answer(correct_answer),
    )
