'''
scores a submission: one outcome per question, totals and a per-subject breakdown

malformed answers never raise, they are scored as incorrect so a single bad
response cannot abort the whole submission
'''
import math
from typing import Dict, Iterable, List, Optional

from rankwise.schemas.scoring_schemas import (
    AnswerStatus,
    MarkingScheme,
    Question,
    QuestionOutcome,
    QuestionType,
    Response,
    ScoreResult,
    SubjectTally,
)

DEFAULT_SUBJECT = "General"


def _parse_number(text: str) -> Optional[float]:
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def answers_match(question_type: QuestionType, given: str, expected: str, tolerance: float = 0.0) -> bool:
    given = (given or "").strip()
    expected = (expected or "").strip()
    if not given or not expected:
        return False

    if question_type == QuestionType.NUMERICAL:
        user_value = _parse_number(given)
        correct_value = _parse_number(expected)
        if user_value is None or correct_value is None:
            return False
        diff = abs(user_value - correct_value)
        # isclose keeps 3.15 vs 3.14 inside a 0.01 tolerance despite float error
        return diff <= tolerance or math.isclose(diff, tolerance)

    return given.casefold() == expected.casefold()


def _accuracy(correct: int, attempted: int) -> float:
    if not attempted:
        return 0.0
    return round(correct / attempted * 100, 1)


def score(
    questions: Iterable[Question],
    responses: Iterable[Response],
    marking_scheme: Optional[MarkingScheme] = None,
    tolerance: Optional[float] = 0.0,
) -> ScoreResult:
    scheme = marking_scheme or MarkingScheme()
    # a missing or negative tolerance means exact numerical match
    tolerance = max(0.0, tolerance or 0.0)

    # later responses for the same question replace earlier ones
    by_question: Dict[str, Response] = {r.question_id: r for r in responses}

    tallies: Dict[str, SubjectTally] = {}
    outcomes: List[QuestionOutcome] = []
    raw_score = 0.0
    correct = incorrect = unattempted = 0

    for question in questions:
        subject = question.subject.strip() or DEFAULT_SUBJECT
        tally = tallies.get(subject)
        if tally is None:
            tally = tallies[subject] = SubjectTally(subject=subject)
        tally.total += 1
        tally.max_marks += scheme.correct_points

        response = by_question.get(question.id)
        answer = response.answer_text.strip() if response else ""
        time_spent = response.time_spent_seconds if response else 0
        tally.time_spent_seconds += time_spent

        if not answer:
            status = AnswerStatus.UNATTEMPTED
            marks = 0.0
            unattempted += 1
            tally.unattempted += 1
        elif answers_match(question.type, answer, question.correct_answer, tolerance):
            status = AnswerStatus.CORRECT
            marks = scheme.correct_points
            correct += 1
            tally.correct += 1
        else:
            status = AnswerStatus.INCORRECT
            if question.type == QuestionType.MCQ:
                marks = -scheme.incorrect_mcq_penalty
            else:
                marks = -scheme.incorrect_numerical_penalty
            incorrect += 1
            tally.incorrect += 1

        tally.marks += marks
        raw_score += marks
        outcomes.append(QuestionOutcome(
            question_id=question.id,
            subject=subject,
            status=status,
            marks=marks,
            time_spent_seconds=time_spent
        ))

    for tally in tallies.values():
        tally.accuracy = _accuracy(tally.correct, tally.correct + tally.incorrect)
        tally.avg_time_per_question = round(tally.time_spent_seconds / tally.total)

    return ScoreResult(
        raw_score=raw_score,
        max_score=sum(t.max_marks for t in tallies.values()),
        correct_count=correct,
        incorrect_count=incorrect,
        unattempted_count=unattempted,
        total_questions=len(outcomes),
        accuracy=_accuracy(correct, correct + incorrect),
        subject_tallies=list(tallies.values()),
        outcomes=outcomes
    )
