"""
Tests for submission scoring.
"""
import pytest

from rankwise.core.scorer import answers_match, score
from rankwise.schemas.scoring_schemas import (
    AnswerStatus,
    MarkingScheme,
    Question,
    QuestionType,
    Response,
)


def mcq(qid, subject, answer):
    return Question(id=qid, subject=subject, type=QuestionType.MCQ, correct_answer=answer)


def numerical(qid, subject, answer):
    return Question(id=qid, subject=subject, type=QuestionType.NUMERICAL, correct_answer=answer)


def answer(qid, text):
    return Response(question_id=qid, answer_text=text)


@pytest.fixture()
def questions():
    return [
        mcq("q1", "Physics", "A"),
        mcq("q2", "Physics", "C"),
        numerical("q3", "Physics", "3.14"),
        mcq("q4", "Chemistry", "B"),
        numerical("q5", "Chemistry", "42"),
        mcq("q6", "Maths", "D"),
    ]


class TestAnswersMatch:

    def test_mcq_is_case_insensitive_and_trimmed(self):
        assert answers_match(QuestionType.MCQ, " a ", "A")
        assert answers_match(QuestionType.MCQ, "b", " B")
        assert not answers_match(QuestionType.MCQ, "A", "B")

    def test_numerical_exact_by_default(self):
        assert answers_match(QuestionType.NUMERICAL, "42", "42.0")
        assert not answers_match(QuestionType.NUMERICAL, "3.141", "3.14")

    def test_numerical_with_tolerance(self):
        assert answers_match(QuestionType.NUMERICAL, "3.141", "3.14", tolerance=0.01)
        assert answers_match(QuestionType.NUMERICAL, "3.15", "3.14", tolerance=0.01)
        assert not answers_match(QuestionType.NUMERICAL, "3.2", "3.14", tolerance=0.01)

    @pytest.mark.parametrize("given", ["abc", "3,14", "nan", "inf", "1e"])
    def test_unparseable_numerical_is_incorrect(self, given):
        assert not answers_match(QuestionType.NUMERICAL, given, "3.14", tolerance=1000)

    def test_unparseable_correct_answer_is_incorrect(self):
        assert not answers_match(QuestionType.NUMERICAL, "4", "four")

    def test_missing_correct_answer_never_matches(self):
        assert not answers_match(QuestionType.MCQ, "A", "")


class TestScore:

    def test_counts_and_default_marking(self, questions):
        responses = [
            answer("q1", "A"),      # correct
            answer("q2", "B"),      # wrong mcq, -1
            answer("q3", "3.14"),   # correct
            answer("q4", ""),       # unattempted
            answer("q5", "41"),     # wrong numerical, no penalty
        ]
        result = score(questions, responses)

        assert result.correct_count == 2
        assert result.incorrect_count == 2
        assert result.unattempted_count == 2
        assert result.total_questions == 6
        assert result.raw_score == 4 + 4 - 1
        assert result.max_score == 24
        assert result.accuracy == 50.0

    def test_buckets_cover_every_question(self, questions):
        result = score(questions, [answer("q1", "A"), answer("q6", "x")])
        assert result.correct_count + result.incorrect_count + result.unattempted_count == len(questions)

    def test_unattempted_has_no_penalty(self, questions):
        scheme = MarkingScheme(correct_points=3, incorrect_mcq_penalty=1, incorrect_numerical_penalty=1)
        result = score(questions, [answer("q1", "   ")], scheme)

        assert result.raw_score == 0
        assert result.unattempted_count == 6
        assert result.incorrect_count == 0

    def test_custom_marking_scheme(self, questions):
        scheme = MarkingScheme(correct_points=3, incorrect_mcq_penalty=0.5, incorrect_numerical_penalty=1)
        responses = [answer("q1", "A"), answer("q2", "A"), answer("q5", "0")]
        result = score(questions, responses, scheme)

        assert result.raw_score == 3 - 0.5 - 1
        assert result.max_score == 18

    def test_subject_tallies(self, questions):
        responses = [
            answer("q1", "a"),
            answer("q2", "B"),
            answer("q3", "3.14"),
            answer("q4", "B"),
        ]
        result = score(questions, responses)
        tallies = {t.subject: t for t in result.subject_tallies}

        assert list(tallies) == ["Physics", "Chemistry", "Maths"]
        physics = tallies["Physics"]
        assert (physics.correct, physics.incorrect, physics.unattempted, physics.total) == (2, 1, 0, 3)
        assert physics.marks == 7
        assert physics.max_marks == 12
        assert physics.accuracy == 66.7

        chemistry = tallies["Chemistry"]
        assert (chemistry.correct, chemistry.unattempted, chemistry.total) == (1, 1, 2)
        assert chemistry.accuracy == 100.0

        maths = tallies["Maths"]
        assert (maths.correct, maths.total, maths.accuracy) == (0, 1, 0.0)

        assert sum(t.total for t in result.subject_tallies) == len(questions)
        for t in result.subject_tallies:
            assert t.correct <= t.total

    def test_per_subject_scores(self, questions):
        result = score(questions, [answer("q4", "B")])
        assert result.per_subject_scores() == {
            "Physics": {"correct": 0, "total": 3},
            "Chemistry": {"correct": 1, "total": 2},
            "Maths": {"correct": 0, "total": 1},
        }

    def test_numerical_tolerance_is_passed_through(self, questions):
        responses = [answer("q3", "3.141")]
        assert score(questions, responses).correct_count == 0
        assert score(questions, responses, tolerance=0.01).correct_count == 1

    def test_null_or_negative_tolerance_means_exact(self, questions):
        responses = [answer("q3", "3.14"), answer("q5", "41.9")]
        for tolerance in (None, -0.5):
            result = score(questions, responses, tolerance=tolerance)
            assert result.correct_count == 1
            assert result.incorrect_count == 1

    def test_garbage_numerical_answer_is_incorrect(self, questions):
        result = score(questions, [answer("q5", "abc")])
        assert result.incorrect_count == 1
        assert result.outcomes[4].status == AnswerStatus.INCORRECT

    def test_outcomes_follow_question_order(self, questions):
        result = score(questions, [answer("q6", "D"), answer("q2", "A")])
        assert [o.question_id for o in result.outcomes] == ["q1", "q2", "q3", "q4", "q5", "q6"]
        assert result.outcomes[0].status == AnswerStatus.UNATTEMPTED
        assert result.outcomes[1].status == AnswerStatus.INCORRECT
        assert result.outcomes[1].marks == -1
        assert result.outcomes[5].status == AnswerStatus.CORRECT
        assert result.outcomes[5].marks == 4

    def test_last_response_for_a_question_wins(self, questions):
        result = score(questions, [answer("q1", "B"), answer("q1", "A")])
        assert result.correct_count == 1

    def test_responses_for_unknown_questions_are_ignored(self, questions):
        result = score(questions, [answer("zzz", "A")])
        assert result.unattempted_count == 6

    def test_blank_subject_is_general_and_unknown_subjects_kept(self):
        qs = [mcq("a", "", "A"), mcq("b", "Biology", "A")]
        result = score(qs, [])
        assert [t.subject for t in result.subject_tallies] == ["General", "Biology"]

    def test_no_questions(self):
        result = score([], [answer("q1", "A")])
        assert result.total_questions == 0
        assert result.raw_score == 0
        assert result.accuracy == 0.0
        assert result.subject_tallies == []


def test_time_spent_per_question_and_subject(questions):
    responses = [
        Response(question_id="q1", answer_text="A", time_spent_seconds=50),
        Response(question_id="q2", answer_text="", time_spent_seconds=20),
        Response(question_id="q3", answer_text="3", time_spent_seconds=110),
        Response(question_id="q4", answer_text="B", time_spent_seconds=95),
    ]
    result = score(questions, responses)

    assert [o.time_spent_seconds for o in result.outcomes] == [50, 20, 110, 95, 0, 0]
    tallies = {t.subject: t for t in result.subject_tallies}
    # physics: (50 + 20 + 110) / 3, chemistry: (95 + 0) / 2 = 47.5
    assert tallies["Physics"].time_spent_seconds == 180
    assert tallies["Physics"].avg_time_per_question == 60
    assert tallies["Chemistry"].avg_time_per_question == 48
    assert tallies["Maths"].avg_time_per_question == 0
