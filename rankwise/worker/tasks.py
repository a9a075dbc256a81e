# rankwise/worker/tasks.py
from datetime import datetime, timezone

from celery.utils.log import get_task_logger
from pymongo.errors import PyMongoError

from rankwise.config import Settings, settings
from rankwise.core.analysis import build_report
from rankwise.core.errors import InvalidInput
from rankwise.core.estimator import PercentileEstimator
from rankwise.core.scorer import score
from rankwise.db.database import get_db
from rankwise.dependencies import get_estimator
from rankwise.schemas.scoring_schemas import MarkingScheme, Question, QuestionType, Response
from rankwise.worker.worker import celery_app

logger = get_task_logger(__name__)


def resolve_category(test_type, config: Settings = settings) -> str:
    return config.TEST_TYPE_CATEGORIES.get(test_type or "", config.DEFAULT_CATEGORY)


def _as_number(value, default: float, field: str) -> float:
    # null or non-numeric values on stored documents fall back to the configured default
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("ignoring non-numeric %s: %r", field, value)
        return default


def numerical_tolerance_for(test: dict, config: Settings = settings) -> float:
    tolerance = _as_number(test.get("numerical_tolerance"), config.NUMERICAL_TOLERANCE, "numerical_tolerance")
    if tolerance < 0:
        logger.warning("negative numerical_tolerance %s on test %s, using 0", tolerance, test.get("test_id"))
        return 0.0
    return tolerance


def marking_scheme_for(test: dict, config: Settings = settings) -> MarkingScheme:
    # test documents may carry their own scheme, missing or null fields use the defaults
    defaults = {
        "correct_points": config.CORRECT_POINTS,
        "incorrect_mcq_penalty": config.INCORRECT_MCQ_PENALTY,
        "incorrect_numerical_penalty": config.INCORRECT_NUMERICAL_PENALTY,
    }
    overrides = test.get("marking_scheme")
    if not isinstance(overrides, dict):
        overrides = {}
    return MarkingScheme(**{
        name: _as_number(overrides.get(name), default, name)
        for name, default in defaults.items()
    })


def _question_type(value, question_id: str) -> QuestionType:
    try:
        return QuestionType(str(value or "mcq").strip().lower())
    except ValueError:
        # unknown types are marked like multiple choice
        logger.warning("question %s has unknown type %r, scoring as mcq", question_id, value)
        return QuestionType.MCQ


def _question_from_doc(doc: dict) -> Question:
    question_id = str(doc["question_id"])
    return Question(
        id=question_id,
        subject=doc.get("subject") or "",
        type=_question_type(doc.get("question_type"), question_id),
        correct_answer=str(doc.get("correct_answer") or "")
    )


def _response_from_doc(doc: dict) -> Response:
    value = doc.get("response_value") or {}
    answer = value.get("answer") if isinstance(value, dict) else value
    return Response(
        question_id=str(doc["question_id"]),
        answer_text="" if answer is None else str(answer),
        marked_for_review=bool(doc.get("marked_for_review")),
        time_spent_seconds=round(_as_number(doc.get("time_spent_seconds"), 0, "time_spent_seconds"))
    )


def evaluate_attempt_record(db, attempt_id: str, estimator: PercentileEstimator, config: Settings = settings) -> dict:
    '''
    score one submitted attempt, estimate percentile and rank, and write the result back
    onto the attempt document
    '''
    attempt = db.test_attempts.find_one({"attempt_id": attempt_id})
    if not attempt:
        raise InvalidInput(f"attempt {attempt_id} not found")

    test_id = attempt["test_id"]
    test = db.tests.find_one({"test_id": test_id})
    if not test:
        raise InvalidInput(f"test {test_id} not found")

    questions = [_question_from_doc(q) for q in db.test_questions.find({"test_id": test_id})]
    responses = [_response_from_doc(r) for r in db.test_responses.find({"attempt_id": attempt_id})]

    tolerance = numerical_tolerance_for(test, config)
    result = score(questions, responses, marking_scheme_for(test, config), tolerance)

    category = resolve_category(test.get("test_type"), config)
    # curves are calibrated on whole marks
    estimate = estimator.estimate(round(result.raw_score), category)

    duration_minutes = test.get("duration")
    report = build_report(
        result,
        estimate,
        responses,
        duration_seconds=attempt.get("duration_seconds"),
        max_duration_seconds=duration_minutes * 60 if duration_minutes else None,
        strong_threshold=config.STRONG_SUBJECT_ACCURACY,
        weak_threshold=config.WEAK_SUBJECT_ACCURACY,
    )

    db.test_attempts.update_one(
        {"attempt_id": attempt_id},
        {"$set": {
            "score": result.raw_score,
            "percentile": estimate.percentile,
            "predicted_rank": estimate.predicted_rank,
            "per_subject_scores": result.per_subject_scores(),
            "performance_tier": report.performance.tier,
            "report": report.model_dump(mode="json"),
            "evaluated_at": datetime.now(timezone.utc)
        }}
    )

    logger.info(
        "evaluated attempt %s: score=%s percentile=%s rank=%s",
        attempt_id, result.raw_score, estimate.percentile, estimate.predicted_rank
    )
    return {
        "status": "completed",
        "attempt_id": attempt_id,
        "score": result.raw_score,
        "percentile": estimate.percentile,
        "predicted_rank": estimate.predicted_rank
    }


@celery_app.task(name="evaluate_attempt", bind=True)
def evaluate_attempt(self, attempt_id: str):
    try:
        return evaluate_attempt_record(get_db(), attempt_id, get_estimator())
    except PyMongoError as e:
        logger.warning("evaluation of attempt %s failed, retrying: %s", attempt_id, e)
        raise self.retry(exc=e, countdown=60, max_retries=3)
