from typing import Dict, Iterable, List, Optional, Tuple

from rankwise.core.errors import InvalidInput
from rankwise.core.estimator import classify_performance
from rankwise.schemas.percentile_schemas import PercentileResult
from rankwise.schemas.report_schemas import AttemptReport, TimeEfficiency
from rankwise.schemas.scoring_schemas import Response, ScoreResult, SubjectTally

# share of the allowed time used, in percent
TIME_EFFICIENCY_LADDER = [
    (70, "Fast", "Good speed! Consider double-checking answers."),
    (90, "Optimal", "Well-balanced time management."),
    (100, "Slow", "Practice time management techniques."),
]
OVERTIME = ("Very Slow", "Focus on speed and accuracy balance.")

# average seconds per question within a subject
SUBJECT_PACE_LADDER = [(60, "Good"), (90, "Average")]
SLOW_PACE = "Slow"


def strengths_and_weaknesses(
    tallies: Iterable[SubjectTally],
    strong_threshold: float = 80.0,
    weak_threshold: float = 60.0,
) -> Tuple[List[str], List[str]]:
    strong, weak = [], []
    for tally in tallies:
        if tally.accuracy >= strong_threshold:
            strong.append(tally.subject)
        elif tally.accuracy < weak_threshold:
            weak.append(tally.subject)
    return strong, weak


def strongest_and_weakest(tallies: Iterable[SubjectTally]) -> Tuple[Optional[str], Optional[str]]:
    # sorted() is stable, ties keep the order subjects first appeared in
    ranked = sorted(tallies, key=lambda t: t.accuracy, reverse=True)
    if not ranked:
        return None, None
    return ranked[0].subject, ranked[-1].subject


def average_time_per_question(responses: Iterable[Response]) -> int:
    times = [r.time_spent_seconds or 0 for r in responses]
    if not times:
        return 0
    return round(sum(times) / len(times))


def subject_pace(avg_time_per_question: float) -> str:
    for limit, label in SUBJECT_PACE_LADDER:
        if avg_time_per_question < limit:
            return label
    return SLOW_PACE


def subject_paces(tallies: Iterable[SubjectTally]) -> Dict[str, str]:
    return {t.subject: subject_pace(t.avg_time_per_question) for t in tallies}


def time_efficiency(time_taken: float, max_time: float) -> TimeEfficiency:
    if max_time <= 0:
        raise InvalidInput(f"max time must be positive, got {max_time}")

    used = time_taken * 100 / max_time
    for limit, rating, advice in TIME_EFFICIENCY_LADDER:
        if used < limit:
            return TimeEfficiency(rating=rating, advice=advice)
    rating, advice = OVERTIME
    return TimeEfficiency(rating=rating, advice=advice)


def build_report(
    score_result: ScoreResult,
    percentile_result: PercentileResult,
    responses: Iterable[Response],
    duration_seconds: Optional[int] = None,
    max_duration_seconds: Optional[int] = None,
    strong_threshold: float = 80.0,
    weak_threshold: float = 60.0,
) -> AttemptReport:
    """Everything the analysis view shows for one submitted attempt."""
    tallies = score_result.subject_tallies
    strong, weak = strengths_and_weaknesses(tallies, strong_threshold, weak_threshold)
    strongest, weakest = strongest_and_weakest(tallies)

    efficiency = None
    if duration_seconds is not None and max_duration_seconds:
        efficiency = time_efficiency(duration_seconds, max_duration_seconds)

    return AttemptReport(
        score=score_result,
        percentile=percentile_result,
        performance=classify_performance(percentile_result.percentile),
        strong_subjects=strong,
        weak_subjects=weak,
        strongest_subject=strongest,
        weakest_subject=weakest,
        average_time_per_question=average_time_per_question(responses),
        subject_paces=subject_paces(tallies),
        time_efficiency=efficiency
    )
