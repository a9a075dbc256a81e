import logging
import math
from typing import List, Mapping, Union

from rankwise.core.curve_store import CurveStore
from rankwise.core.errors import DataUnavailable, InvalidInput, UnknownCategory
from rankwise.schemas.percentile_schemas import CalibrationPoint, PercentileResult, PerformanceTier

logger = logging.getLogger(__name__)

MIN_PERCENTILE = 0.1
MAX_PERCENTILE = 100.0
# below the calibrated range the result never goes above this
BELOW_RANGE_CEILING = 1.0

# evaluated top-down, first threshold reached wins
PERFORMANCE_TIERS = [
    (99, "Exceptional", "Top 1% performance - Excellent chances for top NITs/IITs"),
    (95, "Excellent", "Top 5% performance - Good chances for NITs/IITs"),
    (85, "Very Good", "Top 15% performance - Eligible for good engineering colleges"),
    (70, "Good", "Top 30% performance - Eligible for many engineering colleges"),
    (50, "Average", "Above average performance - Keep improving"),
]
LOWEST_TIER = ("Needs Improvement", "Focus on weak areas and practice more")


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def interpolate_percentile(curve: List[CalibrationPoint], raw_score: float) -> float:
    '''
    piecewise linear lookup over a curve sorted ascending by score

    - exact score match returns that point's percentile (clamped)
    - below the lowest score: the curve's minimum percentile, capped at 1
    - above the highest score: 100
    - otherwise interpolate between the neighbours, clamp, round to 2 places
    '''
    if not curve:
        return 0.0

    for point in curve:
        if point.score == raw_score:
            return _clamp(point.percentile, MIN_PERCENTILE, MAX_PERCENTILE)

    lower = None
    upper = None
    for point in curve:
        if point.score <= raw_score:
            lower = point
        else:
            upper = point
            break

    if lower is None:
        min_percentile = min(p.percentile for p in curve)
        return _clamp(min_percentile, MIN_PERCENTILE, BELOW_RANGE_CEILING)
    if upper is None:
        return MAX_PERCENTILE

    offset = raw_score - lower.score
    span = upper.score - lower.score
    percentile = lower.percentile + (upper.percentile - lower.percentile) * offset / span
    return round(_clamp(percentile, MIN_PERCENTILE, MAX_PERCENTILE), 2)


def predicted_rank(percentile: float, pool_size: int) -> int:
    # percentile 100 is rank 1, never 0
    if pool_size < 1:
        raise InvalidInput(f"candidate pool size must be at least 1, got {pool_size}")
    # halves round up, round() would send 2.5 to 2
    rank = math.floor(pool_size * (MAX_PERCENTILE - percentile) / 100 + 0.5)
    return max(1, int(rank))


def classify_performance(percentile: float) -> PerformanceTier:
    for threshold, tier, description in PERFORMANCE_TIERS:
        if percentile >= threshold:
            return PerformanceTier(tier=tier, description=description)
    tier, description = LOWEST_TIER
    return PerformanceTier(tier=tier, description=description)


class PercentileEstimator:

    def __init__(self, curves: CurveStore, pool_sizes: Mapping[str, int]):
        self.curves = curves
        self.pool_sizes = dict(pool_sizes)

    def estimate_percentile(self, raw_score: float, category: str) -> float:
        """Percentile for a raw score, 0 when the category has no calibration data."""
        try:
            curve = self.curves.load_curve(category)
        except DataUnavailable as e:
            logger.warning("percentile estimate degraded to 0: %s", e)
            return 0.0
        return interpolate_percentile(curve, raw_score)

    def pool_size(self, category: str) -> int:
        try:
            return self.pool_sizes[category]
        except KeyError:
            raise UnknownCategory(category)

    def predicted_rank(self, percentile: float, category_or_pool: Union[str, int]) -> int:
        if isinstance(category_or_pool, str):
            pool = self.pool_size(category_or_pool)
        else:
            pool = category_or_pool
        return predicted_rank(percentile, pool)

    def classify_performance(self, percentile: float) -> PerformanceTier:
        return classify_performance(percentile)

    def estimate(self, raw_score: float, category: str) -> PercentileResult:
        percentile = self.estimate_percentile(raw_score, category)
        return PercentileResult(
            category=category,
            percentile=percentile,
            predicted_rank=self.predicted_rank(percentile, category)
        )
