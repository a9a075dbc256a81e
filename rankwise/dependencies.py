from functools import lru_cache

from rankwise.config import settings
from rankwise.core.curve_store import CurveStore, MongoCalibrationSource
from rankwise.core.estimator import PercentileEstimator
from rankwise.db.database import get_db


# one curve store per process, curves stay cached until restart
@lru_cache()
def get_curve_store() -> CurveStore:
    source = MongoCalibrationSource(get_db(), settings.PERCENTILE_COLLECTION)
    return CurveStore(source)


@lru_cache()
def get_estimator() -> PercentileEstimator:
    return PercentileEstimator(get_curve_store(), settings.CANDIDATE_POOL_SIZES)
