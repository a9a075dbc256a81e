'''
calibration curves: per exam category, an ascending list of (score, percentile) points
loaded once from the backing store and kept for the lifetime of the store object
'''
import logging
import threading
from typing import Dict, List, Protocol

from pymongo.errors import PyMongoError

from rankwise.core.errors import DataUnavailable
from rankwise.schemas.percentile_schemas import CalibrationPoint

logger = logging.getLogger(__name__)


class CalibrationSource(Protocol):
    def fetch_rows(self, category: str) -> List[dict]:
        ...


class MongoCalibrationSource:
    """Reads calibration rows from a mongo collection keyed by exam_type."""

    def __init__(self, db, collection: str = "percentile_curves"):
        self.collection = db[collection]

    def fetch_rows(self, category: str) -> List[dict]:
        try:
            # index (exam_type, score) created in database.init_indexes
            cursor = self.collection.find(
                {"exam_type": category},
                projection={"_id": 0, "score": 1, "percentile": 1}
            ).sort("score", 1)
            return list(cursor)
        except PyMongoError as e:
            raise DataUnavailable(category, str(e)) from e


class CurveStore:

    def __init__(self, source: CalibrationSource):
        self.source = source
        self._curves: Dict[str, List[CalibrationPoint]] = {}
        self._lock = threading.Lock()

    def load_curve(self, category: str) -> List[CalibrationPoint]:
        '''
        returns the curve sorted ascending by score, raises DataUnavailable when the
        source fails or has no rows. failures are not cached, the next call retries
        '''
        curve = self._curves.get(category)
        if curve is not None:
            return curve

        with self._lock:
            # another thread may have loaded it while we waited
            curve = self._curves.get(category)
            if curve is not None:
                return curve

            rows = self.source.fetch_rows(category)
            points = []
            for row in rows:
                try:
                    points.append(CalibrationPoint(score=row["score"], percentile=row["percentile"]))
                except (KeyError, TypeError, ValueError):
                    logger.warning("skipping malformed calibration row for %s: %r", category, row)

            if not points:
                raise DataUnavailable(category)

            # stable sort, for duplicate scores the row the source returned first wins
            points.sort(key=lambda p: p.score)
            self._curves[category] = points
            logger.info("loaded %d calibration points for %s", len(points), category)
            return points

    def is_loaded(self, category: str) -> bool:
        return category in self._curves
