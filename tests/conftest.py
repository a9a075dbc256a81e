import pytest

from rankwise.core.curve_store import CurveStore
from rankwise.core.errors import DataUnavailable
from rankwise.core.estimator import PercentileEstimator


class FakeCalibrationSource:
    """In-memory stand-in for the percentile_curves collection."""

    def __init__(self, curves=None, fail=False):
        self.curves = curves or {}
        self.fail = fail
        self.calls = []

    def fetch_rows(self, category):
        self.calls.append(category)
        if self.fail:
            raise DataUnavailable(category, "connection refused")
        return [dict(row) for row in self.curves.get(category, [])]


SAMPLE_CURVE = [
    {"score": 0, "percentile": 0.1},
    {"score": 100, "percentile": 50},
    {"score": 200, "percentile": 90},
    {"score": 300, "percentile": 100},
]


@pytest.fixture()
def source():
    return FakeCalibrationSource({"mains": SAMPLE_CURVE})


@pytest.fixture()
def curve_store(source):
    return CurveStore(source)


@pytest.fixture()
def estimator(curve_store):
    return PercentileEstimator(curve_store, {"mains": 1200000, "advanced": 250000})
