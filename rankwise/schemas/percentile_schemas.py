from pydantic import BaseModel, ConfigDict


class CalibrationPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float
    percentile: float


class PerformanceTier(BaseModel):
    tier: str
    description: str


class PercentileResult(BaseModel):
    category: str
    percentile: float # 0 when no calibration data was available
    predicted_rank: int
