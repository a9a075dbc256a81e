from pydantic import BaseModel
from typing import Dict, List, Optional

from rankwise.schemas.percentile_schemas import PercentileResult, PerformanceTier
from rankwise.schemas.scoring_schemas import ScoreResult


class TimeEfficiency(BaseModel):
    rating: str
    advice: str


class AttemptReport(BaseModel):
    score: ScoreResult
    percentile: PercentileResult
    performance: PerformanceTier
    strong_subjects: List[str]
    weak_subjects: List[str]
    strongest_subject: Optional[str] = None
    weakest_subject: Optional[str] = None
    average_time_per_question: int
    subject_paces: Dict[str, str] = {} # Good / Average / Slow per subject
    time_efficiency: Optional[TimeEfficiency] = None # only when the test has a duration
