from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List


class QuestionType(str, Enum):
    MCQ = "mcq"
    NUMERICAL = "numerical"


class AnswerStatus(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNATTEMPTED = "unattempted"


class Question(BaseModel):
    id: str
    subject: str = ""
    type: QuestionType
    correct_answer: str = ""


class Response(BaseModel):
    question_id: str
    answer_text: str = "" # empty means unattempted
    marked_for_review: bool = False # not used for scoring
    time_spent_seconds: int = 0


class MarkingScheme(BaseModel):
    '''
    points awarded per question, penalties are positive and get subtracted
    '''
    correct_points: float = 4.0
    incorrect_mcq_penalty: float = 1.0
    incorrect_numerical_penalty: float = 0.0


class QuestionOutcome(BaseModel):
    question_id: str
    subject: str
    status: AnswerStatus
    marks: float
    time_spent_seconds: int = 0


class SubjectTally(BaseModel):
    subject: str
    correct: int = 0
    incorrect: int = 0
    unattempted: int = 0
    total: int = 0
    marks: float = 0.0
    max_marks: float = 0.0
    accuracy: float = 0.0 # percent of attempted questions answered correctly
    time_spent_seconds: int = 0
    avg_time_per_question: int = 0 # seconds, over every question of the subject


class ScoreResult(BaseModel):
    raw_score: float
    max_score: float
    correct_count: int
    incorrect_count: int
    unattempted_count: int
    total_questions: int
    accuracy: float
    subject_tallies: List[SubjectTally] = Field(default_factory=list)
    outcomes: List[QuestionOutcome] = Field(default_factory=list)

    @property
    def attempted_count(self) -> int:
        return self.correct_count + self.incorrect_count

    def per_subject_scores(self) -> Dict[str, Dict[str, int]]:
        # shape stored on test_attempts.per_subject_scores
        return {
            t.subject: {"correct": t.correct, "total": t.total}
            for t in self.subject_tallies
        }
