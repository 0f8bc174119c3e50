# FILE: quiz_backend/models/statistics.py
"""
Quiz statistics models
"""
from typing import Optional, List
from pydantic import Field

from quiz_backend.models.quizzes import CamelModel


class MinMax(CamelModel):
    min: float
    max: float


class ScoreBucket(CamelModel):
    """Count of attempts whose score percentage falls in [min, max)"""
    min: float
    max: float
    range: str
    count: int
    percentage: str


class RankedStudent(CamelModel):
    student_id: str
    attempt_id: str
    total_score: float
    score_percentage: float
    duration_seconds: Optional[float] = None
    rank: int


class QuizStatistics(CamelModel):
    quiz_id: str
    submitted_count: int
    average_score: float
    median_score: float
    min_max: Optional[MinMax] = None
    standard_deviation: Optional[float] = None
    score_distribution: List[ScoreBucket] = Field(default_factory=list)
    students: List[RankedStudent] = Field(default_factory=list)
