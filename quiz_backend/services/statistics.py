# FILE: quiz_backend/services/statistics.py
"""
Score statistics over submitted attempts
"""
import math
from typing import List, Optional, Sequence

from quiz_backend.models.attempts import QuizAttempt
from quiz_backend.models.statistics import MinMax, QuizStatistics, RankedStudent, ScoreBucket

# Buckets over scorePercentage (0-10); the last one includes 10
SCORE_BUCKETS = [(0, 2), (2, 4), (4, 6), (6, 8), (8, 10)]


def median(scores: Sequence[float]) -> float:
    """Median of a list of numbers; 0 for an empty list"""
    if not scores:
        return 0.0
    ordered = sorted(scores)
    n = len(ordered)
    mid = n // 2
    if n % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def min_max(scores: Sequence[float]) -> Optional[MinMax]:
    if not scores:
        return None
    return MinMax(min=min(scores), max=max(scores))


def standard_deviation(scores: Sequence[float]) -> Optional[float]:
    """Population standard deviation around the mean"""
    if not scores:
        return None
    mean = sum(scores) / len(scores)
    variance = sum((x - mean) ** 2 for x in scores) / len(scores)
    return math.sqrt(variance)


def score_distribution(percentages: Sequence[float]) -> List[ScoreBucket]:
    buckets = []
    total = len(percentages)
    for index, (low, high) in enumerate(SCORE_BUCKETS):
        last = index == len(SCORE_BUCKETS) - 1
        count = sum(1 for p in percentages if low <= p < high or (last and p == high))
        share = (count / total * 100) if total else 0.0
        buckets.append(ScoreBucket(
            min=low,
            max=high,
            range=f"{low}-{high}",
            count=count,
            percentage=f"{share:.2f}%",
        ))
    return buckets


def rank_attempts(attempts: Sequence[QuizAttempt]) -> List[RankedStudent]:
    """Highest score first; ties go to the shorter duration"""
    ordered = sorted(
        attempts,
        key=lambda a: (
            -(a.total_score or 0.0),
            a.duration_seconds if a.duration_seconds is not None else math.inf,
            a.id,
        ),
    )
    return [
        RankedStudent(
            student_id=a.student_id,
            attempt_id=a.id,
            total_score=a.total_score or 0.0,
            score_percentage=a.score_percentage or 0.0,
            duration_seconds=a.duration_seconds,
            rank=i + 1,
        )
        for i, a in enumerate(ordered)
    ]


def compute_statistics(quiz_id: str, submitted: Sequence[QuizAttempt]) -> QuizStatistics:
    """Aggregate statistics for the submitted attempts of one quiz"""
    scores = [a.total_score or 0.0 for a in submitted]
    percentages = [a.score_percentage or 0.0 for a in submitted]

    return QuizStatistics(
        quiz_id=quiz_id,
        submitted_count=len(submitted),
        average_score=(sum(scores) / len(scores)) if scores else 0.0,
        median_score=median(scores),
        min_max=min_max(scores),
        standard_deviation=standard_deviation(scores),
        score_distribution=score_distribution(percentages),
        students=rank_attempts(submitted),
    )
