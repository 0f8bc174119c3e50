# FILE: quiz_backend/services/scoring.py
"""
Scoring engine

Pure, all-or-nothing per question. The same function grades at submit time
and at regrade time, so identical inputs always yield identical scores.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from quiz_backend.models.attempts import AnswerEntry
from quiz_backend.models.quizzes import QuestionSnapshot

# scorePercentage is reported on a 0-10 scale
SCORE_SCALE = 10


@dataclass(frozen=True)
class QuestionScore:
    question_id: str
    correct: bool
    points_earned: float


@dataclass(frozen=True)
class ScoreResult:
    questions: Tuple[QuestionScore, ...]
    total_score: float
    total_quiz_score: float
    score_percentage: float

    def by_question(self) -> Dict[str, QuestionScore]:
        return {q.question_id: q for q in self.questions}


def _answer_vector(question: QuestionSnapshot, answers: Mapping[str, AnswerEntry]) -> List[int]:
    entry = answers.get(question.id)
    if entry is None:
        return [0] * len(question.options)
    return list(entry.answer)


def score(
    snapshot_questions: Sequence[QuestionSnapshot],
    answers: Mapping[str, AnswerEntry]
) -> ScoreResult:
    """Grade answers against a snapshot; deleted questions are ignored"""
    results = []
    total_score = 0.0
    total_quiz_score = 0.0

    for question in snapshot_questions:
        if question.is_deleted:
            continue

        correct = _answer_vector(question, answers) == list(question.correct_options)
        earned = float(question.points) if correct else 0.0

        results.append(QuestionScore(question.id, correct, earned))
        total_score += earned
        total_quiz_score += float(question.points)

    percentage = total_score / total_quiz_score * SCORE_SCALE if total_quiz_score else 0.0

    return ScoreResult(
        questions=tuple(results),
        total_score=total_score,
        total_quiz_score=total_quiz_score,
        score_percentage=percentage,
    )
