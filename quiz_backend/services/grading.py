# FILE: quiz_backend/services/grading.py
"""
Finalization and regrade

Both run the scoring engine inside the attempt's lock, so the answers that are
graded are exactly the answers that get committed with the score.
"""
import logging
from typing import Callable, Mapping, Sequence, Tuple

from quiz_backend.errors import Banned, InvalidState
from quiz_backend.models.attempts import AnswerEntry, AttemptStatus, QuizAttempt, RegradeRecord
from quiz_backend.models.quizzes import QuestionSnapshot
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock, as_utc
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.scoring import ScoreResult, score
from quiz_backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

Scorer = Callable[[Sequence[QuestionSnapshot], Mapping[str, AnswerEntry]], ScoreResult]


def apply_score(attempt: QuizAttempt, result: ScoreResult) -> None:
    """Write derived score fields onto an attempt"""
    graded = result.by_question()
    for question_id, entry in attempt.answers.items():
        question_score = graded.get(question_id)
        if question_score is None:
            # retracted question
            entry.correct = None
            entry.points_earned = None
        else:
            entry.correct = question_score.correct
            entry.points_earned = question_score.points_earned

    attempt.total_score = result.total_score
    attempt.total_quiz_score = result.total_quiz_score
    attempt.score_percentage = result.score_percentage


class Grader:
    """Moves attempts to SUBMITTED and recomputes submitted scores"""

    def __init__(
        self,
        attempts: AttemptStore,
        quizzes: QuizStore,
        clock: Clock,
        scorer: Scorer = score
    ):
        self.attempts = attempts
        self.quizzes = quizzes
        self.clock = clock
        self.scorer = scorer

    def finalize(self, attempt_id: str, forced: bool = False) -> Tuple[QuizAttempt, bool]:
        """
        Score and submit an in-progress attempt.

        Returns (attempt, won). When another transition got there first the
        stored attempt is returned unchanged with won=False.
        """
        def _grade(staged: QuizAttempt) -> None:
            quiz = self.quizzes.get(staged.quiz_id)
            result = self.scorer(quiz.snapshot_questions, staged.answers)
            apply_score(staged, result)

            now = self.clock.now()
            staged.submitted_at = now
            staged.duration_seconds = max(0.0, (now - as_utc(staged.started_at)).total_seconds())
            staged.forced = forced

        attempt, won = self.attempts.transition(
            attempt_id, AttemptStatus.IN_PROGRESS, AttemptStatus.SUBMITTED, _grade
        )

        if won:
            logger.info(
                f"Attempt submitted: {attempt_id} score={attempt.total_score}/{attempt.total_quiz_score}"
                f"{' (forced)' if forced else ''}"
            )
            record_event(
                "attempt_submitted",
                attempt_id=attempt_id,
                quiz_id=attempt.quiz_id,
                forced=forced,
                total_score=attempt.total_score,
                score_percentage=attempt.score_percentage,
            )
        return attempt, won

    def regrade(self, attempt_id: str, regraded_by: str) -> QuizAttempt:
        """Re-run scoring for a submitted attempt against the current snapshot"""
        def _regrade(staged: QuizAttempt) -> QuizAttempt:
            if staged.status is AttemptStatus.ABANDONED:
                raise Banned("Banned attempts are never graded")
            if staged.status is AttemptStatus.IN_PROGRESS:
                raise InvalidState("Only submitted attempts can be regraded")

            quiz = self.quizzes.get(staged.quiz_id)
            result = self.scorer(quiz.snapshot_questions, staged.answers)
            old_score = staged.total_score
            apply_score(staged, result)
            staged.regrade_history.append(RegradeRecord(
                regraded_by=regraded_by,
                regraded_at=self.clock.now(),
                old_score=old_score,
                new_score=result.total_score,
            ))
            return staged

        attempt = self.attempts.mutate(attempt_id, _regrade)
        logger.info(f"Attempt regraded: {attempt_id} score={attempt.total_score}/{attempt.total_quiz_score}")
        record_event(
            "attempt_regraded",
            attempt_id=attempt_id,
            quiz_id=attempt.quiz_id,
            total_score=attempt.total_score,
        )
        return attempt
