# FILE: quiz_backend/services/quiz_attempts.py
"""
Quiz attempt operations: enroll, auto-save, submit, ban, regrade, get

Every operation on an existing attempt first lets the deadline enforcer
finalize it if the quiz window has closed, then proceeds against the
resulting state.
"""
import logging
from typing import List, Optional

from quiz_backend.errors import AlreadyTerminal, Banned, Forbidden, InvalidAnswer, InvalidState
from quiz_backend.models.attempts import (
    AnswerEntry, AttemptStatus, AttemptView, AutoSaveResult, QuizAttempt
)
from quiz_backend.models.identity import Caller, Role
from quiz_backend.models.quizzes import QuestionSnapshot, QuestionView, Quiz
from quiz_backend.services.access_gate import AccessGate
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock
from quiz_backend.services.deadline import DeadlineEnforcer
from quiz_backend.services.grading import Grader
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.telemetry import record_event

logger = logging.getLogger(__name__)


def _find_question(quiz: Quiz, question_id: str) -> Optional[QuestionSnapshot]:
    for question in quiz.snapshot_questions:
        if question.id == question_id:
            return question
    return None


def _progress(quiz: Quiz, attempt: QuizAttempt):
    """Count active questions and those with at least one option selected"""
    active = {q.id for q in quiz.snapshot_questions if not q.is_deleted}
    answered = sum(
        1 for qid, entry in attempt.answers.items()
        if qid in active and any(entry.answer)
    )
    return len(active), answered


class QuizAttemptService:
    """Attempt lifecycle"""

    def __init__(
        self,
        attempts: AttemptStore,
        quizzes: QuizStore,
        gate: AccessGate,
        grader: Grader,
        enforcer: DeadlineEnforcer,
        clock: Clock
    ):
        self.attempts = attempts
        self.quizzes = quizzes
        self.gate = gate
        self.grader = grader
        self.enforcer = enforcer
        self.clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _owned(self, attempt_id: str, caller: Caller) -> QuizAttempt:
        """Check ownership, then apply the deadline"""
        attempt = self.attempts.get(attempt_id)
        if attempt.student_id != caller.user_id:
            raise Forbidden("This attempt belongs to another student")
        return self.enforcer.enforce(attempt_id)

    def _instructor(self, caller: Caller):
        if not caller.is_instructor:
            raise Forbidden("Only teachers can perform this action")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def enroll(self, quiz_id: str, caller: Caller, password: str) -> QuizAttempt:
        if caller.role is not Role.STUDENT:
            raise Forbidden("Only students can enroll in quizzes")
        attempt = self.gate.enroll(quiz_id, caller, password)
        logger.info(f"Enrolled: attempt={attempt.id} quiz={quiz_id} student={caller.user_id}")
        return attempt

    def auto_save(
        self,
        attempt_id: str,
        caller: Caller,
        question_id: str,
        answer: List[int]
    ) -> AutoSaveResult:
        """Replace the stored answer for one question"""
        attempt = self._owned(attempt_id, caller)
        if attempt.status is not AttemptStatus.IN_PROGRESS:
            logger.warning(f"Auto-save rejected: attempt {attempt_id} is {attempt.status.value}")
            raise InvalidState(f"Attempt is {attempt.status.value}; answers can no longer be saved")

        quiz = self.quizzes.get(attempt.quiz_id)
        question = _find_question(quiz, question_id)
        if question is None or question.is_deleted:
            raise InvalidAnswer(f"Question {question_id} is not part of this quiz")
        if len(answer) != len(question.options):
            raise InvalidAnswer(
                f"Answer has {len(answer)} entries but question has {len(question.options)} options"
            )
        if any(v not in (0, 1) for v in answer):
            raise InvalidAnswer("Answer entries must be 0 or 1")

        vector = list(answer)

        def _save(staged: QuizAttempt) -> Optional[QuizAttempt]:
            if staged.status is not AttemptStatus.IN_PROGRESS:
                raise InvalidState(f"Attempt is {staged.status.value}; answers can no longer be saved")
            if self.enforcer.is_expired(quiz):
                raise InvalidState("The quiz has ended; answers can no longer be saved")
            current = staged.answers.get(question_id)
            if current is not None and current.answer == vector:
                return None
            staged.answers[question_id] = AnswerEntry(question_id=question_id, answer=vector)
            return staged

        saved = self.attempts.mutate(attempt_id, _save)
        total, answered = _progress(quiz, saved)
        logger.debug(f"Auto-saved attempt {attempt_id} question {question_id} ({answered}/{total})")
        record_event("attempt_autosaved", attempt_id=attempt_id, answered=answered, total=total)
        return AutoSaveResult(attempt=saved, total_questions=total, answered_total=answered)

    def submit(self, attempt_id: str, caller: Caller) -> QuizAttempt:
        """Finalize and score; repeat calls return the stored result"""
        attempt = self._owned(attempt_id, caller)
        if attempt.status is AttemptStatus.ABANDONED:
            raise Banned("You were banned from taking this quiz")
        if attempt.status is AttemptStatus.SUBMITTED:
            return attempt

        attempt, won = self.grader.finalize(attempt_id, forced=False)
        if not won and attempt.status is AttemptStatus.ABANDONED:
            raise Banned("You were banned from taking this quiz")
        return attempt

    def ban(self, attempt_id: str, caller: Caller) -> QuizAttempt:
        """Irreversibly disqualify an in-progress attempt"""
        self._instructor(caller)
        attempt = self.enforcer.enforce(attempt_id)
        if attempt.status.is_terminal:
            raise AlreadyTerminal(f"Attempt is already {attempt.status.value}")

        def _mark(staged: QuizAttempt) -> None:
            staged.banned_by = caller.user_id
            staged.banned_at = self.clock.now()

        attempt, won = self.attempts.transition(
            attempt_id, AttemptStatus.IN_PROGRESS, AttemptStatus.ABANDONED, _mark
        )
        if not won:
            raise AlreadyTerminal(f"Attempt is already {attempt.status.value}")

        logger.info(f"Attempt banned: {attempt_id} by {caller.user_id}")
        record_event("attempt_banned", attempt_id=attempt_id, quiz_id=attempt.quiz_id, banned_by=caller.user_id)
        return attempt

    def regrade(self, attempt_id: str, caller: Caller) -> QuizAttempt:
        """Rescore a submitted attempt against the current snapshot"""
        self._instructor(caller)
        self.enforcer.enforce(attempt_id)
        return self.grader.regrade(attempt_id, regraded_by=caller.user_id)

    def get_attempt(self, attempt_id: str, caller: Caller) -> AttemptView:
        if caller.is_instructor:
            attempt = self.enforcer.enforce(attempt_id)
        else:
            attempt = self._owned(attempt_id, caller)

        quiz = self.quizzes.get(attempt.quiz_id)
        questions = [
            QuestionView(id=q.id, text=q.text, type=q.type, options=q.options, points=q.points)
            for q in quiz.snapshot_questions if not q.is_deleted
        ]
        return AttemptView(attempt=attempt, questions=questions)

    def list_attempts(
        self,
        quiz_id: str,
        caller: Caller,
        status: Optional[AttemptStatus] = None
    ) -> List[QuizAttempt]:
        self._instructor(caller)
        self.quizzes.get(quiz_id)
        attempts = [self.enforcer.enforce(a.id) for a in self.attempts.list(quiz_id=quiz_id)]
        return [a for a in attempts if status is None or a.status is status]
