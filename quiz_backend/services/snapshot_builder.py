# FILE: quiz_backend/services/snapshot_builder.py
"""
Snapshot builder

Copies the quiz's live bank questions into the quiz record once. Every attempt
at that quiz is graded against the same snapshot, and later bank edits never
reach it.
"""
import logging
from typing import Callable, Optional, Union

from quiz_backend.errors import InvalidQuestion
from quiz_backend.models.quizzes import BankQuestion, QuestionSnapshot, QuestionType, Quiz
from quiz_backend.services.clock import Clock
from quiz_backend.services.correlation import generate_id
from quiz_backend.services.question_bank import QuestionBank
from quiz_backend.services.quiz_store import QuizStore

logger = logging.getLogger(__name__)


def validate_question(question: Union[QuestionSnapshot, BankQuestion], label: Optional[str] = None) -> None:
    """Check a question's option/answer invariants"""
    label = label or f'Question "{question.text}"'

    if len(question.options) < 2:
        raise InvalidQuestion(f"{label}: at least two options are required")
    if len(question.correct_options) != len(question.options):
        raise InvalidQuestion(f"{label}: correctOptions must have one entry per option")
    if any(v not in (0, 1) for v in question.correct_options):
        raise InvalidQuestion(f"{label}: correctOptions entries must be 0 or 1")
    if question.points <= 0:
        raise InvalidQuestion(f"{label}: points must be positive")

    true_options = sum(question.correct_options)
    if question.type is QuestionType.SINGLE:
        if true_options != 1:
            raise InvalidQuestion(f"{label}: single-select questions must have exactly one correct option")
    elif true_options < 1:
        raise InvalidQuestion(f"{label}: at least one correct option is required")


def snapshot_from_bank(question: BankQuestion, id_factory: Callable[[], str] = generate_id) -> QuestionSnapshot:
    """Copy a bank question into a fresh snapshot entry"""
    validate_question(question)
    return QuestionSnapshot(
        id=id_factory(),
        text=question.text,
        type=question.type,
        options=list(question.options),
        correct_options=list(question.correct_options),
        points=question.points,
        explanation=question.explanation,
    )


class SnapshotBuilder:
    """Builds a quiz's shared snapshot on first enrollment"""

    def __init__(
        self,
        quizzes: QuizStore,
        bank: QuestionBank,
        clock: Clock,
        id_factory: Callable[[], str] = generate_id
    ):
        self.quizzes = quizzes
        self.bank = bank
        self.clock = clock
        self.id_factory = id_factory

    def build(self, quiz_id: str) -> Quiz:
        """Build the snapshot if the quiz has none; otherwise a no-op"""
        def _build(quiz: Quiz) -> Optional[Quiz]:
            if quiz.snapshot_questions:
                return None
            if not quiz.bank_question_ids:
                return None

            questions = self.bank.get_questions(quiz.bank_question_ids)
            quiz.snapshot_questions = [snapshot_from_bank(q, self.id_factory) for q in questions]
            quiz.snapshot_built_at = self.clock.now()
            return quiz

        quiz = self.quizzes.update(quiz_id, _build)
        logger.debug(f"Snapshot ready for quiz {quiz_id}: {len(quiz.snapshot_questions)} questions")
        return quiz
