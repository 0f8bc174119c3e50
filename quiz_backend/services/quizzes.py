# FILE: quiz_backend/services/quizzes.py
"""
Quiz authoring: create, publish, snapshot corrections, statistics
"""
import logging
from typing import Dict, List, Optional

from quiz_backend.errors import Forbidden, InvalidQuestion, NotFound
from quiz_backend.models.attempts import AttemptStatus
from quiz_backend.models.identity import Caller
from quiz_backend.models.quizzes import (
    CreateQuizRequest, QuestionEdit, QuestionSnapshot, Quiz, QuizView
)
from quiz_backend.models.statistics import QuizStatistics
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock
from quiz_backend.services.correlation import generate_id
from quiz_backend.services.deadline import DeadlineEnforcer
from quiz_backend.services.passwords import hash_password
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.snapshot_builder import SnapshotBuilder, validate_question
from quiz_backend.services.statistics import compute_statistics

logger = logging.getLogger(__name__)


def _apply_edit(question: QuestionSnapshot, edit: QuestionEdit) -> QuestionSnapshot:
    changes = edit.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
    return question.model_copy(update=changes)


def _new_question(edit: QuestionEdit) -> QuestionSnapshot:
    if edit.text is None or edit.options is None or edit.correct_options is None:
        raise InvalidQuestion("New questions need text, options and correctOptions")
    fields = edit.model_dump(exclude_none=True, exclude={"id"})
    return QuestionSnapshot(id=edit.id or generate_id(), **fields)


class QuizService:
    """Instructor-side quiz management"""

    def __init__(
        self,
        quizzes: QuizStore,
        attempts: AttemptStore,
        snapshots: SnapshotBuilder,
        enforcer: DeadlineEnforcer,
        clock: Clock
    ):
        self.quizzes = quizzes
        self.attempts = attempts
        self.snapshots = snapshots
        self.enforcer = enforcer
        self.clock = clock

    def _instructor(self, caller: Caller):
        if not caller.is_instructor:
            raise Forbidden("Only teachers can manage quizzes")

    def create_quiz(self, request: CreateQuizRequest, caller: Caller) -> Quiz:
        self._instructor(caller)
        if request.questions and request.bank_question_ids:
            raise InvalidQuestion("Use either inline questions or bankQuestionIds, not both")

        snapshot: List[QuestionSnapshot] = []
        for index, question in enumerate(request.questions):
            candidate = QuestionSnapshot(id=generate_id(), **question.model_dump())
            validate_question(candidate, label=f"Question {index + 1}")
            snapshot.append(candidate)

        now = self.clock.now()
        quiz = Quiz(
            id=generate_id(),
            course_id=request.course_id,
            title=request.title,
            description=request.description,
            start_time=request.start_time,
            end_time=request.end_time,
            password_hash=hash_password(request.password),
            published=request.published,
            bank_question_ids=list(request.bank_question_ids),
            snapshot_questions=snapshot,
            snapshot_built_at=now if snapshot else None,
            created_by=caller.user_id,
            created_at=now,
        )
        return self.quizzes.create(quiz)

    def get_quiz(self, quiz_id: str, caller: Caller) -> QuizView:
        quiz = self.quizzes.get(quiz_id)
        if caller.is_instructor:
            return QuizView.from_quiz(quiz)
        if not quiz.published:
            raise NotFound(f"Quiz {quiz_id} not found")
        # students never see the answer key
        view = QuizView.from_quiz(quiz)
        view.snapshot_questions = []
        return view

    def publish(self, quiz_id: str, caller: Caller) -> QuizView:
        self._instructor(caller)

        def _publish(quiz: Quiz) -> Optional[Quiz]:
            if quiz.published:
                return None
            quiz.published = True
            return quiz

        quiz = self.quizzes.update(quiz_id, _publish)
        logger.info(f"Quiz published: {quiz_id}")
        return QuizView.from_quiz(quiz)

    def update_snapshot(self, quiz_id: str, edits: List[QuestionEdit], caller: Caller) -> QuizView:
        """
        Correct snapshot questions ahead of a regrade.

        Edits to existing ids are merged in place; positions never move.
        Edits without a known id are appended as new questions.
        """
        self._instructor(caller)
        self.snapshots.build(quiz_id)

        def _edit(quiz: Quiz) -> Quiz:
            positions: Dict[str, int] = {q.id: i for i, q in enumerate(quiz.snapshot_questions)}
            for edit in edits:
                if edit.id is not None and edit.id in positions:
                    index = positions[edit.id]
                    updated = _apply_edit(quiz.snapshot_questions[index], edit)
                    quiz.snapshot_questions[index] = updated
                else:
                    updated = _new_question(edit)
                    positions[updated.id] = len(quiz.snapshot_questions)
                    quiz.snapshot_questions.append(updated)

                if not updated.is_deleted:
                    validate_question(updated)

            if quiz.snapshot_built_at is None:
                quiz.snapshot_built_at = self.clock.now()
            return quiz

        quiz = self.quizzes.update(quiz_id, _edit)
        logger.info(f"Snapshot updated for quiz {quiz_id}: {len(edits)} edits")
        return QuizView.from_quiz(quiz)

    def statistics(self, quiz_id: str, caller: Caller) -> QuizStatistics:
        self._instructor(caller)
        self.quizzes.get(quiz_id)

        submitted = []
        for attempt in self.attempts.list(quiz_id=quiz_id):
            attempt = self.enforcer.enforce(attempt.id)
            if attempt.status is AttemptStatus.SUBMITTED:
                submitted.append(attempt)
        return compute_statistics(quiz_id, submitted)
