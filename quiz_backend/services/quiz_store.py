# FILE: quiz_backend/services/quiz_store.py
"""
Quiz store

Quizzes are cached in memory and persisted one JSON document per quiz.
Writes stage a copy, persist it, and only then replace the cached version.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional
from pathlib import Path

from quiz_backend.config import get_settings
from quiz_backend.errors import NotFound
from quiz_backend.models.quizzes import Quiz
from quiz_backend.services.file_io import iter_json_documents, write_json_atomic

logger = logging.getLogger(__name__)


class QuizStore:
    """Store for quizzes and their embedded snapshots"""

    def __init__(self, quizzes_dir: Optional[str] = None):
        self.quizzes_dir = Path(quizzes_dir or get_settings().quizzes_dir)
        self.quizzes_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._quizzes: Dict[str, Quiz] = {}
        self._load()

    def _load(self):
        for _, doc in iter_json_documents(self.quizzes_dir):
            quiz = Quiz.model_validate(doc)
            self._quizzes[quiz.id] = quiz
        logger.info(f"Loaded {len(self._quizzes)} quizzes from {self.quizzes_dir}")

    def _persist(self, quiz: Quiz):
        write_json_atomic(self.quizzes_dir / f"{quiz.id}.json", quiz.model_dump(mode="json"))

    def get(self, quiz_id: str) -> Quiz:
        """Get a copy of a quiz"""
        with self._lock:
            quiz = self._quizzes.get(quiz_id)
            if quiz is None:
                raise NotFound(f"Quiz {quiz_id} not found")
            return quiz.model_copy(deep=True)

    def list(self) -> List[Quiz]:
        with self._lock:
            return [q.model_copy(deep=True) for q in self._quizzes.values()]

    def create(self, quiz: Quiz) -> Quiz:
        """Persist a new quiz"""
        with self._lock:
            self._persist(quiz)
            self._quizzes[quiz.id] = quiz.model_copy(deep=True)
        logger.info(f"Quiz created: {quiz.id}")
        return quiz

    def update(self, quiz_id: str, mutate: Callable[[Quiz], Optional[Quiz]]) -> Quiz:
        """
        Apply a mutation to a staged copy of the quiz.

        `mutate` returns the staged quiz to commit it, or None for a no-op.
        Exceptions raised by `mutate` leave the stored quiz untouched.
        """
        with self._lock:
            current = self._quizzes.get(quiz_id)
            if current is None:
                raise NotFound(f"Quiz {quiz_id} not found")

            staged = mutate(current.model_copy(deep=True))
            if staged is None:
                return current.model_copy(deep=True)

            self._persist(staged)
            self._quizzes[quiz_id] = staged
            return staged.model_copy(deep=True)
