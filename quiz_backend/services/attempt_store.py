# FILE: quiz_backend/services/attempt_store.py
"""
Attempt store with per-attempt serialization

- One attempt per (quiz, student) pair, created atomically.
- Every state-changing operation on an attempt runs under that attempt's lock,
  against a staged copy; the copy is persisted before it becomes visible.
- Status changes go through `transition`, a compare-and-set on status.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple
from pathlib import Path

from quiz_backend.config import get_settings
from quiz_backend.errors import IllegalTransition, NotFound
from quiz_backend.models.attempts import AttemptStatus, QuizAttempt, can_transition
from quiz_backend.services.file_io import iter_json_documents, write_json_atomic

logger = logging.getLogger(__name__)


class AttemptStore:
    """Store for quiz attempts"""

    def __init__(self, attempts_dir: Optional[str] = None):
        self.attempts_dir = Path(attempts_dir or get_settings().attempts_dir)
        self.attempts_dir.mkdir(parents=True, exist_ok=True)

        self._registry_lock = threading.Lock()
        self._attempts: Dict[str, QuizAttempt] = {}
        self._by_pair: Dict[Tuple[str, str], str] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._load()

    def _load(self):
        for _, doc in iter_json_documents(self.attempts_dir):
            attempt = QuizAttempt.model_validate(doc)
            self._register(attempt)
        logger.info(f"Loaded {len(self._attempts)} attempts from {self.attempts_dir}")

    def _register(self, attempt: QuizAttempt):
        self._attempts[attempt.id] = attempt
        self._by_pair[(attempt.quiz_id, attempt.student_id)] = attempt.id
        self._locks.setdefault(attempt.id, threading.Lock())

    def _persist(self, attempt: QuizAttempt):
        write_json_atomic(self.attempts_dir / f"{attempt.id}.json", attempt.model_dump(mode="json"))

    def _lock_for(self, attempt_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(attempt_id)
        if lock is None:
            raise NotFound(f"Quiz attempt {attempt_id} not found")
        return lock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, attempt_id: str) -> QuizAttempt:
        """Get a copy of an attempt"""
        with self._lock_for(attempt_id):
            return self._attempts[attempt_id].model_copy(deep=True)

    def find(self, quiz_id: str, student_id: str) -> Optional[QuizAttempt]:
        """Get the attempt for a (quiz, student) pair, if any"""
        with self._registry_lock:
            attempt_id = self._by_pair.get((quiz_id, student_id))
        if attempt_id is None:
            return None
        return self.get(attempt_id)

    def list(
        self,
        quiz_id: Optional[str] = None,
        status: Optional[AttemptStatus] = None
    ) -> List[QuizAttempt]:
        """List attempts, optionally filtered by quiz and status"""
        with self._registry_lock:
            attempt_ids = list(self._attempts.keys())

        attempts = []
        for attempt_id in attempt_ids:
            attempt = self.get(attempt_id)
            if quiz_id is not None and attempt.quiz_id != quiz_id:
                continue
            if status is not None and attempt.status != status:
                continue
            attempts.append(attempt)
        return sorted(attempts, key=lambda a: (a.started_at, a.id))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def get_or_create(
        self,
        quiz_id: str,
        student_id: str,
        factory: Callable[[], QuizAttempt]
    ) -> Tuple[QuizAttempt, bool]:
        """
        Return the pair's attempt, creating it with `factory` if none exists.

        Returns (attempt, created).
        """
        with self._registry_lock:
            attempt_id = self._by_pair.get((quiz_id, student_id))
            if attempt_id is None:
                attempt = factory()
                self._persist(attempt)
                self._register(attempt)
                logger.info(f"Attempt created: {attempt.id} (quiz={quiz_id}, student={student_id})")
                return attempt.model_copy(deep=True), True

        return self.get(attempt_id), False

    def mutate(
        self,
        attempt_id: str,
        apply: Callable[[QuizAttempt], Optional[QuizAttempt]]
    ) -> QuizAttempt:
        """
        Apply a change to a staged copy of the attempt under its lock.

        `apply` returns the staged attempt to commit it, or None for a no-op.
        If `apply` raises or the commit fails, the stored attempt is unchanged.
        """
        with self._lock_for(attempt_id):
            current = self._attempts[attempt_id]
            staged = apply(current.model_copy(deep=True))
            if staged is None:
                return current.model_copy(deep=True)

            if staged.status != current.status and not can_transition(current.status, staged.status):
                raise IllegalTransition(
                    f"Illegal transition {current.status.value} -> {staged.status.value}"
                )

            staged.version = current.version + 1
            self._persist(staged)
            self._attempts[attempt_id] = staged
            return staged.model_copy(deep=True)

    def transition(
        self,
        attempt_id: str,
        expected: AttemptStatus,
        target: AttemptStatus,
        apply: Optional[Callable[[QuizAttempt], None]] = None
    ) -> Tuple[QuizAttempt, bool]:
        """
        Compare-and-set on status.

        Moves the attempt from `expected` to `target` (running `apply` on the
        staged copy first) only if its current status is `expected`.
        Returns (attempt, won); a loser gets the current stored attempt.
        """
        if not can_transition(expected, target):
            raise IllegalTransition(f"Illegal transition {expected.value} -> {target.value}")

        won = False

        def _apply(staged: QuizAttempt) -> Optional[QuizAttempt]:
            nonlocal won
            if staged.status != expected:
                return None
            if apply is not None:
                apply(staged)
            staged.status = target
            won = True
            return staged

        attempt = self.mutate(attempt_id, _apply)
        return attempt, won
