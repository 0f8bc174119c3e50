# FILE: quiz_backend/services/container.py
"""
Service wiring

One set of stores and services per process. Tests build their own with a
manual clock and temporary directories.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from quiz_backend.config import Settings, get_settings
from quiz_backend.services.access_gate import AccessGate
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock, SystemClock
from quiz_backend.services.deadline import DeadlineEnforcer
from quiz_backend.services.grading import Grader, Scorer
from quiz_backend.services.question_bank import QuestionBank
from quiz_backend.services.quiz_attempts import QuizAttemptService
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.quizzes import QuizService
from quiz_backend.services.scoring import score
from quiz_backend.services.snapshot_builder import SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class Services:
    clock: Clock
    bank: QuestionBank
    quizzes: QuizStore
    attempts: AttemptStore
    snapshots: SnapshotBuilder
    grader: Grader
    enforcer: DeadlineEnforcer
    gate: AccessGate
    quiz_attempts: QuizAttemptService
    quiz_admin: QuizService


def build_services(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    scorer: Scorer = score
) -> Services:
    """Wire stores and services from settings"""
    settings = settings or get_settings()
    clock = clock or SystemClock()

    bank = QuestionBank(settings.question_bank_dir)
    quizzes = QuizStore(settings.quizzes_dir)
    attempts = AttemptStore(settings.attempts_dir)
    snapshots = SnapshotBuilder(quizzes, bank, clock)
    grader = Grader(attempts, quizzes, clock, scorer=scorer)
    enforcer = DeadlineEnforcer(attempts, quizzes, grader, clock)
    gate = AccessGate(
        attempts, quizzes, snapshots, clock,
        enroll_cutoff_minutes=settings.enroll_cutoff_minutes
    )

    return Services(
        clock=clock,
        bank=bank,
        quizzes=quizzes,
        attempts=attempts,
        snapshots=snapshots,
        grader=grader,
        enforcer=enforcer,
        gate=gate,
        quiz_attempts=QuizAttemptService(attempts, quizzes, gate, grader, enforcer, clock),
        quiz_admin=QuizService(quizzes, attempts, snapshots, enforcer, clock),
    )


_services: Optional[Services] = None


def get_services() -> Services:
    """Get or create singleton services"""
    global _services
    if _services is None:
        _services = build_services()
        logger.info("Services initialized")
    return _services


def reset_services():
    """Drop the singleton (useful for testing)"""
    global _services
    _services = None
