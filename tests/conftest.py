# FILE: tests/conftest.py

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Global settings point at a scratch directory before anything imports them
_scratch = tempfile.mkdtemp(prefix="quiz-backend-tests-")
os.environ.setdefault("DATA_DIR", os.path.join(_scratch, "data"))
os.environ.setdefault("QUIZZES_DIR", os.path.join(_scratch, "data", "quizzes"))
os.environ.setdefault("ATTEMPTS_DIR", os.path.join(_scratch, "data", "attempts"))
os.environ.setdefault("QUESTION_BANK_DIR", os.path.join(_scratch, "data", "question_bank"))
os.environ.setdefault("LOGS_DIR", os.path.join(_scratch, "logs"))
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "10000")
os.environ.setdefault("DEADLINE_SWEEP_ENABLED", "false")

import pytest
from quiz_backend.config import Settings
from quiz_backend.models.identity import Caller, Role
from quiz_backend.models.quizzes import CreateQuizRequest, QuestionInput, QuestionType
from quiz_backend.services.container import build_services
from quiz_backend.services.telemetry import reset_telemetry

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
PASSWORD = "open-sesame"


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime = T0):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float):
        self._now = self._now + timedelta(seconds=seconds)

    def set(self, value: datetime):
        self._now = value


@pytest.fixture(autouse=True)
def _clean_telemetry():
    reset_telemetry()
    yield


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a per-test directory"""
    return Settings(
        data_dir=str(tmp_path / "data"),
        quizzes_dir=str(tmp_path / "data" / "quizzes"),
        attempts_dir=str(tmp_path / "data" / "attempts"),
        question_bank_dir=str(tmp_path / "data" / "question_bank"),
        logs_dir=str(tmp_path / "logs"),
        deadline_sweep_enabled=False,
        password_hash_iterations=10_000,
    )


@pytest.fixture
def services(settings, clock):
    return build_services(settings, clock)


@pytest.fixture
def teacher():
    return Caller(user_id="teacher-1", role=Role.TEACHER)


@pytest.fixture
def student():
    return Caller(user_id="student-1", role=Role.STUDENT, ip_address="10.0.0.7", user_agent="pytest")


@pytest.fixture
def other_student():
    return Caller(user_id="student-2", role=Role.STUDENT)


def two_question_request(**overrides) -> CreateQuizRequest:
    """Two single-select questions worth 2 points each: keys [1,0] and [0,1]"""
    fields = dict(
        course_id="course-1",
        title="Unit 1 check",
        start_time=T0,
        end_time=T0 + timedelta(hours=1),
        password=PASSWORD,
        published=True,
        questions=[
            QuestionInput(text="2 + 2 = 4?", type=QuestionType.SINGLE,
                          options=["yes", "no"], correct_options=[1, 0], points=2),
            QuestionInput(text="The sun orbits the earth?", type=QuestionType.SINGLE,
                          options=["yes", "no"], correct_options=[0, 1], points=2),
        ],
    )
    fields.update(overrides)
    return CreateQuizRequest(**fields)


@pytest.fixture
def quiz(services, teacher):
    """Published two-question quiz open for one hour from T0"""
    return services.quiz_admin.create_quiz(two_question_request(), teacher)


@pytest.fixture
def question_ids(quiz):
    return [q.id for q in quiz.snapshot_questions]


@pytest.fixture
def attempt(services, quiz, student):
    """Student's in-progress attempt"""
    return services.quiz_attempts.enroll(quiz.id, student, PASSWORD)
