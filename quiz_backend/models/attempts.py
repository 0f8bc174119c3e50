# FILE: quiz_backend/models/attempts.py
"""
Attempt models
"""
from enum import Enum
from typing import Optional, List, Dict
from datetime import datetime
from pydantic import Field

from quiz_backend.errors import IllegalTransition
from quiz_backend.models.quizzes import CamelModel, QuestionView


class AttemptStatus(str, Enum):
    """Attempt lifecycle states"""
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        if self is AttemptStatus.IN_PROGRESS:
            return False
        if self is AttemptStatus.SUBMITTED or self is AttemptStatus.ABANDONED:
            return True
        raise IllegalTransition(f"Unhandled attempt status: {self!r}")


# Allowed status transitions; terminal states have none
TRANSITIONS: Dict[AttemptStatus, frozenset] = {
    AttemptStatus.IN_PROGRESS: frozenset({AttemptStatus.SUBMITTED, AttemptStatus.ABANDONED}),
    AttemptStatus.SUBMITTED: frozenset(),
    AttemptStatus.ABANDONED: frozenset(),
}


def can_transition(source: AttemptStatus, target: AttemptStatus) -> bool:
    """Check a status transition against the state machine"""
    return target in TRANSITIONS[source]


class AnswerEntry(CamelModel):
    """Stored answer for one snapshot question"""
    question_id: str
    answer: List[int]
    correct: Optional[bool] = None
    points_earned: Optional[float] = None


class RegradeRecord(CamelModel):
    """One instructor regrade of a submitted attempt"""
    regraded_by: str
    regraded_at: datetime
    old_score: Optional[float] = None
    new_score: float


class QuizAttempt(CamelModel):
    """One student's run at one quiz"""
    id: str
    quiz_id: str
    student_id: str
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    started_at: datetime
    submitted_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    forced: bool = False
    answers: Dict[str, AnswerEntry] = Field(default_factory=dict)
    total_score: Optional[float] = None
    total_quiz_score: Optional[float] = None
    score_percentage: Optional[float] = None
    banned_by: Optional[str] = None
    banned_at: Optional[datetime] = None
    regrade_history: List[RegradeRecord] = Field(default_factory=list)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    version: int = 0


class AttemptView(CamelModel):
    """Attempt returned to clients; students see no grading data while in progress"""
    attempt: QuizAttempt
    questions: List[QuestionView] = Field(default_factory=list)


class AutoSaveResult(CamelModel):
    """Attempt state after an auto-save"""
    attempt: QuizAttempt
    total_questions: int
    answered_total: int


class EnrollRequest(CamelModel):
    """Enroll into a quiz"""
    quiz_id: str
    password: str


class AutoSaveRequest(CamelModel):
    """Save the answer vector for one question"""
    question_id: str
    answer: List[int]
