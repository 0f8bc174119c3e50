# FILE: quiz_backend/models/quizzes.py
"""
Quiz and question snapshot models
"""
from enum import Enum
from typing import Optional, List
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionType(str, Enum):
    """How many options a question may mark as correct"""
    SINGLE = "single"
    MULTIPLE = "multiple"
    OTHER = "other"


class BankQuestion(CamelModel):
    """Live question bank entry (external, read-only for the quiz core)"""
    id: str
    subject_id: str
    text: str
    type: QuestionType = QuestionType.SINGLE
    options: List[str]
    correct_options: List[int]
    points: float = 1
    explanation: Optional[str] = None


class QuestionSnapshot(CamelModel):
    """Immutable copy of a question embedded in a quiz"""
    id: str
    text: str
    type: QuestionType = QuestionType.SINGLE
    options: List[str]
    correct_options: List[int]
    points: float = 1
    explanation: Optional[str] = None
    is_deleted: bool = False


class QuestionView(CamelModel):
    """Snapshot question as shown to a student during an attempt"""
    id: str
    text: str
    type: QuestionType
    options: List[str]
    points: float


class Quiz(CamelModel):
    """Quiz record holding the shared snapshot"""
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    password_hash: str
    published: bool = False
    bank_question_ids: List[str] = Field(default_factory=list)
    snapshot_questions: List[QuestionSnapshot] = Field(default_factory=list)
    snapshot_built_at: Optional[datetime] = None
    created_by: str
    created_at: datetime


class QuizView(CamelModel):
    """Quiz representation returned to clients (never carries the secret)"""
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    published: bool
    snapshot_questions: List[QuestionSnapshot] = Field(default_factory=list)
    snapshot_built_at: Optional[datetime] = None
    created_by: str
    created_at: datetime

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizView":
        return cls(**quiz.model_dump(exclude={"password_hash", "bank_question_ids"}))


class QuestionInput(CamelModel):
    """Inline question supplied at quiz creation"""
    text: str
    type: QuestionType = QuestionType.SINGLE
    options: List[str]
    correct_options: List[int]
    points: float = 1
    explanation: Optional[str] = None


class CreateQuizRequest(CamelModel):
    """Create quiz request"""
    course_id: str
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    password: str = Field(..., min_length=1)
    bank_question_ids: List[str] = Field(default_factory=list)
    questions: List[QuestionInput] = Field(default_factory=list)
    published: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # naive timestamps are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        return self


class QuestionEdit(CamelModel):
    """Instructor correction to one snapshot question; no id appends a new question"""
    id: Optional[str] = None
    text: Optional[str] = None
    type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    correct_options: Optional[List[int]] = None
    points: Optional[float] = None
    explanation: Optional[str] = None
    is_deleted: Optional[bool] = None


class UpdateSnapshotRequest(CamelModel):
    """Batch of snapshot edits applied atomically"""
    questions: List[QuestionEdit] = Field(..., min_length=1)
