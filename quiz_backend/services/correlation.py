# FILE: quiz_backend/services/correlation.py
"""
Correlation ID and record ID utilities
"""
import uuid
from contextvars import ContextVar
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate unique correlation ID"""
    return str(uuid.uuid4())


def generate_id() -> str:
    """Generate a record id (quizzes, attempts, snapshot questions)"""
    return uuid.uuid4().hex


def set_correlation_id(correlation_id: str):
    """Bind correlation ID to the current request context"""
    return _correlation_id.set(correlation_id)


def reset_correlation_id(token) -> None:
    _correlation_id.reset(token)


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current request, if any"""
    return _correlation_id.get()
