# FILE: quiz_backend/errors.py
"""
Tagged errors raised by the quiz attempt core

Every QuizError is a recoverable, caller-facing condition. StorageError is
not a QuizError: it means a commit failed and the caller should retry.
"""


class QuizError(Exception):
    """Base class for caller-facing quiz errors"""

    kind = "QuizError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {"error": self.kind, "detail": self.message}


class WindowClosed(QuizError):
    """Enrollment attempted outside [startTime, endTime)"""
    kind = "WindowClosed"


class Unauthorized(QuizError):
    """Wrong enrollment password or missing caller identity"""
    kind = "Unauthorized"


class Forbidden(QuizError):
    """Caller does not own the attempt or lacks the required role"""
    kind = "Forbidden"


class Banned(QuizError):
    """Operation on, or re-enrollment into, an abandoned attempt"""
    kind = "Banned"


class InvalidState(QuizError):
    """Write attempted on an attempt that is not in progress"""
    kind = "InvalidState"


class InvalidAnswer(QuizError):
    """Answer vector does not fit the snapshot question"""
    kind = "InvalidAnswer"


class InvalidQuestion(QuizError):
    """Question snapshot violates its invariants"""
    kind = "InvalidQuestion"


class AlreadyTerminal(QuizError):
    """Transition raced against an already finalized attempt"""
    kind = "AlreadyTerminal"


class NotFound(QuizError):
    """Unknown quiz, attempt or question id"""
    kind = "NotFound"


class StorageError(Exception):
    """Persistence layer could not commit; safe to retry"""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class IllegalTransition(Exception):
    """Attempted status change outside the attempt state machine"""
