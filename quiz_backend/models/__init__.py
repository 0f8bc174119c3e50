# FILE: quiz_backend/models/__init__.py
"""
Pydantic models for request/response validation
"""
from quiz_backend.models.quizzes import *
from quiz_backend.models.attempts import *
from quiz_backend.models.identity import *
from quiz_backend.models.statistics import *
