# FILE: quiz_backend/models/identity.py
"""
Caller identity supplied by the authentication layer
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class Caller(BaseModel):
    """Verified caller"""
    user_id: str
    role: Role
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @property
    def is_instructor(self) -> bool:
        return self.role in (Role.TEACHER, Role.ADMIN)
