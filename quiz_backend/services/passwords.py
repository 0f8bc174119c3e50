# FILE: quiz_backend/services/passwords.py
"""
Enrollment password hashing
"""
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from quiz_backend.config import get_settings


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Hash an enrollment password for storage"""
    iterations = iterations or get_settings().password_hash_iterations
    return generate_password_hash(password, method=f"pbkdf2:sha256:{iterations}")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a supplied password against the stored hash"""
    return check_password_hash(password_hash, password)
