# FILE: quiz_backend/routes/deps.py
"""
Request dependencies shared by routers
"""
from typing import Optional
from fastapi import Header, Request

from quiz_backend.errors import Unauthorized
from quiz_backend.models.identity import Caller, Role
from quiz_backend.services.container import Services, get_services


def get_caller(
    request: Request,
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    user_agent: Optional[str] = Header(None)
) -> Caller:
    """Caller identity as verified by the upstream auth layer"""
    if not x_user_id or not x_user_role:
        raise Unauthorized("Missing caller identity")
    try:
        role = Role(x_user_role.lower())
    except ValueError:
        raise Unauthorized(f"Unknown role: {x_user_role}")

    return Caller(
        user_id=x_user_id,
        role=role,
        ip_address=request.client.host if request.client else None,
        user_agent=user_agent,
    )


def services() -> Services:
    return get_services()


def envelope(data) -> dict:
    """Success response body"""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [d.model_dump(mode="json", by_alias=True) for d in data]
    return {"status": "success", "data": data}
