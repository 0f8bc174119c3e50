# FILE: quiz_backend/middleware/correlation.py
"""
Correlation ID middleware
"""
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from quiz_backend.services.correlation import (
    generate_correlation_id, reset_correlation_id, set_correlation_id
)

logger = logging.getLogger(__name__)

HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to each request and echo it on the response"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(HEADER) or generate_correlation_id()
        token = set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)

        response.headers[HEADER] = correlation_id
        return response
