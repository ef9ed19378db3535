"""Rate limiting configuration for public lead-capture endpoints."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")

# Single-process in-memory storage; limits apply per IP only to routes
# decorated with public_limit.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=not IS_TESTING and settings.RATE_LIMIT_PUBLIC > 0,
)


def public_limit() -> str:
    return f"{settings.RATE_LIMIT_PUBLIC}/minute"
