"""
CORS and preflight handling.

Each API resource advertises its own method list. Preflight requests are
answered before routing so they never reach authentication.
"""

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

ALLOWED_HEADERS = "Content-Type, Authorization"
DEFAULT_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")

_resource_methods: dict[str, str] = {}


def register_resource_methods(path: str, methods: tuple[str, ...] | list[str]) -> None:
    """Register the methods advertised for a resource path (e.g. /api/patients)."""
    _resource_methods[path.rstrip("/")] = ", ".join(methods)


def allowed_methods_for(path: str) -> str:
    return _resource_methods.get(path.rstrip("/"), ", ".join(DEFAULT_METHODS))


def cors_headers(path: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.FRONTEND_URL or "*",
        "Access-Control-Allow-Methods": allowed_methods_for(path),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }


class ResourceCORSMiddleware(BaseHTTPMiddleware):
    """Answer OPTIONS with 200 and stamp CORS headers on every /api response."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=cors_headers(path))

        response = await call_next(request)
        if path.startswith("/api/"):
            response.headers.update(cors_headers(path))
        return response
