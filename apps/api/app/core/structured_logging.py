"""Structured logging helpers (PHI-safe)."""

from typing import Any

from fastapi import Request


def build_log_context(
    *,
    user_id: str | None = None,
    org_id: str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
    resource: str | None = None,
) -> dict[str, Any]:
    """Return a PHI-safe log context dict."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if org_id:
        context["org_id"] = org_id
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    if resource:
        context["resource"] = resource
    return context


def request_log_context(request: Request) -> dict[str, Any]:
    """Build a log context from request state populated by the auth dependencies."""
    path = request.url.path
    resource = path[len("/api/"):] if path.startswith("/api/") else None
    return build_log_context(
        user_id=getattr(request.state, "user_id", None),
        org_id=getattr(request.state, "org_id", None),
        request_id=request.headers.get("X-Request-ID"),
        route=path,
        method=request.method,
        resource=resource,
    )
