"""Access token verification for identity-provider issued JWTs."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from app.core.config import settings


ALGORITHM = "HS256"
BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def create_access_token(
    user_id: UUID,
    email: str | None = None,
    expires_minutes: int = 60,
    secret: str | None = None,
) -> str:
    """
    Mint an access token with the same claims the identity provider issues.

    Used by the dev seed command and tests; production tokens come from
    Supabase Auth.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "role": "authenticated",
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, secret or settings.SUPABASE_JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify an access token.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets or lacks a subject
    """
    last_error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                audience=settings.SUPABASE_JWT_AUDIENCE,
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidSignatureError as e:
            last_error = e
            continue
        try:
            UUID(str(payload["sub"]))
        except ValueError as e:
            raise jwt.InvalidTokenError("Subject is not a user id") from e
        return payload
    raise last_error or jwt.InvalidTokenError("No signing secret configured")
