"""JWT helpers for tokens issued by the hosted auth provider."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt

from parkshift.core.config import get_settings


def create_access_token(
    subject: str, expires_delta: timedelta | None = None, **extra: Any
) -> str:
    """Create a JWT shaped like the ones the auth provider issues.

    Production tokens are minted by the provider; this is used by local
    tooling and the test-suite.
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(UTC) + expires_delta
    claims: dict[str, Any] = {"sub": subject, "exp": expire}
    if settings.auth_jwt_audience:
        claims["aud"] = settings.auth_jwt_audience
    claims.update(extra)
    return jwt.encode(claims, settings.auth_jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode a JWT token, raising JWTError on failure."""
    settings = get_settings()
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.auth_jwt_audience,
        options=options,
    )
