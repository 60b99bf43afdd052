"""Common API dependencies."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from parkshift.core.config import get_settings
from parkshift.core.security import decode_access_token
from parkshift.core.settings import get_payment_settings
from parkshift.db.session import get_session
from parkshift.integrations import StripeClient
from parkshift.models.parking_space import ParkingSpace
from parkshift.models.profile import Profile
from parkshift.services import space_service

bearer_scheme = HTTPBearer(auto_error=False)

_RATE_WINDOWS = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Profile:
    """Resolve the profile behind the auth provider's bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception
    try:
        profile_id = uuid.UUID(subject)
    except (ValueError, TypeError) as exc:
        raise credentials_exception from exc

    profile = await session.get(Profile, profile_id)
    if profile is None:
        raise credentials_exception
    return profile


@lru_cache
def _build_stripe_client(secret_key: str, webhook_secret: str | None) -> StripeClient:
    return StripeClient(secret_key, webhook_secret=webhook_secret)


def get_stripe_client() -> StripeClient:
    """Return the configured Stripe client, or 503 when payments are off."""
    settings = get_payment_settings()
    if not settings.stripe_secret_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payments are not configured",
        )
    return _build_stripe_client(
        settings.stripe_secret_key, settings.stripe_webhook_secret
    )


def get_optional_stripe_client() -> StripeClient | None:
    settings = get_payment_settings()
    if not settings.stripe_secret_key:
        return None
    return _build_stripe_client(
        settings.stripe_secret_key, settings.stripe_webhook_secret
    )


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"10/minute"`` style limits into ``(times, seconds)``."""
    count_str, sep, window_str = value.partition("/")
    if not sep or not count_str.strip().isdigit():
        return fallback
    seconds = _RATE_WINDOWS.get(window_str.strip().lower(), fallback[1])
    return int(count_str.strip()), seconds


def rate_limit(value: str, *, fallback: tuple[int, int] = (100, 60)):
    """Rate limit dependency; a no-op until the limiter has a Redis connection."""
    times, seconds = parse_rate(value, fallback=fallback)

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=times, seconds=seconds)
        await limiter(request, response)

    return Depends(_dependency)


DEFAULT_RATE_LIMIT = rate_limit(get_settings().rate_limit_default)
BOOKING_RATE_LIMIT = rate_limit(get_settings().rate_limit_booking, fallback=(10, 60))


async def load_owned_space(
    session: AsyncSession, *, space_id: uuid.UUID, owner_id: uuid.UUID
) -> ParkingSpace:
    """Fetch a space for its owner, mapping lookup errors to 404/403."""
    try:
        return await space_service.get_owned_space(
            session, space_id=space_id, owner_id=owner_id
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except PermissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
