"""JWT access tokens shared with the external auth service."""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from viewings.config import settings
from viewings.errors import AuthError

logger = logging.getLogger(__name__)


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed access token whose subject is the account id."""
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    claims = {"sub": user_id, "iat": now, "exp": expire, "type": "access"}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Verify a token and return its subject.

    Raises:
        AuthError: If the token is malformed, expired, or has no subject
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise AuthError("Invalid or expired token") from e

    if payload.get("type", "access") != "access":
        raise AuthError("Invalid token type")

    subject = payload.get("sub")
    if not subject:
        raise AuthError("Token has no subject")
    return str(subject)
