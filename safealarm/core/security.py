"""Caller identity tokens.

Tokens are JWTs issued by the external auth provider and signed with the
shared secret. The ``sub`` claim is the caller's uid.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from safealarm.config import settings


def create_access_token(uid: str, expires_delta: timedelta | None = None) -> str:
    """Create a signed access token for ``uid``.

    Used by operators and tests; production tokens come from the auth provider.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": uid,
        "exp": now + expires_delta,
        "iat": now,
        "type": "access",
    }

    return jwt.encode(
        payload,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict | None:
    """Decode and validate an access token.

    Returns:
        Token payload dict if valid, None if invalid, expired or not an
        access token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    if payload.get("type") != "access" or not payload.get("sub"):
        return None

    return payload
