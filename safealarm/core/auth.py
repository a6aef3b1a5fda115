"""Caller identity dependency for authenticated (callable) routes."""

from dataclasses import dataclass

from fastapi import Request

from safealarm.core.errors import ApiError, ErrorCode
from safealarm.core.security import decode_access_token
from safealarm.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    """Verified identity attached to a request."""

    uid: str


async def get_caller_identity(request: Request) -> CallerIdentity:
    """Extract and verify the caller identity from the Bearer token.

    Raises:
        ApiError(unauthenticated): If no valid token is attached. Raised
            before the route body runs, so no side effect has happened.
    """
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:] if auth_header.startswith("Bearer ") else None

    payload = decode_access_token(token) if token else None
    if payload is None:
        logger.debug("Missing or invalid caller token", path=request.url.path)
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Must be signed in.")

    return CallerIdentity(uid=payload["sub"])
