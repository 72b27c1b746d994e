"""
Static API token authentication.

linkding clients send ``Authorization: Token <token>``; ``Bearer`` is accepted
too. There is a single user, so authentication is a comparison against the
configured API_TOKEN.
"""
import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from core.config import Settings, get_settings

logger = logging.getLogger(__name__)

ACCEPTED_SCHEMES = frozenset({"token", "bearer"})

# Raw Authorization header (HTTPBearer would reject linkding's "Token" scheme)
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Token"},
    )


def parse_authorization(header: str | None) -> str | None:
    """
    Extract the token from an Authorization header value.

    Returns:
        The token for ``Token <t>`` or ``Bearer <t>`` (scheme is
        case-insensitive), otherwise None.
    """
    if not header:
        return None
    parts = header.split(maxsplit=1)
    if len(parts) != 2 or parts[0].lower() not in ACCEPTED_SCHEMES:
        return None
    token = parts[1].strip()
    return token or None


def _mask(token: str) -> str:
    """Token prefix safe to put in logs."""
    return f"{token[:4]}..." if len(token) > 4 else "***"


async def verify_token(
    authorization: str | None = Depends(authorization_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Require a valid API token on the request.

    Raises:
        HTTPException: 401 if the header is missing or malformed, the token
            doesn't match, or no API_TOKEN is configured at all.
    """
    token = parse_authorization(authorization)
    if token is None:
        raise _unauthorized("Not authenticated")

    if not settings.api_token:
        logger.warning("Rejecting request: API_TOKEN is not configured")
        raise _unauthorized("Invalid token")

    if not secrets.compare_digest(token.encode(), settings.api_token.encode()):
        logger.warning("Rejecting request with invalid token %s", _mask(token))
        raise _unauthorized("Invalid token")
