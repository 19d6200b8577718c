"""
Authentication for FastAPI routes.

Requests carry a Supabase access token ("Authorization: Bearer <token>"),
which is checked against Supabase Auth with the service client.
"""

import logging

from fastapi import Header, HTTPException
from pydantic import BaseModel

from wandercrew.db.client import get_service_client

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthenticatedUser(BaseModel):
    """User resolved from a Supabase access token."""
    id: str
    email: str | None
    access_token: str


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")
    return token


async def get_current_user(authorization: str | None = Header(None)) -> AuthenticatedUser:
    """
    Resolve the calling user.

    401 for a missing, malformed or rejected token; 503 when the server has
    no Supabase credentials to check it with.
    """
    token = _bearer_token(authorization)

    try:
        client = get_service_client()
    except RuntimeError as e:
        logger.error(f"Cannot authenticate requests: {e}")
        raise HTTPException(status_code=503, detail="Authentication is not configured")

    try:
        user_response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token rejected by Supabase: {e}")
        raise HTTPException(status_code=401, detail="Authentication failed")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthenticatedUser(
        id=user_response.user.id,
        email=user_response.user.email,
        access_token=token,
    )
