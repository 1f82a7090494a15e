"""Dependency injection for FastAPI endpoints."""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, Request

from src.core.auth import AuthError, authenticate
from src.core.config import settings
from src.core.i18n import MessageBundle
from src.core.jmrl_client import JMRLClient

logger = logging.getLogger(__name__)


@lru_cache
def get_jmrl_client() -> JMRLClient:
    """Get the process-wide JMRL client (and its connection pool)."""
    return JMRLClient.from_settings(settings)


@lru_cache
def get_message_bundle() -> MessageBundle:
    """Get the localized message bundle."""
    return MessageBundle.load(settings.i18n_dir)


def require_auth(request: Request, authorization: Optional[str] = Header(default=None)) -> Optional[dict]:
    """Verify the bearer JWT on a pool API request.

    Authentication is skipped when no JWT key is configured. Validated
    claims are stored on `request.state.claims`.
    """
    if not settings.auth_enabled:
        return None
    try:
        token, claims = authenticate(authorization or "", settings.jwt_key)
    except AuthError as e:
        logger.warning("Authentication failed: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized")
    request.state.jwt = token
    request.state.claims = claims
    return claims
