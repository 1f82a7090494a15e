"""Bearer token parsing and JWT validation for pool API requests."""

import logging

from jose import jwt
from jose.exceptions import JWTError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when a request does not carry a valid bearer token."""


def get_bearer_token(authorization: str) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header value.

    Raises:
        AuthError: The header is not exactly "Bearer" followed by a token
    """
    components = (authorization or "").split()
    if len(components) != 2 or components[0] != "Bearer" or not components[1]:
        raise AuthError(f"Invalid Authorization header: [{authorization}]")
    if components[1] == "undefined":
        raise AuthError("Bearer token is undefined")
    return components[1]


def validate_token(token: str, key: str) -> dict:
    """Verify a pool JWT signature and expiry, returning its claims.

    Raises:
        AuthError: The signature is invalid or the token has expired
    """
    try:
        return jwt.decode(token, key, algorithms=["HS256"], options={"verify_aud": False})
    except JWTError as e:
        raise AuthError(f"JWT signature for {token} is invalid: {e}")


def authenticate(authorization: str, key: str) -> tuple[str, dict]:
    """Validate the Authorization header, returning the token and its claims."""
    token = get_bearer_token(authorization)
    logger.debug("Validating JWT auth token...")
    claims = validate_token(token, key)
    return token, claims
