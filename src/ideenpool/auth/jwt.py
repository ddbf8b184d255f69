"""Decoding of the platform bearer token.

The token is issued by the platform's identity provider and pasted in by the
user. Its signature is not verified; the claims are trusted as-is.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import jwt

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown"
EXPIRY_BUFFER_SECONDS = 60


class TokenExpiredError(Exception):
    """Raised when a JWT token has expired."""


class TokenInvalidError(Exception):
    """Raised when a JWT token is invalid."""


@dataclass(frozen=True)
class TokenUser:
    id: str
    name: str
    email: str
    expires_at: int


def strip_bearer(token: str) -> str:
    token = token.strip()
    return token[7:] if token.startswith("Bearer ") else token


def decode_token(token: str) -> dict[str, Any]:
    """Decode a JWT payload without signature verification."""
    try:
        return jwt.decode(
            strip_bearer(token),
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.InvalidTokenError as e:
        logger.warning("Could not decode token: %s", e)
        raise TokenInvalidError("Token could not be decoded") from e


def extract_user(token: str) -> TokenUser:
    """Read the user claims from a token.

    Raises:
        TokenInvalidError: If the token cannot be decoded or carries no ``oid``.
    """
    payload = decode_token(token)

    user_id = payload.get("oid")
    if not user_id:
        raise TokenInvalidError("Token has no object id (oid)")

    email = payload.get("preferred_username") or payload.get("upn") or payload.get("email") or ""
    name = payload.get("name") or email or UNKNOWN_USER
    exp = payload.get("exp")

    return TokenUser(
        id=str(user_id),
        name=str(name),
        email=str(email),
        expires_at=int(exp) if isinstance(exp, (int, float)) else 0,
    )


def is_token_expired(token: str, *, now: float | None = None) -> bool:
    """True if the token expires within the safety buffer.

    Undecodable tokens and tokens without ``exp`` count as expired.
    """
    try:
        user = extract_user(token)
    except TokenInvalidError:
        return True
    if not user.expires_at:
        return True
    now = time.time() if now is None else now
    return user.expires_at < int(now) + EXPIRY_BUFFER_SECONDS


def time_remaining(token: str, *, now: float | None = None) -> str:
    """Human readable validity left on the token."""
    try:
        user = extract_user(token)
    except TokenInvalidError:
        return "Unknown"
    if not user.expires_at:
        return "Unknown"

    now = time.time() if now is None else now
    remaining = user.expires_at - int(now)
    if remaining <= 0:
        return "Expired"

    minutes = remaining // 60
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60} h {minutes % 60} min"
