"""Pasted-token storage and resolution of the current actor."""

from __future__ import annotations

import logging
import os

from ideenpool.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    TokenUser,
    extract_user,
    is_token_expired,
    strip_bearer,
)
from ideenpool.config import Config
from ideenpool.models.actor import Actor
from ideenpool.storage.base import IdeaStore
from ideenpool.storage.sample import DEMO_DIRECTORY_ID

logger = logging.getLogger(__name__)


class TokenStore:
    """Keeps the token a user pasted in, in a private file under the config home."""

    def __init__(self, config: Config) -> None:
        self._path = config.token_path

    def save(self, token: str) -> TokenUser:
        """Validate and store a token.

        Raises:
            TokenInvalidError: If the token cannot be decoded.
            TokenExpiredError: If the token has expired.
        """
        token = strip_bearer(token)
        user = extract_user(token)
        if is_token_expired(token):
            raise TokenExpiredError("Token has expired. Please fetch a new one.")

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(token)
        logger.info("Stored token for %s", user.name)
        return user

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        token = self._path.read_text().strip()
        return token or None

    def clear(self) -> bool:
        if not self._path.exists():
            return False
        self._path.unlink()
        return True


def resolve_token(config: Config) -> str | None:
    """The pasted token if there is one, else the deployment token."""
    return TokenStore(config).load() or config.access_token or None


async def current_actor(config: Config, store: IdeaStore, token: str | None) -> Actor:
    """Build the actor for a session.

    Demo mode without a token acts as the configured demo user.

    Raises:
        TokenInvalidError: If the token cannot be decoded.
        TokenExpiredError: If the token has expired.
    """
    if not token:
        if not config.demo_mode:
            raise TokenInvalidError("No token available")
        user_id = await store.find_user_id(DEMO_DIRECTORY_ID)
        return Actor(
            directory_id=DEMO_DIRECTORY_ID,
            name=config.demo_user_name,
            email=config.demo_user_email,
            user_id=user_id,
        )

    user = extract_user(token)
    if is_token_expired(token):
        raise TokenExpiredError("Token has expired. Please paste a new one.")
    user_id = await store.find_user_id(user.id)
    return Actor(directory_id=user.id, name=user.name, email=user.email, user_id=user_id)
