"""The user on whose behalf an operation runs."""

from __future__ import annotations

from pydantic import BaseModel


class Actor(BaseModel):
    """Current user.

    ``directory_id`` is the directory object id from the token. ``user_id`` is
    the platform's own user id for the same person, or None when the platform
    does not know them.
    """

    directory_id: str
    name: str
    email: str = ""
    user_id: str | None = None
