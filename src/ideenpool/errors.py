"""Exception types raised by Ideenpool."""

from __future__ import annotations


class IdeenpoolError(Exception):
    """Base class for all Ideenpool errors."""


class ConfigurationError(IdeenpoolError):
    """Raised when the platform URL or token is missing and demo mode is off."""


class AuthorizationError(IdeenpoolError):
    """Raised when the platform rejects the bearer token (401/403)."""


class PlatformError(IdeenpoolError):
    """Raised when a platform call fails. Carries the platform's own message."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        prefix = f"Dataverse {status}" if status is not None else "Dataverse"
        super().__init__(f"{prefix}: {message}")


class PermissionDeniedError(IdeenpoolError):
    """Raised when the actor may not perform an action on an idea."""


class NotEditableError(IdeenpoolError):
    """Raised when a field is not editable in the idea's current status."""
