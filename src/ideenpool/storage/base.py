"""Abstract access to the platform's idea table."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IdeaStore(ABC):
    """Abstract interface for idea record stores.

    Stores speak the platform's wire format: records are dicts keyed by
    platform field names. Translation to the domain model happens in
    ``ideenpool.core.mapper``.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections."""

    @abstractmethod
    async def close(self) -> None:
        """Close all connections."""

    @abstractmethod
    async def list_records(self, *, status_code: int | None = None) -> list[dict[str, Any]]:
        """List idea records, newest first, optionally only those with a status code."""

    @abstractmethod
    async def get_record(self, record_id: str) -> dict[str, Any] | None:
        """Get a record by ID. Returns None if not found."""

    @abstractmethod
    async def insert_record(self, body: dict[str, Any]) -> str:
        """Create a record. Returns the new record's ID."""

    @abstractmethod
    async def patch_record(self, record_id: str, body: dict[str, Any]) -> None:
        """Partially update a record."""

    @abstractmethod
    async def find_user_id(self, directory_id: str) -> str | None:
        """Resolve a directory object id to the platform's user id."""
