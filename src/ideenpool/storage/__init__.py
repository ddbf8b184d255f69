"""Ideenpool storage layer."""

from __future__ import annotations

from ideenpool.config import Config
from ideenpool.errors import ConfigurationError
from ideenpool.storage.base import IdeaStore
from ideenpool.storage.dataverse import DataverseStore
from ideenpool.storage.sample import SampleStore


def open_store(config: Config, token: str | None) -> IdeaStore:
    """Pick the store for a configuration.

    Demo mode must be switched on explicitly; a missing URL or token is an
    error otherwise.
    """
    if config.demo_mode:
        return SampleStore()
    if not config.platform_url:
        raise ConfigurationError(
            "DATAVERSE_URL is not set. Configure it, or enable demo mode"
            " with IDEENPOOL_DEMO_MODE=1."
        )
    if not token:
        raise ConfigurationError(
            "No access token. Paste one with 'ideenpool token set' or set"
            " DATAVERSE_ACCESS_TOKEN."
        )
    return DataverseStore(config, token)


__all__ = ["DataverseStore", "IdeaStore", "SampleStore", "open_store"]
