"""Shared test fixtures for Ideenpool."""

from __future__ import annotations

import time
from pathlib import Path

import jwt
import pytest

from ideenpool.config import Config
from ideenpool.events.bus import EventBus
from ideenpool.models.actor import Actor
from ideenpool.storage.sample import DEMO_DIRECTORY_ID, DEMO_USER_ID, SampleStore

MAX_DIRECTORY_ID = "00000000-0000-4000-8000-0000000000a1"
MAX_USER_ID = "a1a1a1a1-0000-4000-8000-000000000002"

SUBMITTED_ID = "550e8400-e29b-41d4-a716-446655440003"
REVISION_ID = "550e8400-e29b-41d4-a716-446655440004"
QUALITY_CHECK_ID = "550e8400-e29b-41d4-a716-446655440001"
DETAIL_ANALYSIS_ID = "550e8400-e29b-41d4-a716-446655440002"


def make_token(
    oid: str | None = DEMO_DIRECTORY_ID,
    *,
    name: str | None = "Demo User",
    email: str | None = "demo@example.com",
    exp_minutes: int | None = 60,
) -> str:
    """Build a token shaped like the platform's. The signing key is irrelevant."""
    payload: dict = {}
    if oid is not None:
        payload["oid"] = oid
    if name is not None:
        payload["name"] = name
    if email is not None:
        payload["preferred_username"] = email
    if exp_minutes is not None:
        payload["exp"] = int(time.time()) + exp_minutes * 60
    return jwt.encode(payload, "any-key-will-do-for-unverified-tokens", algorithm="HS256")


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(home=tmp_path, demo_mode=True)


@pytest.fixture
def live_config(tmp_path: Path) -> Config:
    return Config(
        home=tmp_path,
        platform_url="https://org.crm17.dynamics.com",
        access_token="env-token",
    )


@pytest.fixture
async def store() -> SampleStore:
    s = SampleStore()
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def demo_actor() -> Actor:
    return Actor(directory_id=DEMO_DIRECTORY_ID, name="Demo User", user_id=DEMO_USER_ID)


@pytest.fixture
def other_actor() -> Actor:
    return Actor(directory_id=MAX_DIRECTORY_ID, name="Max Muster", user_id=MAX_USER_ID)
