"""Ideenpool event system."""

from ideenpool.events.bus import EventBus
from ideenpool.events.types import EventType

__all__ = ["EventBus", "EventType"]
