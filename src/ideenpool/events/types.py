"""Idea lifecycle events emitted by the engine."""

from enum import StrEnum


class EventType(StrEnum):
    IDEA_SUBMITTED = "idea.submitted"
    IDEA_DESCRIPTION_UPDATED = "idea.description_updated"
    IDEA_STATUS_RESET = "idea.status_reset"
    IDEA_SUBSCRIBED = "idea.subscribed"
    IDEA_UNSUBSCRIBED = "idea.unsubscribed"
