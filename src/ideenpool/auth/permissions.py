"""Ownership and subscription checks for ideas.

Identity is decided by one mechanism only: the platform's opaque user id.
The actor's id is resolved from the token's directory id once per session;
names and e-mail addresses are never compared.
"""

from __future__ import annotations

from ideenpool.core.visibility import is_field_editable
from ideenpool.models.actor import Actor
from ideenpool.models.idea import Idea


def same_user(a: str | None, b: str | None) -> bool:
    """Compare two platform user ids. GUIDs are case-insensitive."""
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def is_owner(actor: Actor, idea: Idea) -> bool:
    """Check if the actor submitted the idea."""
    return same_user(actor.user_id, idea.submitted_by_id)


def can_edit(actor: Actor, idea: Idea, field_name: str = "description") -> bool:
    """Check if the actor may edit a field of the idea right now."""
    return is_owner(actor, idea) and is_field_editable(idea.status, field_name)


def is_subscribed(actor: Actor, idea: Idea) -> bool:
    """Check if the actor is the idea's subscriber."""
    return same_user(actor.user_id, idea.subscriber_id)


def can_unsubscribe(actor: Actor, idea: Idea) -> bool:
    """Check if the actor may drop the subscription. Submitters stay subscribed."""
    return is_subscribed(actor, idea) and not is_owner(actor, idea)
