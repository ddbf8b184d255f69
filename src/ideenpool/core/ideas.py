"""Idea engine.

Submits ideas, reads and filters them, and applies the description edit and
subscription rules. Workflow transitions beyond the revision reset happen in
the platform, never here.
"""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from ideenpool.auth.permissions import can_unsubscribe, is_owner, is_subscribed
from ideenpool.core.mapper import (
    create_payload,
    description_patch,
    record_to_idea,
    subscriber_patch,
)
from ideenpool.core.status import code_for_status, phase_for_status, status_order
from ideenpool.core.visibility import is_field_editable
from ideenpool.errors import NotEditableError, PermissionDeniedError
from ideenpool.events.bus import EventBus
from ideenpool.events.types import EventType
from ideenpool.models.actor import Actor
from ideenpool.models.idea import (
    DEFAULT_TYPE,
    INITIAL_STATUS,
    REVISION_STATUS,
    BpfPhase,
    CreateIdeaInput,
    EditIdeaInput,
    Idea,
    IdeaStatus,
    IdeaType,
)
from ideenpool.storage.base import IdeaStore

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    return ", ".join(e["msg"] for e in error.errors())


class IdeaEngine:
    """Engine for submitting, reading and editing ideas."""

    def __init__(self, store: IdeaStore, event_bus: EventBus) -> None:
        """Initialize the IdeaEngine.

        Args:
            store: Platform store the ideas live in
            event_bus: Event bus for emitting lifecycle events
        """
        self._store = store
        self._event_bus = event_bus

    async def submit(self, *, title: str, description: str, actor: Actor) -> Idea:
        """Submit a new idea.

        Args:
            title: Idea title, 5 to 200 characters
            description: Idea description, 20 to 4000 characters
            actor: The submitting user

        Returns:
            The new Idea with status "eingereicht" and the default type

        Raises:
            ValueError: If title or description are out of bounds
        """
        try:
            data = CreateIdeaInput(title=title, description=description)
        except ValidationError as e:
            raise ValueError(_validation_message(e)) from e

        new_id = await self._store.insert_record(create_payload(data))

        idea = Idea(
            id=new_id,
            title=data.title,
            description=data.description,
            submitted_by=actor.name,
            submitted_by_id=actor.user_id,
            type=DEFAULT_TYPE,
            status=INITIAL_STATUS,
            bpf_phase=phase_for_status(INITIAL_STATUS),
        )
        logger.info(f"Submitted idea: {idea.id} - {idea.title}")

        await self._event_bus.emit(
            EventType.IDEA_SUBMITTED,
            {"idea_id": idea.id, "title": idea.title, "submitted_by": actor.name},
        )
        return idea

    async def get(self, idea_id: str) -> Idea | None:
        """Get an idea by ID, or None if the platform has no such record."""
        record = await self._store.get_record(idea_id)
        if record is None:
            return None
        return record_to_idea(record)

    async def list_ideas(
        self,
        *,
        search: str | None = None,
        types: Iterable[IdeaType] | None = None,
        phases: Iterable[BpfPhase] | None = None,
        person: str | None = None,
        status: IdeaStatus | None = None,
    ) -> list[Idea]:
        """List ideas, newest first.

        Args:
            search: Case-insensitive text matched against title, description
                and submitter
            types: Keep only ideas of these types
            phases: Keep only ideas in these workflow phases
            person: Keep only ideas by this submitter (exact name)
            status: Keep only ideas in this status (filtered by the platform)

        Returns:
            Matching ideas
        """
        status_code = code_for_status(status) if status is not None else None
        records = await self._store.list_records(status_code=status_code)
        ideas = [record_to_idea(r) for r in records]

        if search and search.strip():
            query = search.strip().lower()
            ideas = [
                i
                for i in ideas
                if query in i.title.lower()
                or query in i.description.lower()
                or query in i.submitted_by.lower()
            ]
        if types:
            wanted_types = set(types)
            ideas = [i for i in ideas if i.type in wanted_types]
        if phases:
            wanted_phases = set(phases)
            ideas = [i for i in ideas if i.bpf_phase in wanted_phases]
        if person:
            ideas = [i for i in ideas if i.submitted_by == person]
        return ideas

    async def revision_queue(self) -> list[Idea]:
        """Ideas sent back to their submitters for revision."""
        return await self.list_ideas(status=REVISION_STATUS)

    async def edit_description(
        self, idea_id: str, description: str, actor: Actor
    ) -> Idea | None:
        """Replace an idea's description.

        An idea in "in Überarbeitung" goes back to "eingereicht" with the
        edit; no other status changes.

        Args:
            idea_id: Idea to edit
            description: New description, 20 to 4000 characters
            actor: The editing user

        Returns:
            The updated Idea, or None if not found

        Raises:
            ValueError: If the description is out of bounds
            PermissionDeniedError: If the actor did not submit the idea
            NotEditableError: If the status does not allow description edits
        """
        try:
            data = EditIdeaInput(description=description)
        except ValidationError as e:
            raise ValueError(_validation_message(e)) from e

        current = await self.get(idea_id)
        if current is None:
            return None

        if not is_owner(actor, current):
            raise PermissionDeniedError("Only the submitter can edit this idea")
        if not is_field_editable(current.status, "description"):
            raise NotEditableError(
                f"The description cannot be edited in status '{current.status}'"
            )

        await self._store.patch_record(
            idea_id, description_patch(data.description, current.status)
        )
        logger.info(f"Updated description of idea {idea_id}")

        await self._event_bus.emit(
            EventType.IDEA_DESCRIPTION_UPDATED,
            {"idea_id": idea_id, "status": current.status},
        )
        if current.status == REVISION_STATUS:
            logger.info(f"Idea {idea_id} resubmitted after revision")
            await self._event_bus.emit(
                EventType.IDEA_STATUS_RESET,
                {"idea_id": idea_id, "from": current.status, "to": INITIAL_STATUS},
            )

        return await self.get(idea_id)

    async def subscribe(self, idea_id: str, actor: Actor) -> Idea | None:
        """Make the actor the idea's subscriber.

        Raises:
            PermissionDeniedError: If the actor has no platform user
        """
        if not actor.user_id:
            raise PermissionDeniedError(
                "No platform user found for you. Are you registered in Dataverse?"
            )
        current = await self.get(idea_id)
        if current is None:
            return None
        if is_subscribed(actor, current):
            return current

        await self._store.patch_record(idea_id, subscriber_patch(actor.user_id))
        logger.info(f"Subscribed {actor.user_id} to idea {idea_id}")
        await self._event_bus.emit(
            EventType.IDEA_SUBSCRIBED, {"idea_id": idea_id, "user_id": actor.user_id}
        )
        return await self.get(idea_id)

    async def unsubscribe(self, idea_id: str, actor: Actor) -> Idea | None:
        """Remove the actor's subscription.

        Raises:
            PermissionDeniedError: If the actor is the submitter, or not subscribed
        """
        current = await self.get(idea_id)
        if current is None:
            return None
        if not can_unsubscribe(actor, current):
            if is_owner(actor, current):
                raise PermissionDeniedError("Submitters cannot unsubscribe from their idea")
            raise PermissionDeniedError("You are not subscribed to this idea")

        await self._store.patch_record(idea_id, subscriber_patch(None))
        logger.info(f"Unsubscribed {actor.user_id} from idea {idea_id}")
        await self._event_bus.emit(
            EventType.IDEA_UNSUBSCRIBED, {"idea_id": idea_id, "user_id": actor.user_id}
        )
        return await self.get(idea_id)


def group_by_phase(ideas: Iterable[Idea]) -> dict[BpfPhase | None, list[Idea]]:
    """Group ideas by workflow phase.

    Phases come in workflow order, followed by ``None`` for ideas outside the
    process flow. Empty groups are left out. Inside a phase, ideas are ordered
    by status; the incoming order is kept within a status.
    """
    buckets: dict[BpfPhase | None, list[Idea]] = {p: [] for p in BpfPhase}
    buckets[None] = []
    for idea in ideas:
        buckets[idea.bpf_phase].append(idea)
    return {
        phase: sorted(items, key=lambda i: status_order(i.status))
        for phase, items in buckets.items()
        if items
    }


def persons(ideas: Iterable[Idea]) -> list[str]:
    """Distinct submitter names, sorted."""
    return sorted({i.submitted_by for i in ideas if i.submitted_by})
