"""Tests for the idea engine."""

from __future__ import annotations

from typing import Any

import pytest
from conftest import (
    DETAIL_ANALYSIS_ID,
    MAX_USER_ID,
    QUALITY_CHECK_ID,
    REVISION_ID,
    SUBMITTED_ID,
)

from ideenpool.core.ideas import IdeaEngine, group_by_phase, persons
from ideenpool.errors import NotEditableError, PermissionDeniedError
from ideenpool.events.bus import EventBus
from ideenpool.events.types import EventType
from ideenpool.models.actor import Actor
from ideenpool.models.idea import BpfPhase, Idea, IdeaStatus, IdeaType
from ideenpool.storage.sample import DEMO_USER_ID, SampleStore

NEW_DESCRIPTION = "Die Beschreibung wurde ergänzt und präzisiert."


@pytest.fixture
async def engine(store: SampleStore, bus: EventBus) -> IdeaEngine:
    return IdeaEngine(store, bus)


@pytest.fixture
def events(bus: EventBus) -> list[tuple[EventType, dict[str, Any]]]:
    received: list[tuple[EventType, dict[str, Any]]] = []

    async def _record(event_type: EventType, data: dict[str, Any]) -> None:
        received.append((event_type, data))

    bus.on_all(_record)
    return received


class TestSubmit:
    async def test_submit_and_read_back(
        self, engine: IdeaEngine, demo_actor: Actor, events: list
    ) -> None:
        description = "Zeiterfassung mit der App"
        assert len(description) == 25
        idea = await engine.submit(
            title="Digitale Zeiterfassung",
            description=description,
            actor=demo_actor,
        )
        assert idea.status == IdeaStatus.EINGEREICHT
        assert idea.type == IdeaType.IDEE
        assert idea.bpf_phase == BpfPhase.INITIALISIERUNG
        assert idea.submitted_by == "Demo User"

        stored = await engine.get(idea.id)
        assert stored is not None
        assert stored.title == "Digitale Zeiterfassung"
        assert stored.description == description
        assert stored.status == IdeaStatus.EINGEREICHT
        assert stored.submitted_by_id == DEMO_USER_ID

        listed = await engine.list_ideas()
        assert idea.id in {i.id for i in listed}
        assert events[0][0] == EventType.IDEA_SUBMITTED

    async def test_title_too_short(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        with pytest.raises(ValueError, match="Titel"):
            await engine.submit(
                title="App", description="Zeiterfassung per App erfassen", actor=demo_actor
            )

    async def test_description_too_short(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        with pytest.raises(ValueError, match="mindestens 20 Zeichen"):
            await engine.submit(
                title="Digitale Zeiterfassung", description="Zu kurz", actor=demo_actor
            )

    async def test_description_too_long(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        with pytest.raises(ValueError, match="maximal 4000"):
            await engine.submit(
                title="Digitale Zeiterfassung", description="x" * 4001, actor=demo_actor
            )

    async def test_bounds_are_inclusive(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        idea = await engine.submit(title="x" * 5, description="y" * 20, actor=demo_actor)
        assert idea.title == "xxxxx"
        idea = await engine.submit(title="x" * 200, description="y" * 4000, actor=demo_actor)
        assert len(idea.description) == 4000

    async def test_rejected_input_is_not_stored(
        self, engine: IdeaEngine, demo_actor: Actor
    ) -> None:
        before = len(await engine.list_ideas())
        with pytest.raises(ValueError):
            await engine.submit(title="App", description="Zu kurz", actor=demo_actor)
        assert len(await engine.list_ideas()) == before


class TestRead:
    async def test_get_missing(self, engine: IdeaEngine) -> None:
        assert await engine.get("00000000-0000-0000-0000-000000000000") is None

    async def test_list_newest_first(self, engine: IdeaEngine) -> None:
        ideas = await engine.list_ideas()
        assert [i.id for i in ideas] == [
            SUBMITTED_ID,
            REVISION_ID,
            QUALITY_CHECK_ID,
            DETAIL_ANALYSIS_ID,
        ]

    async def test_search(self, engine: IdeaEngine) -> None:
        ideas = await engine.list_ideas(search="  OCR ")
        assert [i.id for i in ideas] == [DETAIL_ANALYSIS_ID]

    async def test_search_matches_submitter(self, engine: IdeaEngine) -> None:
        ideas = await engine.list_ideas(search="anna")
        assert [i.submitted_by for i in ideas] == ["Anna Beispiel"]

    async def test_blank_search_keeps_everything(self, engine: IdeaEngine) -> None:
        assert len(await engine.list_ideas(search="   ")) == 4

    async def test_filter_by_phase(self, engine: IdeaEngine) -> None:
        ideas = await engine.list_ideas(phases=[BpfPhase.ANALYSE_BEWERTUNG])
        assert [i.id for i in ideas] == [DETAIL_ANALYSIS_ID]

    async def test_filter_by_type(self, engine: IdeaEngine) -> None:
        assert len(await engine.list_ideas(types=[IdeaType.IDEE])) == 4
        assert await engine.list_ideas(types=[IdeaType.PROJEKT]) == []

    async def test_filter_by_person(self, engine: IdeaEngine) -> None:
        ideas = await engine.list_ideas(person="Demo User")
        assert {i.id for i in ideas} == {SUBMITTED_ID, REVISION_ID}

    async def test_revision_queue(self, engine: IdeaEngine) -> None:
        ideas = await engine.revision_queue()
        assert [i.id for i in ideas] == [REVISION_ID]
        assert ideas[0].status == IdeaStatus.IN_UEBERARBEITUNG


class TestEditDescription:
    async def test_edit_submitted_idea(
        self, engine: IdeaEngine, demo_actor: Actor, events: list
    ) -> None:
        idea = await engine.edit_description(SUBMITTED_ID, NEW_DESCRIPTION, demo_actor)
        assert idea is not None
        assert idea.description == NEW_DESCRIPTION
        assert idea.status == IdeaStatus.EINGEREICHT
        assert [e[0] for e in events] == [EventType.IDEA_DESCRIPTION_UPDATED]

    async def test_edit_resubmits_revision(
        self, engine: IdeaEngine, demo_actor: Actor, events: list
    ) -> None:
        idea = await engine.edit_description(REVISION_ID, NEW_DESCRIPTION, demo_actor)
        assert idea is not None
        assert idea.status == IdeaStatus.EINGEREICHT
        assert idea.bpf_phase == BpfPhase.INITIALISIERUNG
        assert [e[0] for e in events] == [
            EventType.IDEA_DESCRIPTION_UPDATED,
            EventType.IDEA_STATUS_RESET,
        ]
        assert await engine.revision_queue() == []

    async def test_not_owner(self, engine: IdeaEngine, other_actor: Actor) -> None:
        with pytest.raises(PermissionDeniedError):
            await engine.edit_description(SUBMITTED_ID, NEW_DESCRIPTION, other_actor)

    async def test_not_editable_status(self, engine: IdeaEngine, other_actor: Actor) -> None:
        with pytest.raises(NotEditableError):
            await engine.edit_description(QUALITY_CHECK_ID, NEW_DESCRIPTION, other_actor)
        idea = await engine.get(QUALITY_CHECK_ID)
        assert idea is not None
        assert idea.description != NEW_DESCRIPTION

    async def test_invalid_description(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        with pytest.raises(ValueError):
            await engine.edit_description(SUBMITTED_ID, "Zu kurz", demo_actor)

    async def test_missing_idea(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        result = await engine.edit_description(
            "00000000-0000-0000-0000-000000000000", NEW_DESCRIPTION, demo_actor
        )
        assert result is None


class TestSubscriptions:
    async def test_subscribe(
        self, engine: IdeaEngine, demo_actor: Actor, events: list
    ) -> None:
        idea = await engine.subscribe(QUALITY_CHECK_ID, demo_actor)
        assert idea is not None
        assert idea.subscriber_id == DEMO_USER_ID
        assert idea.subscriber == "Demo User"
        assert events[-1][0] == EventType.IDEA_SUBSCRIBED

    async def test_subscribe_twice_is_a_no_op(
        self, engine: IdeaEngine, demo_actor: Actor, events: list
    ) -> None:
        await engine.subscribe(QUALITY_CHECK_ID, demo_actor)
        await engine.subscribe(QUALITY_CHECK_ID, demo_actor)
        assert len(events) == 1

    async def test_subscribe_without_platform_user(self, engine: IdeaEngine) -> None:
        actor = Actor(directory_id="unknown", name="Gast")
        with pytest.raises(PermissionDeniedError):
            await engine.subscribe(QUALITY_CHECK_ID, actor)

    async def test_unsubscribe(self, engine: IdeaEngine, demo_actor: Actor) -> None:
        await engine.subscribe(QUALITY_CHECK_ID, demo_actor)
        idea = await engine.unsubscribe(QUALITY_CHECK_ID, demo_actor)
        assert idea is not None
        assert idea.subscriber_id is None
        assert idea.subscriber is None

    async def test_submitter_cannot_unsubscribe(
        self, engine: IdeaEngine, demo_actor: Actor
    ) -> None:
        with pytest.raises(PermissionDeniedError, match="Submitters"):
            await engine.unsubscribe(SUBMITTED_ID, demo_actor)

    async def test_unsubscribe_when_not_subscribed(
        self, engine: IdeaEngine, other_actor: Actor
    ) -> None:
        with pytest.raises(PermissionDeniedError, match="not subscribed"):
            await engine.unsubscribe(SUBMITTED_ID, other_actor)

    async def test_subscribe_missing_idea(self, engine: IdeaEngine, other_actor: Actor) -> None:
        assert await engine.subscribe("00000000-0000-0000-0000-000000000000", other_actor) is None


def _make(title: str, status: IdeaStatus, phase: BpfPhase | None, by: str = "Max") -> Idea:
    return Idea(title=title, submitted_by=by, status=status, bpf_phase=phase)


class TestGrouping:
    def test_phases_in_workflow_order(self) -> None:
        ideas = [
            _make("Rejected", IdeaStatus.ABGELEHNT, None),
            _make("Building", IdeaStatus.IN_UMSETZUNG, BpfPhase.UMSETZUNG),
            _make("Review", IdeaStatus.IN_QUALITAETSPRUEFUNG, BpfPhase.INITIALISIERUNG),
            _make("New", IdeaStatus.EINGEREICHT, BpfPhase.INITIALISIERUNG),
        ]
        groups = group_by_phase(ideas)
        assert list(groups) == [BpfPhase.INITIALISIERUNG, BpfPhase.UMSETZUNG, None]
        assert [i.title for i in groups[BpfPhase.INITIALISIERUNG]] == ["New", "Review"]

    def test_empty(self) -> None:
        assert group_by_phase([]) == {}

    def test_persons(self) -> None:
        ideas = [
            _make("A", IdeaStatus.EINGEREICHT, None, by="Max Muster"),
            _make("B", IdeaStatus.EINGEREICHT, None, by="Anna Beispiel"),
            _make("C", IdeaStatus.EINGEREICHT, None, by="Max Muster"),
        ]
        assert persons(ideas) == ["Anna Beispiel", "Max Muster"]


async def test_store_attributes_new_ideas_to_its_user(bus: EventBus, other_actor: Actor) -> None:
    store = SampleStore(user_id=MAX_USER_ID)
    engine = IdeaEngine(store, bus)
    idea = await engine.submit(
        title="Automatisierte Rechnungsverarbeitung",
        description="Rechnungen mit OCR automatisch erfassen.",
        actor=other_actor,
    )
    stored = await engine.get(idea.id)
    assert stored is not None
    assert stored.submitted_by == "Max Muster"
    assert stored.submitted_by_id == MAX_USER_ID
