"""Idea model with lifecycle status, type, and workflow phase."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError


class IdeaStatus(StrEnum):
    """Lifecycle status, in display order."""

    EINGEREICHT = "eingereicht"
    IN_QUALITAETSPRUEFUNG = "in Qualitätsprüfung"
    IN_UEBERARBEITUNG = "in Überarbeitung"
    IN_DETAILANALYSE = "in Detailanalyse"
    ITOT_BOARD_VORGESTELLT = "ITOT-Board vorgestellt"
    PROJEKTPORTFOLIO_AUFGENOMMEN = "Projektportfolio aufgenommen"
    QUARTALSPLANUNG_AUFGENOMMEN = "Quartalsplanung aufgenommen"
    WOCHENPLANUNG_AUFGENOMMEN = "Wochenplanung aufgenommen"
    IN_UMSETZUNG = "in Umsetzung"
    ABGESCHLOSSEN = "abgeschlossen"
    ABGELEHNT = "abgelehnt"


INITIAL_STATUS = IdeaStatus.EINGEREICHT
REVISION_STATUS = IdeaStatus.IN_UEBERARBEITUNG


class IdeaType(StrEnum):
    IDEE = "Idee"
    VORHABEN = "Vorhaben"
    PROJEKT = "Projekt"


DEFAULT_TYPE = IdeaType.IDEE


class BpfPhase(StrEnum):
    """Business process flow stages, in workflow order."""

    INITIALISIERUNG = "Initialisierung"
    ANALYSE_BEWERTUNG = "Analyse & Bewertung"
    PLANUNG = "Planung"
    UMSETZUNG = "Umsetzung"


TITLE_MIN, TITLE_MAX = 5, 200
DESCRIPTION_MIN, DESCRIPTION_MAX = 20, 4000


def _check_length(value: str, minimum: int, maximum: int, noun: str) -> str:
    if len(value) < minimum:
        raise PydanticCustomError(
            "too_short", f"{noun} muss mindestens {minimum} Zeichen lang sein."
        )
    if len(value) > maximum:
        raise PydanticCustomError(
            "too_long", f"{noun} darf maximal {maximum} Zeichen lang sein."
        )
    return value


class EditIdeaInput(BaseModel):
    """What an end user may change on an existing idea: the description only."""

    description: str

    @field_validator("description")
    @classmethod
    def _description_length(cls, v: str) -> str:
        return _check_length(v, DESCRIPTION_MIN, DESCRIPTION_MAX, "Die Beschreibung")


class CreateIdeaInput(EditIdeaInput):
    """Fields a user fills in when submitting a new idea."""

    title: str

    @field_validator("title")
    @classmethod
    def _title_length(cls, v: str) -> str:
        return _check_length(v, TITLE_MIN, TITLE_MAX, "Der Titel")


class Idea(BaseModel):
    """A digitalization idea as read from the platform."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    description: str = ""
    submitted_by: str
    submitted_by_id: str | None = None
    type: IdeaType | None = None
    status: IdeaStatus = INITIAL_STATUS
    bpf_phase: BpfPhase | None = None
    responsible_person: str | None = None
    subscriber: str | None = None
    subscriber_id: str | None = None

    # Initial review
    initial_review_reason: str | None = None
    initial_review_date: str | None = None

    # Detail analysis
    complexity: str | None = None
    criticality: str | None = None
    priority: str | None = None
    detail_analysis_result: str | None = None
    detail_analysis_benefit: str | None = None
    detail_analysis_effort: float | None = None

    # ITOT board
    itot_board_reason: str | None = None
    itot_board_meeting: str | None = None
    itot_board_meeting_id: str | None = None

    # Planning
    planned_start: str | None = None
    planned_end: str | None = None

    # Closing
    completed_on: str | None = None
    rejected_on: str | None = None

    created_on: str | None = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    modified_on: str | None = None

    def to_response(self, *, detail: str = "summary") -> dict:
        data = {
            "_v": "1.0",
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "type": self.type,
            "phase": self.bpf_phase,
            "submitted_by": self.submitted_by,
        }
        if detail != "summary":
            data.update(
                self.model_dump(
                    exclude={"id", "title", "status", "type", "bpf_phase", "submitted_by"}
                )
            )
        return data
