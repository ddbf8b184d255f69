"""Record mapper between Dataverse rows and the Idea model.

Dataverse returns lookups and choices as raw ids/codes. With the
``odata.include-annotations="*"`` preference it also returns a display value
for each of them under ``<field>@OData.Community.Display.V1.FormattedValue``.
The mapper prefers the display value, falls back to the raw value, and uses a
fixed placeholder where a value is required.
"""

from __future__ import annotations

import re
from typing import Any

from ideenpool.core.status import (
    code_for_status,
    code_for_type,
    phase_for_status,
    status_from_code,
    type_from_value,
)
from ideenpool.errors import PlatformError
from ideenpool.models.idea import (
    DEFAULT_TYPE,
    INITIAL_STATUS,
    REVISION_STATUS,
    BpfPhase,
    CreateIdeaInput,
    Idea,
    IdeaStatus,
)

UNKNOWN = "Unknown"
FORMATTED_SUFFIX = "@OData.Community.Display.V1.FormattedValue"

FIELD_MAP: dict[str, str] = {
    "id": "cr6df_sgsw_digitalisierungsvorhabenid",
    "title": "cr6df_name",
    "description": "cr6df_beschreibung",
    "type": "cr6df_typ",
    "status": "cr6df_lifecyclestatus",
    "bpf_phase": "_stageid_value",
    "idea_giver": "_cr6df_ideengeber_value",
    "created_by": "_createdby_value",
    "responsible_person": "_cr6df_verantwortlicher_value",
    "subscriber": "_cr6df_abonnenten_value",
    "initial_review_reason": "cr6df_initalbewertung_begruendung",
    "initial_review_date": "cr6df_initialgeprueft_am",
    "complexity": "cr6df_komplexitaet",
    "criticality": "cr6df_kritikalitaet",
    "priority": "cr6df_prioritat",
    "detail_analysis_result": "cr6df_detailanalyse_ergebnis",
    "detail_analysis_benefit": "cr6df_detailanalyse_nutzen",
    "detail_analysis_effort": "cr6df_detailanalyse_personentage",
    "itot_board_reason": "cr6df_itotboard_begruendung",
    "itot_board_meeting": "_cr6df_itotboardsitzung_value",
    "planned_start": "cr6df_planung_geplanterstart",
    "planned_end": "cr6df_planung_geplantesende",
    "completed_on": "cr6df_abgeschlossen_am",
    "rejected_on": "cr6df_abgelehnt_am",
    "created_on": "createdon",
    "modified_on": "modifiedon",
}

SUBSCRIBER_BIND = "cr6df_abonnenten@odata.bind"

_TEXT_FIELDS = (
    "initial_review_reason",
    "initial_review_date",
    "detail_analysis_result",
    "detail_analysis_benefit",
    "itot_board_reason",
    "planned_start",
    "planned_end",
    "completed_on",
    "rejected_on",
    "modified_on",
)
_CHOICE_FIELDS = ("complexity", "criticality", "priority")

_ENTITY_ID = re.compile(r"\(([^)]+)\)\s*$")


def formatted_key(platform_field: str) -> str:
    return platform_field + FORMATTED_SUFFIX


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _raw(record: dict[str, Any], name: str) -> Any:
    value = record.get(FIELD_MAP[name])
    return value if _present(value) else None


def _text(record: dict[str, Any], name: str) -> str | None:
    value = _raw(record, name)
    return None if value is None else str(value)


def _display(record: dict[str, Any], name: str, default: str | None = None) -> str | None:
    """Formatted value, then raw value, then ``default``."""
    platform_field = FIELD_MAP[name]
    formatted = record.get(formatted_key(platform_field))
    if _present(formatted):
        return str(formatted)
    raw = record.get(platform_field)
    if _present(raw):
        return str(raw)
    return default


def _number(record: dict[str, Any], name: str) -> float | None:
    value = _raw(record, name)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _phase(record: dict[str, Any], status: IdeaStatus) -> BpfPhase | None:
    stage = record.get(formatted_key(FIELD_MAP["bpf_phase"]))
    if _present(stage):
        try:
            return BpfPhase(stage)
        except ValueError:
            pass
    return phase_for_status(status)


def record_to_idea(record: dict[str, Any]) -> Idea:
    """Flatten a Dataverse row into an Idea.

    Raises:
        PlatformError: If the row has no primary id.
    """
    status = status_from_code(record.get(FIELD_MAP["status"]))

    idea_type = type_from_value(record.get(formatted_key(FIELD_MAP["type"])))
    if idea_type is None:
        idea_type = type_from_value(record.get(FIELD_MAP["type"]))

    submitted_by = record.get(formatted_key(FIELD_MAP["idea_giver"]))
    if not _present(submitted_by):
        submitted_by = _display(record, "created_by", UNKNOWN)

    values: dict[str, Any] = {
        "title": _text(record, "title") or "",
        "description": _text(record, "description") or "",
        "submitted_by": str(submitted_by),
        "submitted_by_id": _text(record, "created_by"),
        "type": idea_type,
        "status": status,
        "bpf_phase": _phase(record, status),
        "responsible_person": _display(record, "responsible_person"),
        "subscriber": _display(record, "subscriber"),
        "subscriber_id": _text(record, "subscriber"),
        "detail_analysis_effort": _number(record, "detail_analysis_effort"),
        "itot_board_meeting": _display(record, "itot_board_meeting"),
        "itot_board_meeting_id": _text(record, "itot_board_meeting"),
    }
    for name in _TEXT_FIELDS:
        values[name] = _text(record, name)
    for name in _CHOICE_FIELDS:
        values[name] = _display(record, name)

    record_id = _text(record, "id")
    if not record_id:
        raise PlatformError(None, "Record carries no id")
    values["id"] = record_id
    values["created_on"] = _text(record, "created_on")

    return Idea(**values)


def create_payload(data: CreateIdeaInput) -> dict[str, Any]:
    """Body for creating an idea. The platform sets creator and timestamps."""
    return {
        FIELD_MAP["title"]: data.title,
        FIELD_MAP["description"]: data.description,
        FIELD_MAP["type"]: code_for_type(DEFAULT_TYPE),
    }


def description_patch(description: str, current_status: IdeaStatus | None) -> dict[str, Any]:
    """Body for a description edit.

    Editing an idea that was sent back for revision resubmits it.
    """
    body: dict[str, Any] = {FIELD_MAP["description"]: description}
    if current_status == REVISION_STATUS:
        body[FIELD_MAP["status"]] = code_for_status(INITIAL_STATUS)
    return body


def subscriber_patch(user_id: str | None) -> dict[str, Any]:
    if user_id:
        return {SUBSCRIBER_BIND: f"/systemusers({user_id})"}
    return {SUBSCRIBER_BIND: None}


def entity_id_from_location(header: str | None) -> str | None:
    """Extract the GUID from an ``OData-EntityId`` header value."""
    if not header:
        return None
    match = _ENTITY_ID.search(header)
    return match.group(1) if match else None
