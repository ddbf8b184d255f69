"""Field visibility policy.

Which fields of an idea are shown, and which may be edited, depends only on
the idea's lifecycle status. Fields accumulate as an idea moves through the
workflow: each stage adds the fields its reviewers fill in. Only the
description is ever editable, and only while the idea is freshly submitted
or sent back for revision.
"""

from __future__ import annotations

from typing import Any

from ideenpool.models.field import FieldDefinition, FieldSection, StatusFieldConfig
from ideenpool.models.idea import Idea, IdeaStatus

FIELD_DEFINITIONS: list[FieldDefinition] = [
    # Grunddaten
    FieldDefinition("title", "Titel", FieldSection.GRUNDDATEN, "cr6df_name"),
    FieldDefinition("description", "Beschreibung", FieldSection.GRUNDDATEN, "cr6df_beschreibung"),
    FieldDefinition("type", "Typ", FieldSection.GRUNDDATEN, "cr6df_typ"),
    FieldDefinition("status", "Lifecycle-Status", FieldSection.GRUNDDATEN, "cr6df_lifecyclestatus"),
    FieldDefinition("bpf_phase", "Phase (BPF)", FieldSection.GRUNDDATEN, "_stageid_value"),
    FieldDefinition(
        "submitted_by", "Eingereicht von", FieldSection.GRUNDDATEN, "_cr6df_ideengeber_value"
    ),
    FieldDefinition(
        "responsible_person",
        "Verantwortliche Person",
        FieldSection.GRUNDDATEN,
        "_cr6df_verantwortlicher_value",
    ),
    # Initialprüfung
    FieldDefinition(
        "initial_review_reason",
        "Initialprüfung Begründung",
        FieldSection.INITIALPRUEFUNG,
        "cr6df_initalbewertung_begruendung",
    ),
    FieldDefinition(
        "initial_review_date",
        "Initialgeprüft am",
        FieldSection.INITIALPRUEFUNG,
        "cr6df_initialgeprueft_am",
    ),
    # Detailanalyse
    FieldDefinition("complexity", "Komplexität", FieldSection.DETAILANALYSE, "cr6df_komplexitaet"),
    FieldDefinition(
        "criticality", "Kritikalität", FieldSection.DETAILANALYSE, "cr6df_kritikalitaet"
    ),
    FieldDefinition("priority", "Priorität", FieldSection.DETAILANALYSE, "cr6df_prioritat"),
    FieldDefinition(
        "detail_analysis_result",
        "Detailanalyse Ergebnis",
        FieldSection.DETAILANALYSE,
        "cr6df_detailanalyse_ergebnis",
    ),
    FieldDefinition(
        "detail_analysis_benefit",
        "Detailanalyse Nutzen",
        FieldSection.DETAILANALYSE,
        "cr6df_detailanalyse_nutzen",
    ),
    FieldDefinition(
        "detail_analysis_effort",
        "Aufwandschätzung",
        FieldSection.DETAILANALYSE,
        "cr6df_detailanalyse_personentage",
    ),
    # ITOT-Board
    FieldDefinition(
        "itot_board_reason",
        "ITOT-Board Begründung",
        FieldSection.ITOT_BOARD,
        "cr6df_itotboard_begruendung",
    ),
    FieldDefinition(
        "itot_board_meeting",
        "ITOT-Board Sitzung",
        FieldSection.ITOT_BOARD,
        "_cr6df_itotboardsitzung_value",
    ),
    # Planung
    FieldDefinition(
        "planned_start", "Geplanter Start", FieldSection.PLANUNG, "cr6df_planung_geplanterstart"
    ),
    FieldDefinition(
        "planned_end", "Geplantes Ende", FieldSection.PLANUNG, "cr6df_planung_geplantesende"
    ),
    # Abschluss
    FieldDefinition(
        "completed_on", "Abgeschlossen am", FieldSection.ABSCHLUSS, "cr6df_abgeschlossen_am"
    ),
    FieldDefinition("rejected_on", "Abgelehnt am", FieldSection.ABSCHLUSS, "cr6df_abgelehnt_am"),
    # System
    FieldDefinition("created_on", "Eingereicht am", FieldSection.SYSTEM, "createdon"),
    FieldDefinition("modified_on", "Zuletzt bearbeitet", FieldSection.SYSTEM, "modifiedon"),
]

SECTION_ORDER: list[FieldSection] = list(FieldSection)

_BASE = (
    "title",
    "description",
    "type",
    "status",
    "bpf_phase",
    "submitted_by",
    "responsible_person",
    "created_on",
    "modified_on",
)
_INITIAL_REVIEW = _BASE + ("initial_review_reason", "initial_review_date")
_DETAIL_ANALYSIS = _INITIAL_REVIEW + (
    "complexity",
    "criticality",
    "priority",
    "detail_analysis_result",
    "detail_analysis_benefit",
    "detail_analysis_effort",
)
_ITOT_BOARD = _DETAIL_ANALYSIS + ("itot_board_reason", "itot_board_meeting")
_PLANNING = _ITOT_BOARD + ("planned_start", "planned_end")


def _config(visible: tuple[str, ...], editable: tuple[str, ...] = ()) -> StatusFieldConfig:
    return StatusFieldConfig(visible=frozenset(visible), editable=frozenset(editable))


FIELD_CONFIG: dict[IdeaStatus, StatusFieldConfig] = {
    IdeaStatus.EINGEREICHT: _config(_BASE, ("description",)),
    IdeaStatus.IN_QUALITAETSPRUEFUNG: _config(_INITIAL_REVIEW),
    IdeaStatus.IN_UEBERARBEITUNG: _config(_INITIAL_REVIEW, ("description",)),
    IdeaStatus.IN_DETAILANALYSE: _config(_DETAIL_ANALYSIS),
    IdeaStatus.ITOT_BOARD_VORGESTELLT: _config(_ITOT_BOARD),
    IdeaStatus.PROJEKTPORTFOLIO_AUFGENOMMEN: _config(_PLANNING),
    IdeaStatus.QUARTALSPLANUNG_AUFGENOMMEN: _config(_PLANNING),
    IdeaStatus.WOCHENPLANUNG_AUFGENOMMEN: _config(_PLANNING),
    IdeaStatus.IN_UMSETZUNG: _config(_PLANNING),
    IdeaStatus.ABGESCHLOSSEN: _config(_PLANNING + ("completed_on",)),
    IdeaStatus.ABGELEHNT: _config(_PLANNING + ("rejected_on",)),
}

_DEFINITIONS_BY_NAME: dict[str, FieldDefinition] = {f.name: f for f in FIELD_DEFINITIONS}


def field_config(status: IdeaStatus) -> StatusFieldConfig:
    return FIELD_CONFIG[IdeaStatus(status)]


def visible_fields(status: IdeaStatus) -> frozenset[str]:
    return field_config(status).visible


def editable_fields(status: IdeaStatus) -> frozenset[str]:
    return field_config(status).editable


def is_field_editable(status: IdeaStatus, field_name: str) -> bool:
    return field_name in editable_fields(status)


def get_field_definition(field_name: str) -> FieldDefinition | None:
    return _DEFINITIONS_BY_NAME.get(field_name)


def fields_by_section() -> dict[FieldSection, list[FieldDefinition]]:
    """Group the field catalogue by section, sections in display order."""
    result: dict[FieldSection, list[FieldDefinition]] = {s: [] for s in SECTION_ORDER}
    for definition in FIELD_DEFINITIONS:
        result[definition.section].append(definition)
    return result


def describe(idea: Idea) -> dict[FieldSection, list[dict[str, Any]]]:
    """Visible fields of an idea with their values, grouped by section.

    Sections without any visible field are omitted.
    """
    config = field_config(idea.status)
    result: dict[FieldSection, list[dict[str, Any]]] = {}
    for section, definitions in fields_by_section().items():
        rows = [
            {
                "name": d.name,
                "label": d.label,
                "value": getattr(idea, d.name),
                "editable": d.name in config.editable,
            }
            for d in definitions
            if d.name in config.visible
        ]
        if rows:
            result[section] = rows
    return result
