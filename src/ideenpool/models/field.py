"""Field catalogue models for the visibility policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FieldSection(StrEnum):
    GRUNDDATEN = "Grunddaten"
    INITIALPRUEFUNG = "Initialprüfung"
    DETAILANALYSE = "Detailanalyse"
    ITOT_BOARD = "ITOT-Board"
    PLANUNG = "Planung"
    ABSCHLUSS = "Abschluss"
    SYSTEM = "System"


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    label: str
    section: FieldSection
    platform_field: str


@dataclass(frozen=True)
class StatusFieldConfig:
    visible: frozenset[str]
    editable: frozenset[str]
