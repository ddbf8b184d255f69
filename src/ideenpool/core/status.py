"""Status mapper: platform option-set codes to domain enums and back."""

from __future__ import annotations

import logging

from ideenpool.models.idea import INITIAL_STATUS, BpfPhase, IdeaStatus, IdeaType

logger = logging.getLogger(__name__)

STATUS_CODES: dict[int, IdeaStatus] = {
    562520000: IdeaStatus.EINGEREICHT,
    562520001: IdeaStatus.IN_QUALITAETSPRUEFUNG,
    562520002: IdeaStatus.IN_UEBERARBEITUNG,
    562520003: IdeaStatus.IN_DETAILANALYSE,
    562520004: IdeaStatus.ABGELEHNT,
    562520005: IdeaStatus.ITOT_BOARD_VORGESTELLT,
    562520006: IdeaStatus.PROJEKTPORTFOLIO_AUFGENOMMEN,
    562520007: IdeaStatus.QUARTALSPLANUNG_AUFGENOMMEN,
    562520008: IdeaStatus.WOCHENPLANUNG_AUFGENOMMEN,
    562520010: IdeaStatus.IN_UMSETZUNG,
    562520011: IdeaStatus.ABGESCHLOSSEN,
}

_CODES_BY_STATUS: dict[IdeaStatus, int] = {s: c for c, s in STATUS_CODES.items()}

TYPE_CODES: dict[int, IdeaType] = {
    562520000: IdeaType.IDEE,
    562520001: IdeaType.VORHABEN,
    562520002: IdeaType.PROJEKT,
}

_CODES_BY_TYPE: dict[IdeaType, int] = {t: c for c, t in TYPE_CODES.items()}

STATUS_PHASES: dict[IdeaStatus, BpfPhase | None] = {
    IdeaStatus.EINGEREICHT: BpfPhase.INITIALISIERUNG,
    IdeaStatus.IN_QUALITAETSPRUEFUNG: BpfPhase.INITIALISIERUNG,
    IdeaStatus.IN_UEBERARBEITUNG: BpfPhase.INITIALISIERUNG,
    IdeaStatus.IN_DETAILANALYSE: BpfPhase.ANALYSE_BEWERTUNG,
    IdeaStatus.ITOT_BOARD_VORGESTELLT: BpfPhase.ANALYSE_BEWERTUNG,
    IdeaStatus.PROJEKTPORTFOLIO_AUFGENOMMEN: BpfPhase.PLANUNG,
    IdeaStatus.QUARTALSPLANUNG_AUFGENOMMEN: BpfPhase.PLANUNG,
    IdeaStatus.WOCHENPLANUNG_AUFGENOMMEN: BpfPhase.PLANUNG,
    IdeaStatus.IN_UMSETZUNG: BpfPhase.UMSETZUNG,
    IdeaStatus.ABGESCHLOSSEN: BpfPhase.UMSETZUNG,
    # Rejected ideas leave the process flow
    IdeaStatus.ABGELEHNT: None,
}

STATUS_LABELS: dict[IdeaStatus, str] = {
    IdeaStatus.EINGEREICHT: "Eingereicht",
    IdeaStatus.IN_QUALITAETSPRUEFUNG: "In Qualitätsprüfung",
    IdeaStatus.IN_UEBERARBEITUNG: "Zur Überarbeitung",
    IdeaStatus.IN_DETAILANALYSE: "In Detailanalyse",
    IdeaStatus.ITOT_BOARD_VORGESTELLT: "ITOT-Board vorgestellt",
    IdeaStatus.PROJEKTPORTFOLIO_AUFGENOMMEN: "In Projektportfolio",
    IdeaStatus.QUARTALSPLANUNG_AUFGENOMMEN: "In Quartalsplanung",
    IdeaStatus.WOCHENPLANUNG_AUFGENOMMEN: "In Wochenplanung",
    IdeaStatus.IN_UMSETZUNG: "In Umsetzung",
    IdeaStatus.ABGESCHLOSSEN: "Abgeschlossen",
    IdeaStatus.ABGELEHNT: "Abgelehnt",
}


def _as_code(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


def status_from_code(value: object) -> IdeaStatus:
    """Map a platform status code to an IdeaStatus.

    Unknown, missing, or malformed codes fall back to the initial status.
    """
    code = _as_code(value)
    status = STATUS_CODES.get(code) if code is not None else None
    if status is None:
        if value is not None:
            logger.debug("Unknown status code %r, defaulting to %s", value, INITIAL_STATUS)
        return INITIAL_STATUS
    return status


def code_for_status(status: IdeaStatus) -> int:
    return _CODES_BY_STATUS[IdeaStatus(status)]


def type_from_value(value: object) -> IdeaType | None:
    """Map a type code or label to an IdeaType. Unknown values give None."""
    if isinstance(value, str):
        try:
            return IdeaType(value)
        except ValueError:
            pass
    code = _as_code(value)
    if code is None:
        return None
    return TYPE_CODES.get(code)


def code_for_type(idea_type: IdeaType) -> int:
    return _CODES_BY_TYPE[IdeaType(idea_type)]


def phase_for_status(status: IdeaStatus) -> BpfPhase | None:
    """Workflow stage a status belongs to, or None outside the process flow."""
    return STATUS_PHASES.get(status)


def status_order(status: IdeaStatus) -> int:
    return list(IdeaStatus).index(status)
