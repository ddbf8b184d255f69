"""In-memory sample dataset for demo mode."""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from ideenpool.core.mapper import FIELD_MAP, SUBSCRIBER_BIND, formatted_key
from ideenpool.core.status import code_for_status
from ideenpool.errors import PlatformError
from ideenpool.models.idea import INITIAL_STATUS, IdeaStatus
from ideenpool.storage.base import IdeaStore

logger = logging.getLogger(__name__)

DEMO_DIRECTORY_ID = "00000000-0000-4000-8000-0000000000d0"
DEMO_USER_ID = "d0d0d0d0-0000-4000-8000-000000000001"

# Platform users known to the sample store: directory id -> (user id, name)
SAMPLE_USERS: dict[str, tuple[str, str]] = {
    DEMO_DIRECTORY_ID: (DEMO_USER_ID, "Demo User"),
    "00000000-0000-4000-8000-0000000000a1": (
        "a1a1a1a1-0000-4000-8000-000000000002",
        "Max Muster",
    ),
    "00000000-0000-4000-8000-0000000000a2": (
        "a2a2a2a2-0000-4000-8000-000000000003",
        "Anna Beispiel",
    ),
}


def _user(directory_id: str) -> tuple[str, str]:
    return SAMPLE_USERS[directory_id]


def _lookup(name: str, user: tuple[str, str]) -> dict[str, Any]:
    platform_field = FIELD_MAP[name]
    return {platform_field: user[0], formatted_key(platform_field): user[1]}


def _record(
    record_id: str,
    title: str,
    description: str,
    status: IdeaStatus,
    created_on: str,
    submitter: tuple[str, str],
    **extra: Any,
) -> dict[str, Any]:
    record = {
        FIELD_MAP["id"]: record_id,
        FIELD_MAP["title"]: title,
        FIELD_MAP["description"]: description,
        FIELD_MAP["status"]: code_for_status(status),
        FIELD_MAP["type"]: 562520000,
        formatted_key(FIELD_MAP["type"]): "Idee",
        FIELD_MAP["created_on"]: created_on,
        FIELD_MAP["modified_on"]: created_on,
        **_lookup("created_by", submitter),
        **_lookup("subscriber", submitter),
    }
    record.update(extra)
    return record


def sample_records() -> list[dict[str, Any]]:
    """The demo dataset, in platform wire format."""
    max_muster = _user("00000000-0000-4000-8000-0000000000a1")
    anna = _user("00000000-0000-4000-8000-0000000000a2")
    demo = _user(DEMO_DIRECTORY_ID)
    return [
        _record(
            "550e8400-e29b-41d4-a716-446655440001",
            "Digitale Zeiterfassung per App",
            "Aktuell erfassen wir Arbeitszeiten noch auf Papier oder in Excel. Eine mobile "
            "App würde den Prozess vereinfachen und Fehler reduzieren. Die App sollte "
            "offline funktionieren und sich mit unserem HR-System synchronisieren.",
            IdeaStatus.IN_QUALITAETSPRUEFUNG,
            "2024-11-15T09:30:00Z",
            max_muster,
        ),
        _record(
            "550e8400-e29b-41d4-a716-446655440002",
            "Automatisierte Rechnungsverarbeitung",
            "Eingehende Rechnungen werden manuell in unser System eingegeben. Mit OCR und KI "
            "könnten wir diesen Prozess automatisieren. Das spart Zeit und reduziert "
            "Eingabefehler erheblich.",
            IdeaStatus.IN_DETAILANALYSE,
            "2024-11-10T14:15:00Z",
            anna,
            **{
                FIELD_MAP["initial_review_reason"]: "Hoher Nutzen für die Buchhaltung",
                FIELD_MAP["initial_review_date"]: "2024-11-12",
                FIELD_MAP["complexity"]: 562520001,
                formatted_key(FIELD_MAP["complexity"]): "Mittel",
                FIELD_MAP["detail_analysis_effort"]: 40,
            },
        ),
        _record(
            "550e8400-e29b-41d4-a716-446655440003",
            "Self-Service Portal für Mitarbeitende",
            "Viele HR-Anfragen (Feriensaldo, Lohnabrechnung, Adressänderung) könnten über ein "
            "Portal selbst erledigt werden. Das entlastet die HR-Abteilung und gibt "
            "Mitarbeitenden mehr Autonomie.",
            IdeaStatus.EINGEREICHT,
            "2024-11-20T11:00:00Z",
            demo,
        ),
        _record(
            "550e8400-e29b-41d4-a716-446655440004",
            "Digitales Sitzungsprotokoll",
            "Protokolle werden heute in Word geschrieben und per Mail verteilt. Ein "
            "gemeinsames digitales Protokoll würde Pendenzen sichtbar machen.",
            IdeaStatus.IN_UEBERARBEITUNG,
            "2024-11-18T08:45:00Z",
            demo,
            **{
                FIELD_MAP["initial_review_reason"]: "Bitte Nutzen genauer beschreiben",
                FIELD_MAP["initial_review_date"]: "2024-11-19",
            },
        ),
    ]


class SampleStore(IdeaStore):
    """Idea store serving an in-memory copy of the sample dataset."""

    def __init__(
        self,
        records: list[dict[str, Any]] | None = None,
        *,
        user_id: str = DEMO_USER_ID,
    ) -> None:
        # Records created through this store are attributed to user_id, the way
        # Dataverse attributes them to the token owner.
        self._user_id = user_id
        source = sample_records() if records is None else records
        self._records: dict[str, dict[str, Any]] = {
            r[FIELD_MAP["id"]]: copy.deepcopy(r) for r in source
        }

    async def initialize(self) -> None:
        logger.warning("Demo mode: serving sample data, nothing is saved to Dataverse")

    async def close(self) -> None:
        pass

    async def list_records(self, *, status_code: int | None = None) -> list[dict[str, Any]]:
        records = [
            copy.deepcopy(r)
            for r in self._records.values()
            if status_code is None or r.get(FIELD_MAP["status"]) == status_code
        ]
        records.sort(key=lambda r: r.get(FIELD_MAP["created_on"]) or "", reverse=True)
        return records

    async def get_record(self, record_id: str) -> dict[str, Any] | None:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def insert_record(self, body: dict[str, Any]) -> str:
        new_id = str(uuid.uuid4())
        now = datetime.now(UTC).isoformat()
        record = {
            FIELD_MAP["status"]: code_for_status(INITIAL_STATUS),
            **self._creator(),
            **body,
            FIELD_MAP["id"]: new_id,
            FIELD_MAP["created_on"]: now,
            FIELD_MAP["modified_on"]: now,
        }
        self._records[new_id] = record
        logger.info("Demo mode: created record %s", new_id)
        return new_id

    async def patch_record(self, record_id: str, body: dict[str, Any]) -> None:
        record = self._records.get(record_id)
        if record is None:
            raise PlatformError(404, f"Record {record_id} does not exist")
        for key, value in body.items():
            if key == SUBSCRIBER_BIND:
                self._bind_subscriber(record, value)
            else:
                record[key] = value
        record[FIELD_MAP["modified_on"]] = datetime.now(UTC).isoformat()

    async def find_user_id(self, directory_id: str) -> str | None:
        user = SAMPLE_USERS.get(directory_id)
        return user[0] if user else None

    def _bind_subscriber(self, record: dict[str, Any], bind: str | None) -> None:
        platform_field = FIELD_MAP["subscriber"]
        record.pop(formatted_key(platform_field), None)
        record[platform_field] = None
        if not bind:
            return
        user_id = bind.removeprefix("/systemusers(").removesuffix(")")
        record[platform_field] = user_id
        for known_id, name in SAMPLE_USERS.values():
            if known_id == user_id:
                record[formatted_key(platform_field)] = name

    def _creator(self) -> dict[str, Any]:
        platform_field = FIELD_MAP["created_by"]
        creator: dict[str, Any] = {platform_field: self._user_id}
        for known_id, name in SAMPLE_USERS.values():
            if known_id == self._user_id:
                creator[formatted_key(platform_field)] = name
        return creator
