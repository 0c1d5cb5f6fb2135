"""Candidate store boundary: protocol plus an in-memory implementation.

The production store (document database plus plain-text index) lives
outside this package; anything implementing ``ContactStore`` can back the
ranker.  ``InMemoryContactStore`` serves tests, demos and small deployments.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Protocol

from src.contact_ranking.models import ContactVectorRecord, IndexedContact

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


class ContactStore(Protocol):
    async def list_active_contacts(self, user_id: str) -> list[ContactVectorRecord]: ...

    async def search_index(self, user_id: str, text: str) -> list[IndexedContact]: ...


def build_index_entry(record: ContactVectorRecord) -> IndexedContact:
    payload = record.original_connection
    flags = payload.get("flags") or {}

    def _text(key: str) -> str | None:
        value = payload.get(key)
        return str(value) if value else None

    return IndexedContact(
        id=record.connection_id,
        user_id=record.user_id,
        name=_text("name") or record.connection_id,
        company=_text("company"),
        position=_text("position"),
        location=_text("location"),
        industry=_text("industry"),
        headline=_text("headline"),
        skills=[str(s) for s in payload.get("skills") or record.skills],
        is_open_to_work=flags.get("isOpenToWork"),
        is_hiring=flags.get("isHiring"),
        payload=payload,
    )


class InMemoryContactStore:
    def __init__(
        self,
        records: Iterable[ContactVectorRecord] = (),
        index: Iterable[IndexedContact] | None = None,
    ) -> None:
        self._records = {r.connection_id: r for r in records}
        if index is None:
            index = [build_index_entry(r) for r in self._records.values()]
        self._index = {entry.id: entry for entry in index}

    def put(
        self,
        record: ContactVectorRecord,
        index_entry: IndexedContact | None = None,
    ) -> None:
        """Insert or overwrite a record; the index entry defaults to one derived from it."""
        self._records[record.connection_id] = record
        self._index[record.connection_id] = index_entry or build_index_entry(record)

    def deactivate(self, connection_id: str) -> None:
        record = self._records.get(connection_id)
        if record is not None:
            self._records[connection_id] = record.model_copy(update={"is_active": False})

    async def list_active_contacts(self, user_id: str) -> list[ContactVectorRecord]:
        active = [
            r for r in self._records.values()
            if r.user_id == user_id and r.is_active
        ]
        active.sort(
            key=lambda r: r.last_updated.timestamp() if r.last_updated else float("-inf"),
            reverse=True,
        )
        return active

    async def search_index(self, user_id: str, text: str) -> list[IndexedContact]:
        needle = text.lower().strip()
        if not needle:
            return []
        return [
            entry for entry in self._index.values()
            if entry.user_id == user_id
            and any(needle in field for field in entry.searchable_fields())
        ]


def load_contacts_from_json(data: list[dict]) -> list[ContactVectorRecord]:
    return [ContactVectorRecord.model_validate(item) for item in data]


def load_sample_contacts() -> list[ContactVectorRecord]:
    path = DATA_DIR / "sample_contacts.json"
    with open(path) as f:
        raw = json.load(f)
    records = load_contacts_from_json(raw)
    logger.info("Loaded %d sample contacts from %s", len(records), path.name)
    return records


def load_sample_store() -> InMemoryContactStore:
    return InMemoryContactStore(load_sample_contacts())
