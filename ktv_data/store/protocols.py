from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol


class StoreError(Exception):
    """Raised by transports when the remote store reports a failure."""


class RecordNotFound(StoreError):
    def __init__(self, collection: str, object_id: str) -> None:
        super().__init__(f"{collection} record {object_id} not found")
        self.collection = collection
        self.object_id = object_id


@dataclass(frozen=True, slots=True)
class Record:
    object_id: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> Any:
        return self.fields.get(name)


@dataclass(frozen=True, slots=True)
class RecordDraft:
    """Save descriptor: ``object_id`` of ``None`` inserts, otherwise only
    ``fields`` are written onto the existing record."""

    collection: str
    fields: Dict[str, Any]
    object_id: Optional[str] = None

    @property
    def is_insert(self) -> bool:
        return self.object_id is None


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring match on one text field."""

    field: str
    value: str

    def matches(self, record: Record) -> bool:
        candidate = record.get(self.field)
        if not isinstance(candidate, str):
            return False
        return self.value.casefold() in candidate.casefold()


class ObjectStoreTransport(Protocol):
    def save(self, draft: RecordDraft) -> str: ...

    def fetch(self, collection: str, object_id: str) -> Record: ...

    def list(self, collection: str, predicate: Optional[Contains] = None) -> List[Record]: ...


class ProcedureTransport(Protocol):
    def call(self, name: str, params: Mapping[str, Any]) -> Any: ...
