from __future__ import annotations

from .gateway import ObjectStoreGateway
from .procedures import (
    EMPTY_RESULT_MESSAGE,
    ProcedureEmpty,
    ProcedureError,
    ProcedureValue,
    RemoteProcedureGateway,
)
from .protocols import (
    Contains,
    ObjectStoreTransport,
    ProcedureTransport,
    Record,
    RecordDraft,
    RecordNotFound,
    StoreError,
)

__all__ = [
    "Contains",
    "EMPTY_RESULT_MESSAGE",
    "ObjectStoreGateway",
    "ObjectStoreTransport",
    "ProcedureEmpty",
    "ProcedureError",
    "ProcedureTransport",
    "ProcedureValue",
    "Record",
    "RecordDraft",
    "RecordNotFound",
    "RemoteProcedureGateway",
    "StoreError",
]
