from __future__ import annotations

import json
import logging
import secrets
import sqlite3
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..meta_keys import (
    GET_MUSIC_PROCEDURE,
    MUSIC_ID,
    MUSIC_LRC,
    MUSIC_NAME,
    MUSIC_SONG,
    MUSIC_TABLE,
)
from .protocols import Contains, Record, RecordDraft, RecordNotFound, StoreError

logger = logging.getLogger(__name__)


def _new_object_id() -> str:
    return secrets.token_hex(12)


class SqliteObjectStore:
    """Schema-less object store kept in a single SQLite table.

    Records are JSON field maps keyed by (collection, object_id). Saving with
    an id merges the given fields into the stored map.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS objects (
                collection TEXT NOT NULL,
                object_id TEXT NOT NULL,
                fields TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY(collection, object_id)
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def save(self, draft: RecordDraft) -> str:
        try:
            payload = json.dumps(draft.fields)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"{draft.collection} fields are not serializable: {exc}") from exc
        with self._lock:
            try:
                if draft.is_insert:
                    object_id = _new_object_id()
                    self._conn.execute(
                        """
                        INSERT INTO objects(collection, object_id, fields, created_at, updated_at)
                        VALUES(?, ?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                        """,
                        (draft.collection, object_id, payload),
                    )
                else:
                    object_id = draft.object_id
                    row = self._conn.execute(
                        "SELECT fields FROM objects WHERE collection = ? AND object_id = ?",
                        (draft.collection, object_id),
                    ).fetchone()
                    if not row:
                        raise RecordNotFound(draft.collection, object_id)
                    merged = json.loads(row[0])
                    merged.update(draft.fields)
                    self._conn.execute(
                        """
                        UPDATE objects SET fields = ?, updated_at = CURRENT_TIMESTAMP
                        WHERE collection = ? AND object_id = ?
                        """,
                        (json.dumps(merged), draft.collection, object_id),
                    )
                self._conn.commit()
            except sqlite3.Error as exc:
                raise StoreError(f"{draft.collection} save failed: {exc}") from exc
        return object_id

    def fetch(self, collection: str, object_id: str) -> Record:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT fields FROM objects WHERE collection = ? AND object_id = ?",
                    (collection, object_id),
                ).fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"{collection} fetch failed: {exc}") from exc
        if not row:
            raise RecordNotFound(collection, object_id)
        return Record(object_id, json.loads(row[0]))

    def list(self, collection: str, predicate: Optional[Contains] = None) -> List[Record]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT object_id, fields FROM objects WHERE collection = ? ORDER BY rowid",
                    (collection,),
                ).fetchall()
            except sqlite3.Error as exc:
                raise StoreError(f"{collection} query failed: {exc}") from exc
        records = [Record(row[0], json.loads(row[1])) for row in rows]
        if predicate is None:
            return records
        return [record for record in records if predicate.matches(record)]

    def count(self, collection: str) -> int:
        with self._lock:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM objects WHERE collection = ?", (collection,)
            ).fetchone()
        return int(row[0])


Procedure = Callable[[Mapping[str, Any]], Any]


class LocalProcedures:
    """In-process stand-in for server-side functions."""

    def __init__(self) -> None:
        self._procedures: Dict[str, Procedure] = {}

    def register(self, name: str, fn: Procedure) -> None:
        self._procedures[name] = fn

    def call(self, name: str, params: Mapping[str, Any]) -> Any:
        fn = self._procedures.get(name)
        if fn is None:
            raise StoreError(f"procedure {name} is not defined")
        logger.debug("Running local procedure %s", name)
        return fn(params)


def get_music_procedure(store: SqliteObjectStore) -> Procedure:
    """Serve lyric documents from the local music catalog."""

    def get_music(params: Mapping[str, Any]) -> Optional[str]:
        music_id = params.get("id")
        if music_id is None:
            raise StoreError("400 Bad Request")
        for record in store.list(MUSIC_TABLE):
            if record.get(MUSIC_ID) != music_id:
                continue
            return json.dumps(
                {
                    "id": music_id,
                    "name": record.get(MUSIC_NAME) or "",
                    "song": record.get(MUSIC_SONG) or "",
                    "lrc": record.get(MUSIC_LRC) or "",
                }
            )
        return None

    return get_music


def default_procedures(store: SqliteObjectStore) -> LocalProcedures:
    procedures = LocalProcedures()
    procedures.register(GET_MUSIC_PROCEDURE, get_music_procedure(store))
    return procedures
