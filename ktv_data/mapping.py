from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .meta_keys import (
    MUSIC_ID,
    MUSIC_NAME,
    MUSIC_TABLE,
    USER_AVATAR,
    USER_NAME,
    USER_TABLE,
)
from .models import LyricTrack, User
from .result import Failure, Result, Success
from .store.protocols import Record, RecordDraft


class MappingError(ValueError):
    pass


class LyricTrackDocument(BaseModel):
    """Wire shape of the document returned by the ``getMusic`` procedure."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    song: str = Field(min_length=1)
    lrc: str = Field(min_length=1)

    def to_track(self) -> LyricTrack:
        return LyricTrack(id=self.id, name=self.name, song=self.song, lrc=self.lrc)


def _require_str(record: Record, collection: str, name: str) -> str:
    value = record.get(name)
    if value is None:
        raise MappingError(f"{collection} record {record.object_id or '?'} is missing field '{name}'")
    if not isinstance(value, str):
        raise MappingError(
            f"{collection} record {record.object_id or '?'} field '{name}' is not a string"
        )
    return value


def to_user(record: Record) -> Result[User]:
    try:
        if not record.object_id:
            raise MappingError(f"{USER_TABLE} record has no object id")
        name = _require_str(record, USER_TABLE, USER_NAME)
        avatar = _require_str(record, USER_TABLE, USER_AVATAR)
    except MappingError as exc:
        return Failure(str(exc))
    return Success(User(id=record.object_id, name=name, avatar=avatar))


def to_lyric_track_summary(record: Record) -> Result[LyricTrack]:
    try:
        music_id = _require_str(record, MUSIC_TABLE, MUSIC_ID)
        name = _require_str(record, MUSIC_TABLE, MUSIC_NAME)
    except MappingError as exc:
        return Failure(str(exc))
    return Success(LyricTrack(id=music_id, name=name))


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "document"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts) or str(exc)


def decode_lyric_track(raw: Any) -> Result[LyricTrack]:
    """Decode a ``getMusic`` payload (JSON text, bytes or a mapping)."""
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            document = LyricTrackDocument.model_validate_json(raw)
        elif isinstance(raw, Mapping):
            document = LyricTrackDocument.model_validate(dict(raw))
        else:
            return Failure(f"could not decode lyric track: unsupported payload type {type(raw).__name__}")
    except ValidationError as exc:
        return Failure(f"could not decode lyric track: {_describe_validation_error(exc)}")
    return Success(document.to_track())


def build_user_record(name: str, avatar: str) -> RecordDraft:
    return RecordDraft(USER_TABLE, {USER_NAME: name, USER_AVATAR: avatar})


def build_rename_record(object_id: str, new_name: str) -> RecordDraft:
    # Only the name is sent; the store keeps every other field as is.
    return RecordDraft(USER_TABLE, {USER_NAME: new_name}, object_id=object_id)
