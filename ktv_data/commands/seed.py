from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, ConfigDict, Field

from ..meta_keys import MUSIC_ID, MUSIC_LRC, MUSIC_NAME, MUSIC_SONG, MUSIC_TABLE
from ..result import Failure, Result, Success
from ..store.gateway import ObjectStoreGateway
from ..store.protocols import RecordDraft

logger = logging.getLogger(__name__)


class CatalogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    music_id: str = Field(alias=MUSIC_ID)
    name: str
    song: str = ""
    lrc: str = ""
    lrc_file: Path | None = None

    def to_draft(self, base_dir: Path) -> RecordDraft:
        lrc = self.lrc
        if not lrc and self.lrc_file is not None:
            path = self.lrc_file if self.lrc_file.is_absolute() else base_dir / self.lrc_file
            lrc = path.read_text(encoding="utf-8")
        return RecordDraft(
            MUSIC_TABLE,
            {MUSIC_ID: self.music_id, MUSIC_NAME: self.name, MUSIC_SONG: self.song, MUSIC_LRC: lrc},
        )


def load_catalog(path: Path) -> List[CatalogEntry]:
    with path.open("r", encoding="utf-8") as fh:
        raw: Any = yaml.safe_load(fh)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a list of songs")
    return [CatalogEntry.model_validate(item) for item in raw]


async def run(gateway: ObjectStoreGateway, path: Path) -> Result[List[str]]:
    entries = load_catalog(path)
    saved: List[str] = []
    for entry in entries:
        result = await gateway.save(entry.to_draft(path.parent))
        if isinstance(result, Failure):
            return Failure(f"{entry.music_id}: {result.message}")
        saved.append(result.payload)
        logger.info("Added %s (%s)", entry.name, entry.music_id)
    return Success(saved)
