from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .lrc import LrcLine, parse_lrc


@dataclass(slots=True)
class User:
    id: str = ""
    name: str = ""
    avatar: str = ""

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    def to_record(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "avatar": self.avatar}


@dataclass(frozen=True, slots=True)
class LyricTrack:
    """A catalog entry.

    ``song`` and ``lrc`` are only filled by a single-track fetch; search and
    listing return summaries with both left empty.
    """

    id: str
    name: str
    song: str = ""
    lrc: str = ""

    @property
    def is_summary(self) -> bool:
        return not self.song and not self.lrc

    def lines(self) -> List[LrcLine]:
        return parse_lrc(self.lrc)

    def to_record(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "song": self.song, "lrc": self.lrc}
