from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

_TS_RE = re.compile(r"\[(\d+):(\d{1,2})(?:[.:](\d{1,3}))?\]")
_TAG_RE = re.compile(r"^\[([a-zA-Z#]+):(.*)\]$")


@dataclass(frozen=True, slots=True)
class LrcLine:
    start_ms: int
    text: str


def _ts_to_ms(mm: str, ss: str, frac: Optional[str]) -> int:
    ms = 0
    if frac:
        if len(frac) == 1:
            ms = int(frac) * 100
        elif len(frac) == 2:
            ms = int(frac) * 10
        else:
            ms = int(frac[:3])
    return (int(mm) * 60 + int(ss)) * 1000 + ms


def format_timestamp(ms: int) -> str:
    """Format milliseconds as mm:ss.xx (centiseconds)."""
    if ms < 0:
        ms = 0
    total_s = ms // 1000
    return f"{total_s // 60:02d}:{total_s % 60:02d}.{(ms % 1000) // 10:02d}"


def _parse_offset(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def parse_lrc(lrc_text: Optional[str]) -> List[LrcLine]:
    """
    Returns the timed lines of an LRC document sorted by start time.
    Supports multiple timestamps per line and the [offset:] tag.
    Ignores metadata tags like [ar:], [ti:], etc.
    """
    if not lrc_text:
        return []
    offset = 0
    timed: list[tuple[int, str]] = []
    for raw_line in lrc_text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        tag = _TAG_RE.match(line)
        if tag:
            if tag.group(1).lower() == "offset":
                offset = _parse_offset(tag.group(2))
            continue
        matches = list(_TS_RE.finditer(line))
        if not matches:
            continue
        text = _TS_RE.sub("", line).strip()
        if not text:
            continue
        for match in matches:
            timed.append((_ts_to_ms(match.group(1), match.group(2), match.group(3)), text))
    # A positive offset shifts lyrics earlier.
    lines = [LrcLine(max(0, start - offset), text) for start, text in timed]
    lines.sort(key=lambda entry: entry.start_ms)
    return lines
