from __future__ import annotations

from pathlib import Path
from typing import Iterable

from cuesync.core.timecode import format_timestamp
from cuesync.infra.storage import ensure_directory
from cuesync.schemas.cue import Cue

EXPORT_FILENAME = "subtitles.srt"
EXPORT_MIME_TYPE = "text/plain"


def sort_for_export(cues: Iterable[Cue]) -> list[Cue]:
    # sorted() is stable: cues sharing a start keep their store order.
    return sorted(cues, key=lambda cue: cue.start)


def format_srt_block(index: int, cue: Cue) -> str:
    return (
        f"{index}\n"
        f"{format_timestamp(cue.start)} --> {format_timestamp(cue.end)}\n"
        f"{cue.text}\n"
    )


def export_srt(cues: Iterable[Cue]) -> str:
    """Serialize cues to SRT text, numbered by start-time rank."""
    blocks = [
        format_srt_block(index, cue)
        for index, cue in enumerate(sort_for_export(cues), start=1)
    ]
    return "\n".join(blocks)


def write_srt(cues: Iterable[Cue], output_path: Path) -> Path:
    """Write subtitle cues to an SRT file."""
    ensure_directory(output_path.parent)
    with output_path.open("w", encoding="utf-8", newline="\n") as handle:
        handle.write(export_srt(cues))
    return output_path
