from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence

from cuesync.core.errors import OutOfRangeError, ScriptFormatError
from cuesync.core.session import EditorSession
from cuesync.infra.storage import read_json
from cuesync.schemas.event import (
    AddEvent,
    DeleteEvent,
    ProgressEvent,
    SessionEvent,
    UpdateEvent,
)

logger = logging.getLogger(__name__)

SUPPORTED_EVENT_TYPES: tuple[str, ...] = ("progress", "add", "update", "delete")


@dataclass(frozen=True)
class ReplayResult:
    total: int
    applied: int
    ignored: int
    stale: int
    last_playback_time: float
    overlay: str | None


@dataclass(frozen=True)
class ReplayProgress:
    completed: int
    total: int
    event: SessionEvent


ReplayProgressCallback = Callable[[ReplayProgress], None]


def _require_position(raw: dict[str, Any], index: int) -> int:
    position = raw.get("position")
    if isinstance(position, bool) or not isinstance(position, int):
        raise ScriptFormatError(
            f"Event {index}: 'position' must be an integer, got {position!r}"
        )
    return position


def parse_event(raw: Any, index: int) -> SessionEvent:
    if not isinstance(raw, dict):
        raise ScriptFormatError(f"Event {index}: expected an object, got {type(raw).__name__}")
    event_type = str(raw.get("type", "")).strip().lower()
    if event_type not in SUPPORTED_EVENT_TYPES:
        raise ScriptFormatError(
            f"Event {index}: unsupported type {raw.get('type')!r}. "
            f"Supported: {', '.join(SUPPORTED_EVENT_TYPES)}"
        )
    if event_type == "progress":
        if "played_seconds" not in raw:
            raise ScriptFormatError(f"Event {index}: 'played_seconds' is required")
        return ProgressEvent(played_seconds=raw["played_seconds"])
    if event_type == "add":
        return AddEvent()
    if event_type == "delete":
        return DeleteEvent(position=_require_position(raw, index))
    field = raw.get("field")
    if not isinstance(field, str) or not field.strip():
        raise ScriptFormatError(f"Event {index}: 'field' must be a non-empty string")
    if "value" not in raw:
        raise ScriptFormatError(f"Event {index}: 'value' is required")
    return UpdateEvent(
        position=_require_position(raw, index),
        field=field,
        value=raw["value"],
    )


def parse_session_script(payload: Any) -> list[SessionEvent]:
    if isinstance(payload, dict):
        payload = payload.get("events")
    if not isinstance(payload, list):
        raise ScriptFormatError("Session script must be a list of events or an object with 'events'.")
    return [parse_event(raw, index) for index, raw in enumerate(payload)]


def load_session_script(path: Path) -> list[SessionEvent]:
    try:
        payload = read_json(path)
    except json.JSONDecodeError as exc:
        raise ScriptFormatError(f"Session script is not valid JSON: {exc}") from exc
    return parse_session_script(payload)


def replay_events(
    session: EditorSession,
    events: Sequence[SessionEvent],
    *,
    strict: bool = False,
    on_progress: ReplayProgressCallback | None = None,
) -> ReplayResult:
    """Feed collaborator events through a session in order.

    Edits that reference a vanished position are counted as stale and skipped,
    unless ``strict`` is set, in which case the ``OutOfRangeError`` propagates.
    """
    total = applied = ignored = stale = 0
    for index, event in enumerate(events):
        total += 1
        try:
            if isinstance(event, ProgressEvent):
                ok = session.set_playback_time(event.played_seconds)
            elif isinstance(event, AddEvent):
                session.add_cue()
                ok = True
            elif isinstance(event, UpdateEvent):
                ok = session.update_cue(event.position, event.field, event.value)
            else:
                session.delete_cue(event.position)
                ok = True
        except OutOfRangeError as exc:
            if strict:
                raise
            logger.warning("Skipping stale event %d: %s", index, exc)
            stale += 1
        else:
            if ok:
                applied += 1
            else:
                ignored += 1
        if on_progress is not None:
            try:
                on_progress(
                    ReplayProgress(completed=total, total=len(events), event=event)
                )
            except Exception:
                # Keep replaying even if caller-side reporting fails.
                logger.exception("Replay progress callback failed.")
    return ReplayResult(
        total=total,
        applied=applied,
        ignored=ignored,
        stale=stale,
        last_playback_time=session.playback_time,
        overlay=session.overlay,
    )
