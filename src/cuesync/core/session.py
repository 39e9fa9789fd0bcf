from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from cuesync.core.errors import InvalidArgumentError, NothingToExportError
from cuesync.core.exporter import EXPORT_FILENAME, export_srt, write_srt
from cuesync.core.resolver import resolve_active_cue
from cuesync.core.store import CueStore, StoreChange, coerce_time_value
from cuesync.schemas.cue import Cue

logger = logging.getLogger(__name__)

DEFAULT_CUE_DURATION = 2.0

OverlayCallback = Callable[[str | None], None]


class EditorSession:
    """Event-driven composition of the cue store, overlay and export.

    Playback progress ticks and store mutations both re-resolve the overlay
    against the latest committed store state. ``on_overlay`` fires only when
    the overlay text actually changes.
    """

    def __init__(
        self,
        store: CueStore | None = None,
        *,
        default_duration: float = DEFAULT_CUE_DURATION,
        export_filename: str = EXPORT_FILENAME,
        on_overlay: OverlayCallback | None = None,
    ) -> None:
        self.store = store if store is not None else CueStore()
        self.default_duration = default_duration
        self.export_filename = export_filename
        self._on_overlay = on_overlay
        self._playback_time = 0.0
        self._overlay: str | None = None
        self._unsubscribe = self.store.subscribe(self._handle_store_change)
        self._refresh_overlay()

    @property
    def playback_time(self) -> float:
        return self._playback_time

    @property
    def overlay(self) -> str | None:
        return self._overlay

    @property
    def can_export(self) -> bool:
        return len(self.store) > 0

    def _refresh_overlay(self) -> str | None:
        text = resolve_active_cue(self.store.list(), self._playback_time)
        if text != self._overlay:
            self._overlay = text
            if self._on_overlay is not None:
                self._on_overlay(text)
        return text

    def _handle_store_change(self, change: StoreChange) -> None:
        del change
        self._refresh_overlay()

    def set_playback_time(self, played_seconds: Any) -> bool:
        """Record a playback tick. Returns False if the tick was rejected."""
        try:
            self._playback_time = coerce_time_value(played_seconds)
        except InvalidArgumentError as exc:
            logger.warning("Ignoring playback tick: %s", exc)
            return False
        self._refresh_overlay()
        return True

    def handle_progress(self, played_seconds: Any) -> str | None:
        """Record a playback tick and return the active cue text."""
        self.set_playback_time(played_seconds)
        return self._overlay

    def add_cue(self) -> int:
        """Add an empty cue anchored at the current playback time."""
        start = self._playback_time
        return self.store.add(Cue(start=start, end=start + self.default_duration, text=""))

    def update_cue(self, position: int, field: str, value: Any) -> bool:
        return self.store.update(position, field, value)

    def delete_cue(self, position: int) -> Cue:
        return self.store.delete(position)

    def export(self) -> str:
        return export_srt(self.store.list())

    def export_to(self, output_dir: Path) -> Path:
        if not self.can_export:
            raise NothingToExportError("No cues to export.")
        output_path = write_srt(self.store.list(), output_dir / self.export_filename)
        logger.info("Exported %d cue(s) to %s", len(self.store), output_path)
        return output_path

    def close(self) -> None:
        self._unsubscribe()
