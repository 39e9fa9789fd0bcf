from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator

from cuesync.core.errors import InvalidArgumentError, OutOfRangeError
from cuesync.schemas.cue import Cue

logger = logging.getLogger(__name__)

CHANGE_ADD = "add"
CHANGE_UPDATE = "update"
CHANGE_DELETE = "delete"

NUMERIC_FIELDS = frozenset({"start", "end"})
_FIELD_ALIASES = {
    "start": "start",
    "starttime": "start",
    "start_time": "start",
    "end": "end",
    "endtime": "end",
    "end_time": "end",
    "text": "text",
}


@dataclass(frozen=True)
class StoreChange:
    kind: str
    position: int
    cue: Cue


StoreListener = Callable[[StoreChange], None]


def normalize_field(field: str) -> str:
    if not isinstance(field, str):
        raise InvalidArgumentError(f"Cue field name must be a string, got {field!r}")
    name = _FIELD_ALIASES.get(field.strip().lower())
    if name is None:
        raise InvalidArgumentError(
            f"Unknown cue field '{field}'. Allowed: start, end, text"
        )
    return name


def coerce_time_value(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise InvalidArgumentError(f"Time value must be numeric, got {value!r}")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidArgumentError(f"Time value must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidArgumentError(f"Time value must be finite, got {value!r}")
    return number


def coerce_field_value(field: str, value: Any) -> tuple[str, Any]:
    name = normalize_field(field)
    if name in NUMERIC_FIELDS:
        return name, coerce_time_value(value)
    return name, "" if value is None else str(value)


class CueStore:
    """Ordered cue collection addressed by insertion position.

    Positions shift down after a delete. Updates swap in a new frozen ``Cue``
    so a reader never observes a half-applied edit.
    """

    def __init__(self, cues: list[Cue] | tuple[Cue, ...] | None = None) -> None:
        self._cues: list[Cue] = list(cues or ())
        self._listeners: list[StoreListener] = []

    def __len__(self) -> int:
        return len(self._cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self.list())

    def __getitem__(self, position: int) -> Cue:
        return self._cues[self._check_position(position)]

    def _check_position(self, position: int) -> int:
        if (
            isinstance(position, bool)
            or not isinstance(position, int)
            or not 0 <= position < len(self._cues)
        ):
            raise OutOfRangeError(position, len(self._cues))
        return position

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, change: StoreChange) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(change)
            except Exception:
                # A failing listener must not undo a committed mutation.
                logger.exception("Cue store listener failed on %s.", change.kind)

    def add(self, cue: Cue) -> int:
        self._cues.append(cue)
        position = len(self._cues) - 1
        logger.debug("Added cue at position %d: %r", position, cue)
        self._notify(StoreChange(kind=CHANGE_ADD, position=position, cue=cue))
        return position

    def update(self, position: int, field: str, value: Any) -> bool:
        """Replace one field of the cue at ``position``.

        Returns False without touching the store when the field or value is
        invalid. Raises ``OutOfRangeError`` for a position not in the store.
        """
        index = self._check_position(position)
        try:
            name, coerced = coerce_field_value(field, value)
        except InvalidArgumentError as exc:
            logger.warning("Ignoring edit at position %d: %s", index, exc)
            return False
        updated = replace(self._cues[index], **{name: coerced})
        self._cues[index] = updated
        logger.debug("Updated cue %d field %s=%r", index, name, coerced)
        self._notify(StoreChange(kind=CHANGE_UPDATE, position=index, cue=updated))
        return True

    def delete(self, position: int) -> Cue:
        index = self._check_position(position)
        removed = self._cues.pop(index)
        logger.debug("Deleted cue at position %d: %r", index, removed)
        self._notify(StoreChange(kind=CHANGE_DELETE, position=index, cue=removed))
        return removed

    def list(self) -> tuple[Cue, ...]:
        return tuple(self._cues)
