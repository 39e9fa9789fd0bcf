from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ProgressEvent:
    played_seconds: Any


@dataclass(frozen=True)
class AddEvent:
    pass


@dataclass(frozen=True)
class UpdateEvent:
    position: int
    field: str
    value: Any


@dataclass(frozen=True)
class DeleteEvent:
    position: int


SessionEvent = Union[ProgressEvent, AddEvent, UpdateEvent, DeleteEvent]
