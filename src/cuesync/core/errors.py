from __future__ import annotations


class CuesyncError(Exception):
    """Base class for cuesync errors."""


class OutOfRangeError(CuesyncError, IndexError):
    """A cue position that is not present in the store."""

    def __init__(self, position: object, size: int) -> None:
        super().__init__(
            f"Cue position {position!r} is out of range for a store of {size} cue(s)."
        )
        self.position = position
        self.size = size


class InvalidArgumentError(CuesyncError, ValueError):
    """Malformed edit or time input. Recovered locally, never fatal."""


class NothingToExportError(CuesyncError):
    pass


class ScriptFormatError(CuesyncError, ValueError):
    pass
