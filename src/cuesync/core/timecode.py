from __future__ import annotations

import logging
import math

from cuesync.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000


def to_milliseconds(seconds: float) -> int:
    """Convert seconds to whole milliseconds, rejecting negative or non-finite input."""
    try:
        value = float(seconds)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidArgumentError(f"Time must be numeric, got {seconds!r}") from exc
    if value < 0:
        raise InvalidArgumentError(f"Time must be >= 0, got {seconds!r}")
    millis = value * 1000
    if not math.isfinite(millis):
        raise InvalidArgumentError(f"Time must be finite in milliseconds, got {seconds!r}")
    return int(round(millis))


def format_timestamp(seconds: float) -> str:
    """Format seconds to SRT timestamp (HH:MM:SS,mmm).

    Hours are not clamped and widen past two digits at 100 hours. Negative and
    non-finite input is clamped to zero.
    """
    try:
        millis = to_milliseconds(seconds)
    except InvalidArgumentError as exc:
        logger.warning("%s; clamping to 0.", exc)
        millis = 0
    hours = millis // _MS_PER_HOUR
    minutes = (millis % _MS_PER_HOUR) // _MS_PER_MINUTE
    secs = (millis % _MS_PER_MINUTE) // _MS_PER_SECOND
    ms = millis % _MS_PER_SECOND
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"
