from __future__ import annotations

import math
from typing import Sequence

from cuesync.schemas.cue import Cue

MAX_SWEEP_TICKS = 10_000


def find_active_position(cues: Sequence[Cue], time: float) -> int | None:
    """Return the position of the first cue whose window contains ``time``.

    Scans in sequence order, not time order, so the earliest-stored cue wins
    when windows overlap. Both window ends are inclusive.
    """
    for position, cue in enumerate(cues):
        if cue.start <= time <= cue.end:
            return position
    return None


def resolve_active_cue(cues: Sequence[Cue], time: float) -> str | None:
    position = find_active_position(cues, time)
    if position is None:
        return None
    return cues[position].text


def sweep_active_cues(
    cues: Sequence[Cue],
    *,
    step: float,
    until: float,
    max_ticks: int = MAX_SWEEP_TICKS,
) -> list[tuple[float, str | None]]:
    """Resolve the active cue at every ``step`` seconds from 0 through ``until``.

    Raises ``ValueError`` when the sweep would exceed ``max_ticks`` rows.
    """
    if not math.isfinite(step) or step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    if not math.isfinite(until):
        raise ValueError(f"until must be finite, got {until}")
    span = until / step + 1e-9 if until > 0 else 0.0
    if not math.isfinite(span) or span >= max_ticks:
        raise ValueError(
            f"Sweep to {until}s every {step}s exceeds the {max_ticks}-tick limit."
        )
    ticks = int(span)
    timeline: list[tuple[float, str | None]] = []
    for tick in range(ticks + 1):
        time = round(tick * step, 6)
        timeline.append((time, resolve_active_cue(cues, time)))
    return timeline
