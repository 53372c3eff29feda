# pipeline/throttle.py
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MIN_INTERVAL_MS = 33.0  # ~30 fps


@dataclass(frozen=True)
class ThrottleState:
    last_processed_ms: float | None = None


def throttle(
    state: ThrottleState,
    now_ms: float,
    min_interval_ms: float = DEFAULT_MIN_INTERVAL_MS,
) -> tuple[bool, ThrottleState]:
    """
    Decide whether the frame arriving at `now_ms` should be processed.

    Returns (process, next_state). A dropped frame leaves the state untouched;
    the first frame always passes. The caller owns the state and must not share
    it between workers.
    """
    last = state.last_processed_ms
    if last is not None and now_ms - last < min_interval_ms:
        return False, state
    return True, ThrottleState(last_processed_ms=now_ms)
