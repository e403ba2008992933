"""Bounded retry schedule for GKE mutation calls.

Examples
--------
>>> DEFAULT_BACKOFF.max_elapsed()
330.0
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

WAIT_SECONDS = 30.0
BACKOFF_STEPS = 12


@dataclass(frozen=True, slots=True)
class Backoff:
    """Retry schedule with a fixed attempt budget.

    Attributes
    ----------
    duration
        Seconds to wait before the first retry.
    steps
        Maximum number of attempts, the first one included.
    factor
        Multiplier applied to the delay after each retry. ``1.0`` keeps a
        fixed interval.
    cap
        Optional upper bound for a single delay.

    Examples
    --------
    >>> list(Backoff(duration=1.0, steps=4, factor=2.0).delays())
    [1.0, 2.0, 4.0]
    >>> Backoff(duration=1.0, steps=4, factor=2.0, cap=3.0).max_elapsed()
    6.0
    """

    duration: float = WAIT_SECONDS
    steps: int = BACKOFF_STEPS
    factor: float = 1.0
    cap: float | None = None

    def __post_init__(self) -> None:
        if self.duration < 0:
            msg = f"backoff duration must not be negative, got {self.duration}"
            raise ValueError(msg)
        if self.steps < 1:
            msg = f"backoff steps must be at least 1, got {self.steps}"
            raise ValueError(msg)
        if self.factor < 1.0:
            msg = f"backoff factor must be at least 1.0, got {self.factor}"
            raise ValueError(msg)
        if self.cap is not None and self.cap < 0:
            msg = f"backoff cap must not be negative, got {self.cap}"
            raise ValueError(msg)

    def delay(self, retry: int) -> float:
        """Return the delay in seconds before retry number ``retry`` (1-based)."""
        if retry < 1:
            msg = f"retry must be at least 1, got {retry}"
            raise ValueError(msg)
        value = float(self.duration)
        for _ in range(retry - 1):
            if self.cap is not None and value >= self.cap:
                break
            value *= self.factor
        if self.cap is not None:
            value = min(value, self.cap)
        return value

    def delays(self) -> Iterator[float]:
        """Yield the delays slept between consecutive attempts."""
        for retry in range(1, self.steps):
            yield self.delay(retry)

    def max_elapsed(self) -> float:
        """Return the worst-case total sleeping time across all attempts."""
        return float(sum(self.delays()))


DEFAULT_BACKOFF = Backoff()
