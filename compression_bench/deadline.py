"""Overall benchmark deadline."""

import time
from typing import Callable, Optional

from .errors import BenchmarkTimeoutError


class Deadline:
    """A fixed budget of wall-clock time shared by every backend operation."""

    def __init__(
        self,
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._expires_at = clock() + timeout_seconds

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self, stage: str) -> None:
        """Raise BenchmarkTimeoutError if the deadline has passed."""
        if self.expired():
            raise BenchmarkTimeoutError(
                f"Benchmark deadline of {self.timeout_seconds:.1f}s exceeded during {stage}"
            )

    def sleep(
        self,
        seconds: float,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        """Sleep for up to `seconds`, never past the deadline."""
        sleep = sleep or time.sleep
        sleep(min(seconds, self.remaining()))
        self.check("inter-run delay")
