"""Per-search stop flag shared between the event loop and walker threads."""

import threading
import time

from kbsearch.search.constants import StopReason


class StopToken:
    """Cancellation flag with an optional deadline.

    Walkers poll ``stopped`` between directory entries; the orchestrator sets
    it when the awaiting task is cancelled.
    """

    def __init__(self, timeout_seconds: float | None = None):
        self._event = threading.Event()
        self._reason: StopReason | None = None
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    def cancel(self, reason: StopReason = StopReason.CANCELLED) -> None:
        if self._reason is None:
            self._reason = reason
        self._event.set()

    @property
    def stopped(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(StopReason.TIMEOUT)
            return True
        return False

    @property
    def reason(self) -> StopReason | None:
        return self._reason

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())