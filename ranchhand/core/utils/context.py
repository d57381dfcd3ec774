"""
RanchHand — Call Context

Carries a deadline and a cancellation flag down through every call that
waits on the backend. Callers check the context before and after each
collaborator call; a result that arrives after cancellation is discarded.
"""

import threading
import time
from typing import Optional

from ranchhand.core.errors import BackendTimeout, OperationCancelled


DEFAULT_TIMEOUT_SECONDS = 60.0


class CallContext:

    def __init__(
        self,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        cancel_event: Optional[threading.Event] = None
    ):
        self.timeout_seconds = timeout_seconds
        self.deadline = (
            time.monotonic() + timeout_seconds
            if timeout_seconds is not None
            else None
        )
        self._cancelled = cancel_event or threading.Event()

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""

        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self, stage: Optional[str] = None):

        if self.cancelled:
            raise OperationCancelled("operation cancelled by caller", stage=stage)

        if self.expired():
            raise BackendTimeout(
                f"deadline of {self.timeout_seconds}s exceeded",
                stage=stage
            )
