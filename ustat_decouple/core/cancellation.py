"""
Cancellation: cooperative stop signal for long aggregate/batch runs.

The token is checked between row blocks and between batch elements,
never inside a kernel call.

Usage:
    token = CancellationToken(timeout=30.0)
    compute_decoupled_sums(x, ys, kernel, cancel=token)

    # from another thread
    token.cancel()
"""

import threading
import time
from typing import Optional

from ustat_decouple.errors import ComputationCancelled


class CancellationToken:
    """Cancel flag plus optional wall-clock timeout (seconds, from creation)."""

    def __init__(self, timeout: Optional[float] = None):
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self._event = threading.Event()
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise ComputationCancelled if cancelled or past the deadline."""
        if self._event.is_set():
            raise ComputationCancelled("cancelled")
        if self.expired:
            raise ComputationCancelled(f"timed out after {self.timeout:g}s")


def check_cancel(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.check()
