from __future__ import annotations

import threading

from prime_stream.domain.outcomes import CancelReason


class CancellationToken:
    """Process-wide cooperative cancellation signal.

    The token is leveled: once cancelled it stays cancelled, and every stage
    observing it sees the same state without consuming it. Only the first
    ``cancel`` call records a reason; later calls are no-ops, which makes
    re-signalling from any observer harmless.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: CancelReason | None = None

    def cancel(self, reason: CancelReason) -> bool:
        # Returns True only for the call that actually raised the signal.
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    @property
    def reason(self) -> CancelReason | None:
        return self._reason
