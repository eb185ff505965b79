from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from prime_stream.domain.outcomes import CancelReason
from prime_stream.services.cancellation import CancellationToken

T = TypeVar("T")


class StageThread(threading.Thread, Generic[T]):
    # One pipeline stage on its own thread; result or failure is kept for the joining thread.
    def __init__(self, name: str, target: Callable[[], T], *, token: CancellationToken) -> None:
        super().__init__(name=name, daemon=True)
        self._stage = target
        self._token = token
        self.result: T | None = None
        self.error: Exception | None = None

    def run(self) -> None:
        try:
            self.result = self._stage()
        except Exception as exc:
            # A failed stage stops its siblings; the runner re-raises after every stage has joined.
            self.error = exc
            self._token.cancel(CancelReason.STAGE_FAILED)

    def wait(self, poll_interval: float) -> None:
        # Sliced join keeps the main thread responsive to SIGINT handlers.
        while self.is_alive():
            self.join(poll_interval)
