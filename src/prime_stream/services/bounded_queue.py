from __future__ import annotations

import threading
from collections import deque
from typing import Generic, TypeVar

from prime_stream.services.cancellation import CancellationToken

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = 0.05


class QueueClosedError(RuntimeError):
    # Publishing after close is a wiring error, not a runtime condition.
    pass


class BoundedQueue(Generic[T]):
    """Bounded FIFO shared between pipeline threads.

    ``put`` blocks while the queue is full and ``get`` blocks while it is
    empty. Both wait in slices of ``poll_interval`` seconds and check the
    cancellation token between slices, so a blocked stage notices
    cancellation within one slice. ``close`` is the end-of-stream signal:
    consumers drain what is left and then receive ``None``.
    """

    def __init__(self, capacity: int, *, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        if capacity <= 0:
            raise ValueError("BoundedQueue capacity must be positive")
        if poll_interval <= 0:
            raise ValueError("BoundedQueue poll_interval must be positive")
        self._capacity = capacity
        self._poll_interval = poll_interval
        self._items: deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, item: T, *, token: CancellationToken | None = None) -> bool:
        # True when delivered; False when cancellation was observed first.
        with self._cond:
            while True:
                if self._closed:
                    raise QueueClosedError("put on a closed queue")
                if token is not None and token.is_cancelled():
                    return False
                if len(self._items) < self._capacity:
                    self._items.append(item)
                    self._cond.notify_all()
                    return True
                self._cond.wait(self._poll_interval)

    def get(self, *, token: CancellationToken | None = None) -> T | None:
        # None means closed-and-drained, or cancellation observed while waiting.
        with self._cond:
            while True:
                if token is not None and token.is_cancelled():
                    return None
                if self._items:
                    item = self._items.popleft()
                    self._cond.notify_all()
                    return item
                if self._closed:
                    return None
                self._cond.wait(self._poll_interval)

    def close(self) -> None:
        # Idempotent; wakes every waiter so consumers can observe end-of-stream.
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def size(self) -> int:
        with self._cond:
            return len(self._items)
