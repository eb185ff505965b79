from __future__ import annotations

import threading
import time

import pytest

from prime_stream.domain.outcomes import CancelReason
from prime_stream.services.bounded_queue import BoundedQueue, QueueClosedError
from prime_stream.services.cancellation import CancellationToken


def _wait_until(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.005)


def test_queue_fifo_order() -> None:
    # FIFO ordering keeps generation order of delivered candidates.
    queue: BoundedQueue[int] = BoundedQueue(3)
    for value in (5, 7, 11):
        assert queue.put(value) is True
    assert [queue.get(), queue.get(), queue.get()] == [5, 7, 11]


def test_queue_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        BoundedQueue(0)


def test_closed_queue_drains_then_returns_none() -> None:
    # Close is the end-of-stream signal: remaining items are still delivered first.
    queue: BoundedQueue[int] = BoundedQueue(2)
    queue.put(5)
    queue.close()
    assert queue.get() == 5
    assert queue.get() is None
    assert queue.closed is True


def test_put_after_close_is_a_wiring_error() -> None:
    queue: BoundedQueue[int] = BoundedQueue(2)
    queue.close()
    with pytest.raises(QueueClosedError):
        queue.put(5)


def test_close_is_idempotent() -> None:
    queue: BoundedQueue[int] = BoundedQueue(1)
    queue.close()
    queue.close()
    assert queue.get() is None


def test_put_on_full_queue_returns_false_when_cancelled() -> None:
    # Backpressure wait is superseded by cancellation.
    token = CancellationToken()
    queue: BoundedQueue[int] = BoundedQueue(1, poll_interval=0.01)
    queue.put(5)
    results: list[bool] = []
    producer = threading.Thread(target=lambda: results.append(queue.put(7, token=token)))
    producer.start()
    time.sleep(0.05)
    assert producer.is_alive()
    token.cancel(CancelReason.EXTERNAL_SIGNAL)
    producer.join(timeout=5)
    assert results == [False]
    assert queue.size() == 1


def test_get_on_empty_queue_returns_none_when_cancelled() -> None:
    token = CancellationToken()
    queue: BoundedQueue[int] = BoundedQueue(1, poll_interval=0.01)
    results: list[int | None] = []
    consumer = threading.Thread(target=lambda: results.append(queue.get(token=token)))
    consumer.start()
    token.cancel(CancelReason.EXTERNAL_SIGNAL)
    consumer.join(timeout=5)
    assert results == [None]


def test_cancelled_get_does_not_drain_remaining_items() -> None:
    # Cancellation wins over pending work for token-aware consumers.
    token = CancellationToken()
    queue: BoundedQueue[int] = BoundedQueue(2)
    queue.put(5)
    token.cancel(CancelReason.TARGET_REACHED)
    assert queue.get(token=token) is None
    assert queue.get() == 5


def test_blocked_put_resumes_when_consumer_takes_an_item() -> None:
    queue: BoundedQueue[int] = BoundedQueue(1, poll_interval=0.01)
    queue.put(5)
    producer = threading.Thread(target=queue.put, args=(7,))
    producer.start()
    _wait_until(lambda: producer.is_alive())
    assert queue.get() == 5
    producer.join(timeout=5)
    assert queue.get() == 7


def test_blocked_get_wakes_on_close() -> None:
    queue: BoundedQueue[int] = BoundedQueue(1, poll_interval=0.01)
    results: list[int | None] = []
    consumer = threading.Thread(target=lambda: results.append(queue.get()))
    consumer.start()
    time.sleep(0.02)
    queue.close()
    consumer.join(timeout=5)
    assert results == [None]
