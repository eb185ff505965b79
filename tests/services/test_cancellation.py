from __future__ import annotations

import threading

from prime_stream.domain.outcomes import CancelReason
from prime_stream.services.cancellation import CancellationToken


def test_token_starts_not_cancelled() -> None:
    # A fresh token has no reason and is not set.
    token = CancellationToken()
    assert token.is_cancelled() is False
    assert token.reason is None


def test_first_cancel_wins_and_records_reason() -> None:
    # Only the first cancel raises the signal; later calls are no-ops.
    token = CancellationToken()
    assert token.cancel(CancelReason.TARGET_REACHED) is True
    assert token.cancel(CancelReason.EXTERNAL_SIGNAL) is False
    assert token.is_cancelled() is True
    assert token.reason is CancelReason.TARGET_REACHED


def test_token_is_leveled_for_many_observers() -> None:
    # Observing the token never consumes it; every waiter sees the same state.
    token = CancellationToken()
    seen: list[bool] = []

    def observer() -> None:
        seen.append(token.wait(timeout=5))

    threads = [threading.Thread(target=observer) for _ in range(4)]
    for thread in threads:
        thread.start()
    token.cancel(CancelReason.EXTERNAL_SIGNAL)
    for thread in threads:
        thread.join(timeout=5)
    assert seen == [True, True, True, True]
    assert token.is_cancelled() is True


def test_wait_times_out_when_not_cancelled() -> None:
    token = CancellationToken()
    assert token.wait(timeout=0.01) is False
