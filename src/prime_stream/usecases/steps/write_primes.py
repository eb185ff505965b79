from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from prime_stream.domain.outcomes import CancelReason
from prime_stream.observability.logging import NullLogSink, StageLogger
from prime_stream.ports.output_sink import OutputSink
from prime_stream.services.bounded_queue import BoundedQueue
from prime_stream.services.cancellation import CancellationToken


def sort_window(values: Iterable[int]) -> list[int]:
    # Local sort of one flush window; previously flushed windows are never revisited.
    return sorted(values)


@dataclass
class PrimeWriter:
    """Sink stage: buffers confirmed primes and flushes them in sorted windows.

    Each window is sorted on its own, so the file is only nearly ordered
    across window boundaries; the final sort pass restores global order.
    Reaching ``max_num_primes`` cancels the pipeline and ends the stage after
    one last flush, so the reported total never exceeds the target.
    """

    primes: BoundedQueue[int]
    output: OutputSink
    token: CancellationToken
    max_num_primes: int
    buffer_size: int
    log: StageLogger = field(default_factory=lambda: StageLogger(NullLogSink(), "writer"))
    total: int = field(default=0, init=False)
    flushes: int = field(default=0, init=False)
    _buffer: list[int] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_num_primes <= 0:
            raise ValueError("max_num_primes must be positive")
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be positive")

    def run(self) -> int:
        try:
            self._consume()
            self._flush()
        finally:
            self.output.close()
        self.log.info("wrote primes", total=self.total, flushes=self.flushes)
        return self.total

    def _consume(self) -> None:
        # The sink ignores cancellation while reading: whatever workers published is kept until the queue closes.
        while True:
            prime = self.primes.get()
            if prime is None:
                return
            self._buffer.append(prime)
            self.total += 1
            if self.total >= self.max_num_primes:
                if self.token.cancel(CancelReason.TARGET_REACHED):
                    self.log.info("found max num primes", total=self.total)
                return
            if len(self._buffer) >= self.buffer_size:
                self._flush()

    def _flush(self) -> None:
        if not self._buffer:
            return
        window = sort_window(self._buffer)
        for prime in window:
            self.output.write_line(str(prime))
        self.output.flush()
        self._buffer.clear()
        self.flushes += 1
        self.log.debug("flushed window", size=len(window), first=window[0], last=window[-1])
