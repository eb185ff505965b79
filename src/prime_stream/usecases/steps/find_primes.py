from __future__ import annotations

from dataclasses import dataclass, field

from prime_stream.domain.outcomes import WorkerStats
from prime_stream.services.stage_thread import StageThread
from prime_stream.observability.logging import NullLogSink, StageLogger
from prime_stream.ports.log_sink import LogSink
from prime_stream.ports.prime_checker import PrimeChecker
from prime_stream.services.bounded_queue import BoundedQueue
from prime_stream.services.cancellation import CancellationToken


@dataclass
class PrimalityWorker:
    # Drains candidates, publishes confirmed primes; stops on queue end or cancellation.
    candidates: BoundedQueue[int]
    primes: BoundedQueue[int]
    token: CancellationToken
    checker: PrimeChecker
    log: StageLogger = field(default_factory=lambda: StageLogger(NullLogSink(), "worker"))

    def run(self) -> WorkerStats:
        tested = 0
        found = 0
        while True:
            # get returns None both for end-of-stream and for cancellation; the token tells them apart.
            candidate = self.candidates.get(token=self.token)
            if candidate is None:
                break
            tested += 1
            if not self.checker.is_prime(candidate):
                continue
            if not self.primes.put(candidate, token=self.token):
                # Cancelled while waiting to publish: the value is abandoned and nothing more is drained.
                break
            found += 1

        stats = WorkerStats(tested=tested, found=found, cancelled=self.token.is_cancelled())
        self.log.debug("worker finished", tested=tested, found=found, cancelled=stats.cancelled)
        return stats


class PrimalityWorkerPool:
    """N identical workers sharing one candidate queue and one prime queue.

    Each candidate is delivered to exactly one worker by the queue itself,
    so the pool holds no other shared state. Cancellation needs no explicit
    forwarding between workers: the token is leveled, so the first
    observation by any stage is already visible to every sibling.
    """

    def __init__(
        self,
        size: int,
        *,
        candidates: BoundedQueue[int],
        primes: BoundedQueue[int],
        token: CancellationToken,
        checker: PrimeChecker,
        log_sink: LogSink | None = None,
    ) -> None:
        if size <= 0:
            raise ValueError("worker pool size must be positive")
        sink = log_sink if log_sink is not None else NullLogSink()
        self._token = token
        self._workers = [
            PrimalityWorker(
                candidates=candidates,
                primes=primes,
                token=token,
                checker=checker,
                log=StageLogger(sink, f"worker-{index}"),
            )
            for index in range(size)
        ]
        self._threads: list[StageThread[WorkerStats]] = []

    @property
    def size(self) -> int:
        return len(self._workers)

    @property
    def threads(self) -> tuple[StageThread[WorkerStats], ...]:
        return tuple(self._threads)

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("worker pool already started")
        for index, worker in enumerate(self._workers):
            thread: StageThread[WorkerStats] = StageThread(f"prime-worker-{index}", worker.run, token=self._token)
            self._threads.append(thread)
            thread.start()

    def join(self, poll_interval: float) -> tuple[WorkerStats, ...]:
        # Failed workers are reported by their StageThread; they contribute empty stats here.
        for thread in self._threads:
            thread.wait(poll_interval)
        return tuple(thread.result or WorkerStats() for thread in self._threads)

    def errors(self) -> list[Exception]:
        return [thread.error for thread in self._threads if thread.error is not None]
