from __future__ import annotations

from dataclasses import dataclass, field

from prime_stream.domain.outcomes import GeneratorStatus
from prime_stream.observability.logging import NullLogSink, StageLogger
from prime_stream.services.bounded_queue import BoundedQueue
from prime_stream.services.cancellation import CancellationToken


@dataclass
class CandidateGenerator:
    # Emits start, start+2, start+4, ... onto the candidate queue until cancelled or out of range.
    start: int
    queue: BoundedQueue[int]
    token: CancellationToken
    max_candidate: int | None = None
    log: StageLogger = field(default_factory=lambda: StageLogger(NullLogSink(), "generator"))
    emitted: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.start % 2 == 0 or self.start < 5:
            raise ValueError("candidate generation must start from an odd number >= 5")

    def run(self) -> GeneratorStatus:
        # Closing the queue is the only end-of-stream signal workers get, so it happens on every exit path.
        try:
            status = self._generate()
        finally:
            self.queue.close()
        self.log.info("candidate generation halted", status=status, emitted=self.emitted)
        return status

    def _generate(self) -> GeneratorStatus:
        candidate = self.start
        while True:
            if self.token.is_cancelled():
                return GeneratorStatus.CANCELLED
            if self.max_candidate is not None and candidate > self.max_candidate:
                self.log.info("reached maximum candidate search size", max_candidate=self.max_candidate)
                return GeneratorStatus.RANGE_EXHAUSTED
            if not self.queue.put(candidate, token=self.token):
                return GeneratorStatus.CANCELLED
            self.emitted += 1
            candidate += 2
