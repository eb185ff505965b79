from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class GeneratorStatus(str, Enum):
    # Terminal status reported by the candidate generator (observability only, never control).
    CANCELLED = "CANCELLED"
    RANGE_EXHAUSTED = "RANGE_EXHAUSTED"


class CancelReason(str, Enum):
    # Sources that may raise the shared cancellation token.
    EXTERNAL_SIGNAL = "EXTERNAL_SIGNAL"
    TARGET_REACHED = "TARGET_REACHED"
    STAGE_FAILED = "STAGE_FAILED"


class RunOutcome(str, Enum):
    # User-visible completion kinds; none of them is an error.
    EXTERNAL_SIGNAL = "EXTERNAL_SIGNAL"
    TARGET_REACHED = "TARGET_REACHED"
    RANGE_EXHAUSTED = "RANGE_EXHAUSTED"


COMPLETION_MESSAGES: dict[RunOutcome, str] = {
    RunOutcome.EXTERNAL_SIGNAL: "Cancelled by external signal.",
    RunOutcome.TARGET_REACHED: "Found max num primes.",
    RunOutcome.RANGE_EXHAUSTED: "Reached maximum candidate search size.",
}


@dataclass(frozen=True, slots=True)
class WorkerStats:
    # Per-worker counters collected when the pool joins.
    tested: int = 0
    found: int = 0
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class RunReport:
    # Summary returned by the pipeline runner once every stage has joined.
    outcome: RunOutcome
    total_primes: int
    generator_status: GeneratorStatus
    output_path: str
    final_sorted: bool = False
    workers: tuple[WorkerStats, ...] = field(default_factory=tuple)

    @property
    def completion_message(self) -> str:
        return COMPLETION_MESSAGES[self.outcome]
