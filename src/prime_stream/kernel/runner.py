from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from types import FrameType

from prime_stream.domain.outcomes import CancelReason, GeneratorStatus, RunOutcome, RunReport
from prime_stream.kernel.composition_root import PipelineRuntime
from prime_stream.services.stage_thread import StageThread
from prime_stream.services.cancellation import CancellationToken


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    # SIGINT becomes a cancellation request; the previous handler is restored afterwards.
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: FrameType | None) -> None:
        _ = (signum, frame)
        token.cancel(CancelReason.EXTERNAL_SIGNAL)

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def resolve_outcome(token: CancellationToken, generator_status: GeneratorStatus) -> RunOutcome:
    # Cancellation reason wins; an uncancelled run can only end by exhausting the candidate range.
    if token.reason is CancelReason.TARGET_REACHED:
        return RunOutcome.TARGET_REACHED
    if token.reason is CancelReason.EXTERNAL_SIGNAL:
        return RunOutcome.EXTERNAL_SIGNAL
    if generator_status is GeneratorStatus.RANGE_EXHAUSTED:
        return RunOutcome.RANGE_EXHAUSTED
    raise RuntimeError(f"pipeline ended without a terminal condition (token={token.reason})")


@dataclass(frozen=True, slots=True)
class PipelineRunner:
    """Runs a wired pipeline to completion.

    Order of events: the sink file is opened (so an unwritable path fails
    before any work), seeds are queued, generator, workers and sink start,
    generator and workers are joined, the prime queue is closed, the sink is
    joined, and finally the optional exact sort runs on the main thread.
    The first stage failure is re-raised once every thread has stopped.
    """

    runtime: PipelineRuntime

    def run(self) -> RunReport:
        rt = self.runtime
        rt.writer_output.open()
        for seed in rt.seeds:
            rt.primes.put(seed)

        generator: StageThread[GeneratorStatus] = StageThread("candidate-generator", rt.generator.run, token=rt.token)
        writer: StageThread[int] = StageThread("prime-writer", rt.writer.run, token=rt.token)
        rt.log.info("pipeline started", start_from=rt.generator.start, workers=rt.pool.size)
        writer.start()
        generator.start()
        rt.pool.start()

        generator.wait(rt.poll_interval)
        worker_stats = rt.pool.join(rt.poll_interval)
        rt.log.info("worker threads finished", workers=len(worker_stats))
        rt.primes.close()
        writer.wait(rt.poll_interval)
        rt.log.info("finished writing values to disk", total=writer.result)

        errors = [error for error in (generator.error, *rt.pool.errors(), writer.error) if error is not None]
        if errors:
            rt.log.error("pipeline failed", error=str(errors[0]), failures=len(errors))
            raise errors[0]

        assert generator.result is not None
        assert writer.result is not None
        final_sorted = False
        if rt.final_sort is not None:
            rt.final_sort.run()
            final_sorted = True

        report = RunReport(
            outcome=resolve_outcome(rt.token, generator.result),
            total_primes=writer.result,
            generator_status=generator.result,
            output_path=str(rt.output_path),
            final_sorted=final_sorted,
            workers=worker_stats,
        )
        # Interrupted runs complete at warning level.
        complete = rt.log.warning if report.outcome is RunOutcome.EXTERNAL_SIGNAL else rt.log.info
        complete(report.completion_message, outcome=report.outcome, total=report.total_primes)
        return report
