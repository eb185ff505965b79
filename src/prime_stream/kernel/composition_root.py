from __future__ import annotations

import os
import random
from dataclasses import dataclass
from pathlib import Path

from prime_stream.adapters.output_sink import FileOutputSink
from prime_stream.observability.logging import StageLogger
from prime_stream.ports.log_sink import LogSink
from prime_stream.services.bounded_queue import BoundedQueue
from prime_stream.services.cancellation import CancellationToken
from prime_stream.services.primality import PrimalityTester
from prime_stream.usecases.config_models import AppConfig
from prime_stream.usecases.steps.final_sort import FinalSortPass
from prime_stream.usecases.steps.find_primes import PrimalityWorkerPool
from prime_stream.usecases.steps.generate_candidates import CandidateGenerator
from prime_stream.usecases.steps.write_primes import PrimeWriter

SEED_PRIMES: tuple[int, ...] = (2, 3)


@dataclass(frozen=True, slots=True)
class PipelineRuntime:
    # Fully wired pipeline: every stage shares the same token and queues.
    token: CancellationToken
    candidates: BoundedQueue[int]
    primes: BoundedQueue[int]
    generator: CandidateGenerator
    pool: PrimalityWorkerPool
    writer: PrimeWriter
    writer_output: FileOutputSink
    final_sort: FinalSortPass | None
    seeds: tuple[int, ...]
    output_path: Path
    poll_interval: float
    log: StageLogger


def resolve_worker_count(configured: int | None) -> int:
    # Default fan-out is the host parallelism.
    if configured is not None:
        return configured
    return os.cpu_count() or 1


def build_runtime(
    config: AppConfig,
    *,
    log_sink: LogSink,
    token: CancellationToken | None = None,
) -> PipelineRuntime:
    # Composition root: config in, wired stages out. Nothing touches the filesystem here.
    token = token if token is not None else CancellationToken()
    poll = config.pipeline.poll_interval_seconds
    capacity = config.pipeline.max_buffer
    candidates: BoundedQueue[int] = BoundedQueue(capacity, poll_interval=poll)
    # Prime queue holds twice the buffer so the seeds always fit before the sink starts.
    primes: BoundedQueue[int] = BoundedQueue(2 * capacity, poll_interval=poll)

    output_path = Path(config.output.file_path)
    final_sort: FinalSortPass | None = None
    sink_path = output_path
    if config.output.final_sort:
        sink_path = output_path.with_name(output_path.name + config.output.presorted_suffix)
        final_sort = FinalSortPass(
            presorted_path=sink_path,
            final_path=output_path,
            flush_every_lines=config.output.flush_every_lines,
            log=StageLogger(log_sink, "final_sort"),
        )
    # The presorted file belongs to this run only; direct output accumulates across runs.
    writer_output = FileOutputSink(sink_path, mode="truncate" if final_sort is not None else "append")

    primality = config.primality
    tester = PrimalityTester(
        probabilistic=primality.probabilistic,
        ceiling=primality.probabilistic_ceiling,
        rounds=primality.probabilistic_rounds,
        rng=random.Random(primality.seed),
    )

    generator = CandidateGenerator(
        start=config.search.start_from,
        queue=candidates,
        token=token,
        max_candidate=config.search.max_candidate,
        log=StageLogger(log_sink, "generator"),
    )
    pool = PrimalityWorkerPool(
        resolve_worker_count(config.pipeline.workers),
        candidates=candidates,
        primes=primes,
        token=token,
        checker=tester,
        log_sink=log_sink,
    )
    writer = PrimeWriter(
        primes=primes,
        output=writer_output,
        token=token,
        max_num_primes=config.search.max_num_primes,
        buffer_size=capacity,
        log=StageLogger(log_sink, "writer"),
    )
    seeds = SEED_PRIMES if config.search.start_from <= 5 else ()
    return PipelineRuntime(
        token=token,
        candidates=candidates,
        primes=primes,
        generator=generator,
        pool=pool,
        writer=writer,
        writer_output=writer_output,
        final_sort=final_sort,
        seeds=seeds,
        output_path=output_path,
        poll_interval=poll,
        log=StageLogger(log_sink, "runner"),
    )
