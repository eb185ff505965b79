from __future__ import annotations

import signal
from pathlib import Path
from typing import Any

import pytest

from prime_stream.domain.errors import OutputFileError
from prime_stream.domain.outcomes import CancelReason, GeneratorStatus, RunOutcome
from prime_stream.kernel.composition_root import build_runtime, resolve_worker_count
from prime_stream.kernel.runner import PipelineRunner, cancel_on_interrupt, resolve_outcome
from prime_stream.observability.logging import LogMessage, NullLogSink
from prime_stream.services.cancellation import CancellationToken
from prime_stream.usecases.config_models import AppConfig

PRIMES_BELOW_100 = [
    2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71, 73, 79, 83, 89, 97,
]


class _SpyLogSink:
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)

    def close(self) -> None:
        return None


def _config(tmp_path: Path, **sections: dict[str, Any]) -> AppConfig:
    raw: dict[str, Any] = {
        "pipeline": {"max_buffer": 4, "workers": 1, "poll_interval_seconds": 0.01},
        "output": {"file_path": str(tmp_path / "primes.txt")},
        "logging": {"sink": "none"},
    }
    for name, values in sections.items():
        raw[name] = {**raw.get(name, {}), **values}
    return AppConfig.model_validate(raw)


def _read_ints(path: Path) -> list[int]:
    return [int(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_first_primes_from_five_with_seeds(tmp_path: Path) -> None:
    # Seeds 2 and 3 count toward the target when starting from 5.
    config = _config(tmp_path, search={"start_from": 5, "max_num_primes": 20}, output={"final_sort": True})
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    assert report.outcome is RunOutcome.TARGET_REACHED
    assert report.total_primes == 20
    assert report.final_sorted is True
    assert _read_ints(tmp_path / "primes.txt") == PRIMES_BELOW_100[:20]
    assert not (tmp_path / "primes.txt.presorted").exists()


def test_eighteen_primes_from_seven_without_seeds(tmp_path: Path) -> None:
    config = _config(tmp_path, search={"start_from": 7, "max_num_primes": 18}, output={"final_sort": True})
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    assert report.total_primes == 18
    assert _read_ints(tmp_path / "primes.txt") == PRIMES_BELOW_100[3:21]


@pytest.mark.parametrize("workers", [1, 3, 8])
def test_range_exhaustion_finds_every_prime(tmp_path: Path, workers: int) -> None:
    # Without an early stop nothing is lost, whatever the worker count.
    config = _config(
        tmp_path,
        search={"start_from": 5, "max_num_primes": 1000, "max_candidate": 99},
        pipeline={"workers": workers},
        output={"final_sort": True},
    )
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    assert report.outcome is RunOutcome.RANGE_EXHAUSTED
    assert report.generator_status is GeneratorStatus.RANGE_EXHAUSTED
    assert report.completion_message == "Reached maximum candidate search size."
    assert _read_ints(tmp_path / "primes.txt") == PRIMES_BELOW_100
    assert len(report.workers) == workers


@pytest.mark.parametrize("workers", [2, 4])
def test_multi_worker_target_run_never_exceeds_target(tmp_path: Path, workers: int) -> None:
    config = _config(
        tmp_path,
        search={"start_from": 5, "max_num_primes": 50},
        pipeline={"workers": workers},
        primality={"probabilistic": True},
        output={"final_sort": True},
    )
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    values = _read_ints(tmp_path / "primes.txt")
    assert report.total_primes == 50
    assert len(values) == 50
    assert values == sorted(set(values))
    assert 9 not in values and 35 not in values
    assert all(all(v % d for d in range(2, v)) for v in values)


@pytest.mark.parametrize("workers", [2, 4, 8])
def test_multi_worker_target_run_keeps_first_primes(tmp_path: Path, workers: int) -> None:
    # Candidates this small finish testing before the target stop, so the result is the exact prefix.
    config = _config(
        tmp_path,
        search={"start_from": 7, "max_num_primes": 18},
        pipeline={"workers": workers},
        output={"final_sort": True},
    )
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    assert report.outcome is RunOutcome.TARGET_REACHED
    assert report.total_primes == 18
    assert _read_ints(tmp_path / "primes.txt") == PRIMES_BELOW_100[3:21]


def test_without_final_sort_output_is_written_directly(tmp_path: Path) -> None:
    config = _config(tmp_path, search={"start_from": 7, "max_num_primes": 10})
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink())).run()
    values = _read_ints(tmp_path / "primes.txt")
    assert report.final_sorted is False
    assert len(values) == report.total_primes == 10
    assert not (tmp_path / "primes.txt.presorted").exists()


def test_external_cancellation_before_start_keeps_seeds(tmp_path: Path) -> None:
    # Cancellation is a normal outcome; already queued seeds are still written.
    token = CancellationToken()
    token.cancel(CancelReason.EXTERNAL_SIGNAL)
    config = _config(tmp_path, search={"start_from": 5, "max_num_primes": 100})
    report = PipelineRunner(build_runtime(config, log_sink=NullLogSink(), token=token)).run()
    assert report.outcome is RunOutcome.EXTERNAL_SIGNAL
    assert report.generator_status is GeneratorStatus.CANCELLED
    assert report.completion_message == "Cancelled by external signal."
    assert _read_ints(tmp_path / "primes.txt") == [2, 3]


def test_external_cancellation_completes_at_warning_level(tmp_path: Path) -> None:
    sink = _SpyLogSink()
    token = CancellationToken()
    token.cancel(CancelReason.EXTERNAL_SIGNAL)
    config = _config(tmp_path, search={"start_from": 7, "max_num_primes": 100})
    PipelineRunner(build_runtime(config, log_sink=sink, token=token)).run()
    last = sink.messages[-1]
    assert last.message == "Cancelled by external signal."
    assert last.level == "warning"


def test_unwritable_output_fails_before_any_work(tmp_path: Path) -> None:
    config = _config(tmp_path, output={"file_path": str(tmp_path / "missing" / "primes.txt")})
    runtime = build_runtime(config, log_sink=NullLogSink())
    with pytest.raises(OutputFileError):
        PipelineRunner(runtime).run()
    assert runtime.generator.emitted == 0
    assert runtime.token.is_cancelled() is False


def test_runner_logs_lifecycle(tmp_path: Path) -> None:
    sink = _SpyLogSink()
    config = _config(tmp_path, search={"start_from": 7, "max_num_primes": 3})
    PipelineRunner(build_runtime(config, log_sink=sink)).run()
    messages = [m.message for m in sink.messages]
    assert "pipeline started" in messages
    assert "found max num primes" in messages
    assert "worker threads finished" in messages
    assert "finished writing values to disk" in messages
    assert messages[-1] == "Found max num primes."


def test_cancel_on_interrupt_routes_sigint_to_token() -> None:
    token = CancellationToken()
    previous = signal.getsignal(signal.SIGINT)
    with cancel_on_interrupt(token):
        handler = signal.getsignal(signal.SIGINT)
        assert callable(handler)
        handler(signal.SIGINT, None)
    assert token.reason is CancelReason.EXTERNAL_SIGNAL
    assert signal.getsignal(signal.SIGINT) is previous


def test_resolve_outcome_requires_terminal_condition() -> None:
    with pytest.raises(RuntimeError):
        resolve_outcome(CancellationToken(), GeneratorStatus.CANCELLED)


def test_resolve_worker_count_defaults_to_host_parallelism() -> None:
    assert resolve_worker_count(3) == 3
    assert resolve_worker_count(None) >= 1
