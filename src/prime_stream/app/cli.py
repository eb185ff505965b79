from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from prime_stream.config.loader import ConfigError, load_config
from prime_stream.domain.errors import OutputFileError, PrimeFileFormatError
from prime_stream.kernel.composition_root import build_runtime
from prime_stream.kernel.runner import PipelineRunner, cancel_on_interrupt
from prime_stream.observability.logging import StageLogger, StdoutLogSink, build_log_sink
from prime_stream.usecases.config_models import AppConfig

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2

# NOTE: This CLI module is a thin wrapper around composition root wiring; pipeline logic lives in kernel/usecases.


def build_parser() -> argparse.ArgumentParser:
    # Flag names follow the original tool; every flag overrides the matching YAML value.
    parser = argparse.ArgumentParser(prog="prime-stream", description="Concurrent prime number generator")
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument("--max-num-primes", type=int, help="The maximum number of primes to compute")
    parser.add_argument(
        "--max-buffer",
        type=int,
        help="The maximum number of values to store in the buffers between operations",
    )
    parser.add_argument("--output-filename", help="The file to write prime numbers to")
    parser.add_argument("--start-from", type=int, help="The number from which to start searching for primes")
    parser.add_argument(
        "--max-threads",
        type=int,
        help=f"The number of primality workers (default: host parallelism, {os.cpu_count() or 1})",
    )
    parser.add_argument("--max-candidate", type=int, help="Stop generating candidates above this value")
    parser.add_argument(
        "--probabilistic",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use the fast Miller-Rabin path below the configured ceiling",
    )
    parser.add_argument(
        "--final-sort",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exactly sort the output once the pipeline has finished",
    )
    parser.add_argument("--log-path", help="Write JSONL logs to this file instead of stdout")
    parser.add_argument(
        "--log-level",
        choices=("debug", "info", "warning", "error"),
        help="Lowest log level to emit",
    )
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Parse CLI arguments; caller passes argv for testability.
    return build_parser().parse_args(argv)


def cli_overrides(args: argparse.Namespace) -> dict[str, dict[str, Any]]:
    # CLI overrides take precedence over config; None means the flag was not given.
    overrides: dict[str, dict[str, Any]] = {
        "search": {
            "start_from": args.start_from,
            "max_num_primes": args.max_num_primes,
            "max_candidate": args.max_candidate,
        },
        "pipeline": {"max_buffer": args.max_buffer, "workers": args.max_threads},
        "primality": {"probabilistic": args.probabilistic},
        "output": {"file_path": args.output_filename, "final_sort": args.final_sort},
        "logging": {"level": args.log_level},
    }
    if args.log_path is not None:
        overrides["logging"].update({"sink": "jsonl", "path": args.log_path})
    return overrides


def resolve_config(args: argparse.Namespace) -> AppConfig:
    config_path = Path(args.config) if args.config else None
    return load_config(config_path, cli_overrides(args))


def run(argv: Sequence[str] | None = None) -> int:
    # Configuration errors are reported before any work begins; cancellation is a normal exit.
    args = parse_args(argv)
    console = StageLogger(StdoutLogSink(), "cli")
    try:
        config = resolve_config(args)
    except ConfigError as exc:
        console.error("configuration error", error=str(exc))
        return EXIT_CONFIG_ERROR

    try:
        log_sink = build_log_sink(config.logging.sink, config.logging.path, config.logging.level)
    except OutputFileError as exc:
        console.error("cannot open log sink", error=str(exc))
        return EXIT_RUN_FAILED

    log = StageLogger(log_sink, "cli")
    try:
        runtime = build_runtime(config, log_sink=log_sink)
        with cancel_on_interrupt(runtime.token):
            PipelineRunner(runtime).run()
    except (OutputFileError, PrimeFileFormatError) as exc:
        log.error("run aborted", error=str(exc))
        return EXIT_RUN_FAILED
    finally:
        log_sink.close()
    return EXIT_OK
