from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from prime_stream.services.primality import DEFAULT_PROBABILISTIC_CEILING, DETERMINISTIC_LIMIT

# Config models map YAML sections (and CLI overrides) to typed structures.
# Fields that may carry arbitrary-precision ints are checked in validators rather than Field constraints.


class SearchConfig(BaseModel):
    # What to search for: where to start and how many primes to find.
    model_config = ConfigDict(extra="forbid")
    start_from: int = 5
    max_num_primes: int = 1_000_000
    # Optional upper bound on candidates; emulates a fixed-width integer build when set.
    max_candidate: int | None = None

    @model_validator(mode="after")
    def _check_search(self) -> SearchConfig:
        if self.start_from % 2 == 0:
            raise ValueError("start_from must not be even")
        if self.start_from < 5:
            raise ValueError("start_from must be >= 5")
        if self.max_num_primes <= 0:
            raise ValueError("max_num_primes must be positive")
        if self.max_candidate is not None and self.max_candidate < self.start_from:
            raise ValueError("max_candidate must be >= start_from")
        return self


class PipelineConfig(BaseModel):
    # Queue capacity and worker fan-out.
    model_config = ConfigDict(extra="forbid")
    max_buffer: int = Field(default=10_000, gt=0)
    # None resolves to the host parallelism at composition time.
    workers: int | None = Field(default=None, gt=0, validation_alias=AliasChoices("workers", "max_threads"))
    poll_interval_seconds: float = Field(default=0.05, gt=0)


class PrimalityConfig(BaseModel):
    # Fast probabilistic path is opt-in and bounded by a ceiling below which it is exact.
    model_config = ConfigDict(extra="forbid")
    probabilistic: bool = False
    probabilistic_ceiling: int = DEFAULT_PROBABILISTIC_CEILING
    probabilistic_rounds: int = Field(default=0, ge=0)
    seed: int | None = None

    @model_validator(mode="after")
    def _check_ceiling(self) -> PrimalityConfig:
        if self.probabilistic_ceiling <= 0:
            raise ValueError("probabilistic_ceiling must be positive")
        if self.probabilistic_ceiling > DETERMINISTIC_LIMIT:
            raise ValueError(f"probabilistic_ceiling must be <= {DETERMINISTIC_LIMIT}")
        return self


class OutputConfig(BaseModel):
    # Output artifacts; the presorted file only exists while final_sort is pending.
    model_config = ConfigDict(extra="forbid")
    file_path: str = Field(
        default="found_primes.txt",
        min_length=1,
        validation_alias=AliasChoices("file_path", "file"),
    )
    final_sort: bool = False
    presorted_suffix: str = Field(default=".presorted", min_length=1)
    flush_every_lines: int = Field(default=10_000, gt=0)


class LoggingConfig(BaseModel):
    # Structured log sink selector; only one sink is active at a time.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["stdout", "jsonl", "none"] = "stdout"
    path: str | None = None
    # None keeps the sink's own threshold: info on stdout, debug in a JSONL file.
    level: Literal["debug", "info", "warning", "error"] | None = None

    @model_validator(mode="after")
    def _require_path(self) -> LoggingConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("path is required when sink is 'jsonl'")
        return self


class AppConfig(BaseModel):
    # AppConfig is the top-level typed view of configuration.
    model_config = ConfigDict(extra="forbid")
    # Schema version of the YAML layout; only version 1 exists.
    version: Literal[1] = 1
    search: SearchConfig = Field(default_factory=SearchConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    primality: PrimalityConfig = Field(default_factory=PrimalityConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
