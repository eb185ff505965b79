from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from prime_stream.adapters.output_sink import FileOutputSink
from prime_stream.domain.errors import OutputFileError, PrimeFileFormatError
from prime_stream.observability.logging import NullLogSink, StageLogger

DEFAULT_FLUSH_EVERY_LINES = 10_000


def read_prime_file(path: Path) -> list[int]:
    # Strict reader: every line must be a plain non-negative decimal integer.
    try:
        handle = path.open("r", encoding="utf-8")
    except OSError as exc:
        raise OutputFileError("open for reading", path, exc) from exc

    values: list[int] = []
    with handle:
        try:
            for line_no, raw in enumerate(handle, start=1):
                text = raw.rstrip("\n")
                if not (text.isascii() and text.isdigit()):
                    raise PrimeFileFormatError(path, line_no, text)
                values.append(int(text))
        except OSError as exc:
            raise OutputFileError("read", path, exc) from exc
    return values


@dataclass(frozen=True, slots=True)
class FinalSortPass:
    # Post-processing: exact global sort of the presorted file, then the intermediate file is removed.
    presorted_path: Path
    final_path: Path
    flush_every_lines: int = DEFAULT_FLUSH_EVERY_LINES
    log: StageLogger = field(default_factory=lambda: StageLogger(NullLogSink(), "final_sort"))

    def __post_init__(self) -> None:
        if self.flush_every_lines <= 0:
            raise ValueError("flush_every_lines must be positive")
        if self.presorted_path == self.final_path:
            raise ValueError("presorted and final paths must differ")

    def run(self) -> int:
        # Parsing completes before the final file is opened, so a bad line never yields a partial result.
        values = sorted(read_prime_file(self.presorted_path))
        self._write(values)
        try:
            self.presorted_path.unlink()
        except OSError as exc:
            raise OutputFileError("delete", self.presorted_path, exc) from exc
        self.log.info("final sort complete", total=len(values), path=str(self.final_path))
        return len(values)

    def _write(self, values: list[int]) -> None:
        sink = FileOutputSink(self.final_path, mode="truncate")
        sink.open()
        try:
            for index, value in enumerate(values, start=1):
                sink.write_line(str(value))
                if index % self.flush_every_lines == 0:
                    sink.flush()
        finally:
            sink.close()
