from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TextIO

from prime_stream.domain.errors import OutputFileError
from prime_stream.ports.output_sink import OutputSink


@dataclass
class FileOutputSink(OutputSink):
    # Line-oriented file adapter; OSError is surfaced as OutputFileError so callers see one fatal type.
    path: Path
    mode: Literal["append", "truncate"] = "append"
    encoding: str = "utf-8"
    _handle: TextIO | None = field(default=None, init=False, repr=False)
    lines_written: int = field(default=0, init=False)

    def open(self) -> None:
        # Explicit open lets the pipeline fail before any thread starts; write_line opens lazily otherwise.
        if self._handle is not None:
            return
        file_mode = "a" if self.mode == "append" else "w"
        try:
            self._handle = self.path.open(file_mode, encoding=self.encoding)
        except OSError as exc:
            raise OutputFileError("open for writing", self.path, exc) from exc

    def write_line(self, line: str) -> None:
        if self._handle is None:
            self.open()
        assert self._handle is not None
        try:
            self._handle.write(line + "\n")
        except OSError as exc:
            raise OutputFileError("write", self.path, exc) from exc
        self.lines_written += 1

    def flush(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.flush()
        except OSError as exc:
            raise OutputFileError("flush", self.path, exc) from exc

    def close(self) -> None:
        # Close is idempotent to simplify shutdown paths.
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        try:
            handle.flush()
        except OSError as exc:
            raise OutputFileError("flush", self.path, exc) from exc
        finally:
            handle.close()
