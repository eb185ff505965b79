from __future__ import annotations

from typing import Protocol, runtime_checkable


# OutputSink port defines how confirmed primes leave the pipeline as text lines.
@runtime_checkable
class OutputSink(Protocol):
    def write_line(self, line: str) -> None:
        """Write a single output line (without the trailing newline)."""
        # Port contract has no implementation; calling it directly is a wiring error.
        raise NotImplementedError("OutputSink is a port; use a concrete adapter.")

    def flush(self) -> None:
        """Push buffered lines to durable storage."""
        raise NotImplementedError("OutputSink is a port; use a concrete adapter.")

    def close(self) -> None:
        """Finalize and release resources held by the sink."""
        raise NotImplementedError("OutputSink is a port; use a concrete adapter.")
