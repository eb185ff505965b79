from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from prime_stream.observability.logging import LogMessage


# LogSink port receives structured log records from every pipeline stage.
@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: "LogMessage") -> None:
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")

    def close(self) -> None:
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")
