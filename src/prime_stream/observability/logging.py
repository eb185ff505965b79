from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from prime_stream.domain.errors import OutputFileError
from prime_stream.ports.log_sink import LogSink

_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload shared by every pipeline stage.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in _LEVELS:
            raise ValueError(f"LogMessage level must be one of: {', '.join(_LEVELS)}")


class StdoutLogSink(LogSink):
    # Compact JSON per line on stdout; the lock keeps lines whole when several threads log.
    def __init__(self, *, min_level: str = "info") -> None:
        self._min_level = _LEVELS.index(min_level)
        self._lock = threading.Lock()

    def emit(self, message: LogMessage) -> None:
        if _LEVELS.index(message.level) < self._min_level:
            return
        line = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            print(line, flush=True)

    def close(self) -> None:
        return None


class JsonlLogSink(LogSink):
    # File-backed structured log sink; every record is flushed as it is written.
    def __init__(self, path: Path, *, min_level: str = "debug") -> None:
        self._path = path
        self._min_level = _LEVELS.index(min_level)
        self._lock = threading.Lock()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("a", encoding="utf-8")
        except OSError as exc:
            raise OutputFileError("open log file", self._path, exc) from exc

    def emit(self, message: LogMessage) -> None:
        if _LEVELS.index(message.level) < self._min_level:
            return
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            self._file.write(payload + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()


class NullLogSink(LogSink):
    # Discards everything; used when logging.sink is "none".
    def emit(self, message: LogMessage) -> None:
        _ = message

    def close(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class StageLogger:
    # Thin helper binding a stage name to a sink so call sites stay one-liners.
    sink: LogSink
    stage: str

    def debug(self, message: str, **fields: object) -> None:
        self._emit("debug", message, fields)

    def info(self, message: str, **fields: object) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: object) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, **fields: object) -> None:
        self._emit("error", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, object]) -> None:
        self.sink.emit(LogMessage(level=level, message=message, fields={"stage": self.stage, **fields}))


def build_log_sink(kind: str, path: str | None = None, level: str | None = None) -> LogSink:
    # Sink selector mirrors the logging section of AppConfig.
    if level is not None and level not in _LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    if kind == "stdout":
        return StdoutLogSink(min_level=level or "info")
    if kind == "jsonl":
        if not path:
            raise ValueError("logging.path is required when sink is 'jsonl'")
        return JsonlLogSink(Path(path), min_level=level or "debug")
    if kind == "none":
        return NullLogSink()
    raise ValueError(f"Unknown log sink: {kind}")


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": {key: _json_value(value) for key, value in message.fields.items()},
    }


def _json_value(value: object) -> object:
    # Arbitrary-precision ints beyond double precision stay exact as strings; enums log by value.
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool) or value is None or isinstance(value, (str, float)):
        return value
    if isinstance(value, int):
        return value if abs(value) < 2**53 else str(value)
    return str(value)
