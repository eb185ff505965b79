from .logging import (
    JsonlLogSink,
    LogMessage,
    NullLogSink,
    StageLogger,
    StdoutLogSink,
    build_log_sink,
)

__all__ = [
    "JsonlLogSink",
    "LogMessage",
    "NullLogSink",
    "StageLogger",
    "StdoutLogSink",
    "build_log_sink",
]
