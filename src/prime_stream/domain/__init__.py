from .errors import OutputFileError, PrimeFileFormatError
from .outcomes import (
    COMPLETION_MESSAGES,
    CancelReason,
    GeneratorStatus,
    RunOutcome,
    RunReport,
    WorkerStats,
)

# Public domain exports keep imports explicit across layers.
__all__ = [
    "COMPLETION_MESSAGES",
    "CancelReason",
    "GeneratorStatus",
    "OutputFileError",
    "PrimeFileFormatError",
    "RunOutcome",
    "RunReport",
    "WorkerStats",
]
