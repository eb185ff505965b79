from __future__ import annotations

from pathlib import Path


class OutputFileError(RuntimeError):
    # Fatal I/O failure on an output artifact (open, write, flush, delete).
    def __init__(self, action: str, path: Path, cause: OSError) -> None:
        super().__init__(f"cannot {action} {path}: {cause}")
        self.action = action
        self.path = path
        self.cause = cause


class PrimeFileFormatError(ValueError):
    # A line of a prime file is not a non-negative decimal integer.
    def __init__(self, path: Path, line_no: int, text: str) -> None:
        super().__init__(f"{path}:{line_no}: not a decimal integer: {text!r}")
        self.path = path
        self.line_no = line_no
        self.text = text
