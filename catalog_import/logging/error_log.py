from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error report buffer.

Holds the ordered per-row error report for one import run. flush() appends
the entries as JSON Lines to `logs/errors-YYYYMMDD-HHMMSS.log` (UTC); the
buffer keeps its records so the orchestrator can still itemize them.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory error report. Flush writes JSON Lines.

    - ファイルパスは初回アクセスで決定
    - スレッド安全性不要 (シリアル実行)
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._flushed = 0
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(self._records)

    def flush(self) -> Path | None:
        """Write records not yet flushed. Returns None when the report is empty."""
        if not self._records:
            return None
        pending = self._records[self._flushed:]
        fp = self.file_path
        if pending:
            with fp.open("a", encoding="utf-8") as f:
                for r in pending:
                    f.write(r.to_json_line() + "\n")
            self._flushed = len(self._records)
        return fp
