from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

"""ErrorRecord model for the import error report.

Each entry describes one rejected row: the offending data and the list of
human-readable reasons. The same record is logged at the end of the run and
written as one JSON Lines entry to the error log file.
"""

__all__ = [
    "ErrorRecord",
    "ROW_LENGTH_MISMATCH",
    "VALIDATION_ERROR",
    "DATABASE_UPSERT_ERROR",
]

ROW_LENGTH_MISMATCH = "ROW_LENGTH_MISMATCH"
VALIDATION_ERROR = "VALIDATION_ERROR"
DATABASE_UPSERT_ERROR = "DATABASE_UPSERT_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error report entry.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: CSV filename being imported
        row: Row number in the file (header = 1)
        error_type: Error classification in UPPER_SNAKE_CASE format
        data: Offending row (field mapping or raw field list)
        errors: Failure reasons, in the order they were detected
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    error_type: str  # UPPER_SNAKE
    data: dict[str, str] | list[str]
    errors: list[str] = field(default_factory=list)

    @staticmethod
    def create(
        file: str,
        row: int,
        error_type: str,
        data: dict[str, str] | list[str],
        errors: list[str],
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            data=data,
            errors=list(errors),
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
