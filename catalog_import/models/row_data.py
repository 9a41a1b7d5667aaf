from __future__ import annotations

from dataclasses import dataclass

"""Row models for the catalog importer.

RawRow is one data line of the CSV after syntactic splitting. The row_number
refers to the physical record position in the file (header = row 1, so the
first data row is row 2).
"""

__all__ = [
    "RawRow",
    "ParsedRecord",
    "RowValidation",
    "ValidationFailure",
]

# Field name -> trimmed string value
ParsedRecord = dict[str, str]


@dataclass(frozen=True)
class RawRow:
    """Ordered string fields, positionally aligned with the header."""
    row_number: int
    values: list[str]

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class ValidationFailure:
    """All failure reasons collected for a single row.

    data holds the ParsedRecord when the row had the right shape, otherwise
    the raw field list.
    """
    row_number: int
    data: ParsedRecord | list[str]
    reasons: list[str]
    shape_mismatch: bool = False


@dataclass(frozen=True)
class RowValidation:
    """Validator result: exactly one of record / failure is set."""
    record: ParsedRecord | None = None
    failure: ValidationFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None
