from __future__ import annotations

import re
from collections.abc import Sequence

from ..models.row_data import ParsedRecord, RawRow, RowValidation, ValidationFailure

"""Row validator for catalog CSV rows.

Checks run in two steps:
1. Row shape: field count must equal the header length. A mismatch fails
   immediately and no field rule is evaluated.
2. Field rules: every rule runs and every failure is collected, so one
   ValidationFailure lists all problems of the row.

Failures are returned as values (RowValidation), never raised.
"""

__all__ = [
    "COST_FIELD",
    "CODE_FIELD",
    "DESCRIPTION_FIELD",
    "DISCONTINUED_FIELD",
    "DISCONTINUED_TOKEN",
    "NAME_FIELD",
    "ROW_LENGTH_MISMATCH_MESSAGE",
    "STOCK_FIELD",
    "validate_row",
]

CODE_FIELD = "Product Code"
NAME_FIELD = "Product Name"
DESCRIPTION_FIELD = "Product Description"
STOCK_FIELD = "Stock"
COST_FIELD = "Cost in GBP"
DISCONTINUED_FIELD = "Discontinued"

DISCONTINUED_TOKEN = "yes"
MAX_STRING_LENGTH = 255

ROW_LENGTH_MISMATCH_MESSAGE = "Invalid format! Row does not match header length"

_INTEGER = re.compile(r"^[+-]?\d+$")


def _present(record: ParsedRecord, field: str) -> bool:
    # 空文字は未指定扱い
    return record.get(field, "") != ""


def _required_string(record: ParsedRecord, field: str, max_length: int | None) -> list[str]:
    if not _present(record, field):
        return [f"The {field} field is required."]
    if max_length is not None and len(record[field]) > max_length:
        return [f"The {field} field must not be greater than {max_length} characters."]
    return []


def _check_stock(record: ParsedRecord) -> list[str]:
    if _present(record, STOCK_FIELD) and not _INTEGER.match(record[STOCK_FIELD]):
        return [f"The {STOCK_FIELD} field must be an integer."]
    return []


def _check_discontinued(record: ParsedRecord) -> list[str]:
    if _present(record, DISCONTINUED_FIELD) and record[DISCONTINUED_FIELD] != DISCONTINUED_TOKEN:
        return [f"The selected {DISCONTINUED_FIELD} is invalid."]
    return []


def check_record(record: ParsedRecord) -> list[str]:
    """Apply all field rules to a parsed record and return every failure reason."""
    reasons: list[str] = []
    reasons += _required_string(record, CODE_FIELD, MAX_STRING_LENGTH)
    reasons += _required_string(record, NAME_FIELD, MAX_STRING_LENGTH)
    # Product Description: 任意・長さ制限なし
    reasons += _check_stock(record)
    reasons += _required_string(record, COST_FIELD, None)
    reasons += _check_discontinued(record)
    return reasons


def validate_row(header: Sequence[str], row: RawRow) -> RowValidation:
    """Validate one raw row against the header and the field rules."""
    if len(row.values) != len(header):
        return RowValidation(
            failure=ValidationFailure(
                row_number=row.row_number,
                data=list(row.values),
                reasons=[ROW_LENGTH_MISMATCH_MESSAGE],
                shape_mismatch=True,
            )
        )

    record: ParsedRecord = {
        name: value.strip() for name, value in zip(header, row.values, strict=True)
    }
    reasons = check_record(record)
    if reasons:
        return RowValidation(
            failure=ValidationFailure(row_number=row.row_number, data=record, reasons=reasons)
        )
    return RowValidation(record=record)
