from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .error_record import ErrorRecord

"""Processing result models for the catalog importer.

ImportSummary aggregates the per-run counters and the audit trail returned by
the orchestrator. RowOutcome records what happened to every data row.
"""

__all__ = [
    "ImportSummary",
    "RowOutcome",
    "RowStatus",
]


class RowStatus(Enum):
    """Final state of a single data row.

    - IMPORTED: upserted into the product store
    - VALIDATED: accepted in dry-run mode (nothing written)
    - EXCLUDED: filtered out by business rules
    - INVALID_SHAPE: field count differs from the header
    - INVALID_DATA: one or more field rules violated
    - FAILED: the store rejected the upsert
    """
    IMPORTED = "imported"
    VALIDATED = "validated"
    EXCLUDED = "excluded"
    INVALID_SHAPE = "invalid_shape"
    INVALID_DATA = "invalid_data"
    FAILED = "failed"


@dataclass(frozen=True)
class RowOutcome:
    row_number: int
    status: RowStatus
    code: str | None = None  # 形状不一致行では不明
    message: str = ""


@dataclass(frozen=True)
class ImportSummary:
    """Aggregated result of one import run.

    processed counts rows that passed the shape and field validation stages;
    successful counts rows actually persisted; skipped counts rows rejected at
    any stage. created/updated split successful by upsert action.
    """
    file_name: str
    dry_run: bool
    processed: int
    successful: int
    skipped: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    created: int = 0
    updated: int = 0
    excluded: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)
    outcomes: list[RowOutcome] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status is RowStatus.FAILED)
