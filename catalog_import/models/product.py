from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

"""Product domain model for the catalog importer.

NormalizedProduct is the validated, typed result of one CSV row. It is the
only shape that reaches the product store; the persisted `products` table
mirrors these fields one to one (cost stored as numeric(10,2)).
"""

__all__ = [
    "Currency",
    "NormalizedProduct",
    "PRODUCT_COLUMNS",
]

COST_PRECISION = Decimal("0.01")

# 永続化列順 (INSERT 文の列順と一致させる)
PRODUCT_COLUMNS: tuple[str, ...] = (
    "code",
    "name",
    "description",
    "stock",
    "cost",
    "currency",
    "is_discontinued",
    "discontinued_date",
)


class Currency(Enum):
    """Currency enumeration for stored product costs.

    The catalog feed only ever carries GBP prices.
    """
    GBP = "gbp"


@dataclass(frozen=True)
class NormalizedProduct:
    """Validated product record ready for upsert (keyed by `code`)."""
    code: str
    name: str
    cost: Decimal
    description: str = ""
    stock: int = 0
    currency: Currency = Currency.GBP
    is_discontinued: bool = False
    discontinued_date: datetime | None = None

    @property
    def stored_cost(self) -> Decimal:
        """Cost rounded to the fixed 2-decimal storage precision."""
        return self.cost.quantize(COST_PRECISION, rounding=ROUND_HALF_UP)

    def to_row(self) -> dict[str, Any]:
        """Column name -> value mapping in PRODUCT_COLUMNS order."""
        return {
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "stock": self.stock,
            "cost": self.stored_cost,
            "currency": self.currency.value,
            "is_discontinued": self.is_discontinued,
            "discontinued_date": self.discontinued_date,
        }

    def to_log_dict(self) -> dict[str, Any]:
        row = self.to_row()
        row["cost"] = str(row["cost"])
        if self.discontinued_date is not None:
            row["discontinued_date"] = self.discontinued_date.isoformat()
        return row
