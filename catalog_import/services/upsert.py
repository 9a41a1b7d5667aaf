from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from ..db.product_store import ProductStore, UpsertAction
from ..models.product import Currency, NormalizedProduct
from ..models.row_data import ParsedRecord
from .normalizer import normalize_cost, normalize_stock
from .validator import (
    CODE_FIELD,
    COST_FIELD,
    DESCRIPTION_FIELD,
    DISCONTINUED_FIELD,
    DISCONTINUED_TOKEN,
    NAME_FIELD,
    STOCK_FIELD,
)

"""Upsert decision engine.

build_product turns a validated ParsedRecord into a NormalizedProduct
(cost/stock normalization, discontinued flag and timestamp). decide maps the
product to an idempotent create-or-update keyed by code, or to a no-op in
dry-run mode. apply_decision executes an UPSERT decision against the store;
UpsertError propagates to the caller.
"""

__all__ = [
    "DecisionKind",
    "UpsertDecision",
    "apply_decision",
    "build_product",
    "decide",
]


def utc_now() -> datetime:
    return datetime.now(UTC)


class DecisionKind(Enum):
    UPSERT = "upsert"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class UpsertDecision:
    kind: DecisionKind
    key: str  # product code
    product: NormalizedProduct


def build_product(
    record: ParsedRecord,
    now: Callable[[], datetime] = utc_now,
    currency: Currency = Currency.GBP,
) -> NormalizedProduct:
    """Normalize a validated record into a typed product."""
    discontinued = record.get(DISCONTINUED_FIELD, "") == DISCONTINUED_TOKEN
    return NormalizedProduct(
        code=record[CODE_FIELD],
        name=record[NAME_FIELD],
        description=record.get(DESCRIPTION_FIELD, ""),
        stock=normalize_stock(record.get(STOCK_FIELD)),
        cost=normalize_cost(record.get(COST_FIELD)),
        currency=currency,
        is_discontinued=discontinued,
        discontinued_date=now() if discontinued else None,
    )


def decide(product: NormalizedProduct, dry_run: bool) -> UpsertDecision:
    kind = DecisionKind.DRY_RUN if dry_run else DecisionKind.UPSERT
    return UpsertDecision(kind=kind, key=product.code, product=product)


def apply_decision(decision: UpsertDecision, store: ProductStore | None) -> UpsertAction | None:
    """Run the decision. Returns None for dry-run decisions (store untouched)."""
    if decision.kind is DecisionKind.DRY_RUN:
        return None
    if store is None:
        raise ValueError("product store is required for non dry-run upserts")
    return store.upsert(decision.product)
