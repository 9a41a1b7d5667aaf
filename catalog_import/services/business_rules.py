from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..models.config_models import BusinessRulesConfig
from ..models.product import NormalizedProduct

"""Business rule filter applied after validation and normalization.

A product is excluded (skipped, not persisted, not an error) when it is both
cheap and scarce, or implausibly expensive:

    (cost < min_cost and stock < min_stock) or cost > max_cost

All comparisons are strict. A row without a Stock value reaches this filter
with stock=0.
"""

__all__ = [
    "BusinessRules",
    "EXCLUSION_REASON",
]

EXCLUSION_REASON = "Cost below {min_cost} and stock below {min_stock} or cost above {max_cost}"


@dataclass(frozen=True)
class BusinessRules:
    min_cost: Decimal = Decimal("5")
    min_stock: int = 10
    max_cost: Decimal = Decimal("1000")

    @classmethod
    def from_config(cls, cfg: BusinessRulesConfig) -> BusinessRules:
        return cls(min_cost=cfg.min_cost, min_stock=cfg.min_stock, max_cost=cfg.max_cost)

    def is_excluded(self, product: NormalizedProduct) -> bool:
        cheap_and_scarce = product.cost < self.min_cost and product.stock < self.min_stock
        return cheap_and_scarce or product.cost > self.max_cost

    def exclusion_reason(self, product: NormalizedProduct) -> str | None:
        """Reason text when the product is excluded, otherwise None."""
        if not self.is_excluded(product):
            return None
        return EXCLUSION_REASON.format(
            min_cost=self.min_cost, min_stock=self.min_stock, max_cost=self.max_cost
        )
