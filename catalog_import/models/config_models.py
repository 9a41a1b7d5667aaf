from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

"""Config dataclasses for the catalog importer.

These are the typed shapes produced by catalog_import.config.loader. Every
field has a default so the importer runs without a config file.
"""

__all__ = [
    "BusinessRulesConfig",
    "DatabaseConfig",
    "ImportConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    table: str = "products"


@dataclass(frozen=True)
class BusinessRulesConfig:
    """Exclusion thresholds: (cost < min_cost and stock < min_stock) or cost > max_cost."""
    min_cost: Decimal = Decimal("5")
    min_stock: int = 10
    max_cost: Decimal = Decimal("1000")


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for one import run."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    business_rules: BusinessRulesConfig = field(default_factory=BusinessRulesConfig)
    currency: str = "gbp"
    encoding: str = "utf-8-sig"  # BOM 付き CSV も許容
    logs_dir: str = "./logs"
    log_file: str | None = None
