from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import InvalidOperation
from enum import Enum
from typing import Any, Protocol

from ..models.product import PRODUCT_COLUMNS, NormalizedProduct

"""Product store: keyed "find or create by code, else update".

PostgresProductStore issues one INSERT ... ON CONFLICT (code) DO UPDATE per
product and commits it on its own, so a failing row never undoes the rows
before it. InMemoryProductStore implements the same contract for tests and
for DISABLE_DB_CONNECT=1 mock runs.

Expected table (managed outside this tool):

    CREATE TABLE products (
        id                bigserial PRIMARY KEY,
        code              varchar(255) NOT NULL UNIQUE,
        name              varchar(255) NOT NULL,
        description       text NOT NULL DEFAULT '',
        stock             integer NOT NULL DEFAULT 0,
        cost              numeric(10, 2) NOT NULL,
        currency          varchar(3) NOT NULL,
        is_discontinued   boolean NOT NULL DEFAULT false,
        discontinued_date timestamptz NULL,
        created_at        timestamptz NOT NULL DEFAULT now(),
        updated_at        timestamptz NOT NULL DEFAULT now()
    );
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    import psycopg2
    from psycopg2 import sql
except Exception:  # pragma: no cover
    psycopg2 = None  # type: ignore
    sql = None  # type: ignore

__all__ = [
    "InMemoryProductStore",
    "PostgresProductStore",
    "ProductStore",
    "UpsertAction",
    "UpsertError",
]


class UpsertError(Exception):
    """Raised when the store rejects an upsert. Message is the driver's message."""


class UpsertAction(Enum):
    CREATED = "created"
    UPDATED = "updated"


class ProductStore(Protocol):
    def upsert(self, product: NormalizedProduct) -> UpsertAction:
        """Insert the product, or overwrite every field of the row with the same code."""
        ...


def build_upsert_sql(table: str) -> Any:
    """INSERT ... ON CONFLICT (code) DO UPDATE statement for the given table.

    RETURNING (xmax = 0) is true only for freshly inserted rows.
    """
    if sql is None:
        raise UpsertError("psycopg2 not available")
    cols = sql.SQL(", ").join(sql.Identifier(c) for c in PRODUCT_COLUMNS)
    placeholders = sql.SQL(", ").join(sql.Placeholder(c) for c in PRODUCT_COLUMNS)
    updates = sql.SQL(", ").join(
        sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
        for c in PRODUCT_COLUMNS
        if c != "code"
    )
    return sql.SQL(
        "INSERT INTO {table} ({cols}) VALUES ({values}) "
        "ON CONFLICT ({key}) DO UPDATE SET {updates}, {updated_at} = now() "
        "RETURNING (xmax = 0) AS inserted"
    ).format(
        table=sql.Identifier(table),
        cols=cols,
        values=placeholders,
        key=sql.Identifier("code"),
        updates=updates,
        updated_at=sql.Identifier("updated_at"),
    )


class PostgresProductStore:
    """psycopg2-backed store. Each upsert is its own transaction."""

    def __init__(self, connection: Any, table: str = "products") -> None:
        self._conn = connection
        self._table = table
        self._statement: Any = None

    @property
    def statement(self) -> Any:
        if self._statement is None:
            self._statement = build_upsert_sql(self._table)
        return self._statement

    def upsert(self, product: NormalizedProduct) -> UpsertAction:
        statement = self.statement
        try:
            with self._conn.cursor() as cur:
                cur.execute(statement, product.to_row())
                row = cur.fetchone()
            self._conn.commit()
        except Exception as e:
            # 行単位で失敗を閉じる (後続行の処理を継続させる)
            try:
                self._conn.rollback()
            except Exception:  # pragma: no cover
                pass
            message = getattr(e, "pgerror", None) or str(e)
            raise UpsertError(message.strip()) from e
        inserted = bool(row[0]) if row else True
        return UpsertAction.CREATED if inserted else UpsertAction.UPDATED


@dataclass
class InMemoryProductStore:
    """Dict-backed store keyed by product code."""
    products: dict[str, NormalizedProduct] = field(default_factory=dict)
    upsert_calls: int = 0

    def upsert(self, product: NormalizedProduct) -> UpsertAction:
        self.upsert_calls += 1
        existed = product.code in self.products
        # 永続化精度 (小数2桁) に揃えて保持。丸められない値は DB の numeric overflow と同じく行エラー
        try:
            stored = replace(product, cost=product.stored_cost)
        except InvalidOperation as e:
            raise UpsertError(f"cost out of range: {product.cost}") from e
        self.products[product.code] = stored
        return UpsertAction.UPDATED if existed else UpsertAction.CREATED

    def get(self, code: str) -> NormalizedProduct | None:
        return self.products.get(code)

    def __len__(self) -> int:
        return len(self.products)
