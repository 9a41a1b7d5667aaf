from __future__ import annotations

from decimal import Decimal

import pytest

from catalog_import.db.product_store import InMemoryProductStore, UpsertAction
from catalog_import.models.product import Currency
from catalog_import.services.upsert import (
    DecisionKind,
    apply_decision,
    build_product,
    decide,
)


def _record(**overrides: str) -> dict[str, str]:
    record = {
        "Product Code": "P0001",
        "Product Name": "TV",
        "Product Description": "32in Tv",
        "Stock": "10",
        "Cost in GBP": "£399.99",
        "Discontinued": "",
    }
    record.update(overrides)
    return record


def test_build_product_example_row(fixed_now):
    product = build_product(_record(), now=fixed_now)
    assert product.code == "P0001"
    assert product.name == "TV"
    assert product.description == "32in Tv"
    assert product.stock == 10
    assert product.cost == Decimal("399.99")
    assert product.currency is Currency.GBP
    assert product.is_discontinued is False
    assert product.discontinued_date is None


def test_build_product_discontinued_sets_timestamp(fixed_now):
    product = build_product(_record(Discontinued="yes"), now=fixed_now)
    assert product.is_discontinued is True
    assert product.discontinued_date == fixed_now()


def test_build_product_defaults_for_absent_optional_fields(fixed_now):
    record = {"Product Code": "P9", "Product Name": "Radio", "Cost in GBP": "12"}
    product = build_product(record, now=fixed_now)
    assert product.description == ""
    assert product.stock == 0
    assert product.is_discontinued is False


def test_build_product_malformed_cost_becomes_zero(fixed_now):
    product = build_product(_record(**{"Cost in GBP": "call us"}), now=fixed_now)
    assert product.cost == Decimal("0")


def test_decide_live_and_dry_run(fixed_now):
    product = build_product(_record(), now=fixed_now)
    live = decide(product, dry_run=False)
    assert live.kind is DecisionKind.UPSERT
    assert live.key == "P0001"
    assert live.product.to_row()["cost"] == Decimal("399.99")
    assert live.product.to_row()["currency"] == "gbp"

    dry = decide(product, dry_run=True)
    assert dry.kind is DecisionKind.DRY_RUN


def test_apply_decision_dry_run_never_touches_store(fixed_now):
    store = InMemoryProductStore()
    decision = decide(build_product(_record(), now=fixed_now), dry_run=True)
    assert apply_decision(decision, store) is None
    assert store.upsert_calls == 0
    assert len(store) == 0


def test_apply_decision_is_idempotent_by_code(fixed_now):
    store = InMemoryProductStore()
    first = apply_decision(decide(build_product(_record(), now=fixed_now), False), store)
    second = apply_decision(
        decide(build_product(_record(**{"Product Name": "TV v2"}), now=fixed_now), False), store
    )
    assert first is UpsertAction.CREATED
    assert second is UpsertAction.UPDATED
    assert len(store) == 1
    assert store.get("P0001").name == "TV v2"


def test_apply_decision_requires_store_for_live(fixed_now):
    decision = decide(build_product(_record(), now=fixed_now), dry_run=False)
    with pytest.raises(ValueError):
        apply_decision(decision, None)
