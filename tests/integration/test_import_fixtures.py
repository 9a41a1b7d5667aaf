from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from catalog_import.cli import main as cli_main
from catalog_import.db.product_store import InMemoryProductStore
from catalog_import.services.orchestrator import run_import

"""End-to-end imports of the CSV fixtures in tests/fixtures.

run_import is driven against the in-memory store; the CLI variant swaps the
Postgres store for the same fake so no database is needed.
"""


def test_valid_data_fixture(fixture_path, store, fixed_now, temp_workdir):
    summary = run_import(fixture_path("stock_valid_data.csv"), store, now=fixed_now)

    assert summary.processed == 3
    assert summary.successful == 3
    assert summary.skipped == 0

    tv = store.get("P0001")
    assert tv.name == "TV"
    assert tv.description == "32” Tv"
    assert tv.stock == 10
    assert tv.cost == Decimal("399.99")
    assert tv.currency.value == "gbp"
    assert tv.is_discontinued is False
    assert tv.discontinued_date is None

    cd = store.get("P0002")
    assert cd.name == "Cd Player"
    assert cd.description == "Nice CD player"
    assert cd.stock == 11
    assert cd.cost == Decimal("50.12")
    assert cd.is_discontinued is True
    assert cd.discontinued_date == fixed_now()

    vcr = store.get("P0003")
    assert vcr.description == "Top notch VCR, with remote"
    assert vcr.cost == Decimal("39.33")


def test_invalid_data_fixture(fixture_path, store, temp_workdir):
    summary = run_import(fixture_path("stock_invalid_data.csv"), store)

    assert sorted(store.products) == ["P0010"]
    assert store.get("P0011") is None
    assert store.get("P0017") is None
    assert summary.processed == 1
    assert summary.successful == 1
    assert summary.skipped == 5
    assert [e.error_type for e in summary.errors] == [
        "VALIDATION_ERROR",      # P0011: cost missing
        "ROW_LENGTH_MISMATCH",   # P0017: unquoted comma in description
        "VALIDATION_ERROR",      # P0018: Discontinued=no
        "VALIDATION_ERROR",      # P0019: Stock=ten
        "VALIDATION_ERROR",      # code / name / cost missing
    ]
    assert summary.errors[-1].errors == [
        "The Product Code field is required.",
        "The Product Name field is required.",
        "The Cost in GBP field is required.",
    ]


def test_business_logic_fixture(fixture_path, store, temp_workdir):
    summary = run_import(fixture_path("stock_business_logic.csv"), store)

    assert store.get("P0027") is None  # cost < 5 and stock < 10
    assert store.get("P0028") is None  # cost > 1000
    assert store.get("P0031") is None  # stock absent -> 0, cost < 5
    assert store.get("P0029") is not None  # cost == 5, stock == 10
    assert store.get("P0030").cost == Decimal("1000.00")
    assert summary.processed == 5
    assert summary.successful == 2
    assert summary.excluded == 3
    assert summary.skipped == 3
    assert summary.errors == []


def test_cli_imports_fixture_twice_without_duplicates(fixture_path, temp_workdir, capsys):
    memory = InMemoryProductStore()
    with patch("catalog_import.cli.command._db_connect"):
        with patch("catalog_import.cli.command.PostgresProductStore", return_value=memory):
            assert cli_main([str(fixture_path("stock_valid_data.csv"))]) == 0
            assert cli_main([str(fixture_path("stock_valid_data.csv"))]) == 0

    out = capsys.readouterr().out
    assert len(memory) == 3
    assert "created=3 updated=0" in out
    assert "created=0 updated=3" in out


def test_cli_dry_run_fixture_leaves_store_untouched(fixture_path, temp_workdir, capsys):
    memory = InMemoryProductStore()
    with patch("catalog_import.cli.command.PostgresProductStore", return_value=memory):
        assert cli_main([str(fixture_path("stock_invalid_data.csv")), "--test"]) == 0
    assert memory.upsert_calls == 0
    assert "mode=dry-run processed=1 successful=0 skipped=5" in capsys.readouterr().out
