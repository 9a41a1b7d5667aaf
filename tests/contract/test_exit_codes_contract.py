from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from catalog_import.cli import main as cli_main
from catalog_import.db.product_store import InMemoryProductStore, UpsertError

"""Exit code contract: 1 only for fatal conditions, 0 whatever the row outcomes."""


class RejectingStore(InMemoryProductStore):
    def upsert(self, product):
        raise UpsertError("permission denied for table products")


def test_exit_code_fatal_missing_file(temp_workdir: Path, capsys):
    assert cli_main(["nowhere.csv"]) == 1


def test_exit_code_zero_when_every_row_is_skipped(write_csv, capsys):
    path = write_csv("stock.csv", "broken", ",,,,,", "P0027,VCR,,5,£3.99,")
    with patch("catalog_import.cli.command._db_connect"):
        with patch("catalog_import.cli.command.PostgresProductStore", return_value=InMemoryProductStore()):
            assert cli_main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "successful=0 skipped=3" in out


def test_exit_code_zero_when_store_rejects_every_row(write_csv, capsys):
    path = write_csv("stock.csv", "P0001,TV,,10,£399.99,", "P0003,VCR,,12,£39.33,")
    with patch("catalog_import.cli.command._db_connect"):
        with patch("catalog_import.cli.command.PostgresProductStore", return_value=RejectingStore()):
            assert cli_main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "processed=2 successful=0 skipped=2" in out
    assert out.count("ERROR Error saving product") == 2


def test_exit_code_zero_for_dry_run(write_csv, capsys):
    path = write_csv("stock.csv", "P0001,TV,,10,£399.99,")
    assert cli_main([str(path), "--test"]) == 0
