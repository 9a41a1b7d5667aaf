# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from catalog_import.db.product_store import InMemoryProductStore
from catalog_import.logging.init import reset_logging

FIXTURES_DIR = Path(__file__).parent / "fixtures"

HEADER = "Product Code,Product Name,Product Description,Stock,Cost in GBP,Discontinued"

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_logging():
    # 各テストで stdout (capsys) に紐づくハンドラを作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
  table: products
business_rules:
  min_cost: 5
  min_stock: 10
  max_cost: 1000
currency: gbp
encoding: utf-8-sig
logs_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Write a catalog CSV into data/ (header prepended unless header=None)."""
    def _write(name: str, *lines: str, header: str | None = HEADER) -> Path:
        path = temp_workdir / "data" / name
        body = ([header] if header is not None else []) + list(lines)
        path.write_text("\n".join(body) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture()
def fixture_path() -> Callable[[str], Path]:
    def _path(name: str) -> Path:
        return FIXTURES_DIR / name
    return _path


@pytest.fixture()
def store() -> InMemoryProductStore:
    return InMemoryProductStore()


@pytest.fixture()
def fixed_now() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
