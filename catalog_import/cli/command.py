from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from catalog_import.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    default_config,
    load_config,
    resolve_dsn,
)
from catalog_import.db.product_store import InMemoryProductStore, PostgresProductStore, ProductStore
from catalog_import.logging.error_log import ErrorLogBuffer
from catalog_import.logging.init import add_file_handler, set_debug, setup_logging
from catalog_import.models.config_models import ImportConfig
from catalog_import.models.product import Currency
from catalog_import.parsing.reader import HeaderError, ImportFileNotFoundError
from catalog_import.services.business_rules import BusinessRules
from catalog_import.services.orchestrator import ProcessingError, run_import

"""CLI entrypoint: import products from a CSV catalog file.

    catalog-import FILE [--test] [--config PATH] [--debug] [--inspect-data]

Flow:
- Load .env and config (config/import.yml when present, defaults otherwise)
- Check the input file exists (fatal otherwise, nothing processed)
- Open the product store (skipped in --test dry-run mode)
- Run the import; exit 0 regardless of how many rows were skipped
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _db_connect(cfg: ImportConfig) -> Any:  # pragma: no cover (thin wrapper; tested via integration)
    """Open a psycopg2 connection.

    autocommit は無効。PostgresProductStore が1行ごとに COMMIT / ROLLBACK する。
    """
    import psycopg2

    conn = psycopg2.connect(resolve_dsn(cfg.database, dict(os.environ)))
    conn.autocommit = False
    return conn


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True により .env の値で既存環境変数を上書きし、PostgreSQL 接続情報を最優先化。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import products from a CSV file")
    p.add_argument("file", help="Path to the CSV catalog file")
    p.add_argument(
        "--test",
        action="store_true",
        help="Dry-run: validate and report without writing to the database",
    )
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/import.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first rows then exit")
    return p.parse_args(argv)


def _load_config(config_path: Path | None) -> ImportConfig:
    if config_path is not None:
        return load_config(config_path)
    # 既定パスに設定ファイルが無ければ既定値で実行
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _inspect_data(path: Path, cfg: ImportConfig, rows: int = 5) -> int:
    import pandas as pd

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            nrows=rows,
            encoding=cfg.encoding,
            on_bad_lines="skip",
            engine="python",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        print(f"inspect: read_error: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name}")
    print(f"  columns={list(df.columns)}")
    print("  sample_rows=", df.to_dict(orient="records"))
    return EXIT_SUCCESS


def _run(path: Path, cfg: ImportConfig, dry_run: bool, store: ProductStore | None) -> None:
    run_import(
        path,
        store,
        dry_run=dry_run,
        rules=BusinessRules.from_config(cfg.business_rules),
        encoding=cfg.encoding,
        currency=Currency(cfg.currency),
        error_log=ErrorLogBuffer(Path(cfg.logs_dir)),
    )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: 空リスト [] はそのまま使う。None のときのみシステム引数を読む。
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if cfg.log_file:
        add_file_handler(Path(cfg.log_file))
    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    path = Path(args.file)
    if not path.is_file():
        logger.error(f"File does not exist: {path}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(path, cfg)

    try:
        if args.test:
            logger.info("test mode: no changes will be written")
            _run(path, cfg, dry_run=True, store=None)
        elif os.getenv("DISABLE_DB_CONNECT") == "1":
            # DB 接続を完全に無効化 (テスト・動作確認用): メモリ上のストアへ書き込む
            logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
            _run(path, cfg, dry_run=False, store=InMemoryProductStore())
        else:
            try:
                conn = _db_connect(cfg)
            except Exception as db_e:
                logger.error(f"database connection failed: {db_e}")
                return EXIT_FATAL
            try:
                _run(path, cfg, dry_run=False, store=PostgresProductStore(conn, table=cfg.database.table))
            finally:
                conn.close()
    except (ImportFileNotFoundError, HeaderError, ProcessingError) as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    return EXIT_SUCCESS
