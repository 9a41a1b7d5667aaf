from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.product_store import ProductStore, UpsertAction, UpsertError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import get_logger, log_summary
from ..models.error_record import (
    DATABASE_UPSERT_ERROR,
    ROW_LENGTH_MISMATCH,
    VALIDATION_ERROR,
    ErrorRecord,
)
from ..models.processing_result import ImportSummary, RowOutcome, RowStatus
from ..models.product import Currency
from ..models.row_data import ParsedRecord, ValidationFailure
from ..parsing.reader import read_catalog
from .business_rules import BusinessRules
from .progress import RowProgressTracker
from .summary import render_summary_line
from .upsert import DecisionKind, apply_decision, build_product, decide, utc_now
from .validator import CODE_FIELD, validate_row

"""Import orchestration for the product catalog importer.

run_import drives every data row through parse -> validate -> normalize ->
business rules -> upsert decision, sequentially and in file order. It owns the
per-run counters and the error report, and is the only component that talks
to the product store and the logger.

No row-level failure aborts the run. Only a missing input file (or an empty
header) raises, before any row is processed.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "run_import",
]


class ProcessingError(Exception):
    """Base exception for run-level (fatal) processing errors."""


def _fmt(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _record_failure(
    failure: ValidationFailure, file_name: str, error_log: ErrorLogBuffer
) -> RowOutcome:
    if failure.shape_mismatch:
        logger.warning(
            "%s row=%d row_data=%s",
            failure.reasons[0],
            failure.row_number,
            _fmt(failure.data),
        )
        error_type = ROW_LENGTH_MISMATCH
        status = RowStatus.INVALID_SHAPE
        code = None
    else:
        logger.warning(
            "Validation failed row=%d data=%s errors=%s",
            failure.row_number,
            _fmt(failure.data),
            _fmt(failure.reasons),
        )
        error_type = VALIDATION_ERROR
        status = RowStatus.INVALID_DATA
        code = None
        if isinstance(failure.data, dict):
            code = failure.data.get(CODE_FIELD) or None
    error_log.append(
        ErrorRecord.create(
            file=file_name,
            row=failure.row_number,
            error_type=error_type,
            data=failure.data,
            errors=failure.reasons,
        )
    )
    return RowOutcome(
        row_number=failure.row_number, status=status, code=code, message="; ".join(failure.reasons)
    )


def _emit_report(summary: ImportSummary, error_log: ErrorLogBuffer) -> None:
    # log_summary が "SUMMARY " を付与するため先頭ラベルを除去
    log_summary(render_summary_line(summary)[len("SUMMARY "):])
    if not len(error_log):
        return
    logger.info("Errors report:")
    for rec in error_log:
        logger.error(
            "Error during import row=%d type=%s data=%s errors=%s",
            rec.row,
            rec.error_type,
            _fmt(rec.data),
            _fmt(rec.errors),
        )


def run_import(
    path: Path,
    store: ProductStore | None = None,
    *,
    dry_run: bool = False,
    rules: BusinessRules | None = None,
    encoding: str = "utf-8-sig",
    currency: Currency = Currency.GBP,
    error_log: ErrorLogBuffer | None = None,
    now: Callable[[], datetime] = utc_now,
) -> ImportSummary:
    """Import one catalog file into the product store.

    Args:
        path: CSV catalog file
        store: Product store (may be None only when dry_run is set)
        dry_run: Validate and decide without touching the store
        rules: Business exclusion thresholds (defaults 5 / 10 / 1000)
        encoding: Input file encoding
        currency: Currency stamped on every product
        error_log: Error report buffer (a fresh one per run by default)
        now: Clock used for discontinued_date

    Returns:
        ImportSummary with counters, error report and per-row outcomes

    Raises:
        ImportFileNotFoundError: input file missing (nothing processed)
        HeaderError: header line missing or empty
        ProcessingError: live run requested without a store
    """
    if store is None and not dry_run:
        raise ProcessingError("a product store is required unless dry_run is set")
    get_logger()  # アプリケーションロガー未設定なら初期化
    rules = rules or BusinessRules()
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    start_time = datetime.now(UTC)
    catalog = read_catalog(path, encoding=encoding)
    file_name = path.name
    logger.info("Importing products from: %s (dry_run=%s)", path, dry_run)
    logger.debug("header=%s", catalog.header)

    processed = 0
    successful = 0
    skipped = 0
    created = 0
    updated = 0
    excluded = 0
    outcomes: list[RowOutcome] = []

    with RowProgressTracker(file_name) as progress:
        for row in catalog.rows:
            validation = validate_row(catalog.header, row)
            if validation.failure is not None:
                skipped += 1
                outcomes.append(_record_failure(validation.failure, file_name, error_log))
                progress.advance(ok=successful, skipped=skipped)
                continue

            processed += 1
            record: ParsedRecord = validation.record  # type: ignore[assignment]
            product = build_product(record, now=now, currency=currency)

            reason = rules.exclusion_reason(product)
            if reason is not None:
                skipped += 1
                excluded += 1
                logger.info(
                    "Skipped product due to business logic row=%d data=%s reason=%s",
                    row.row_number,
                    _fmt(record),
                    reason,
                )
                outcomes.append(
                    RowOutcome(row.row_number, RowStatus.EXCLUDED, product.code, reason)
                )
                progress.advance(ok=successful, skipped=skipped)
                continue

            decision = decide(product, dry_run=dry_run)
            if decision.kind is DecisionKind.DRY_RUN:
                logger.debug("dry-run: would upsert code=%s", decision.key)
                outcomes.append(
                    RowOutcome(row.row_number, RowStatus.VALIDATED, product.code, "dry-run")
                )
                progress.advance(ok=successful, skipped=skipped)
                continue

            try:
                action = apply_decision(decision, store)
            except UpsertError as e:
                skipped += 1
                logger.error(
                    "Error saving product row=%d data=%s error=%s",
                    row.row_number,
                    _fmt(record),
                    e,
                )
                error_log.append(
                    ErrorRecord.create(
                        file=file_name,
                        row=row.row_number,
                        error_type=DATABASE_UPSERT_ERROR,
                        data=record,
                        errors=[str(e)],
                    )
                )
                outcomes.append(RowOutcome(row.row_number, RowStatus.FAILED, product.code, str(e)))
                progress.advance(ok=successful, skipped=skipped)
                continue

            successful += 1
            if action is UpsertAction.CREATED:
                created += 1
            else:
                updated += 1
            logger.info(
                "Product imported successfully row=%d action=%s product=%s",
                row.row_number,
                action.value if action is not None else "-",
                _fmt(product.to_log_dict()),
            )
            outcomes.append(
                RowOutcome(
                    row.row_number,
                    RowStatus.IMPORTED,
                    product.code,
                    action.value if action is not None else "",
                )
            )
            progress.advance(ok=successful, skipped=skipped)

    try:
        report_path = error_log.flush()
        if report_path is not None:
            logger.info("Error report written to: %s", report_path)
    except OSError as e:
        # レポートファイル書き込み失敗で取り込み結果自体は失敗扱いにしない
        logger.warning("failed to write error report file: %s", e)

    end_time = datetime.now(UTC)
    summary = ImportSummary(
        file_name=file_name,
        dry_run=dry_run,
        processed=processed,
        successful=successful,
        skipped=skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        created=created,
        updated=updated,
        excluded=excluded,
        errors=error_log.records,
        outcomes=outcomes,
    )
    _emit_report(summary, error_log)
    return summary
