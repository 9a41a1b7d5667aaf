from __future__ import annotations

import json
from pathlib import Path

from catalog_import.logging.error_log import ErrorLogBuffer
from catalog_import.models.error_record import ErrorRecord


def _rec(row: int) -> ErrorRecord:
    return ErrorRecord.create("stock.csv", row, "VALIDATION_ERROR", {"Product Code": f"P{row}"}, ["bad"])


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines_and_keeps_records(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(_rec(2))
    buf.append(_rec(3))
    fp = buf.flush()

    assert fp is not None and fp.name.startswith("errors-") and fp.suffix == ".log"
    rows = [json.loads(line)["row"] for line in fp.read_text(encoding="utf-8").splitlines()]
    assert rows == [2, 3]
    # 終了時のレポート出力用に保持
    assert len(buf) == 2
    assert [r.row for r in buf] == [2, 3]


def test_second_flush_appends_only_new_records(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(_rec(2))
    buf.flush()
    buf.append(_rec(5))
    fp = buf.flush()
    rows = [json.loads(line)["row"] for line in fp.read_text(encoding="utf-8").splitlines()]
    assert rows == [2, 5]


def test_default_logs_dir_is_relative_to_cwd(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(_rec(2))
    fp = buf.flush()
    assert fp.resolve().parent == (temp_workdir / "logs").resolve()
