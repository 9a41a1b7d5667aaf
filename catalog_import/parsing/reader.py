from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from ..models.row_data import RawRow

"""CSV catalog reader.

1行目をヘッダ行として扱い、2行目以降をデータ行とする。
Only syntactic splitting happens here (comma delimiter, standard double-quote
rules); row length and field checks belong to the validator.

pandas.read_csv is not used for the data rows because it pads or drops
ragged rows, and a field-count mismatch has to reach the validator intact.
"""

__all__ = [
    "CatalogData",
    "HeaderError",
    "ImportFileNotFoundError",
    "parse_lines",
    "read_catalog",
]

DELIMITER = ","


class HeaderError(Exception):
    """Raised when the header line (1st line) is missing or empty."""


class ImportFileNotFoundError(Exception):
    """Raised when the catalog file does not exist."""


@dataclass
class CatalogData:
    path: Path | None
    header: list[str]
    _lines: list[str]

    @property
    def rows(self) -> Iterator[RawRow]:
        """Fresh lazy iterator over the data rows (restartable by re-access)."""
        return _iter_rows(self._lines)


def _split(lines: Iterable[str]) -> Iterator[list[str]]:
    return csv.reader(lines, delimiter=DELIMITER, quotechar='"')


def _iter_rows(body: list[str]) -> Iterator[RawRow]:
    # ヘッダが row 1 なので先頭データ行は row 2
    for row_number, values in enumerate(_split(body), start=2):
        yield RawRow(row_number=row_number, values=values)


def parse_lines(lines: Iterable[str], path: Path | None = None) -> CatalogData:
    """Split raw text lines into a header and lazily parsed data rows.

    Raises
    ------
    HeaderError: no lines at all, or the first line has no non-blank field
    """
    all_lines = list(lines)
    if not all_lines:
        raise HeaderError("catalog file is empty (header line missing)")
    header_fields = next(_split(all_lines[:1]), [])
    header = [h.strip() for h in header_fields]
    if not any(header):
        raise HeaderError("header line is empty")
    return CatalogData(path=path, header=header, _lines=all_lines[1:])


def read_catalog(path: Path, encoding: str = "utf-8-sig") -> CatalogData:
    """Read a CSV catalog file.

    Parameters
    ----------
    path: CSV ファイルパス
    encoding: ファイルエンコーディング (既定 utf-8-sig で BOM を除去)
    """
    if not path.is_file():
        raise ImportFileNotFoundError(f"file does not exist: {path}")
    # newline="" は csv モジュールの引用符内改行処理に必要。行分割は \r / \n のみ
    with path.open("r", encoding=encoding, errors="replace", newline="") as f:
        lines = f.readlines()
    return parse_lines(lines, path=path)
