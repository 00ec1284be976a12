from __future__ import annotations

import csv
import logging
import math
import sys
from dataclasses import dataclass
from io import StringIO
from typing import List, Optional, Tuple

import numpy as np

from .errors import InvalidColumnIndex, InvalidData, IoError, ParseError

_LOGGER = logging.getLogger(__name__)

NUMERIC = "numeric"
TEXT = "text"


@dataclass(frozen=True)
class Column:
    name: str
    kind: str  # NUMERIC or TEXT
    cells: Tuple[str, ...]
    # float values with NaN for empty cells; only set for numeric columns
    values: Optional[np.ndarray] = None

    @property
    def is_numeric(self) -> bool:
        return self.kind == NUMERIC


@dataclass(frozen=True)
class Table:
    columns: Tuple[Column, ...]
    row_count: int

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column(self, ref: int, axis: str = "") -> Column:
        """1-based lookup; 0 is not a real column and is rejected here."""
        if ref < 1 or ref > self.column_count:
            raise InvalidColumnIndex(ref, self.column_count, axis)
        return self.columns[ref - 1]


def read_input(path: Optional[str]) -> bytes:
    """
    Read the whole input into memory. None reads standard input.
    """
    try:
        if path is None:
            return sys.stdin.buffer.read()
        with open(path, "rb") as fh:
            return fh.read()
    except OSError as e:
        raise IoError(f"Could not read {path or 'STDIN'}: {e.strerror or e}")


def _parse_float(s: str) -> Optional[float]:
    try:
        return float(s)
    except ValueError:
        return None


def _infer_column(name: str, cells: List[str]) -> Column:
    """
    Numeric when every non-empty cell parses as a float, text otherwise.
    A column with no non-empty cells counts as numeric (all NA).
    """
    values = np.full(len(cells), np.nan, dtype=float)
    for i, cell in enumerate(cells):
        if cell == "":
            continue
        v = _parse_float(cell)
        if v is None:
            return Column(name=name, kind=TEXT, cells=tuple(cells))
        values[i] = v
    return Column(name=name, kind=NUMERIC, cells=tuple(cells), values=values)


def parse_table(data: bytes, delimiter: str = "\t", header: bool = False, skip: int = 0) -> Table:
    """
    Turn delimited text into a typed Table.

    - the first `skip` lines are dropped, then the header line if enabled
    - blank lines are ignored
    - the column count is taken from the header (or the first data row);
      short rows are padded with empty cells, long rows truncated
    """
    text = data.decode("utf-8", errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines()[skip:]

    names: List[str] = []
    if header:
        while lines and not lines[0].strip():
            lines = lines[1:]
        if not lines:
            raise ParseError("Header requested but the input has no lines after skipping")
        names = [h.strip() for h in next(csv.reader([lines[0]], delimiter=delimiter))]
        lines = lines[1:]

    body = [ln for ln in lines if ln.strip()]
    try:
        rows = [[cell.strip() for cell in row] for row in csv.reader(StringIO("\n".join(body)), delimiter=delimiter)]
    except csv.Error as e:
        raise ParseError(f"Could not parse table ({type(e).__name__}: {e})")

    if not names and not rows:
        raise ParseError("Input contains no data")

    ncol = len(names) if names else len(rows[0])
    if ncol == 0:
        raise ParseError("Input has no columns")
    if not names:
        names = [f"column_{i + 1}" for i in range(ncol)]

    ragged = 0
    norm_rows: List[List[str]] = []
    for r in rows:
        if len(r) != ncol:
            ragged += 1
        norm_rows.append(list(r[:ncol]) + ([""] * max(0, ncol - len(r))))
    if ragged:
        _LOGGER.info("%d row(s) did not have %d fields and were padded or truncated", ragged, ncol)

    columns = tuple(
        _infer_column(names[i], [r[i] for r in norm_rows])
        for i in range(ncol)
    )
    _LOGGER.debug(
        "parsed %d rows x %d columns (%s)",
        len(norm_rows),
        ncol,
        ", ".join(f"{c.name}:{c.kind}" for c in columns),
    )
    return Table(columns=columns, row_count=len(norm_rows))


def row_index_series(n: int) -> np.ndarray:
    return np.arange(n, dtype=float)


def column_as_series(table: Table, ref: int, axis: str = "") -> np.ndarray:
    """
    Resolve a column reference to a float series of length N.

    0 selects the synthetic row index 0..N-1. Other references must be
    within 1..column_count and point at a numeric column.
    """
    if ref == 0:
        return row_index_series(table.row_count)

    col = table.column(ref, axis)
    if not col.is_numeric:
        label = axis or "column"
        raise InvalidData(
            f"{label} column {ref} ({col.name!r}) is non-numerical. "
            "If the file has a header use -H or --skip"
        )
    return col.values


def observed_max(series: np.ndarray) -> float:
    """Largest finite value, NaN when there is none."""
    finite = series[np.isfinite(series)]
    if finite.size == 0:
        return math.nan
    return float(np.max(finite))


def observed_min_positive(series: np.ndarray) -> float:
    """Smallest finite value > 0, NaN when there is none."""
    pos = series[np.isfinite(series) & (series > 0)]
    if pos.size == 0:
        return math.nan
    return float(np.min(pos))
