"""
Ragged-tolerant 2-D grid of raw cell values.

Spreadsheet readers hand over rows of differing length. CellGrid keeps them
as-is and bounds-checks every access, so callers never index past a short row.

Classes:
    CellGrid: Row-major grid of strings and numbers (blank cells are "")
"""

import math
import numbers
from datetime import date, datetime


def clean_cell(value):
    """
    Normalize one raw cell value.

    None and NaN become empty strings, strings keep their text, numbers stay numbers.

    Examples:
        >>> clean_cell(None)
        ''
        >>> clean_cell(12.5)
        12.5
        >>> clean_cell(' 25kg ')
        ' 25kg '
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        value = float(value)
        return "" if math.isnan(value) else value
    return str(value)


class CellGrid:
    """
    Ordered rows of cell values read from the first sheet of a workbook.

    Examples:
        >>> grid = CellGrid([["S.No", "Qty"], ["1"]])
        >>> grid.cell(1, 1)
        ''
        >>> len(grid)
        2
    """

    def __init__(self, rows):
        self._rows = [[clean_cell(v) for v in (row or [])] for row in rows]

    def __len__(self):
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def __bool__(self):
        return any(
            str(v).strip() for row in self._rows for v in row
        )

    def __repr__(self):
        return f"<CellGrid {len(self._rows)} rows>"

    @property
    def width(self):
        """Length of the longest row."""
        return max((len(row) for row in self._rows), default=0)

    def row(self, row_idx):
        """Return a copy of one row, or an empty list when out of range."""
        if 0 <= row_idx < len(self._rows):
            return list(self._rows[row_idx])
        return []

    def cell(self, row_idx, col_idx):
        """Return one cell, or "" when either index falls outside the grid."""
        if col_idx is None or col_idx < 0:
            return ""
        row = self._rows[row_idx] if 0 <= row_idx < len(self._rows) else []
        return row[col_idx] if col_idx < len(row) else ""

    def text(self, row_idx, col_idx):
        """Return one cell as trimmed text, with whole floats rendered without '.0'."""
        value = self.cell(row_idx, col_idx)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip()

    def rows_from(self, start):
        """Yield (row_idx, row) pairs from start to the end of the grid."""
        for row_idx in range(max(start, 0), len(self._rows)):
            yield row_idx, self._rows[row_idx]
