"""
Main spreadsheet loading orchestration for packing and leftover sheets.

This module coordinates the loading pipeline:
    1. Read the first sheet of a workbook (or a CSV) into a CellGrid
    2. Detect the header row and resolve field roles
    3. Flatten grouped rows into FlatRecords
    4. For leftovers: reconcile a purchase sheet against a usage sheet

Functions:
    read_grid: File path or upload stream -> CellGrid
    load_packing_data: Flatten one packing sheet
    load_leftovers: Reconcile a purchase sheet with a usage sheet
"""

import io
import traceback
import warnings
from pathlib import Path

import openpyxl
import pandas as pd

from .config import SUPPORTED_EXTENSIONS, USAGE_FIELD_PATTERNS
from .cell_grid import CellGrid
from .data_transformer import FlattenResult, flatten_grid
from .header_parser import FieldRole
from .reconciliation import reconcile

# Suppress openpyxl warnings about styles/formatting (we only read data values)
warnings.filterwarnings('ignore', category=UserWarning, module='openpyxl')


def is_supported(filename):
    """True when the file extension is one we can read."""
    return Path(filename or "").suffix.lower() in SUPPORTED_EXTENSIONS


def read_grid(source, filename=None):
    """
    Read the first sheet of a spreadsheet into a CellGrid.

    Args:
        source: Path to the file, or a binary file-like object (an upload stream)
        filename: Name used to pick the reader when source is a stream

    Returns:
        CellGrid

    Raises:
        FileNotFoundError: If a path is given and doesn't exist
        ValueError: If the extension is unsupported or the file can't be parsed
    """
    if isinstance(source, (str, Path)):
        source = Path(source).expanduser()
        if not source.exists():
            raise FileNotFoundError(f"Spreadsheet not found: {source}")
        filename = filename or source.name

    suffix = Path(filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file type '{suffix}' (expected one of {', '.join(SUPPORTED_EXTENSIONS)})")

    try:
        if suffix == '.csv':
            return _read_csv(source)
        if suffix == '.xls':
            df = pd.read_excel(source, sheet_name=0, header=None, dtype=object)
            return CellGrid(df.values.tolist())
        return _read_workbook(source)
    except (FileNotFoundError, ValueError):
        raise
    except Exception as e:
        raise ValueError(f"Cannot read spreadsheet (is it corrupted or wrong format?): {e}")


def _read_workbook(source):
    wb = openpyxl.load_workbook(source, data_only=True)
    # Only the first sheet is used
    ws = wb.worksheets[0]
    return CellGrid([list(row) for row in ws.iter_rows(values_only=True)])


def _read_csv(source):
    if isinstance(source, Path):
        raw = source.read_bytes()
    else:
        raw = source.read()
    text = raw.decode('utf-8-sig', errors='replace') if isinstance(raw, bytes) else raw
    if not text.strip():
        return CellGrid([])

    # Title rows are narrower than the table, so size the frame by the widest line
    width = max(line.count(',') for line in text.splitlines()) + 1
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return CellGrid(df.values.tolist())


def load_packing_data(source, filename=None):
    """
    Load and flatten a packing sheet.

    Reads the first sheet, finds the header, and flattens grouped rows so that every
    item carries its S.No, date, company and reference.

    Returns:
        FlattenResult (empty when the file is empty or unreadable)

    Examples:
        >>> result = load_packing_data('packing_list.xlsx')
        >>> result.records[0].party
        'Acme Traders'
        >>> result.packings
        ['25kg', '50kg']
    """
    label = filename or source
    try:
        print(f"Loading packing sheet: {label}...")
        grid = read_grid(source, filename)
        if not grid:
            print(f"  Warning: No data found in '{label}'")
            return FlattenResult()

        result = flatten_grid(grid)
        print(f"  Header at row {result.header_idx}: {result.roles.as_dict()}")
        print(f"  Loaded {len(result.records)} item rows from '{label}'")
        return result

    except Exception as e:
        print(f"Error loading data: {e}")
        traceback.print_exc()
        return FlattenResult()


def load_sheet_records(source, filename=None, patterns=None):
    """
    Flatten one side of a leftover reconciliation.

    Sheets with a recognised S.No column are grouped; flat sheets (one item per row,
    no ordinal column) are read row by row. `patterns` overrides the role patterns
    for this sheet only.
    """
    label = filename or source
    grid = read_grid(source, filename)
    if not grid:
        print(f"  Warning: No data found in '{label}'")
        return []

    result = flatten_grid(grid, grouped=None, patterns=patterns)
    mode = "grouped" if result.roles.is_matched(FieldRole.ORDINAL) else "flat"
    print(f"  {label}: {len(result.records)} rows ({mode}), header at row {result.header_idx}, quantity from '{result.roles.label(FieldRole.QUANTITY)}'")
    return result.records


def load_leftovers(purchase_source, usage_source, purchase_filename=None, usage_filename=None):
    """
    Reconcile a purchase sheet against a usage sheet.

    Returns:
        list of ReconciliationRow, sorted by description (empty on failure)

    Examples:
        >>> rows = load_leftovers('purchases.xlsx', 'bags_used.xlsx')
        >>> rows[0].description, rows[0].leftover
        ('Wheat', 25.0)
    """
    try:
        print("Loading leftover sheets...")
        purchased = load_sheet_records(purchase_source, purchase_filename)
        used = load_sheet_records(usage_source, usage_filename, USAGE_FIELD_PATTERNS)
        rows = reconcile(purchased, used)
        print(f"  Reconciled {len(rows)} variety/packing combinations")
        return rows

    except Exception as e:
        print(f"Error loading data: {e}")
        traceback.print_exc()
        return []


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m loaders.excel_loader <packing-sheet>")
        sys.exit(1)

    result = load_packing_data(sys.argv[1])
    for record in result.records[:10]:
        print(f"  {record.ordinal:>4} | {record.party} | {record.description} | {record.packing} | {record.quantity}")
