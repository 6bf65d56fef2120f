"""
Spreadsheet loaders for packing lists and leftover reconciliation.

This package turns loosely structured spreadsheet exports (title rows above the
header, inconsistent column names, one record spread over several rows) into flat
item rows, and reconciles a purchase sheet against a usage sheet.

Architecture:
    file → excel_loader → CellGrid → header_parser → data_transformer → FlatRecords
                                                                      → reconciliation → ReconciliationRows

Modules:
    config: Configuration constants
    cell_grid: Ragged-tolerant cell grid
    header_parser: Header row detection and field role resolution
    value_coercion: Cell text to number-or-absent
    data_transformer: Group folding and flattening
    reconciliation: Purchased vs used per variety/packing
    filtering: Description/packing filters and quantity totals
    excel_loader: Main orchestration logic
"""

from .cell_grid import CellGrid
from .header_parser import FieldRole, FieldRoleMap, resolve_headers
from .value_coercion import coerce_number
from .data_transformer import FlatRecord, FlattenResult, flatten_grid, flatten_rows
from .reconciliation import ReconciliationRow, reconcile
from .filtering import RecordFilter, apply_filters, total_quantity
from .excel_loader import load_packing_data, load_leftovers, read_grid

__all__ = [
    'CellGrid', 'FieldRole', 'FieldRoleMap', 'resolve_headers', 'coerce_number',
    'FlatRecord', 'FlattenResult', 'flatten_grid', 'flatten_rows',
    'ReconciliationRow', 'reconcile', 'RecordFilter', 'apply_filters', 'total_quantity',
    'load_packing_data', 'load_leftovers', 'read_grid',
]
