"""
Header detection and field role resolution for packing sheets.

Source spreadsheets put a title block or blank rows above the real header and
name the same column in many ways ("Qty", "Quantity", "No of bags used"). This
module locates the header row and maps each semantic field role onto whichever
literal label the sheet actually uses:

    Row 0:  SHREE TRADERS - PACKING LIST
    Row 1:  S.No | Date | Company Name | Ref No | Description of Goods | Packing | Qty   <- HEADER
    Row 2:  1    | ...

Functions:
    normalize_label: Collapse whitespace/line breaks and case-fold a label
    find_header_row: Locate the header row within the scan window
    find_header_label: First label matching any of a role's patterns
    resolve_field_roles: Build the FieldRoleMap for a header row
    resolve_headers: Header row index plus FieldRoleMap for a grid
"""

import re
from enum import Enum

from .config import MAX_HEADER_SCAN_ROWS, HEADER_MARKERS, FIELD_PATTERNS


WHITESPACE_RE = re.compile(r"\s+")


class FieldRole(Enum):
    """Semantic column meanings, in positional fallback order."""
    ORDINAL = 'ordinal'
    DATE = 'date'
    PARTY = 'party'
    REFERENCE = 'reference'
    DESCRIPTION = 'description'
    PACKING = 'packing'
    QUANTITY = 'quantity'
    RATE = 'rate'
    AMOUNT = 'amount'

    @property
    def position(self):
        """Header column this role falls back to when no label matches."""
        return list(FieldRole).index(self)

    @property
    def patterns(self):
        return FIELD_PATTERNS.get(self.value, [self.value])


class FieldRoleMap:
    """
    Mapping from FieldRole to the literal header label chosen for it.

    Resolved once per sheet. Every role always has a label; `column` is None
    when a fallback label points past the end of a short header row.

    Examples:
        >>> roles = resolve_field_roles(["S.No", "Qty"])
        >>> roles.label(FieldRole.QUANTITY)
        'Qty'
        >>> roles.column(FieldRole.QUANTITY)
        1
    """

    def __init__(self, labels, columns, matched):
        self._labels = dict(labels)
        self._columns = dict(columns)
        self._matched = frozenset(matched)

    def label(self, role):
        return self._labels[role]

    def column(self, role):
        return self._columns[role]

    def is_matched(self, role):
        """True when the label came from a pattern match rather than the positional fallback."""
        return role in self._matched

    def as_dict(self):
        """Role name -> label, for display and JSON."""
        return {role.value: self._labels[role] for role in FieldRole}

    def __len__(self):
        return len(self._labels)

    def __repr__(self):
        return f"<FieldRoleMap {self.as_dict()}>"


def normalize_label(text):
    """
    Normalize a header label or cell text for matching.

    Trims, turns tabs and line breaks into spaces, collapses runs of whitespace
    and case-folds.

    Examples:
        >>> normalize_label("  Description\\nof   Goods ")
        'description of goods'
        >>> normalize_label(None)
        ''
    """
    if text is None:
        return ""
    return WHITESPACE_RE.sub(" ", str(text)).strip().casefold()


def find_header_row(grid, max_scan_rows=MAX_HEADER_SCAN_ROWS, markers=None):
    """
    Find the row containing the column headers.

    Joins each candidate row into normalized text and accepts the first one that
    mentions any header marker.

    Args:
        grid: CellGrid to scan
        max_scan_rows: How many rows from the top to consider
        markers: Marker vocabulary (uses config default if None)

    Returns:
        int: 0-based header row index, 0 when no row matches

    Examples:
        >>> find_header_row(CellGrid([["Packing List"], [], ["S.No", "Description"]]))
        2
    """
    if markers is None:
        markers = HEADER_MARKERS

    for row_idx in range(min(max_scan_rows, len(grid))):
        joined = normalize_label(" ".join(str(v) for v in grid.row(row_idx)))
        if any(marker in joined for marker in markers):
            return row_idx

    return 0


def find_header_label(labels, patterns, claimed=()):
    """
    Return the first label (in column order) whose normalized text contains any pattern.

    Args:
        labels: Header labels in column order
        patterns: Substrings to look for
        claimed: Column indexes already taken by another role

    Returns:
        tuple: (column index, label), or (None, None) when nothing matches

    Examples:
        >>> find_header_label(["S.No", "Total Qty"], ["quantity", "qty"])
        (1, 'Total Qty')
        >>> find_header_label(["Total Qty", "Amount"], ["amount", "total"], claimed={0})
        (1, 'Amount')
    """
    for col_idx, label in enumerate(labels):
        if col_idx in claimed:
            continue
        text = normalize_label(label)
        if not text:
            continue
        for pattern in patterns:
            if pattern in text:
                return col_idx, label
    return None, None


def header_labels(grid, header_idx):
    """
    Read the header row as labels, naming blank header cells by position.

    Examples:
        >>> header_labels(CellGrid([["S.No", "", "Qty"]]), 0)
        ['S.No', 'col1', 'Qty']
    """
    labels = []
    for col_idx in range(len(grid.row(header_idx))):
        text = grid.text(header_idx, col_idx)
        labels.append(text if text else f"col{col_idx}")
    return labels


def resolve_field_roles(labels, patterns=None):
    """
    Map every FieldRole onto a header label.

    Pattern match first, skipping columns an earlier role already matched (so
    "Total Qty" stays the quantity and "Amount" still becomes the amount);
    otherwise the label at the role's fixed position; and when the header is too
    short for that, the role's own name bound to no column.

    Args:
        labels: Header labels in column order
        patterns: Role value -> patterns (uses config FIELD_PATTERNS if None)

    Returns:
        FieldRoleMap covering all nine roles

    Examples:
        >>> roles = resolve_field_roles(["Total Bags", "Bags Used"], USAGE_FIELD_PATTERNS)
        >>> roles.label(FieldRole.QUANTITY)
        'Bags Used'
    """
    if patterns is None:
        patterns = FIELD_PATTERNS

    role_labels = {}
    role_columns = {}
    matched = set()
    claimed = set()

    for role in FieldRole:
        col_idx, label = find_header_label(labels, patterns.get(role.value, [role.value]), claimed)
        if label is not None:
            matched.add(role)
            claimed.add(col_idx)
        elif role.position < len(labels):
            col_idx, label = role.position, labels[role.position]
        else:
            col_idx, label = None, role.value

        role_labels[role] = label
        role_columns[role] = col_idx

    return FieldRoleMap(role_labels, role_columns, matched)


def resolve_headers(grid, patterns=None):
    """
    Locate the header row and resolve field roles for a grid.

    Never raises: an unrecognised header degrades to row 0 and positional roles.

    Args:
        grid: CellGrid
        patterns: Role patterns passed to resolve_field_roles

    Returns:
        tuple: (header_idx, FieldRoleMap)

    Examples:
        >>> idx, roles = resolve_headers(CellGrid([["S.No", "Date", "Party", "Ref", "Desc", "Pack", "Qty"]]))
        >>> idx, roles.label(FieldRole.PARTY)
        (0, 'Party')
    """
    header_idx = find_header_row(grid)
    return header_idx, resolve_field_roles(header_labels(grid, header_idx), patterns)
