"""
Group flattening for packing sheets.

Packing lists put one parent record (S.No, date, company, reference) on a row
carrying an ordinal, followed by continuation rows holding more items of the
same record:

    S.No | Date       | Company | Ref | Description | Packing | Qty
    1    | 2024-01-01 | Acme    | R1  | Wheat       | 25kg    | 10     <- opens group 1
         |            |         |     | Wheat       | 25kg    | 5      <- continuation
         |            |         |     |             |         | 15     <- item row (qty only)
    2    | 2024-01-02 | Beta    | R2  | Rice        | 50kg    | 20     <- opens group 2

This module folds those rows into closed Groups and flattens them into one
FlatRecord per item with the parent fields repeated.

Functions:
    parse_row: Read parent and item fields of one data row
    fold_groups: Fold parsed rows into closed Groups
    flatten_groups: Groups -> FlatRecords
    build_vocabularies: Sorted distinct descriptions and packings
    flatten_rows: Full pipeline below a resolved header
    flatten_grid: Header resolution plus flattening for a whole grid
"""

from dataclasses import dataclass, field, asdict
from functools import reduce
from typing import Optional, Tuple

from .header_parser import FieldRole, normalize_label, resolve_headers
from .value_coercion import coerce_number


NUMERIC_ROLES = (FieldRole.QUANTITY, FieldRole.RATE, FieldRole.AMOUNT)


@dataclass(frozen=True)
class Item:
    """One line within a group. Numeric fields are None when the cell had no number."""
    description: str = ""
    packing: str = ""
    quantity: Optional[float] = None
    rate: Optional[float] = None
    amount: Optional[float] = None


@dataclass(frozen=True)
class Group:
    """One parent record and the items collected for it."""
    ordinal: str
    date: str = ""
    party: str = ""
    reference: str = ""
    items: Tuple[Item, ...] = field(default_factory=tuple)

    def with_item(self, item):
        return Group(self.ordinal, self.date, self.party, self.reference, self.items + (item,))


@dataclass(frozen=True)
class FlatRecord:
    """A group's parent fields joined with one of its items."""
    ordinal: str
    date: str
    party: str
    reference: str
    description: str = ""
    packing: str = ""
    quantity: Optional[float] = None
    rate: Optional[float] = None
    amount: Optional[float] = None

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(**{name: data.get(name) for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class ParsedRow:
    ordinal: str
    date: str
    party: str
    reference: str
    item: Optional[Item]


@dataclass
class FlattenResult:
    """
    Output of flattening one sheet.

    Attributes:
        records: FlatRecords in source order
        descriptions: Sorted distinct description texts (filter choices)
        packings: Sorted distinct packing labels (filter choices)
        header_idx: Row index the header was found on
        roles: FieldRoleMap used for the sheet
    """
    records: list = field(default_factory=list)
    descriptions: list = field(default_factory=list)
    packings: list = field(default_factory=list)
    header_idx: int = 0
    roles: object = None

    def __bool__(self):
        return bool(self.records)


def parse_row(grid, row_idx, roles, positional_parents=True):
    """
    Read one data row through the role map.

    Text roles are trimmed; numeric roles go through coerce_number on the raw cell,
    so numbers read from the workbook stay untouched. The item is None when none
    of description, packing, quantity, rate or amount carries a value.

    With positional_parents=False, parent fields whose role was only guessed by
    position read as empty (flat sheets have no S.No/date/company columns to guess).

    Args:
        grid: CellGrid
        row_idx: Row to read
        roles: FieldRoleMap
        positional_parents: Read parent fields from fallback columns too

    Returns:
        ParsedRow
    """
    def text(role):
        return grid.text(row_idx, roles.column(role))

    def parent(role):
        if positional_parents or roles.is_matched(role):
            return text(role)
        return ""

    numbers = {
        role: coerce_number(_raw_or_text(grid, row_idx, roles.column(role)))
        for role in NUMERIC_ROLES
    }
    description = text(FieldRole.DESCRIPTION)
    packing = text(FieldRole.PACKING)

    item = None
    if description or packing or any(n is not None for n in numbers.values()):
        item = Item(
            description=description,
            packing=packing,
            quantity=numbers[FieldRole.QUANTITY],
            rate=numbers[FieldRole.RATE],
            amount=numbers[FieldRole.AMOUNT],
        )

    return ParsedRow(
        ordinal=parent(FieldRole.ORDINAL),
        date=parent(FieldRole.DATE),
        party=parent(FieldRole.PARTY),
        reference=parent(FieldRole.REFERENCE),
        item=item,
    )


def _raw_or_text(grid, row_idx, col_idx):
    value = grid.cell(row_idx, col_idx)
    return value.strip() if isinstance(value, str) else value


def _grouped_step(state, row):
    closed, current = state

    if row.ordinal:
        if current is not None:
            closed.append(current)
        current = Group(row.ordinal, row.date, row.party, row.reference)
    elif current is None:
        # Continuation before any group opened: nothing to attach it to
        return closed, None

    if row.item is not None:
        current = current.with_item(row.item)

    return closed, current


def _ungrouped_step(state, row):
    closed, _ = state
    if row.item is not None:
        closed.append(Group(row.ordinal, row.date, row.party, row.reference, (row.item,)))
    return closed, None


def fold_groups(parsed_rows, grouped=True):
    """
    Fold parsed rows into closed Groups.

    The open group is fold state: it is appended to the closed list when the next
    ordinal appears or input ends, never earlier. With grouped=False every row with
    item data is its own single-item group (flat sheets without an ordinal column).

    Args:
        parsed_rows: Iterable of ParsedRow
        grouped: Detect group boundaries by ordinal presence

    Returns:
        list of Group
    """
    step = _grouped_step if grouped else _ungrouped_step
    closed, current = reduce(step, parsed_rows, ([], None))
    if current is not None:
        closed.append(current)
    return closed


def flatten_groups(groups):
    """
    Emit one FlatRecord per item, or a single empty-item record for an item-less group.

    Examples:
        >>> flatten_groups([Group("1", party="Acme")])
        [FlatRecord(ordinal='1', date='', party='Acme', reference='', description='', packing='', quantity=None, rate=None, amount=None)]
    """
    records = []
    for group in groups:
        parent = dict(ordinal=group.ordinal, date=group.date, party=group.party, reference=group.reference)
        if not group.items:
            records.append(FlatRecord(**parent))
            continue
        for item in group.items:
            records.append(FlatRecord(**parent, **asdict(item)))
    return records


def distinct_sorted(values):
    """
    Distinct non-empty values, compared and sorted in normalized form.

    The first spelling seen (with whitespace collapsed) is kept for display, so
    ordering ignores case.

    Examples:
        >>> distinct_sorted(["Wheat", " wheat ", "", "Rice"])
        ['Rice', 'Wheat']
        >>> distinct_sorted(["apple", "Banana"])
        ['apple', 'Banana']
    """
    seen = {}
    for value in values:
        key = normalize_label(value)
        if key and key not in seen:
            seen[key] = " ".join(str(value).split())
    return [seen[key] for key in sorted(seen)]


def build_vocabularies(records):
    """Return (descriptions, packings) filter choices for a record set."""
    return (
        distinct_sorted(r.description for r in records),
        distinct_sorted(r.packing for r in records),
    )


def flatten_rows(grid, header_idx, roles, grouped=True):
    """
    Flatten every row below the header into FlatRecords.

    Args:
        grid: CellGrid
        header_idx: Header row index from resolve_headers
        roles: FieldRoleMap from resolve_headers
        grouped: False for flat sheets where each row is its own record

    Returns:
        FlattenResult
    """
    parsed = (parse_row(grid, row_idx, roles, positional_parents=grouped) for row_idx, _ in grid.rows_from(header_idx + 1))
    records = flatten_groups(fold_groups(parsed, grouped=grouped))
    descriptions, packings = build_vocabularies(records)

    return FlattenResult(
        records=records,
        descriptions=descriptions,
        packings=packings,
        header_idx=header_idx,
        roles=roles,
    )


def flatten_grid(grid, grouped=True, patterns=None):
    """
    Resolve headers and flatten a whole grid.

    Args:
        grid: CellGrid
        grouped: True/False to force the mode; None groups only when the sheet has a
            recognisable S.No column
        patterns: Role patterns for header resolution (config FIELD_PATTERNS if None)

    Returns:
        FlattenResult (empty for an empty grid)

    Examples:
        >>> result = flatten_grid(CellGrid([
        ...     ["S.No", "Date", "Party", "Ref", "Desc", "Pack", "Qty"],
        ...     ["1", "2024-01-01", "Acme", "R1", "Wheat", "25kg", "10"],
        ...     ["", "", "", "", "Wheat", "25kg", "5"],
        ... ]))
        >>> [(r.party, r.quantity) for r in result.records]
        [('Acme', 10.0), ('Acme', 5.0)]
    """
    if not grid:
        return FlattenResult()

    header_idx, roles = resolve_headers(grid, patterns)
    if grouped is None:
        grouped = roles.is_matched(FieldRole.ORDINAL)
    return flatten_rows(grid, header_idx, roles, grouped=grouped)
