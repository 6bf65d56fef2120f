"""
Leftover reconciliation between a purchase sheet and a usage sheet.

Both sheets are flattened independently and then joined on the normalized
(description, packing) pair:

    purchase:  Wheat | 25kg | 40        usage:  wheat  | 25KG | 15
               Rice  | 50kg | 20
    result:    Wheat | 25kg | purchased 40 | used 15 | leftover 25
               Rice  | 50kg | purchased 20 | used 0  | leftover 20

Functions:
    normalize_key_part: Trim, collapse whitespace and case-fold
    reconciliation_key: (description, packing) -> ReconciliationKey
    running_sums: Per-key totals for one dataset
    reconcile: Union of both datasets' keys with purchased/used/leftover
    reconciliation_totals: Column totals of a reconciliation
    reconciliation_vocabularies: Filter choices for a reconciliation
"""

from collections import namedtuple
from dataclasses import dataclass, asdict

from .data_transformer import distinct_sorted
from .header_parser import normalize_label
from .value_coercion import as_quantity


ReconciliationKey = namedtuple('ReconciliationKey', ['description', 'packing'])


@dataclass(frozen=True)
class KeySum:
    """Running total for one key, with the first original spelling seen."""
    description: str
    packing: str
    total: float = 0


@dataclass(frozen=True)
class ReconciliationRow:
    key: ReconciliationKey
    description: str
    packing: str
    purchased: float
    used: float
    leftover: float

    def to_dict(self):
        data = asdict(self)
        data['key'] = list(self.key)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            key=ReconciliationKey(*data['key']),
            description=data['description'],
            packing=data['packing'],
            purchased=data['purchased'],
            used=data['used'],
            leftover=data['leftover'],
        )


def normalize_key_part(text):
    """
    Normalize one half of a reconciliation key.

    No unit handling: "25kg" and "25 kg" stay different keys.

    Examples:
        >>> normalize_key_part("  Basmati\\tRice ")
        'basmati rice'
    """
    return normalize_label(text)


def reconciliation_key(description, packing):
    """
    Examples:
        >>> reconciliation_key("Wheat ", "25KG")
        ReconciliationKey(description='wheat', packing='25kg')
    """
    return ReconciliationKey(normalize_key_part(description), normalize_key_part(packing))


def running_sums(records):
    """
    Fold FlatRecords into per-key quantity totals.

    Absent quantities count as 0. Keys keep first-seen order.

    Args:
        records: Iterable of FlatRecord (or anything with description/packing/quantity)

    Returns:
        dict: ReconciliationKey -> KeySum
    """
    sums = {}
    for record in records:
        key = reconciliation_key(record.description, record.packing)
        current = sums.get(key) or KeySum(record.description, record.packing)
        sums[key] = KeySum(current.description, current.packing, current.total + as_quantity(record.quantity))
    return sums


def reconcile(purchased_records, used_records):
    """
    Join purchase and usage records on their reconciliation key.

    Every key present in either dataset yields one row; a missing side counts as 0.
    Leftover may be negative. Display text comes from the purchase side when it has
    the key, otherwise from the first matching usage record. Rows are ordered by that
    display description; equal descriptions keep key order (purchase keys first).

    Args:
        purchased_records: FlatRecords of the purchase sheet
        used_records: FlatRecords of the usage sheet

    Returns:
        list of ReconciliationRow

    Examples:
        >>> rows = reconcile(
        ...     [FlatRecord("1", "2024-01-01", "Acme", "R1", "Wheat", "25kg", 40)],
        ...     [FlatRecord("", "", "", "", "wheat ", "25KG", 15)],
        ... )
        >>> rows[0].purchased, rows[0].used, rows[0].leftover
        (40, 15, 25)
    """
    purchased = running_sums(purchased_records)
    used = running_sums(used_records)

    keys = list(purchased)
    keys.extend(key for key in used if key not in purchased)

    rows = []
    for key in keys:
        exemplar = purchased.get(key) or used[key]
        bought = purchased[key].total if key in purchased else 0
        consumed = used[key].total if key in used else 0
        rows.append(ReconciliationRow(
            key=key,
            description=exemplar.description or key.description,
            packing=exemplar.packing or key.packing,
            purchased=bought,
            used=consumed,
            leftover=bought - consumed,
        ))

    return sorted(rows, key=lambda row: row.description)


def reconciliation_totals(rows):
    """Sum purchased, used and leftover over a set of rows."""
    return {
        'purchased': sum(row.purchased for row in rows),
        'used': sum(row.used for row in rows),
        'leftover': sum(row.leftover for row in rows),
    }


def reconciliation_vocabularies(rows):
    """Return (descriptions, packings) filter choices for reconciliation rows."""
    return (
        distinct_sorted(row.description for row in rows),
        distinct_sorted(row.packing for row in rows),
    )
