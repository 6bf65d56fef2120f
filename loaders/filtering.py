"""
Description / packing filters for flattened and reconciled rows.

Filters are projections: they build a new list and never touch the rows they are
given, so filter and reset cycles can repeat without losing data.
"""

from dataclasses import dataclass

from .value_coercion import as_quantity


@dataclass(frozen=True)
class RecordFilter:
    """Case-insensitive substring filters; an empty string disables a filter."""
    description: str = ""
    packing: str = ""

    def __bool__(self):
        return bool(self.description or self.packing)

    def matches(self, row):
        return (
            _contains(row.description, self.description)
            and _contains(row.packing, self.packing)
        )

    def to_dict(self):
        return {'description': self.description, 'packing': self.packing}


def _contains(text, needle):
    if not needle:
        return True
    return needle.lower() in str(text or "").lower()


def apply_filters(rows, record_filter=None):
    """
    Keep rows whose description and packing contain the filter text.

    Works on FlatRecords and ReconciliationRows alike.

    Examples:
        >>> apply_filters(records, RecordFilter(packing="25kg"))
        [FlatRecord(... packing='25kg' ...), ...]
    """
    if not record_filter:
        return list(rows)
    return [row for row in rows if record_filter.matches(row)]


def total_quantity(records):
    """Sum of quantity over records; absent quantities add nothing."""
    return sum(as_quantity(record.quantity) for record in records)
