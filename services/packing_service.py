from sqlalchemy.orm import Session

from loaders import FlatRecord, ReconciliationRow, RecordFilter, apply_filters, total_quantity
from loaders.reconciliation import reconciliation_totals, reconciliation_vocabularies
from models import ResultSet, FilterSelection, PACKING, LEFTOVERS


class PackingService:
    def __init__(self, session: Session):
        self.session = session

    def store_packing(self, result, source=""):
        """Replace the stored packing result with a freshly flattened sheet and clear its filter."""
        roles = result.roles.as_dict() if result.roles is not None else {}
        self._replace(ResultSet(
            kind=PACKING,
            source=source,
            header_idx=result.header_idx,
            roles=roles,
            rows=[r.to_dict() for r in result.records],
            descriptions=list(result.descriptions),
            packings=list(result.packings),
        ))

    def store_leftovers(self, rows, source=""):
        """Replace the stored reconciliation and clear its filter."""
        descriptions, packings = reconciliation_vocabularies(rows)
        self._replace(ResultSet(
            kind=LEFTOVERS,
            source=source,
            header_idx=None,
            roles={},
            rows=[r.to_dict() for r in rows],
            descriptions=descriptions,
            packings=packings,
        ))

    def _replace(self, result_set):
        self.session.merge(result_set)
        self.session.merge(FilterSelection(kind=result_set.kind, description="", packing=""))
        self.session.commit()

    def get_result(self, kind):
        """Fetches the stored ResultSet for a kind, or None before the first upload."""
        return self.session.get(ResultSet, kind)

    def get_records(self):
        """Returns the stored packing rows as FlatRecords."""
        result = self.get_result(PACKING)
        return [FlatRecord.from_dict(r) for r in result.rows] if result else []

    def get_leftovers(self):
        """Returns the stored reconciliation as ReconciliationRows."""
        result = self.get_result(LEFTOVERS)
        return [ReconciliationRow.from_dict(r) for r in result.rows] if result else []

    def get_filter(self, kind):
        selection = self.session.get(FilterSelection, kind)
        if selection is None:
            return RecordFilter()
        return RecordFilter(selection.description or "", selection.packing or "")

    def set_filter(self, kind, record_filter):
        """Stores the active filter for a kind (replacing the previous one)."""
        self.session.merge(FilterSelection(
            kind=kind,
            description=record_filter.description,
            packing=record_filter.packing,
        ))
        self.session.commit()
        return record_filter

    def reset_filter(self, kind):
        return self.set_filter(kind, RecordFilter())

    def packing_view(self, record_filter=None):
        """
        Filtered packing rows plus everything a screen needs next to them.

        Uses the stored filter when none is given; the quantity total always
        follows the filtered rows.
        """
        if record_filter is None:
            record_filter = self.get_filter(PACKING)

        result = self.get_result(PACKING)
        rows = apply_filters(self.get_records(), record_filter)
        return {
            'source': result.source if result else "",
            'roles': result.roles if result else {},
            'header_row': result.header_idx if result else None,
            'records': [r.to_dict() for r in rows],
            'count': len(rows),
            'total_quantity': total_quantity(rows),
            'descriptions': result.descriptions if result else [],
            'packings': result.packings if result else [],
            'filter': record_filter.to_dict(),
        }

    def leftovers_view(self, record_filter=None):
        """Filtered reconciliation rows with their totals and filter choices."""
        if record_filter is None:
            record_filter = self.get_filter(LEFTOVERS)

        result = self.get_result(LEFTOVERS)
        rows = apply_filters(self.get_leftovers(), record_filter)
        return {
            'source': result.source if result else "",
            'rows': [r.to_dict() for r in rows],
            'count': len(rows),
            'totals': reconciliation_totals(rows),
            'descriptions': result.descriptions if result else [],
            'packings': result.packings if result else [],
            'filter': record_filter.to_dict(),
        }
