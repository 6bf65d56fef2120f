"""Tests for leftover reconciliation."""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from loaders import FlatRecord, ReconciliationRow, reconcile
from loaders.reconciliation import (
    ReconciliationKey,
    normalize_key_part,
    reconciliation_key,
    running_sums,
    reconciliation_totals,
    reconciliation_vocabularies,
)


def rec(description, packing, quantity):
    return FlatRecord("", "", "", "", description, packing, quantity)


@pytest.fixture
def purchases():
    return [
        rec("Wheat", "25kg", 30.0),
        rec("Rice", "50kg", 20.0),
        rec("Wheat", "25kg", 10.0),
    ]


@pytest.fixture
def usage():
    return [
        rec("wheat ", "25KG", 15.0),
    ]


class TestKeys:
    """Key normalization."""

    def test_normalize_key_part(self):
        assert normalize_key_part("  Basmati \n Rice ") == "basmati rice"

    def test_surface_variants_collide(self):
        assert reconciliation_key("Wheat", "25kg") == reconciliation_key(" WHEAT ", "25KG")

    def test_units_are_not_normalized(self):
        assert reconciliation_key("Wheat", "25kg") != reconciliation_key("Wheat", "25 kg")

    def test_key_is_a_named_pair(self):
        key = reconciliation_key("Wheat", "25kg")
        assert key == ReconciliationKey("wheat", "25kg")
        assert key.packing == "25kg"


class TestRunningSums:
    """Test running_sums function."""

    def test_sums_per_key(self, purchases):
        sums = running_sums(purchases)
        assert sums[ReconciliationKey("wheat", "25kg")].total == 40.0
        assert sums[ReconciliationKey("rice", "50kg")].total == 20.0

    def test_absent_quantity_counts_as_zero(self):
        sums = running_sums([rec("Wheat", "25kg", None), rec("Wheat", "25kg", 3.0)])
        assert sums[ReconciliationKey("wheat", "25kg")].total == 3.0

    def test_absent_only_key_still_present(self):
        sums = running_sums([rec("Oats", "5kg", None)])
        assert sums[ReconciliationKey("oats", "5kg")].total == 0

    def test_first_spelling_kept(self):
        sums = running_sums([rec("Wheat", "25kg", 1.0), rec("WHEAT", "25KG", 1.0)])
        key_sum = sums[ReconciliationKey("wheat", "25kg")]
        assert (key_sum.description, key_sum.packing) == ("Wheat", "25kg")


class TestReconcile:
    """Test reconcile function."""

    def test_example(self, purchases, usage):
        rows = reconcile(purchases, usage)
        by_key = {row.key: row for row in rows}
        wheat = by_key[ReconciliationKey("wheat", "25kg")]
        assert (wheat.purchased, wheat.used, wheat.leftover) == (40.0, 15.0, 25.0)
        rice = by_key[ReconciliationKey("rice", "50kg")]
        assert (rice.purchased, rice.used, rice.leftover) == (20.0, 0, 20.0)

    def test_key_union(self, purchases):
        used = [rec("Oats", "5kg", 4.0), rec("Wheat", "25kg", 1.0)]
        rows = reconcile(purchases, used)
        expected = set(running_sums(purchases)) | set(running_sums(used))
        assert {row.key for row in rows} == expected

    def test_usage_only_key(self):
        rows = reconcile([], [rec("Oats", "5kg", 4.0)])
        assert len(rows) == 1
        assert (rows[0].purchased, rows[0].used, rows[0].leftover) == (0, 4.0, -4.0)

    def test_negative_leftover(self):
        rows = reconcile([rec("Wheat", "25kg", 5.0)], [rec("Wheat", "25kg", 8.0)])
        assert rows[0].leftover == -3.0

    def test_leftover_arithmetic(self, purchases, usage):
        for row in reconcile(purchases, usage + [rec("Oats", "5kg", 2.5)]):
            assert row.leftover == row.purchased - row.used

    def test_exemplar_prefers_purchase_spelling(self, purchases, usage):
        rows = reconcile(purchases, usage)
        wheat = next(row for row in rows if row.key.description == "wheat")
        assert (wheat.description, wheat.packing) == ("Wheat", "25kg")

    def test_exemplar_from_usage_when_not_purchased(self):
        rows = reconcile([], [rec("Basmati Rice", "10kg", 1.0), rec("basmati rice", "10KG", 1.0)])
        assert (rows[0].description, rows[0].packing) == ("Basmati Rice", "10kg")

    def test_sorted_by_description(self):
        purchased = [rec("Wheat", "25kg", 1.0), rec("Barley", "10kg", 1.0)]
        used = [rec("Oats", "5kg", 1.0)]
        rows = reconcile(purchased, used)
        assert [row.description for row in rows] == ["Barley", "Oats", "Wheat"]

    def test_sort_is_case_sensitive(self):
        rows = reconcile([rec("apple", "1kg", 1.0), rec("Zucchini", "1kg", 1.0)], [])
        assert [row.description for row in rows] == ["Zucchini", "apple"]

    def test_stable_for_equal_descriptions(self):
        purchased = [rec("Wheat", "50kg", 1.0), rec("Wheat", "25kg", 1.0)]
        used = [rec("Wheat", "10kg", 1.0)]
        rows = reconcile(purchased, used)
        assert [row.packing for row in rows] == ["50kg", "25kg", "10kg"]

    def test_empty_inputs(self):
        assert reconcile([], []) == []

    def test_inputs_not_modified(self, purchases, usage):
        before = list(purchases)
        reconcile(purchases, usage)
        assert purchases == before


class TestSummaries:
    """Totals, vocabularies and serialisation."""

    def test_totals(self, purchases, usage):
        totals = reconciliation_totals(reconcile(purchases, usage))
        assert totals == {'purchased': 60.0, 'used': 15.0, 'leftover': 45.0}

    def test_vocabularies(self, purchases, usage):
        descriptions, packings = reconciliation_vocabularies(reconcile(purchases, usage))
        assert descriptions == ["Rice", "Wheat"]
        assert packings == ["25kg", "50kg"]

    def test_dict_roundtrip(self, purchases, usage):
        row = reconcile(purchases, usage)[0]
        assert ReconciliationRow.from_dict(row.to_dict()) == row
        assert row.to_dict()['key'] == list(row.key)
