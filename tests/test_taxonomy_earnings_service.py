"""
Earnings by taxonomy aggregation tests.

Guards against:
1. Wrong per-term sales / earnings totals
2. Parent/child ordering regressions (alphabetical, by id, children first)
3. Date filters leaking rows outside the report window
4. Monthly averages double counting or skipping products
5. Unregistered taxonomies showing up in the report
"""
from datetime import datetime
from decimal import Decimal

import pytest
import pytz

from taxonomy_reports.services.taxonomy_earnings_service import (
    TaxonomyEarningsService,
    _TermAccumulator,
)
from taxonomy_reports.services.taxonomy_registry import TaxonomyRegistry
from taxonomy_reports.utils.date_ranges import DateRange, parse_dates_for_range


class FixedStats:
    """Per-product averages from a lookup table"""

    def __init__(self, sales=None, earnings=None):
        self.sales = sales or {}
        self.earnings = earnings or {}
        self.calls = []

    def average_monthly_sales(self, product_id):
        self.calls.append(product_id)
        return self.sales.get(product_id, 0.0)

    def average_monthly_earnings(self, product_id):
        return self.earnings.get(product_id, Decimal("0.00"))


def _service(db, taxonomies=("download_category",), stats=None):
    registry = TaxonomyRegistry({"download": list(taxonomies)})
    return TaxonomyEarningsService(db, registry=registry, stats=stats or FixedStats(), content_type="download")


MAY = DateRange(start=datetime(2026, 5, 1), end=datetime(2026, 5, 31, 23, 59, 59), range_name="other")


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------

def test_parent_and_child_sharing_a_product_both_count_its_sales(db, store):
    """Fiction and Sci-Fi both hold product 10; each gets both order lines."""
    store.term(1, "Fiction", taxonomy="genre")
    store.term(2, "Sci-Fi", taxonomy="genre", parent=1)
    store.product(10)
    store.attach(10, 1)
    store.attach(10, 2)
    store.sale(10, "5.00", datetime(2026, 5, 3, 10, 0))
    store.sale(10, "7.00", datetime(2026, 5, 20, 16, 45))
    store.commit()

    terms = _service(db, taxonomies=("genre",)).compute(MAY)

    assert [t.name for t in terms] == ["Fiction", "Sci-Fi"]
    fiction, scifi = terms
    assert (fiction.id, fiction.parent, fiction.sales, fiction.earnings) == (1, None, 2, Decimal("12.00"))
    assert (scifi.id, scifi.parent, scifi.sales, scifi.earnings) == (2, 1, 2, Decimal("12.00"))


def test_term_without_sales_in_range_reports_zero(db, store):
    store.term(1, "Audio")
    store.product(10)
    store.attach(10, 1)
    store.sale(10, "9.99", datetime(2026, 4, 30, 23, 59))
    store.commit()

    [term] = _service(db).compute(MAY)

    assert term.sales == 0
    assert term.earnings == Decimal("0.00")


def test_earnings_sum_every_product_of_the_term(db, store):
    store.term(1, "Bundles")
    for product_id in (10, 11, 12):
        store.product(product_id)
        store.attach(product_id, 1)
    store.sale(10, "10.00", datetime(2026, 5, 2))
    store.sale(11, "2.50", datetime(2026, 5, 2))
    store.sale(11, "2.50", datetime(2026, 5, 9))
    store.commit()

    [term] = _service(db).compute(MAY)

    assert term.sales == 3
    assert term.earnings == Decimal("15.00")
    assert term.object_ids == [10, 11, 12]


def test_no_date_range_means_all_time(db, store):
    store.term(1, "Audio")
    store.product(10)
    store.attach(10, 1)
    store.sale(10, "1.00", datetime(2019, 1, 1))
    store.sale(10, "2.00", datetime(2026, 5, 1))
    store.commit()

    [term] = _service(db).compute(None)

    assert term.sales == 2
    assert term.earnings == Decimal("3.00")


# ---------------------------------------------------------------------------
# Date filtering
# ---------------------------------------------------------------------------

class TestDateFiltering:
    """Both bounds are inclusive; a missing bound leaves that side open."""

    @pytest.fixture
    def seeded(self, db, store):
        store.term(1, "Audio")
        store.product(10)
        store.attach(10, 1)
        store.sale(10, "1.00", datetime(2026, 4, 30, 23, 59, 59))
        store.sale(10, "2.00", datetime(2026, 5, 1, 0, 0, 0))
        store.sale(10, "4.00", datetime(2026, 5, 31, 23, 59, 59))
        store.sale(10, "8.00", datetime(2026, 6, 1, 0, 0, 0))
        store.commit()
        return db

    def test_bounds_are_inclusive(self, seeded):
        [term] = _service(seeded).compute(MAY)
        assert term.sales == 2
        assert term.earnings == Decimal("6.00")

    def test_start_only(self, seeded):
        [term] = _service(seeded).compute(DateRange(start=datetime(2026, 5, 1)))
        assert term.earnings == Decimal("14.00")

    def test_end_only(self, seeded):
        [term] = _service(seeded).compute(DateRange(end=datetime(2026, 5, 1)))
        assert term.earnings == Decimal("3.00")

    def test_narrowing_the_range_never_increases_totals(self, seeded):
        ranges = [
            DateRange(),
            DateRange(start=datetime(2026, 4, 1), end=datetime(2026, 6, 30)),
            MAY,
            DateRange(start=datetime(2026, 5, 15), end=datetime(2026, 5, 31, 23, 59, 59)),
            DateRange(start=datetime(2026, 5, 16), end=datetime(2026, 5, 17)),
        ]
        service = _service(seeded)
        totals = [(t.sales, t.earnings) for r in ranges for t in service.compute(r)]
        for wider, narrower in zip(totals, totals[1:]):
            assert narrower[0] <= wider[0]
            assert narrower[1] <= wider[1]


class TestReportingTimezone:
    """Order timestamps are naive UTC; the window is resolved in New York time."""

    TZ = "America/New_York"

    @pytest.fixture
    def seeded(self, db, store):
        store.term(1, "Audio")
        store.product(10)
        store.attach(10, 1)
        store.sale(10, "1.00", datetime(2026, 4, 30, 21, 0))  # Apr 30 17:00 local
        store.sale(10, "2.00", datetime(2026, 5, 1, 3, 59))  # Apr 30 23:59 local
        store.sale(10, "4.00", datetime(2026, 5, 1, 4, 0))  # May 1 00:00 local
        store.sale(10, "8.00", datetime(2026, 6, 1, 3, 59))  # May 31 23:59 local
        store.sale(10, "16.00", datetime(2026, 6, 1, 4, 0))  # Jun 1 00:00 local
        store.commit()
        return db

    def test_named_month_uses_local_midnights(self, seeded):
        date_range = parse_dates_for_range("last_month", now=datetime(2026, 6, 10), tz_name=self.TZ)

        [term] = _service(seeded).compute(date_range)

        assert term.sales == 2
        assert term.earnings == Decimal("12.00")

    def test_explicit_utc_window_is_not_shifted(self, seeded):
        date_range = parse_dates_for_range(
            "other",
            start=pytz.UTC.localize(datetime(2026, 5, 1)),
            end=pytz.UTC.localize(datetime(2026, 5, 31)),
            tz_name=self.TZ,
        )

        [term] = _service(seeded).compute(date_range)

        # The Apr 30 21:00 UTC sale falls before the window
        assert term.sales == 2
        assert term.earnings == Decimal("6.00")


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class TestOrdering:

    def test_root_followed_by_children_in_discovery_order(self, db, store):
        store.term(5, "Zebra")
        store.term(2, "Beta", parent=5)
        store.term(9, "Alpha", parent=5)
        for term_id in (5, 2, 9):
            store.product(term_id * 10)
            store.attach(term_id * 10, term_id)
        store.commit()

        terms = _service(db).compute(MAY)

        assert [t.id for t in terms] == [5, 2, 9]

    def test_children_grouped_under_their_own_root(self, db, store):
        store.term(1, "Music")
        store.term(2, "Video")
        store.term(3, "Rock", parent=1)
        store.term(4, "Films", parent=2)
        store.term(5, "Jazz", parent=1)
        for term_id in range(1, 6):
            store.product(term_id * 10)
            store.attach(term_id * 10, term_id)
        store.commit()

        terms = _service(db).compute(MAY)

        assert [t.name for t in terms] == ["Music", "Rock", "Jazz", "Video", "Films"]
        assert [t.depth for t in terms] == [0, 1, 1, 0, 1]

    def test_grandchildren_and_orphans_are_left_out(self, db, store):
        store.term(1, "Music")
        store.term(2, "Rock", parent=1)
        store.term(3, "Punk", parent=2)  # grandchild
        store.term(4, "Lost", parent=99)  # parent has no products / does not exist
        for term_id in range(1, 5):
            store.product(term_id * 10)
            store.attach(term_id * 10, term_id)
        store.commit()

        terms = _service(db).compute(MAY)

        assert [t.id for t in terms] == [1, 2]

    def test_child_listed_even_when_its_root_was_created_later(self, db, store):
        store.term(2, "Rock", parent=1)
        store.term(1, "Music")
        store.product(10)
        store.product(20)
        store.attach(20, 2)
        store.attach(10, 1)
        store.commit()

        terms = _service(db).compute(MAY)

        assert [t.id for t in terms] == [1, 2]


# ---------------------------------------------------------------------------
# Registry / taxonomy filtering
# ---------------------------------------------------------------------------

def test_empty_registry_returns_nothing(db, store):
    store.term(1, "Audio")
    store.product(10)
    store.attach(10, 1)
    store.sale(10, "3.00", datetime(2026, 5, 5))
    store.commit()

    service = TaxonomyEarningsService(db, registry=TaxonomyRegistry(), stats=FixedStats(), content_type="download")

    assert service.compute(MAY) == []
    assert service.compute(None) == []


def test_only_registered_taxonomies_are_reported(db, store):
    store.term(1, "Audio", taxonomy="download_category")
    store.term(2, "sale", taxonomy="download_tag")
    store.term(3, "Blue", taxonomy="color")
    for term_id in (1, 2, 3):
        store.product(term_id * 10)
        store.attach(term_id * 10, term_id)
    store.commit()

    terms = _service(db, taxonomies=("download_category", "download_tag")).compute(MAY)

    assert sorted(t.name for t in terms) == ["Audio", "sale"]


def test_term_without_products_is_not_reported(db, store):
    store.term(1, "Audio")
    store.term(2, "Empty")
    store.product(10)
    store.attach(10, 1)
    store.commit()

    terms = _service(db).compute(MAY)

    assert [t.id for t in terms] == [1]


# ---------------------------------------------------------------------------
# Monthly averages
# ---------------------------------------------------------------------------

class TestAverages:

    def test_averages_sum_over_the_terms_products(self, db, store):
        store.term(1, "Audio")
        store.term(2, "Video")
        for product_id in (10, 11, 12):
            store.product(product_id)
        store.attach(10, 1)
        store.attach(11, 1)
        store.attach(12, 2)
        store.commit()
        stats = FixedStats(
            sales={10: 1.5, 11: 2.0, 12: 7.0},
            earnings={10: Decimal("10.00"), 11: Decimal("0.25"), 12: Decimal("99.00")},
        )

        audio, video = _service(db, stats=stats).compute(MAY)

        assert audio.average_sales == pytest.approx(3.5)
        assert audio.average_earnings == Decimal("10.25")
        assert video.average_sales == pytest.approx(7.0)
        assert video.average_earnings == Decimal("99.00")

    def test_each_product_contributes_once(self, db, store):
        store.term(1, "Audio")
        store.product(10)
        store.attach(10, 1)
        store.commit()
        stats = FixedStats(sales={10: 4.0})

        [term] = _service(db, stats=stats).compute(MAY)

        assert term.average_sales == pytest.approx(4.0)
        assert stats.calls == [10]

    def test_earnings_averages_are_rounded_once_on_the_term_total(self, db, store):
        """Three products at 3.333...; rounding each first would give 9.99."""
        store.term(1, "Audio")
        for product_id in (10, 11, 12):
            store.product(product_id)
            store.attach(product_id, 1)
        store.commit()
        third = Decimal("10.00") / 3
        stats = FixedStats(earnings={10: third, 11: third, 12: third})

        [term] = _service(db, stats=stats).compute(MAY)

        assert term.average_earnings == Decimal("10.00")
        assert term.to_dict()["average_earnings"] == "10.00"

    def test_term_in_two_registered_taxonomies_counts_product_per_relationship(self, db, store):
        """Same term reached through two term_taxonomy rows: product listed twice."""
        store.term(1, "Featured", taxonomy="download_category")
        store.term(1, "Featured", taxonomy="download_tag")
        store.product(10)
        store.attach(10, 1, term_taxonomy_id=store.term_taxonomies[1][0])
        store.attach(10, 1, term_taxonomy_id=store.term_taxonomies[1][1])
        store.sale(10, "6.00", datetime(2026, 5, 10))
        store.commit()
        stats = FixedStats(sales={10: 1.0}, earnings={10: Decimal("6.00")})

        [term] = _service(db, taxonomies=("download_category", "download_tag"), stats=stats).compute(MAY)

        assert term.object_ids == [10, 10]
        assert term.average_sales == pytest.approx(2.0)
        assert term.average_earnings == Decimal("12.00")
        # The order item filter is a set of products; the sale is counted once
        assert term.sales == 1
        assert term.earnings == Decimal("6.00")


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------

class TestFold:

    def test_fold_keeps_first_seen_order_and_every_row(self):
        rows = [
            (7, "Old name", 0, 10),
            (3, "Child", 7, 11),
            (7, "New name", 0, 12),
            (7, "New name", 0, 10),
        ]

        folded = TaxonomyEarningsService._fold_term_rows(rows)

        assert list(folded) == [7, 3]
        assert folded[7].name == "New name"
        assert folded[7].object_ids == [10, 12, 10]
        assert folded[7].parent is None
        assert folded[3].parent == 7

    def test_accumulator_without_name_is_rejected(self):
        with pytest.raises(ValueError):
            _TermAccumulator(term_id=1, object_ids=[10]).validate()

    def test_accumulator_without_products_is_rejected(self):
        with pytest.raises(ValueError):
            _TermAccumulator(term_id=1, name="Audio").validate()


def test_report_row_shape(db, store):
    store.term(1, "Music")
    store.term(4, "Rock", parent=1)
    store.product(10)
    store.attach(10, 1)
    store.attach(10, 4)
    store.sale(10, "3.10", datetime(2026, 5, 10))
    store.commit()
    stats = FixedStats(sales={10: 0.333}, earnings={10: Decimal("1.03")})

    music, rock = _service(db, stats=stats).compute(MAY)

    assert music.to_dict()["parent"] is None
    assert rock.to_dict() == {
        "id": 4,
        "name": "Rock",
        "parent": 1,
        "depth": 1,
        "sales": 1,
        "earnings": "3.10",
        "average_sales": 0.33,
        "average_earnings": "1.03",
    }
