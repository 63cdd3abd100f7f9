"""
Earnings by Taxonomy Service

Breaks sales and earnings down by taxonomy term (categories, tags, ...)
for a report date range.

For every term attached to at least one product:
- sales / earnings: order items for the term's products inside the range
- average_sales / average_earnings: sum of each product's historical
  monthly averages

Terms come back parents first, each root immediately followed by its
direct children. The report is two levels deep: terms whose parent is
itself a child, or whose parent has no products, are left out.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func

from taxonomy_reports.config import get_settings
from taxonomy_reports.models.order import OrderItem
from taxonomy_reports.models.taxonomy import Term, TermTaxonomy, TermRelationship
from taxonomy_reports.services.product_stats_service import ProductStatsService
from taxonomy_reports.services.taxonomy_registry import TaxonomyRegistry
from taxonomy_reports.utils.date_ranges import DateRange
from taxonomy_reports.utils.helpers import to_money
from taxonomy_reports.utils.logger import log


@dataclass
class TaxonomyTerm:
    """One row of the earnings by taxonomy report"""
    id: int
    name: str
    parent: Optional[int]
    object_ids: List[int]
    sales: int = 0
    earnings: Decimal = field(default_factory=lambda: to_money(0))
    average_sales: float = 0.0
    average_earnings: Decimal = field(default_factory=lambda: to_money(0))

    @property
    def depth(self) -> int:
        return 0 if self.parent is None else 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "parent": self.parent,
            "depth": self.depth,
            "sales": self.sales,
            "earnings": str(self.earnings),
            "average_sales": round(self.average_sales, 2),
            "average_earnings": str(self.average_earnings),
        }


@dataclass
class _TermAccumulator:
    """Per-term state gathered while folding the term/product join rows"""
    term_id: int
    name: Optional[str] = None
    raw_parent: Optional[int] = None
    object_ids: List[int] = field(default_factory=list)

    def add_row(self, name: str, parent: Optional[int], object_id: int) -> None:
        # name and parent are the same on every row of a term; last one wins
        self.name = name
        self.raw_parent = int(parent or 0)
        self.object_ids.append(int(object_id))

    def validate(self) -> None:
        if self.name is None:
            raise ValueError(f"Term {self.term_id} has no name")
        if not self.object_ids:
            raise ValueError(f"Term {self.term_id} has no products")

    @property
    def parent(self) -> Optional[int]:
        """Parent term id, None for top-level terms"""
        return None if not self.raw_parent else self.raw_parent


class TaxonomyEarningsService:
    """Aggregates order item sales and earnings per taxonomy term"""

    def __init__(
        self,
        db: Session,
        registry: Optional[TaxonomyRegistry] = None,
        stats: Optional[ProductStatsService] = None,
        content_type: Optional[str] = None,
    ):
        self.db = db
        self.registry = registry or TaxonomyRegistry.from_settings()
        # Anything with average_monthly_sales / average_monthly_earnings(product_id) works here
        self.stats = stats or ProductStatsService(db)
        self.content_type = content_type or get_settings().report_content_type

    def compute(self, date_range: Optional[DateRange] = None) -> List[TaxonomyTerm]:
        """
        Build the earnings by taxonomy report

        Args:
            date_range: Report window. None (or a range without bounds) means all time.

        Returns:
            Terms ordered root first, each root followed by its direct children
        """
        date_range = date_range or DateRange(range_name="all_time")
        log.info(
            f"Calculating earnings by taxonomy for '{self.content_type}' "
            f"from {date_range.start or 'the beginning'} to {date_range.end or 'now'}"
        )

        taxonomies = self.registry.list_taxonomy_names(self.content_type)
        if not taxonomies:
            log.info(f"No taxonomies registered for '{self.content_type}'")
            return []

        accumulators = self._fold_term_rows(self._fetch_term_rows(taxonomies))
        terms = [self._summarize_term(acc, date_range) for acc in accumulators.values()]
        ordered = self._order_terms(terms)

        log.info(f"Earnings by taxonomy: {len(ordered)} terms across {len(taxonomies)} taxonomies")
        return ordered

    def _fetch_term_rows(self, taxonomies: Set[str]) -> List[Tuple[int, str, int, int]]:
        """(term_id, name, parent, object_id) for every product attached to a term in taxonomies"""
        return (
            self.db.query(
                Term.term_id,
                Term.name,
                TermTaxonomy.parent,
                TermRelationship.object_id,
            )
            .join(TermTaxonomy, Term.term_id == TermTaxonomy.term_id)
            .join(TermRelationship, TermRelationship.term_taxonomy_id == TermTaxonomy.term_taxonomy_id)
            .filter(TermTaxonomy.taxonomy.in_(sorted(taxonomies)))
            .order_by(TermTaxonomy.term_taxonomy_id, TermRelationship.object_id)
            .all()
        )

    @staticmethod
    def _fold_term_rows(rows) -> Dict[int, _TermAccumulator]:
        """Group join rows by term id, keeping first-seen term order"""
        accumulators: Dict[int, _TermAccumulator] = {}
        for term_id, name, parent, object_id in rows:
            term_id = int(term_id)
            if term_id not in accumulators:
                accumulators[term_id] = _TermAccumulator(term_id=term_id)
            accumulators[term_id].add_row(name, parent, object_id)

        for acc in accumulators.values():
            acc.validate()
        return accumulators

    def _summarize_term(self, acc: _TermAccumulator, date_range: DateRange) -> TaxonomyTerm:
        sales, earnings = self._order_item_totals(acc.object_ids, date_range)

        average_sales = 0.0
        average_earnings = Decimal(0)
        # Once per relationship row, duplicates included
        for product_id in acc.object_ids:
            average_sales += self.stats.average_monthly_sales(product_id)
            average_earnings += Decimal(self.stats.average_monthly_earnings(product_id))

        return TaxonomyTerm(
            id=acc.term_id,
            name=acc.name,
            parent=acc.parent,
            object_ids=list(acc.object_ids),
            sales=sales,
            earnings=earnings,
            average_sales=average_sales,
            average_earnings=to_money(average_earnings),
        )

    def _order_item_totals(self, product_ids: List[int], date_range: DateRange) -> Tuple[int, Decimal]:
        """Count and summed total of order items for product_ids inside date_range"""
        query = self.db.query(
            func.sum(OrderItem.total),
            func.count(OrderItem.id)
        ).filter(OrderItem.product_id.in_(sorted(set(product_ids))))

        if date_range.start is not None:
            query = query.filter(OrderItem.date_created >= date_range.start)
        if date_range.end is not None:
            query = query.filter(OrderItem.date_created <= date_range.end)

        total, sales = query.one()
        return int(sales or 0), to_money(total)

    @staticmethod
    def _order_terms(terms: List[TaxonomyTerm]) -> List[TaxonomyTerm]:
        """Roots in term order, each followed by its direct children in term order"""
        children: Dict[int, List[TaxonomyTerm]] = {}
        for term in terms:
            if term.parent is not None:
                children.setdefault(term.parent, []).append(term)

        ordered: List[TaxonomyTerm] = []
        for term in terms:
            if term.parent is None:
                ordered.append(term)
                ordered.extend(children.get(term.id, []))

        dropped = len(terms) - len(ordered)
        if dropped:
            log.debug(f"{dropped} terms below the second level or without a reported parent were left out")
        return ordered
