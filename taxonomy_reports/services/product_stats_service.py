"""
Product Stats Service

Historical per-product averages used by the taxonomy report:
lifetime sales/earnings spread over the months since the product was published.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func

from taxonomy_reports.models.order import Product, OrderItem
from taxonomy_reports.utils.helpers import to_money

DAYS_PER_MONTH = 30


class ProductStatsService:
    """Average monthly sales and earnings per product"""

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now or datetime.utcnow()
        # Lifetime stats are memoized for the lifetime of this instance only
        self._lifetime: Dict[int, Tuple[int, Decimal]] = {}

    def average_monthly_sales(self, product_id: int) -> float:
        """Lifetime sales divided by whole months since publication"""
        months = self._months_since_publication(product_id)
        if months is None:
            return 0.0
        sales, _ = self._lifetime_stats(product_id)
        return sales / months if months > 0 else float(sales)

    def average_monthly_earnings(self, product_id: int) -> Decimal:
        """Lifetime earnings divided by whole months since publication, unrounded"""
        months = self._months_since_publication(product_id)
        if months is None:
            return to_money(0)
        _, earnings = self._lifetime_stats(product_id)
        return earnings / months if months > 0 else earnings

    def _months_since_publication(self, product_id: int) -> Optional[int]:
        """Whole 30-day months since publication, or None for unknown products"""
        product = self.db.get(Product, product_id)
        if product is None:
            return None
        published = product.published_at or product.created_at
        if published is None:
            return 0
        return abs(self.now - published).days // DAYS_PER_MONTH

    def _lifetime_stats(self, product_id: int) -> Tuple[int, Decimal]:
        if product_id not in self._lifetime:
            total, sales = self.db.query(
                func.sum(OrderItem.total),
                func.count(OrderItem.id)
            ).filter(OrderItem.product_id == product_id).one()
            self._lifetime[product_id] = (int(sales or 0), to_money(total))
        return self._lifetime[product_id]
