"""
Shared fixtures: an in-memory SQLite store and a small builder for
seeding terms, products and order items.
"""
from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import taxonomy_reports.models  # noqa: F401  (registers tables on Base.metadata)
from taxonomy_reports.models.base import Base
from taxonomy_reports.models.order import Order, OrderItem, Product
from taxonomy_reports.models.taxonomy import Term, TermRelationship, TermTaxonomy


class StoreBuilder:
    """Seeds the report tables. term_taxonomy ids follow creation order."""

    def __init__(self, db):
        self.db = db
        self._term_taxonomy_ids = count(1)
        self._order_ids = count(1)
        self._item_ids = count(1)
        # term_id -> [term_taxonomy_id, ...]
        self.term_taxonomies = {}

    def term(self, term_id, name, taxonomy="download_category", parent=0):
        if self.db.get(Term, term_id) is None:
            self.db.add(Term(term_id=term_id, name=name, slug=name.lower().replace(" ", "-")))
        tt_id = next(self._term_taxonomy_ids)
        self.db.add(TermTaxonomy(term_taxonomy_id=tt_id, term_id=term_id, taxonomy=taxonomy, parent=parent))
        self.term_taxonomies.setdefault(term_id, []).append(tt_id)
        self.db.flush()
        return tt_id

    def product(self, product_id, name=None, published_at=None, created_at=None):
        self.db.add(Product(
            id=product_id,
            name=name or f"Product {product_id}",
            published_at=published_at,
            created_at=created_at or datetime(2026, 1, 1),
        ))
        self.db.flush()

    def attach(self, product_id, term_id, term_taxonomy_id=None):
        tt_id = term_taxonomy_id or self.term_taxonomies[term_id][0]
        self.db.add(TermRelationship(object_id=product_id, term_taxonomy_id=tt_id))
        self.db.flush()

    def sale(self, product_id, total, when):
        order = Order(id=next(self._order_ids), total=Decimal(str(total)), date_created=when)
        self.db.add(order)
        self.db.add(OrderItem(
            id=next(self._item_ids),
            order_id=order.id,
            product_id=product_id,
            quantity=1,
            amount=Decimal(str(total)),
            subtotal=Decimal(str(total)),
            total=Decimal(str(total)),
            date_created=when,
        ))
        self.db.flush()

    def commit(self):
        self.db.commit()


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db):
    return StoreBuilder(db)
