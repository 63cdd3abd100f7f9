"""
Store Data Models

Products (downloads), orders and their line items.
Order items are the source of truth for sales and earnings reports.
"""
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from taxonomy_reports.models.base import Base


class Product(Base):
    """A product of the reported content type"""
    __tablename__ = "products"

    id = Column(BigInteger, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, index=True, nullable=True)
    content_type = Column(String, index=True, default="download")
    status = Column(String, index=True, default="publish")  # publish, draft, private

    # Current price
    price = Column(Numeric(10, 2), default=0)

    # Timestamps
    published_at = Column(DateTime, nullable=True)  # Start of the monthly averages window
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Order(Base):
    """A customer order"""
    __tablename__ = "orders"

    id = Column(BigInteger, primary_key=True, index=True)
    order_number = Column(String, index=True, nullable=True)
    status = Column(String, index=True, default="complete")  # complete, pending, refunded, ...
    customer_email = Column(String, index=True, nullable=True)
    currency = Column(String, default="USD")

    # Amounts
    subtotal = Column(Numeric(18, 9), default=0)
    discount = Column(Numeric(18, 9), default=0)
    tax = Column(Numeric(18, 9), default=0)
    total = Column(Numeric(18, 9), default=0)

    # Timestamps
    date_created = Column(DateTime, index=True, default=datetime.utcnow)
    date_completed = Column(DateTime, nullable=True)

    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    """
    Order line items

    One row per purchased product in an order. date_created is denormalized
    from the order for fast date-range queries.
    """
    __tablename__ = "order_items"

    id = Column(BigInteger, primary_key=True, index=True)

    # References
    order_id = Column(BigInteger, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(BigInteger, index=True, nullable=False)
    product_name = Column(String, nullable=True)
    price_id = Column(BigInteger, nullable=True)  # Variable-price option
    cart_index = Column(Integer, default=0)

    status = Column(String, index=True, default="complete")

    # Quantities and amounts
    quantity = Column(Integer, nullable=False, default=1)
    amount = Column(Numeric(18, 9), default=0)  # Unit price
    subtotal = Column(Numeric(18, 9), default=0)
    discount = Column(Numeric(18, 9), default=0)
    tax = Column(Numeric(18, 9), default=0)
    total = Column(Numeric(18, 9), default=0)

    date_created = Column(DateTime, index=True, nullable=False, default=datetime.utcnow)

    order = relationship("Order", back_populates="items")
