"""add_taxonomy_and_order_item_tables

Revision ID: a1c4e2f7b903
Revises:
Create Date: 2026-10-18

Terms, term taxonomy and term relationships, plus products, orders and
order line items for the earnings by taxonomy report.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f7b903'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create taxonomy and order item tables."""
    op.create_table(
        'terms',
        sa.Column('term_id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200)),
        sa.Column('term_group', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_terms_slug', 'terms', ['slug'])

    op.create_table(
        'term_taxonomy',
        sa.Column('term_taxonomy_id', sa.Integer(), primary_key=True),
        sa.Column('term_id', sa.Integer(), sa.ForeignKey('terms.term_id'), nullable=False),
        sa.Column('taxonomy', sa.String(32), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('count', sa.BigInteger(), server_default='0'),
    )
    op.create_index('ix_term_taxonomy_term_id', 'term_taxonomy', ['term_id'])
    op.create_index('ix_term_taxonomy_taxonomy', 'term_taxonomy', ['taxonomy'])

    op.create_table(
        'term_relationships',
        sa.Column('object_id', sa.BigInteger(), primary_key=True),
        sa.Column('term_taxonomy_id', sa.Integer(), sa.ForeignKey('term_taxonomy.term_taxonomy_id'), primary_key=True),
        sa.Column('term_order', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_term_relationships_term_taxonomy_id', 'term_relationships', ['term_taxonomy_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=True),
        sa.Column('content_type', sa.String()),
        sa.Column('status', sa.String()),
        sa.Column('price', sa.Numeric(10, 2)),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )
    op.create_index('ix_products_content_type', 'products', ['content_type'])
    op.create_index('ix_products_status', 'products', ['status'])

    op.create_table(
        'orders',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('order_number', sa.String(), nullable=True),
        sa.Column('status', sa.String()),
        sa.Column('customer_email', sa.String(), nullable=True),
        sa.Column('currency', sa.String()),
        sa.Column('subtotal', sa.Numeric(18, 9)),
        sa.Column('discount', sa.Numeric(18, 9)),
        sa.Column('tax', sa.Numeric(18, 9)),
        sa.Column('total', sa.Numeric(18, 9)),
        sa.Column('date_created', sa.DateTime()),
        sa.Column('date_completed', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_date_created', 'orders', ['date_created'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.BigInteger(), primary_key=True),
        sa.Column('order_id', sa.BigInteger(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.BigInteger(), nullable=False),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('price_id', sa.BigInteger(), nullable=True),
        sa.Column('cart_index', sa.Integer(), server_default='0'),
        sa.Column('status', sa.String()),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('amount', sa.Numeric(18, 9)),
        sa.Column('subtotal', sa.Numeric(18, 9)),
        sa.Column('discount', sa.Numeric(18, 9)),
        sa.Column('tax', sa.Numeric(18, 9)),
        sa.Column('total', sa.Numeric(18, 9)),
        sa.Column('date_created', sa.DateTime(), nullable=False),
    )

    # Per-term aggregates filter on product and date together
    op.create_index(
        'ix_order_items_product_date',
        'order_items',
        ['product_id', 'date_created']
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_status', 'order_items', ['status'])


def downgrade() -> None:
    """Drop taxonomy and order item tables."""
    op.drop_index('ix_order_items_status', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_index('ix_order_items_product_date', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_date_created', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_products_status', table_name='products')
    op.drop_index('ix_products_content_type', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_term_relationships_term_taxonomy_id', table_name='term_relationships')
    op.drop_table('term_relationships')
    op.drop_index('ix_term_taxonomy_taxonomy', table_name='term_taxonomy')
    op.drop_index('ix_term_taxonomy_term_id', table_name='term_taxonomy')
    op.drop_table('term_taxonomy')
    op.drop_index('ix_terms_slug', table_name='terms')
    op.drop_table('terms')
