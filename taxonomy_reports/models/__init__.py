"""Database models for the taxonomy earnings reports service"""

from taxonomy_reports.models.taxonomy import (
    Term,
    TermTaxonomy,
    TermRelationship
)

from taxonomy_reports.models.order import (
    Product,
    Order,
    OrderItem
)
