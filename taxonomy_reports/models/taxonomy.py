"""
Taxonomy Data Models

Terms, their taxonomy metadata and their links to products.
A term belongs to a taxonomy ("download_category", "download_tag", ...)
through term_taxonomy; term_relationships attaches products to it.
"""
from sqlalchemy import Column, Integer, BigInteger, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from taxonomy_reports.models.base import Base


class Term(Base):
    """A taxonomy value, e.g. the "Fiction" category"""
    __tablename__ = "terms"

    term_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), index=True)
    term_group = Column(Integer, default=0)

    taxonomies = relationship("TermTaxonomy", back_populates="term")


class TermTaxonomy(Base):
    """
    Places a term in a taxonomy

    parent is the term_id of the parent term, 0 for top-level terms.
    """
    __tablename__ = "term_taxonomy"

    term_taxonomy_id = Column(Integer, primary_key=True, index=True)
    term_id = Column(Integer, ForeignKey("terms.term_id"), index=True, nullable=False)
    taxonomy = Column(String(32), index=True, nullable=False)
    description = Column(Text, nullable=True)
    parent = Column(BigInteger, default=0, nullable=False)
    count = Column(BigInteger, default=0)  # Number of objects attached

    term = relationship("Term", back_populates="taxonomies")
    relationships = relationship("TermRelationship", back_populates="term_taxonomy")


class TermRelationship(Base):
    """Links one object (product) to one term taxonomy"""
    __tablename__ = "term_relationships"

    object_id = Column(BigInteger, primary_key=True, index=True)
    term_taxonomy_id = Column(
        Integer, ForeignKey("term_taxonomy.term_taxonomy_id"), primary_key=True, index=True
    )
    term_order = Column(Integer, default=0)

    term_taxonomy = relationship("TermTaxonomy", back_populates="relationships")
