"""
SQLAlchemy models for the taxonomy term store.

This module defines the database schema for taxonomies and their terms,
mirroring the host platform's rule that a term name is unique only within
its parent.
"""

from sqlalchemy import (
    Column, Integer, String, Text, TIMESTAMP,
    ForeignKey, Index, UniqueConstraint, text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Limits enforced by the host platform
TAXONOMY_NAME_MAX_LENGTH = 32
TERM_NAME_MAX_LENGTH = 200


class Taxonomy(Base):
    """A named classification scheme (e.g. location, category)."""

    __tablename__ = 'taxonomies'
    __table_args__ = (
        {'comment': 'Classification schemes that own terms'},
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    name = Column(
        String(TAXONOMY_NAME_MAX_LENGTH),
        nullable=False,
        unique=True,
        comment='Machine name used on the command line, e.g. location'
    )
    label = Column(
        String(255),
        nullable=True,
        comment='Human readable name'
    )
    description = Column(
        Text,
        nullable=True
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )

    terms = relationship('Term', back_populates='taxonomy', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Taxonomy(id={self.id}, name='{self.name}')>"


class Term(Base):
    """A single named node within a taxonomy."""

    __tablename__ = 'terms'
    __table_args__ = (
        UniqueConstraint('taxonomy_id', 'parent_id', 'name', name='uq_terms_taxonomy_parent_name'),
        Index('idx_terms_taxonomy_name', 'taxonomy_id', 'name'),
        {'comment': 'Terms; names are unique per (taxonomy, parent)'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    taxonomy_id = Column(
        Integer,
        ForeignKey('taxonomies.id', ondelete='CASCADE'),
        nullable=False
    )
    name = Column(
        String(TERM_NAME_MAX_LENGTH),
        nullable=False
    )
    # 0 means top level; kept as a plain integer the way the host platform stores it
    parent_id = Column(
        Integer,
        server_default='0',
        default=0,
        nullable=False,
        comment='ID of the parent term, 0 for top level terms'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )

    taxonomy = relationship('Taxonomy', back_populates='terms')

    def __repr__(self):
        return f"<Term(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"
