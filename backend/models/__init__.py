"""Models package for the taxonomy term store."""
from backend.models.schema import Base, Taxonomy, Term

__all__ = ['Base', 'Taxonomy', 'Term']
