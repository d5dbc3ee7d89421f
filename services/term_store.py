"""
Term Store - Access to taxonomy and term storage.

The importer only talks to the abstract ``TermStore`` interface so it can be
run against the SQL store below, or against an in-memory fake in tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.schema import (
    Taxonomy, Term, TAXONOMY_NAME_MAX_LENGTH, TERM_NAME_MAX_LENGTH
)
from services.exceptions import (
    InvalidTaxonomyError, TaxonomyExistsError, TermCreationError
)

logger = logging.getLogger(__name__)


class TermStore(ABC):
    """Read and append operations against a taxonomy's term table."""

    @abstractmethod
    def taxonomy_exists(self, taxonomy: str) -> bool:
        ...

    @abstractmethod
    def find_term(self, name: str, taxonomy: str) -> Optional[Term]:
        """Find a term by name anywhere in the taxonomy, ignoring its parent."""

    @abstractmethod
    def term_exists(self, name: str, taxonomy: str, parent_id: int = 0) -> bool:
        ...

    @abstractmethod
    def create_term(self, name: str, taxonomy: str, parent_id: int = 0) -> Term:
        """
        Create a term.

        Raises:
            TermCreationError: If the term is rejected or cannot be written
        """

    @abstractmethod
    def list_terms(self, taxonomy: str) -> List[Term]:
        ...


class SqlTermStore(TermStore):
    """
    Term store backed by a SQLAlchemy session.

    Every created term is committed straight away, so an interrupted import
    keeps what it already wrote and a re-run picks up where it stopped.
    """

    def __init__(self, db_session: Session):
        self.session = db_session

    def _get_taxonomy(self, taxonomy: str) -> Optional[Taxonomy]:
        if not taxonomy:
            return None
        return self.session.query(Taxonomy).filter_by(name=taxonomy).first()

    def _require_taxonomy(self, taxonomy: str) -> Taxonomy:
        tax = self._get_taxonomy(taxonomy)
        if tax is None:
            raise InvalidTaxonomyError(taxonomy)
        return tax

    # Taxonomies

    def create_taxonomy(self, name: str, label: Optional[str] = None,
                        description: Optional[str] = None) -> Taxonomy:
        """
        Register a new taxonomy.

        Raises:
            TaxonomyExistsError: If the name is already taken
            ValueError: If the name is empty or too long
        """
        name = (name or '').strip()
        if not name:
            raise ValueError("Taxonomy name is required")
        if len(name) > TAXONOMY_NAME_MAX_LENGTH:
            raise ValueError(
                f"Taxonomy names must be between 1 and {TAXONOMY_NAME_MAX_LENGTH} characters in length"
            )
        if self._get_taxonomy(name) is not None:
            raise TaxonomyExistsError(f"The taxonomy {name} already exists")

        tax = Taxonomy(name=name, label=label or name, description=description)
        self.session.add(tax)
        self.session.commit()
        logger.info(f"Created taxonomy '{name}' (ID {tax.id})")
        return tax

    def list_taxonomies(self) -> List[Taxonomy]:
        return self.session.query(Taxonomy).order_by(Taxonomy.name).all()

    def taxonomy_exists(self, taxonomy: str) -> bool:
        return self._get_taxonomy(taxonomy) is not None

    # Terms

    def find_term(self, name: str, taxonomy: str) -> Optional[Term]:
        tax = self._get_taxonomy(taxonomy)
        if tax is None or not name:
            return None
        # Oldest match wins when the same name sits under several parents
        return (
            self.session.query(Term)
            .filter_by(taxonomy_id=tax.id, name=name)
            .order_by(Term.id)
            .first()
        )

    def term_exists(self, name: str, taxonomy: str, parent_id: int = 0) -> bool:
        tax = self._get_taxonomy(taxonomy)
        if tax is None or not name:
            return False
        query = self.session.query(Term.id).filter_by(
            taxonomy_id=tax.id, name=name, parent_id=parent_id or 0
        )
        return query.first() is not None

    def create_term(self, name: str, taxonomy: str, parent_id: int = 0) -> Term:
        tax = self._require_taxonomy(taxonomy)
        name = (name or '').strip()
        parent_id = parent_id or 0

        if not name:
            raise TermCreationError("A name is required for this term.")
        if len(name) > TERM_NAME_MAX_LENGTH:
            raise TermCreationError(
                f"Term names must not exceed {TERM_NAME_MAX_LENGTH} characters."
            )
        if parent_id > 0:
            parent = self.session.query(Term.id).filter_by(
                id=parent_id, taxonomy_id=tax.id
            ).first()
            if parent is None:
                raise TermCreationError("Parent term does not exist.")

        term = Term(taxonomy_id=tax.id, name=name, parent_id=parent_id)
        try:
            self.session.add(term)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.error(f"Duplicate term '{name}' in {taxonomy} (parent {parent_id}): {e}")
            raise TermCreationError(
                "A term with the name provided already exists with this parent."
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to insert term '{name}' into {taxonomy}: {e}")
            raise TermCreationError(f"Could not insert term into the database: {e}") from e

        logger.debug(f"Created term {term.id} '{name}' in {taxonomy} (parent {parent_id})")
        return term

    def list_terms(self, taxonomy: str) -> List[Term]:
        tax = self._require_taxonomy(taxonomy)
        return (
            self.session.query(Term)
            .filter_by(taxonomy_id=tax.id)
            .order_by(Term.id)
            .all()
        )
