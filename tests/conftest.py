"""
Pytest configuration and fixtures for term import tests.
"""

import csv
from dataclasses import dataclass
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.models.schema import Base
from services.exceptions import TermCreationError
from services.term_store import SqlTermStore, TermStore


@pytest.fixture
def engine():
    """Create an in-memory test database engine."""
    eng = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)
    sess = Session()

    yield sess

    sess.close()


@pytest.fixture
def sql_store(session):
    """SQL term store with an empty 'location' taxonomy."""
    store = SqlTermStore(session)
    store.create_taxonomy('location', label='Locations')
    return store


@dataclass
class FakeTerm:
    id: int
    name: str
    taxonomy: str
    parent_id: int = 0


class InMemoryTermStore(TermStore):
    """Term store fake keeping terms in a list."""

    def __init__(self, taxonomies=('location',), failing_names=()):
        self.taxonomies = set(taxonomies)
        self.failing_names = set(failing_names)
        self.terms = []
        self.create_calls = []

    def taxonomy_exists(self, taxonomy: str) -> bool:
        return taxonomy in self.taxonomies

    def find_term(self, name: str, taxonomy: str) -> Optional[FakeTerm]:
        for term in self.terms:
            if term.taxonomy == taxonomy and term.name == name:
                return term
        return None

    def term_exists(self, name: str, taxonomy: str, parent_id: int = 0) -> bool:
        return any(
            t.taxonomy == taxonomy and t.name == name and t.parent_id == parent_id
            for t in self.terms
        )

    def create_term(self, name: str, taxonomy: str, parent_id: int = 0) -> FakeTerm:
        self.create_calls.append((name, taxonomy, parent_id))
        if name in self.failing_names:
            raise TermCreationError(f"Rejected term {name}")
        term = FakeTerm(id=len(self.terms) + 1, name=name, taxonomy=taxonomy, parent_id=parent_id)
        self.terms.append(term)
        return term

    def list_terms(self, taxonomy: str):
        return [t for t in self.terms if t.taxonomy == taxonomy]

    def tree(self, taxonomy='location'):
        """(name, parent name) pairs, for easy assertions."""
        by_id = {t.id: t.name for t in self.terms}
        return [(t.name, by_id.get(t.parent_id)) for t in self.list_terms(taxonomy)]


@pytest.fixture
def fake_store():
    return InMemoryTermStore()


@pytest.fixture
def write_csv(tmp_path):
    """Write rows (header first) to a CSV file and return its path."""
    def _write(rows, name='terms.csv'):
        path = tmp_path / name
        with open(path, 'w', newline='', encoding='utf-8') as f:
            csv.writer(f).writerows(rows)
        return str(path)
    return _write
