"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.import_schema import ImportStats, TermImportResultResponse, TermOutcomeResponse
from api.schemas.term_schema import (
    TaxonomyCreateRequest, TaxonomyResponse, TaxonomyListResponse,
    TermResponse, TermListResponse
)

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',

    # Import
    'ImportStats',
    'TermImportResultResponse',
    'TermOutcomeResponse',

    # Taxonomies and terms
    'TaxonomyCreateRequest',
    'TaxonomyResponse',
    'TaxonomyListResponse',
    'TermResponse',
    'TermListResponse',
]
