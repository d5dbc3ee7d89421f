"""
Taxonomies router - Register taxonomies and list their terms.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_api_key, get_term_store
from api.schemas.term_schema import (
    TaxonomyCreateRequest, TaxonomyResponse, TaxonomyListResponse,
    TermResponse, TermListResponse
)
from services.exceptions import InvalidTaxonomyError, TaxonomyExistsError
from services.term_store import SqlTermStore

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/taxonomies', tags=['taxonomies'])


@router.post('', response_model=TaxonomyResponse, status_code=status.HTTP_201_CREATED)
async def create_taxonomy(
    request: TaxonomyCreateRequest,
    store: SqlTermStore = Depends(get_term_store),
    api_key: str = Depends(get_api_key)
):
    """
    Register a taxonomy so terms can be imported into it.

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/api/taxonomies \\
         -H 'Content-Type: application/json' -d '{"name": "location"}'
    ```

    **Returns:**
    - 201 with the new taxonomy
    - 409 if a taxonomy with that name already exists
    """
    try:
        taxonomy = store.create_taxonomy(request.name, request.label, request.description)
    except TaxonomyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TaxonomyResponse.model_validate(taxonomy)


@router.get('', response_model=TaxonomyListResponse)
async def list_taxonomies(
    store: SqlTermStore = Depends(get_term_store)
):
    """List all registered taxonomies by name."""
    taxonomies = store.list_taxonomies()
    return TaxonomyListResponse(
        total=len(taxonomies),
        items=[TaxonomyResponse.model_validate(t) for t in taxonomies]
    )


@router.get('/{taxonomy}/terms', response_model=TermListResponse)
async def list_terms(
    taxonomy: str,
    store: SqlTermStore = Depends(get_term_store)
):
    """
    Get the taxonomy structure: every term with its ID and parent ID.

    **Example:**
    ```bash
    curl http://localhost:8000/api/taxonomies/location/terms
    ```
    """
    try:
        terms = store.list_terms(taxonomy)
    except InvalidTaxonomyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return TermListResponse(
        taxonomy=taxonomy,
        total=len(terms),
        items=[TermResponse.from_term(term) for term in terms]
    )
