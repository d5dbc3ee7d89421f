"""
Taxonomy and term Pydantic schemas.
"""

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from backend.models.schema import TAXONOMY_NAME_MAX_LENGTH


class TaxonomyCreateRequest(BaseModel):
    """Request schema for registering a taxonomy."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=TAXONOMY_NAME_MAX_LENGTH,
        description="Machine name of the taxonomy"
    )
    label: Optional[str] = Field(None, max_length=255, description="Human readable name")
    description: Optional[str] = Field(None, description="Free text description")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "location",
                "label": "Locations",
                "description": "Regions, counties and towns"
            }
        }


class TaxonomyResponse(BaseModel):
    """A registered taxonomy."""

    id: int = Field(..., description="Taxonomy ID")
    name: str = Field(..., description="Machine name")
    label: Optional[str] = Field(None, description="Human readable name")
    description: Optional[str] = Field(None, description="Free text description")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True


class TaxonomyListResponse(BaseModel):
    """All registered taxonomies."""

    total: int = Field(..., description="Number of taxonomies")
    items: List[TaxonomyResponse] = Field(default_factory=list)


class TermResponse(BaseModel):
    """A term as shown in the taxonomy structure listing."""

    term_id: int = Field(..., description="Term ID")
    name: str = Field(..., description="Term name")
    parent: int = Field(0, description="Parent term ID, 0 for top level terms")

    class Config:
        json_schema_extra = {
            "example": {"term_id": 12, "name": "Boulder", "parent": 3}
        }

    @classmethod
    def from_term(cls, term):
        return cls(term_id=term.id, name=term.name, parent=term.parent_id or 0)


class TermListResponse(BaseModel):
    """Terms of one taxonomy, in creation order."""

    taxonomy: str = Field(..., description="Taxonomy name")
    total: int = Field(..., description="Number of terms")
    items: List[TermResponse] = Field(default_factory=list)
