"""
Import-related Pydantic schemas.

This module contains schemas for term import responses.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class TermOutcomeResponse(BaseModel):
    """What happened to a single non-empty cell."""

    row: int = Field(..., description="1-based data row number (header excluded)")
    column: int = Field(..., description="0-based column index")
    name: str = Field(..., description="Term name from the cell")
    parent: Optional[str] = Field(None, description="Name of the resolved parent cell")
    parent_id: int = Field(0, description="Parent term ID used, 0 for top level")
    status: str = Field(..., description="created, exists or failed")
    term_id: Optional[int] = Field(None, description="ID of the created term")
    parent_missing: bool = Field(False, description="Parent name could not be found in the taxonomy")
    error: Optional[str] = Field(None, description="Reason the term could not be created")


class ImportStats(BaseModel):
    rows: int = 0
    cells: int = 0
    created: int = 0
    existing: int = 0
    failed: int = 0
    parents_missing: int = 0


class TermImportResultResponse(BaseModel):
    """Detailed import results."""

    taxonomy: str = Field(..., description="Taxonomy the terms were imported into")
    terms_added: int = Field(..., description="Number of newly created terms")
    stats: ImportStats = Field(..., description="Import statistics")
    outcomes: List[TermOutcomeResponse] = Field(default_factory=list, description="Per-term results")
    errors: List[str] = Field(default_factory=list, description="List of errors encountered")

    class Config:
        json_schema_extra = {
            "example": {
                "taxonomy": "location",
                "terms_added": 2,
                "stats": {
                    "rows": 1,
                    "cells": 2,
                    "created": 2,
                    "existing": 0,
                    "failed": 0,
                    "parents_missing": 0
                },
                "outcomes": [
                    {"row": 1, "column": 0, "name": "Colorado", "parent": None,
                     "parent_id": 0, "status": "created", "term_id": 1,
                     "parent_missing": False, "error": None},
                    {"row": 1, "column": 1, "name": "Boulder", "parent": "Colorado",
                     "parent_id": 1, "status": "created", "term_id": 2,
                     "parent_missing": False, "error": None}
                ],
                "errors": []
            }
        }
