"""
Import router - Handle spreadsheet uploads for term imports.

Imports run synchronously inside the request: rows are processed one at a
time and the full result is returned once the file has been read. The
endpoint is a plain function so FastAPI runs the blocking import in its
threadpool.
"""

import os
import logging
import tempfile
import shutil
from pathlib import Path

from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException, status

from api.config import settings, ensure_temp_dir
from api.dependencies import (
    get_api_key, get_term_store, verify_file_extension, verify_file_size
)
from api.schemas.import_schema import TermImportResultResponse
from services.exceptions import InvalidTaxonomyError, MissingInputError, UnreadableInputError
from services.term_import_service import TermImportService
from services.term_store import SqlTermStore

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/import', tags=['import'])


@router.post('/terms', response_model=TermImportResultResponse)
def import_terms(
    file: UploadFile = File(..., description="CSV or Excel file, first row is a header"),
    taxonomy: str = Form(..., min_length=1, description="Taxonomy to import the terms into"),
    store: SqlTermStore = Depends(get_term_store),
    api_key: str = Depends(get_api_key)
):
    """
    Upload a spreadsheet and import its terms.

    Each column is one level deeper in the hierarchy; a term's parent is the
    nearest non-empty cell to its left. Terms that already exist are skipped,
    so re-uploading the same file adds nothing.

    **Returns:**
    - 200 with per-term outcomes and totals
    - 400 if the file is missing, unreadable or has an unsupported extension
    - 404 if the taxonomy does not exist
    """
    logger.info(f"Term import request from {api_key}: {file.filename} into '{taxonomy}'")

    verify_file_extension(file.filename)

    service = TermImportService(store)
    try:
        service.check_taxonomy(taxonomy)
    except InvalidTaxonomyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    ensure_temp_dir()
    fd, temp_path = tempfile.mkstemp(
        suffix=Path(file.filename).suffix,
        dir=settings.TEMP_UPLOAD_DIR
    )
    try:
        with os.fdopen(fd, 'wb') as tmp:
            shutil.copyfileobj(file.file, tmp)

        verify_file_size(os.path.getsize(temp_path))

        result = service.import_file(taxonomy, temp_path)

    except MissingInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except UnreadableInputError as e:
        logger.warning(f"Unreadable upload {file.filename}: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not read {file.filename}: {e.reason}"
        )

    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)

    logger.info(f"Imported {result['terms_added']} terms into '{taxonomy}' from {file.filename}")
    return TermImportResultResponse(**result)
