"""
Term Import Service - Framework-agnostic hierarchical term import.

Reads spreadsheet rows left to right, where each column is one level deeper
in the taxonomy, and creates any term that does not exist yet under the
nearest non-empty cell to its left.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from services.exceptions import InvalidTaxonomyError, TermCreationError
from services.tabular_service import check_input, load_rows
from services.term_store import TermStore

logger = logging.getLogger(__name__)

STATUS_CREATED = 'created'
STATUS_EXISTS = 'exists'
STATUS_FAILED = 'failed'


def resolve_parent_name(row: Sequence[str], index: int) -> Optional[str]:
    """
    Return the nearest non-empty cell to the left of ``index``.

    Returns None for the first column, or when every cell to the left is empty.
    """
    for cell in reversed(row[:index]):
        if cell:
            return cell
    return None


class TermImportService:
    """
    Import hierarchical taxonomy terms from tabular rows.

    Parent names are looked up by name alone, anywhere in the taxonomy. When
    the same name exists under several parents the oldest term is used, and
    when the parent has not been imported yet the term lands at the top level
    (reported as ``parent_missing``). Rows must therefore list ancestors
    before, or to the left of, their descendants.
    """

    def __init__(
        self,
        store: TermStore,
        progress_callback: Optional[Callable[[str, float, str], None]] = None
    ):
        """
        Initialize term import service.

        Args:
            store: Term store to read from and write to
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
        """
        self.store = store
        self.progress_callback = progress_callback or (lambda *args: None)
        self._reset()

    def _reset(self):
        self.stats = {
            'rows': 0,
            'cells': 0,
            'created': 0,
            'existing': 0,
            'failed': 0,
            'parents_missing': 0,
        }
        self.outcomes: List[Dict[str, Any]] = []
        self.errors: List[str] = []

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.debug(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def check_taxonomy(self, taxonomy: str):
        if not taxonomy or not self.store.taxonomy_exists(taxonomy):
            raise InvalidTaxonomyError(taxonomy)

    def import_file(self, taxonomy: str, file_path: Optional[str]) -> Dict[str, Any]:
        """
        Import terms for ``taxonomy`` from a CSV or Excel file.

        Both preconditions are checked before anything is read or written.

        Raises:
            InvalidTaxonomyError: If the taxonomy does not exist
            MissingInputError: If no file was given or it does not exist
            UnreadableInputError: If the file cannot be decoded or parsed
        """
        self.check_taxonomy(taxonomy)
        check_input(file_path)

        logger.info(f"Starting term import of {file_path} into '{taxonomy}'")
        self._emit_progress('reading', 0, f"Reading {file_path}")
        rows = load_rows(file_path)
        return self.import_rows(taxonomy, rows)

    def import_rows(self, taxonomy: str, rows: Iterable[Sequence[str]]) -> Dict[str, Any]:
        """
        Import terms from already parsed data rows (header excluded).

        Returns:
            Dictionary with import results:
            {
                'taxonomy': str,
                'terms_added': int,
                'stats': dict,
                'outcomes': list of per-term dicts,
                'errors': list
            }
        """
        self.check_taxonomy(taxonomy)
        self._reset()

        rows = list(rows)
        total = len(rows)
        self._emit_progress('importing', 0, f"Importing {total} rows into {taxonomy}")

        for row_num, row in enumerate(rows, 1):
            self.import_row(taxonomy, row, row_num)
            self.stats['rows'] += 1
            self._emit_progress('importing', 100 * row_num / total, f"Row {row_num}/{total}")

        logger.info(f"Successfully imported {self.stats['created']} terms into '{taxonomy}' "
                    f"({self.stats['existing']} existing, {self.stats['failed']} failed)")
        self._emit_progress('complete', 100, 'Import complete')

        return {
            'taxonomy': taxonomy,
            'terms_added': self.stats['created'],
            'stats': dict(self.stats),
            'outcomes': list(self.outcomes),
            'errors': list(self.errors),
        }

    def import_row(self, taxonomy: str, row: Sequence[str], row_num: int = 0):
        """Create the terms of a single row, left to right."""
        row = [(cell or '').strip() for cell in row]

        for index, name in enumerate(row):
            if not name:
                continue
            self.stats['cells'] += 1

            parent_name = resolve_parent_name(row, index)
            parent_id = 0
            parent_missing = False

            if parent_name:
                parent = self.store.find_term(parent_name, taxonomy)
                if parent is not None:
                    parent_id = parent.id
                else:
                    parent_missing = True
                    self.stats['parents_missing'] += 1
                    logger.warning(f"Parent term '{parent_name}' for '{name}' not found in "
                                   f"{taxonomy} (row {row_num}); creating it as a top level term")

            outcome = {
                'row': row_num,
                'column': index,
                'name': name,
                'parent': parent_name,
                'parent_id': parent_id,
                'status': None,
                'term_id': None,
                'parent_missing': parent_missing,
                'error': None,
            }

            if self.store.term_exists(name, taxonomy, parent_id):
                outcome['status'] = STATUS_EXISTS
                self.stats['existing'] += 1
                logger.debug(f"Term '{name}' already exists in {taxonomy} under {parent_id}, skipping")
            else:
                try:
                    term = self.store.create_term(name, taxonomy, parent_id)
                except TermCreationError as e:
                    outcome['status'] = STATUS_FAILED
                    outcome['error'] = str(e)
                    self.stats['failed'] += 1
                    self.errors.append(f"Could not add term: {name} ({e})")
                    logger.warning(f"Could not add term: {name} error printed out below")
                    logger.warning(str(e))
                else:
                    outcome['status'] = STATUS_CREATED
                    outcome['term_id'] = term.id
                    self.stats['created'] += 1
                    logger.info(f"Successfully added the term: {name} to the {taxonomy} "
                                f"taxonomy with a parent of: {parent_name or ''}")

            self.outcomes.append(outcome)
