"""
Tabular Service - Read spreadsheet rows for the importers.

CSV files are read with the csv module, Excel workbooks with openpyxl.
The first row is always a header and is discarded: columns are positional.
"""

import csv
import logging
import zipfile
from pathlib import Path
from typing import Iterator, List, Optional

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from services.exceptions import MissingInputError, UnreadableInputError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xlsm')


def check_input(file_path: Optional[str]) -> Path:
    """
    Make sure a data source was given and exists.

    Raises:
        MissingInputError: If no path was given or it is not a file
    """
    if not file_path:
        raise MissingInputError()
    path = Path(file_path)
    if not path.is_file():
        raise MissingInputError(str(file_path))
    return path


def normalize_cell(value) -> str:
    """Render a raw cell value as a stripped string ('' for blanks)."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_rows(file_path: Optional[str]) -> Iterator[List[str]]:
    """
    Open a CSV or Excel file and iterate over its data rows.

    The input is checked before this returns, so a missing file fails
    immediately rather than on first iteration.

    Returns:
        Iterator of rows, each a list of stripped cell strings
    """
    path = check_input(file_path)
    if path.suffix.lower() in EXCEL_EXTENSIONS:
        return _iter_excel_rows(path)
    return _iter_csv_rows(path)


def _iter_csv_rows(path: Path) -> Iterator[List[str]]:
    logger.info(f"Reading CSV: {path}")
    with open(path, newline='', encoding='utf-8-sig') as f:
        reader = csv.reader(f)
        header = next(reader, None)
        logger.debug(f"Skipping header row: {header}")
        for row in reader:
            yield [normalize_cell(cell) for cell in row]


def _iter_excel_rows(path: Path) -> Iterator[List[str]]:
    logger.info(f"Reading workbook: {path}")
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        for row_idx, row in enumerate(ws.iter_rows(values_only=True)):
            if row_idx == 0:
                logger.debug(f"Skipping header row: {row}")
                continue
            yield [normalize_cell(cell) for cell in row]
    finally:
        wb.close()


def load_rows(file_path: Optional[str]) -> List[List[str]]:
    """
    Read every data row of a CSV or Excel file into memory.

    Raises:
        MissingInputError: If no path was given or it is not a file
        UnreadableInputError: If the file cannot be decoded or parsed
    """
    path = check_input(file_path)
    try:
        return list(read_rows(file_path))
    except UnicodeDecodeError:
        raise UnreadableInputError(path, "the file is not UTF-8 encoded text")
    except csv.Error as e:
        raise UnreadableInputError(path, f"malformed CSV ({e})")
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        logger.error(f"Failed to open workbook {path}: {e}")
        raise UnreadableInputError(path, "the file is not a valid Excel workbook")
