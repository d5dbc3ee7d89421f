"""
Tests for reading CSV and Excel rows.
"""

import openpyxl
import pytest

from services.exceptions import MissingInputError, UnreadableInputError
from services.tabular_service import load_rows, normalize_cell, read_rows


class TestCsvRows:

    def test_header_is_skipped(self, write_csv):
        path = write_csv([['term_1', 'term_2'], ['A', 'B'], ['C']])
        assert list(read_rows(path)) == [['A', 'B'], ['C']]

    def test_header_only(self, write_csv):
        path = write_csv([['term_1']])
        assert list(read_rows(path)) == []

    def test_cells_are_stripped(self, write_csv):
        path = write_csv([['h1', 'h2', 'h3'], [' A ', '', '  C']])
        assert list(read_rows(path)) == [['A', '', 'C']]

    def test_byte_order_mark(self, tmp_path):
        path = tmp_path / 'bom.csv'
        path.write_bytes('\ufeffterm_1,term_2\nZ\u00fcrich,Altstadt\n'.encode('utf-8'))
        assert list(read_rows(str(path))) == [['Z\u00fcrich', 'Altstadt']]


class TestExcelRows:

    def test_first_sheet_is_read(self, tmp_path):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(['term_1', 'term_2', 'term_3'])
        ws.append(['Colorado', None, 'Denver'])
        ws.append([2024, 'Q1', 'Boulder'])
        path = tmp_path / 'terms.xlsx'
        wb.save(path)

        assert list(read_rows(str(path))) == [
            ['Colorado', '', 'Denver'],
            ['2024', 'Q1', 'Boulder'],
        ]


class TestMissingInput:

    def test_no_path(self):
        with pytest.raises(MissingInputError):
            read_rows(None)

    def test_path_does_not_exist(self, tmp_path):
        missing = tmp_path / 'missing.csv'
        with pytest.raises(MissingInputError) as exc_info:
            read_rows(str(missing))
        assert str(missing) in str(exc_info.value)

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(MissingInputError):
            read_rows(str(tmp_path))


class TestUnreadableInput:

    def test_latin1_csv(self, tmp_path):
        path = tmp_path / 'latin1.csv'
        path.write_bytes('term_1\nZ\u00fcrich\n'.encode('latin-1'))

        with pytest.raises(UnreadableInputError) as exc_info:
            load_rows(str(path))
        assert 'UTF-8' in str(exc_info.value)

    def test_xlsx_that_is_not_a_workbook(self, tmp_path):
        path = tmp_path / 'terms.xlsx'
        path.write_bytes(b'term_1,term_2\nA,B\n')

        with pytest.raises(UnreadableInputError) as exc_info:
            load_rows(str(path))
        assert 'not a valid Excel workbook' in str(exc_info.value)

    def test_readable_file_loads_all_rows(self, write_csv):
        path = write_csv([['h'], ['A'], ['B']])
        assert load_rows(path) == [['A'], ['B']]

    def test_missing_file_is_still_missing_input(self, tmp_path):
        with pytest.raises(MissingInputError):
            load_rows(str(tmp_path / 'nope.csv'))


@pytest.mark.parametrize('raw, expected', [
    (None, ''),
    ('  x ', 'x'),
    (3.0, '3'),
    (2.5, '2.5'),
    (7, '7'),
])
def test_normalize_cell(raw, expected):
    assert normalize_cell(raw) == expected
