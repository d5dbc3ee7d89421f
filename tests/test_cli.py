"""
Tests for the migration CLI in direct and API mode.
"""

import logging

import pytest
from click.testing import CliRunner

from scripts import migration_cli
from scripts.migration_cli import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CLI runner using a throwaway SQLite database in direct mode."""
    monkeypatch.setattr(migration_cli, 'DATABASE_URL', f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.delenv('API_URL', raising=False)
    return CliRunner()


class TestDirectMode:

    def test_full_import(self, runner, write_csv):
        path = write_csv([
            ['term_1', 'term_2', 'term_3'],
            ['Colorado', 'Boulder County', 'Boulder'],
            ['Colorado', '', 'Denver'],
        ])

        result = runner.invoke(cli, ['create-taxonomy', 'location'])
        assert result.exit_code == 0, result.output
        assert 'Created taxonomy location' in result.output

        result = runner.invoke(cli, ['import-terms', 'location', '--file', path])
        assert result.exit_code == 0, result.output
        assert 'Starting import process...' in result.output
        assert ('Successfully added the term: Denver to the location taxonomy '
                'with a parent of: Colorado') in result.output
        assert 'Successfully imported 4 terms' in result.output
        assert 'term_id' in result.output

    def test_reimport_adds_nothing(self, runner, write_csv):
        path = write_csv([['h'], ['North'], ['South']])
        runner.invoke(cli, ['create-taxonomy', 'location'])
        runner.invoke(cli, ['import-terms', 'location', '-f', path])

        result = runner.invoke(cli, ['import-terms', 'location', '-f', path])
        assert result.exit_code == 0, result.output
        assert 'Successfully imported 0 terms' in result.output
        assert 'Successfully added the term' not in result.output
        assert 'Term North already exists in the location taxonomy, skipping' in result.output

    def test_list_terms(self, runner, write_csv):
        path = write_csv([['h1', 'h2'], ['A', 'B']])
        runner.invoke(cli, ['create-taxonomy', 'location'])
        runner.invoke(cli, ['import-terms', 'location', '-f', path])

        result = runner.invoke(cli, ['list-terms', 'location'])
        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines[0].split() == ['term_id', 'name', 'parent']
        assert lines[1].split() == ['1', 'A', '0']
        assert lines[2].split() == ['2', 'B', '1']

    def test_unknown_taxonomy(self, runner, write_csv):
        path = write_csv([['h'], ['A']])
        result = runner.invoke(cli, ['import-terms', 'location', '-f', path])

        assert result.exit_code == 1
        assert 'The taxonomy with the name location does not exist' in result.output

    def test_missing_file(self, runner, tmp_path):
        runner.invoke(cli, ['create-taxonomy', 'location'])
        result = runner.invoke(cli, ['import-terms', 'location', '-f', str(tmp_path / 'nope.csv')])

        assert result.exit_code == 1
        assert 'Missing file' in result.output
        assert 'Starting import process' not in result.output

    def test_no_file_option(self, runner):
        runner.invoke(cli, ['create-taxonomy', 'location'])
        result = runner.invoke(cli, ['import-terms', 'location'])

        assert result.exit_code == 1
        assert 'Please specify the filename' in result.output

    def test_unreadable_file(self, runner, tmp_path):
        path = tmp_path / 'latin1.csv'
        path.write_bytes('h\nZ\u00fcrich\n'.encode('latin-1'))
        runner.invoke(cli, ['create-taxonomy', 'location'])

        result = runner.invoke(cli, ['import-terms', 'location', '-f', str(path)])

        assert result.exit_code == 1
        assert 'Error: Could not read' in result.output
        assert 'not UTF-8 encoded' in result.output
        assert 'Starting import process' not in result.output

    def test_duplicate_taxonomy(self, runner):
        runner.invoke(cli, ['create-taxonomy', 'location'])
        result = runner.invoke(cli, ['create-taxonomy', 'location'])

        assert result.exit_code == 1
        assert 'already exists' in result.output


class FakeResponse:

    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


class TestApiMode:

    def test_import_via_api(self, runner, write_csv, monkeypatch):
        path = write_csv([['h1', 'h2'], ['A', 'B']])
        calls = []

        def fake_post(url, files=None, data=None, timeout=None, **kwargs):
            calls.append(('POST', url, data))
            return FakeResponse(200, {
                'taxonomy': 'location',
                'terms_added': 1,
                'stats': {'rows': 1, 'cells': 2, 'created': 1, 'existing': 1,
                          'failed': 0, 'parents_missing': 0},
                'outcomes': [
                    {'row': 1, 'column': 0, 'name': 'A', 'parent': None, 'parent_id': 0,
                     'status': 'exists', 'term_id': None, 'parent_missing': False, 'error': None},
                    {'row': 1, 'column': 1, 'name': 'B', 'parent': 'A', 'parent_id': 1,
                     'status': 'created', 'term_id': 2, 'parent_missing': False, 'error': None},
                ],
                'errors': [],
            })

        def fake_get(url, timeout=None, **kwargs):
            calls.append(('GET', url, None))
            return FakeResponse(200, {'taxonomy': 'location', 'total': 2, 'items': [
                {'term_id': 1, 'name': 'A', 'parent': 0},
                {'term_id': 2, 'name': 'B', 'parent': 1},
            ]})

        monkeypatch.setattr(migration_cli.requests, 'post', fake_post)
        monkeypatch.setattr(migration_cli.requests, 'get', fake_get)

        result = runner.invoke(cli, ['import-terms', 'location', '-f', path,
                                     '--api-url', 'http://backend:8000/'])

        assert result.exit_code == 0, result.output
        assert calls[0] == ('POST', 'http://backend:8000/api/import/terms', {'taxonomy': 'location'})
        assert calls[1][1] == 'http://backend:8000/api/taxonomies/location/terms'
        assert 'Successfully added the term: B' in result.output
        assert 'Successfully imported 1 terms' in result.output

    def test_api_error_is_fatal(self, runner, write_csv, monkeypatch):
        path = write_csv([['h'], ['A']])
        monkeypatch.setattr(
            migration_cli.requests, 'post',
            lambda *args, **kwargs: FakeResponse(404, {'detail': 'The taxonomy with the name x does not exist'})
        )

        result = runner.invoke(cli, ['import-terms', 'x', '-f', path, '--api-url', 'http://backend'])

        assert result.exit_code == 1
        assert 'Import failed (404)' in result.output

    def test_group_api_url_enables_api_mode(self, runner, write_csv, monkeypatch):
        path = write_csv([['h'], ['A']])
        calls = []

        def fake_post(url, **kwargs):
            calls.append(url)
            return FakeResponse(404, {'detail': 'The taxonomy with the name location does not exist'})

        monkeypatch.setattr(migration_cli.requests, 'post', fake_post)

        result = runner.invoke(cli, ['--api-url', 'http://backend:8000', 'import-terms', 'location', '-f', path])

        assert result.exit_code == 1
        assert calls == ['http://backend:8000/api/import/terms']
        assert 'Import failed (404)' in result.output

    def test_api_url_from_environment(self, runner, write_csv, monkeypatch):
        monkeypatch.setenv('API_URL', 'http://env-backend')
        monkeypatch.setattr(
            migration_cli.requests, 'get',
            lambda url, **kwargs: FakeResponse(200, {'taxonomy': 'location', 'total': 1, 'items': [
                {'term_id': 1, 'name': 'A', 'parent': 0},
            ]})
        )

        result = runner.invoke(cli, ['list-terms', 'location'])

        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[1].split() == ['1', 'A', '0']


def test_console_logging_shows_warnings():
    handler = migration_cli.console_handler
    assert isinstance(handler, logging.StreamHandler)
    assert not isinstance(handler, logging.FileHandler)
    assert handler.level == logging.WARNING
