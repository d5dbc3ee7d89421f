#!/usr/bin/env python3
"""
Taxonomy Term Migration CLI - Dual Mode

This script can operate in two modes:
1. Direct mode (default): Direct database access using services
2. API mode: Makes HTTP requests to the FastAPI backend

Usage:
    # Register a taxonomy
    python scripts/migration_cli.py create-taxonomy location --label "Locations"

    # Import terms (direct mode)
    python scripts/migration_cli.py import-terms location --file locations.csv

    # Import terms through the API
    python scripts/migration_cli.py import-terms location --file locations.csv --api-url http://localhost:8000

    # Show the taxonomy structure
    python scripts/migration_cli.py list-terms location

Spreadsheet layout:
    The first row is skipped; its values are not used. Put the highest terms
    of the hierarchy on the left and their children to the right, as many
    levels deep as needed. Each term's parent is the nearest non-empty cell
    to its left, and terms that already exist are skipped. A file with a
    single column imports flat, non-hierarchical terms.

    Parents are looked up by name, so rows must list a term before any row
    that uses it as a parent.
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from typing import Optional

import click
from dotenv import load_dotenv
import requests

# For direct mode
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from backend.models.schema import Base
from services.exceptions import (
    InvalidTaxonomyError, MissingInputError, TaxonomyExistsError, UnreadableInputError
)
from services.tabular_service import check_input, load_rows
from services.term_import_service import (
    TermImportService, STATUS_CREATED, STATUS_EXISTS, STATUS_FAILED
)
from services.term_store import SqlTermStore

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

# Per-term lines are printed by the commands, so the console only gets warnings and up
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.WARNING)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE),
        console_handler
    ]
)

logger = logging.getLogger('migration_cli')

# Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./terms.db')
REQUEST_TIMEOUT = 60


@click.group()
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
@click.pass_context
def cli(ctx, api_url):
    """Taxonomy Term Migration CLI - Dual Mode Support"""
    ctx.ensure_object(dict)
    ctx.obj['api_url'] = api_url


@cli.command('import-terms')
@click.argument('taxonomy')
@click.option('--file', '-f', 'file_path', help='Path to the CSV or Excel file to import terms from')
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
@click.pass_context
def import_terms_cmd(ctx, taxonomy: str, file_path: Optional[str], api_url: Optional[str]):
    """Import hierarchical terms into TAXONOMY from a spreadsheet."""
    api_url = api_url or ctx.obj.get('api_url')
    if api_url:
        import_via_api(api_url, taxonomy, file_path)
    else:
        import_direct(taxonomy, file_path)


@cli.command('create-taxonomy')
@click.argument('name')
@click.option('--label', help='Human readable name')
@click.option('--description', help='Free text description')
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
@click.pass_context
def create_taxonomy_cmd(ctx, name: str, label: Optional[str], description: Optional[str],
                        api_url: Optional[str]):
    """Register taxonomy NAME so terms can be imported into it."""
    api_url = api_url or ctx.obj.get('api_url')
    if api_url:
        create_taxonomy_via_api(api_url, name, label, description)
    else:
        create_taxonomy_direct(name, label, description)


@cli.command('list-terms')
@click.argument('taxonomy')
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
@click.pass_context
def list_terms_cmd(ctx, taxonomy: str, api_url: Optional[str]):
    """Show the term structure of TAXONOMY (term_id, name, parent)."""
    api_url = api_url or ctx.obj.get('api_url')
    if api_url:
        rows = fetch_terms_via_api(api_url, taxonomy)
    else:
        rows = fetch_terms_direct(taxonomy)
    print_term_table(rows)


# ============================================================================
# Output helpers
# ============================================================================

def fail(message: str):
    click.secho(f"Error: {message}", fg='red', err=True)
    sys.exit(1)


def print_import_result(result: dict):
    """Print one line per term, then the total."""
    for outcome in result.get('outcomes', []):
        if outcome.get('parent_missing'):
            click.secho(
                f"Warning: Parent term {outcome['parent']} was not found, "
                f"{outcome['name']} is imported at the top level",
                fg='yellow'
            )
        if outcome['status'] == STATUS_CREATED:
            click.secho(
                f"Success: Successfully added the term: {outcome['name']} to the "
                f"{result['taxonomy']} taxonomy with a parent of: {outcome.get('parent') or ''}",
                fg='green'
            )
        elif outcome['status'] == STATUS_EXISTS:
            click.secho(f"Term {outcome['name']} already exists in the {result['taxonomy']} "
                        f"taxonomy, skipping", dim=True)
        elif outcome['status'] == STATUS_FAILED:
            click.secho(f"Warning: Could not add term: {outcome['name']} error printed out below",
                        fg='yellow')
            click.secho(f"Warning: {outcome.get('error')}", fg='yellow')

    stats = result.get('stats', {})
    click.secho(
        f"Success: Successfully imported {result['terms_added']} terms. "
        f"See the taxonomy structure below",
        fg='green'
    )
    click.echo(f"  Rows: {stats.get('rows', 0)}  Existing: {stats.get('existing', 0)}  "
               f"Failed: {stats.get('failed', 0)}  Missing parents: {stats.get('parents_missing', 0)}")


def print_term_table(rows):
    """Print (term_id, name, parent) rows as an aligned table."""
    headers = ('term_id', 'name', 'parent')
    cells = [tuple(str(v) for v in row) for row in rows]
    widths = [max([len(h)] + [len(r[i]) for r in cells]) for i, h in enumerate(headers)]

    def line(values):
        return '  '.join(v.ljust(widths[i]) for i, v in enumerate(values)).rstrip()

    click.echo(line(headers))
    for row in cells:
        click.echo(line(row))


# ============================================================================
# Direct Mode Implementation (Uses Services Directly)
# ============================================================================

def open_store():
    """Create engine and session for direct mode, creating tables if needed."""
    engine = create_engine(DATABASE_URL)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    return SqlTermStore(Session())


def import_direct(taxonomy: str, file_path: Optional[str]):
    """Import terms using direct database access."""
    store = open_store()
    try:
        service = TermImportService(store)
        try:
            service.check_taxonomy(taxonomy)
            rows = load_rows(file_path)
        except (InvalidTaxonomyError, MissingInputError, UnreadableInputError) as e:
            logger.error(f"Import aborted: {e}")
            fail(str(e))

        click.secho("Success: Starting import process...", fg='green')
        result = service.import_rows(taxonomy, rows)
        print_import_result(result)
        print_term_table(
            (term.id, term.name, term.parent_id) for term in store.list_terms(taxonomy)
        )
    finally:
        store.session.close()


def create_taxonomy_direct(name: str, label: Optional[str], description: Optional[str]):
    store = open_store()
    try:
        try:
            taxonomy = store.create_taxonomy(name, label, description)
        except (TaxonomyExistsError, ValueError) as e:
            fail(str(e))
        click.secho(f"Success: Created taxonomy {taxonomy.name} (ID {taxonomy.id})", fg='green')
    finally:
        store.session.close()


def fetch_terms_direct(taxonomy: str):
    store = open_store()
    try:
        try:
            terms = store.list_terms(taxonomy)
        except InvalidTaxonomyError as e:
            fail(str(e))
        return [(term.id, term.name, term.parent_id) for term in terms]
    finally:
        store.session.close()


# ============================================================================
# API Mode Implementation (Uses FastAPI Backend)
# ============================================================================

def _error_detail(response) -> str:
    try:
        return response.json().get('detail') or response.text
    except ValueError:
        return response.text


def import_via_api(api_url: str, taxonomy: str, file_path: Optional[str]):
    """Import terms via FastAPI backend."""
    try:
        check_input(file_path)
    except MissingInputError as e:
        fail(str(e))

    click.echo(f"Uploading {file_path} to {api_url}...")

    try:
        with open(file_path, 'rb') as f:
            files = {'file': (Path(file_path).name, f, 'application/octet-stream')}
            response = requests.post(
                f"{api_url.rstrip('/')}/api/import/terms",
                files=files,
                data={'taxonomy': taxonomy},
                timeout=REQUEST_TIMEOUT
            )
    except requests.exceptions.RequestException as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        fail(f"Network error: {e}")

    if response.status_code != 200:
        fail(f"Import failed ({response.status_code}): {_error_detail(response)}")

    print_import_result(response.json())
    print_term_table(fetch_terms_via_api(api_url, taxonomy))


def create_taxonomy_via_api(api_url: str, name: str, label: Optional[str],
                            description: Optional[str]):
    try:
        response = requests.post(
            f"{api_url.rstrip('/')}/api/taxonomies",
            json={'name': name, 'label': label, 'description': description},
            timeout=REQUEST_TIMEOUT
        )
    except requests.exceptions.RequestException as e:
        fail(f"Network error: {e}")

    if response.status_code != 201:
        fail(f"Could not create taxonomy ({response.status_code}): {_error_detail(response)}")

    data = response.json()
    click.secho(f"Success: Created taxonomy {data['name']} (ID {data['id']})", fg='green')


def fetch_terms_via_api(api_url: str, taxonomy: str):
    try:
        response = requests.get(
            f"{api_url.rstrip('/')}/api/taxonomies/{taxonomy}/terms",
            timeout=REQUEST_TIMEOUT
        )
    except requests.exceptions.RequestException as e:
        fail(f"Network error: {e}")

    if response.status_code != 200:
        fail(f"Could not list terms ({response.status_code}): {_error_detail(response)}")

    return [(item['term_id'], item['name'], item['parent']) for item in response.json()['items']]


if __name__ == '__main__':
    cli()
