"""
FastAPI application for the taxonomy term import tools.

This package contains the REST API for registering taxonomies and
importing terms from uploaded spreadsheets.
"""

__version__ = "1.0.0"
