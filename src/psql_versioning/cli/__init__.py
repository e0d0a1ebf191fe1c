"""Command-line interface for psql-versioning."""

from .main import main

__all__ = ["main"]
