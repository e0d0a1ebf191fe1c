"""
Pytest configuration and shared fixtures for psql-versioning tests.
"""

import os
import re
from collections.abc import Callable
from unittest.mock import Mock

import pytest
from sqlalchemy.engine import Connection

from psql_versioning.strategy import CURRENT_DATABASE_QUERY, VERSION_QUERY

DB_NAME = "mock_db"

_COMMENT_COMMAND = re.compile(r"COMMENT ON DATABASE (?P<name>.+) IS '(?P<comment>.*)'")


class FakeCatalogConnection:
    """In-memory stand-in for a PostgreSQL session.

    Understands the catalog queries and the COMMENT ON DATABASE command
    issued by the strategy; every executed statement is kept in ``statements``.
    """

    def __init__(self, database_name: str = DB_NAME, comment: str | None = None):
        self.database_name = database_name
        self.comment = comment
        self.statements: list[str] = []

    def execute(self, clause):
        sql = str(clause)
        self.statements.append(sql)
        result = Mock()

        if sql == VERSION_QUERY:
            result.first.return_value = (
                None if self.comment is None else (self.comment,)
            )
        elif sql == CURRENT_DATABASE_QUERY:
            result.scalar_one.return_value = self.database_name
        elif match := _COMMENT_COMMAND.fullmatch(sql):
            self.comment = match.group("comment")
        else:
            raise AssertionError(f"Unexpected statement: {sql}")

        return result


@pytest.fixture
def mock_connection() -> Mock:
    """Provide a mock SQLAlchemy connection."""
    return Mock(spec=Connection)


@pytest.fixture
def fake_connection() -> Callable[..., FakeCatalogConnection]:
    """Factory for in-memory catalog connections."""
    return FakeCatalogConnection


@pytest.fixture
def clean_env(monkeypatch):
    """Remove psql-versioning environment variables for the test."""
    for key in list(os.environ):
        if key.startswith("PSQL_VERSIONING_"):
            monkeypatch.delenv(key)
    return monkeypatch
