"""Schema version stored in the PostgreSQL database comment."""

import re

from sqlalchemy import text
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from .registry import StrategyRegistry, VersionStrategy
from .utils.logging import (
    ConnectivityError,
    LogContext,
    VersionParseError,
    get_logger,
)

STRATEGY_NAME = "psql-versioning"

VERSION_QUERY = (
    "SELECT description FROM pg_shdescription "
    "JOIN pg_database ON objoid = pg_database.oid "
    "WHERE datname = current_database()"
)
CURRENT_DATABASE_QUERY = "SELECT current_database()"

# Base-10 integer with optional sign, nothing else
_VERSION_TEXT = re.compile(r"[+-]?[0-9]+")

_identifier_preparer = postgresql.dialect().identifier_preparer

logger = get_logger(__name__, LogContext.STRATEGY)


def parse_version(description: str | None) -> int:
    """Parse the text of a database comment into a version number.

    Raises:
        VersionParseError: If the text is not a decimal integer.
    """
    if description is None or not _VERSION_TEXT.fullmatch(description):
        raise VersionParseError(
            f"Database comment {description!r} is not a valid version number",
            text=description,
        )
    return int(description)


def build_comment_command(database_name: str, version: int) -> str:
    """Build the COMMENT ON DATABASE statement recording ``version``.

    The name is quoted only when PostgreSQL requires it, so ``mock_db``
    is emitted bare and ``My-DB`` becomes ``"My-DB"``.
    """
    identifier = _identifier_preparer.quote(database_name)
    return "COMMENT ON DATABASE %s IS '%d'" % (identifier, version)


class PsqlVersioningStrategy(VersionStrategy):
    """Keeps the schema version in the comment of the connected database.

    No table is created. Transactions and connection lifecycle stay with
    the caller.
    """

    def version(self, connection: Connection) -> int:
        try:
            row = connection.execute(text(VERSION_QUERY)).first()
        except SQLAlchemyError as e:
            raise ConnectivityError(
                f"Failed to read database comment: {e}", original=e
            ) from e

        if row is None:
            logger.debug("No database comment found, assuming version 0")
            return 0

        version = parse_version(row[0])
        logger.debug(f"Read schema version {version}", version=version)
        return version

    def set_version(self, connection: Connection, version: int) -> None:
        try:
            database_name = connection.execute(
                text(CURRENT_DATABASE_QUERY)
            ).scalar_one()
        except SQLAlchemyError as e:
            raise ConnectivityError(
                f"Failed to look up current database: {e}", original=e
            ) from e

        command = build_comment_command(database_name, version)
        try:
            # Colons inside a quoted identifier are not bind parameters
            connection.execute(text(command.replace(":", r"\:")))
        except SQLAlchemyError as e:
            raise ConnectivityError(
                f"Failed to comment on database {database_name}: {e}",
                original=e,
                context={"database": database_name, "version": version},
            ) from e

        logger.debug(
            f"Recorded schema version {version} on {database_name}",
            version=version,
            database=database_name,
        )


def register(registry: StrategyRegistry) -> PsqlVersioningStrategy:
    """Register the strategy under ``psql-versioning``.

    Call once at application startup.

    Returns:
        The registered strategy instance.
    """
    strategy = PsqlVersioningStrategy()
    registry.register(STRATEGY_NAME, strategy)
    return strategy
