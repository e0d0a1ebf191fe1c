"""Database engine and connection management for the operator tooling."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from ..config import VersioningConfig
from ..utils.logging import (
    ConfigurationError,
    ConnectivityError,
    LogContext,
    get_logger,
)

logger = get_logger(__name__, LogContext.DATABASE)


class DatabaseManager:
    """Manages the engine used to reach the versioned database."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_pre_ping: bool = True,
        pool_timeout: int = 30,
    ) -> None:
        """Initialize database manager.

        Args:
            database_url: SQLAlchemy URL of the target database.
            echo: Whether to echo SQL statements.
            pool_pre_ping: Whether to validate pooled connections before use.
            pool_timeout: Timeout for getting a connection from the pool.
        """
        if not database_url:
            raise ConfigurationError(
                "No database URL configured; pass --database-url or set "
                "PSQL_VERSIONING_DATABASE_URL"
            )
        self.database_url = database_url
        self.echo = echo
        self.pool_pre_ping = pool_pre_ping
        self.pool_timeout = pool_timeout

        self._engine: Engine | None = None

    @classmethod
    def from_config(cls, config: VersioningConfig) -> "DatabaseManager":
        """Create a manager from loaded configuration."""
        return cls(
            database_url=config.database_url or "",
            echo=config.echo_sql,
            pool_timeout=config.pool_timeout,
        )

    @property
    def engine(self) -> Engine:
        """Get the database engine, creating it if necessary."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        engine_kwargs: dict[str, Any] = {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
            "pool_timeout": self.pool_timeout,
        }
        try:
            return create_engine(self.database_url, **engine_kwargs)
        except (ArgumentError, ImportError) as e:
            raise ConfigurationError(
                f"Cannot create engine for configured database URL: {e}"
            ) from e

    @contextmanager
    def connect(self) -> Generator[Connection, None, None]:
        """Open a connection for read-only work.

        Yields:
            Connection that is closed (and rolled back) on exit.
        """
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as e:
            raise ConnectivityError(f"Failed to connect: {e}", original=e) from e

        logger.debug("Opened connection", url=self.engine.url.render_as_string())
        try:
            yield connection
        finally:
            connection.close()

    @contextmanager
    def begin(self) -> Generator[Connection, None, None]:
        """Open a connection inside a transaction.

        Yields:
            Connection whose transaction is committed on success and rolled
            back if the block raises.
        """
        with self.connect() as connection:
            try:
                with connection.begin():
                    yield connection
            except SQLAlchemyError as e:
                raise ConnectivityError(f"Failed to commit: {e}", original=e) from e

    def close(self) -> None:
        """Dispose of pooled connections."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
