"""Main CLI entry point for psql-versioning."""

from pathlib import Path

import click

from .. import __version__
from ..config import VersioningConfig, load_config
from ..database import DatabaseManager
from ..registry import StrategyRegistry, VersionStrategy
from ..strategy import STRATEGY_NAME, register
from ..utils.logging import (
    LogContext,
    PsqlVersioningError,
    audit_log,
    get_logger,
    setup_logging,
)
from .utils import emit, fail, status

logger = get_logger(__name__, LogContext.CLI)


@click.group()
@click.version_option(version=__version__, prog_name="psql-versioning")
@click.option("--config", "-c", help="Configuration file path")
@click.option("--database-url", help="Override database_url setting")
@click.option("--log-level", help="Override log_level setting")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    database_url: str | None,
    log_level: str | None,
    verbose: bool,
    quiet: bool,
    json: bool,
) -> None:
    """Inspect and set the schema version stored in a PostgreSQL database comment.

    The version lives in the comment of the database itself
    (COMMENT ON DATABASE), so no version table is created.
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet options")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json"] = json
    ctx.obj["cli_overrides"] = {
        "database_url": database_url,
        "log_level": "DEBUG" if verbose and not log_level else log_level,
    }


def _load_config(ctx: click.Context) -> VersioningConfig:
    """Load configuration and set up logging for a command."""
    config = load_config(ctx.obj.get("config"), ctx.obj.get("cli_overrides"))
    setup_logging(
        log_level=config.log_level,
        log_file=Path(config.log_file).expanduser() if config.log_file else None,
        enable_structured=config.structured_logs,
    )
    return config


def _strategy() -> VersionStrategy:
    registry = StrategyRegistry()
    register(registry)
    return registry.get(STRATEGY_NAME)


@audit_log("set_version", LogContext.CLI)
def _record_version(
    manager: DatabaseManager, strategy: VersionStrategy, version: int
) -> None:
    with manager.begin() as connection:
        strategy.set_version(connection, version)


@main.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the schema version recorded on the database."""
    try:
        config = _load_config(ctx)
        status(
            ctx, f"Connecting to {config.masked_database_url()}", verbose_only=True
        )
        with DatabaseManager.from_config(config) as manager:
            with manager.connect() as connection:
                version = _strategy().version(connection)
    except PsqlVersioningError as e:
        logger.error("Failed to read schema version", exception=e)
        fail(ctx, e)
        return

    emit(ctx, {"database": config.masked_database_url(), "version": version})


@main.command(name="set")
@click.argument("version", type=click.IntRange(min=0))
@click.pass_context
def set_(ctx: click.Context, version: int) -> None:
    """Record VERSION as the schema version of the database."""
    try:
        config = _load_config(ctx)
        status(
            ctx, f"Connecting to {config.masked_database_url()}", verbose_only=True
        )
        with DatabaseManager.from_config(config) as manager:
            _record_version(manager, _strategy(), version)
    except PsqlVersioningError as e:
        logger.error("Failed to record schema version", exception=e)
        fail(ctx, e)
        return

    if ctx.obj.get("json"):
        emit(ctx, {"database": config.masked_database_url(), "version": version})
    elif not ctx.obj.get("quiet"):
        click.echo(f"Schema version set to {version}")


@main.command(name="config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    try:
        config = _load_config(ctx)
    except PsqlVersioningError as e:
        fail(ctx, e)
        return

    config_dict = config.model_dump(mode="json")
    config_dict["database_url"] = config.masked_database_url()
    emit(ctx, {"configuration": config_dict})


if __name__ == "__main__":
    main()
