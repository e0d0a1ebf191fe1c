"""Output helpers shared by the psql-versioning commands."""

import json
from collections.abc import Mapping
from typing import Any

import click

from ..utils.logging import ConnectivityError, PsqlVersioningError


def render_fields(data: Mapping[str, Any], indent: int = 0) -> list[str]:
    """Render a mapping as aligned ``key:  value`` lines.

    Nested mappings are rendered below their key, indented by two spaces.
    """
    width = max((len(key) for key in data), default=0)
    pad = " " * indent
    lines = []
    for key, value in data.items():
        if isinstance(value, Mapping):
            lines.append(f"{pad}{key}:")
            lines.extend(render_fields(value, indent + 2))
        else:
            shown = "-" if value is None else value
            lines.append(f"{pad}{key}:{' ' * (width - len(key))} {shown}")
    return lines


def emit(ctx: click.Context, data: Mapping[str, Any]) -> None:
    """Print a command result as JSON (``--json``) or as aligned fields."""
    if ctx.obj.get("json"):
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo("\n".join(render_fields(data)))


def status(ctx: click.Context, message: str, verbose_only: bool = False) -> None:
    """Print a progress line on stderr, honouring --quiet and --verbose."""
    if ctx.obj.get("quiet") or (verbose_only and not ctx.obj.get("verbose")):
        return
    click.echo(click.style(message, fg="blue" if verbose_only else None), err=True)


def fail(ctx: click.Context, error: PsqlVersioningError) -> None:
    """Report a failed command on stderr and exit with status 1.

    With --verbose the driver error behind a ConnectivityError is shown too.
    """
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    if ctx.obj.get("verbose") and isinstance(error, ConnectivityError):
        click.echo(f"  caused by {type(error.original).__name__}", err=True)
    ctx.exit(1)
