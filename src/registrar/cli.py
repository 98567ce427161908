"""Administrative command line for the Registrar rule engine.

Manages the status transition rule set and inspects audit history on the
database named by ``--db`` or REGISTRAR_DB_PATH.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click

from registrar.app import Registrar
from registrar.config import ConfigError, Settings
from registrar.exceptions import RegistrarError
from registrar.logging import get_logger, setup_logging

logger = get_logger("cli")


def _open(ctx: click.Context, rules_file: Path | None = None) -> Registrar:
    """Open the configured database, exiting 1 on a configuration error."""
    settings: Settings = ctx.obj["settings"]
    if rules_file is not None:
        settings = replace(settings, rules_file=rules_file)
    try:
        return Registrar(settings)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="registrar")
@click.option(
    "--db",
    "db_path",
    default=None,
    help="SQLite database file (default: REGISTRAR_DB_PATH or registrar.db)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def main(ctx: click.Context, db_path: str | None, verbose: bool) -> None:
    """Registrar - student status and class registration rules."""
    setup_logging(level="DEBUG" if verbose else None, console=verbose)
    try:
        settings = Settings.from_env()
        if db_path is not None:
            settings = replace(settings, db_path=db_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    logger.debug("Running %s on %s", ctx.invoked_subcommand, settings.db_path)
    ctx.obj = {"settings": settings}


@main.command("load-rules")
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def load_rules(ctx: click.Context, rules_file: Path) -> None:
    """Replace the transition rule set with the one in RULES_FILE."""
    registrar = _open(ctx, rules_file=rules_file)
    try:
        count = len(registrar.rules.list_rules())
        click.echo(f"Loaded {count} transition rules from {rules_file}")
    finally:
        registrar.close()


@main.command()
@click.pass_context
def statuses(ctx: click.Context) -> None:
    """List student statuses; terminal statuses are marked."""
    registrar = _open(ctx)
    try:
        edges = registrar.rules.load_edges()
        for status in registrar.records.list_statuses():
            marker = "" if status.id in edges else "  (terminal)"
            click.echo(f"{status.name}{marker}")
    finally:
        registrar.close()


@main.command()
@click.pass_context
def rules(ctx: click.Context) -> None:
    """List the allowed status transitions."""
    registrar = _open(ctx)
    try:
        names = {s.id: s.name for s in registrar.records.list_statuses()}
        pairs = sorted(
            (names[r.from_status_id], names[r.to_status_id]) for r in registrar.rules.list_rules()
        )
        if not pairs:
            click.echo("No transition rules configured")
            return
        for from_name, to_name in pairs:
            click.echo(f"{from_name} -> {to_name}")
    finally:
        registrar.close()


@main.command("check-transition")
@click.argument("from_status")
@click.argument("to_status")
@click.pass_context
def check_transition(ctx: click.Context, from_status: str, to_status: str) -> None:
    """Check whether FROM_STATUS may change to TO_STATUS (by name).

    Exits with status 0 when allowed and 1 when not.
    """
    registrar = _open(ctx)
    try:
        from_id = registrar.records.get_status_by_name(from_status).id
        to_id = registrar.records.get_status_by_name(to_status).id
        allowed = registrar.can_transition(from_id, to_id)
    except RegistrarError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    finally:
        registrar.close()

    click.echo(f"{from_status} -> {to_status}: {'allowed' if allowed else 'not allowed'}")
    if not allowed:
        sys.exit(1)


@main.command()
@click.argument("registration_id")
@click.pass_context
def history(ctx: click.Context, registration_id: str) -> None:
    """Show the audit history of a class registration."""
    registrar = _open(ctx)
    try:
        entries = registrar.history.history_for(registration_id)
    except RegistrarError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        registrar.close()

    for entry in entries:
        previous = entry.previous_status or "-"
        line = f"{entry.changed_at:%Y-%m-%d %H:%M:%S}  {previous} -> {entry.new_status}"
        if entry.reason:
            line += f"  ({entry.reason})"
        click.echo(line)


if __name__ == "__main__":
    main()
