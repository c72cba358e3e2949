#!/usr/bin/env python3
"""
Main CLI Entry Point for subscan

Provides the command-line interface for discovering and reconciling
subscriptions from a connected mailbox.
"""

import asyncio

import click

from ..core.config import get_config
from ..core.errors import RecordStoreError


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    subscan - Subscription Discovery from your Inbox

    Scans a connected mailbox for billing messages, extracts subscription
    details, and reconciles them against your tracked subscriptions.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)

    # Set environment if specified
    if config_env:
        import os

        os.environ["SUBSCAN_ENV"] = config_env

    # Configure debug logging if requested
    if debug:
        import logging
        import os

        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("subscan").setLevel(logging.DEBUG)

    # Store global options
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from subscan import __author__, __version__

    click.echo(f"subscan v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (secrets redacted)."""
    config_obj = ctx.obj["config"]
    settings = config_obj.to_dict()

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {settings['environment']}")
    click.echo(f"  Data Directory: {settings['data_dir']}")
    click.echo(f"  User: {settings['user_id']}")
    click.echo(f"  Model: {settings['model']['model']} (API key: {settings['model']['api_key'] or 'not set'})")
    click.echo(f"  Mailbox Token: {settings['gmail']['access_token'] or 'not set'}")
    click.echo(f"  Lookback Days: {settings['scan']['lookback_days']}")
    click.echo(f"  Message Cap: {settings['scan']['max_messages']}")
    click.echo(f"  Debug Mode: {settings['debug']}")
    click.echo(f"  Log Level: {settings['log_level']}")


@main.command()
@click.pass_context
def records(ctx: click.Context) -> None:
    """List tracked subscription records."""
    from ..store import JsonSubscriptionStore

    config_obj = ctx.obj["config"]
    store = JsonSubscriptionStore(config_obj.store.data_dir)

    try:
        stored = asyncio.run(store.list_records(config_obj.user_id))
    except RecordStoreError as e:
        raise click.ClickException(str(e)) from e
    if not stored:
        click.echo("No subscription records found")
        return

    click.echo(store.summary_text())
    for record in sorted(stored, key=lambda r: r.name.lower()):
        renewal = record.renewal_date.to_iso_string() if record.renewal_date else "-"
        line = f"  {record.name:<30} {str(record.cost):>10} {record.frequency:<8} renews {renewal}"
        if record.previous_cost is not None:
            line += f" (was {record.previous_cost})"
        click.echo(line)


# Import scan commands
from .scan import review, scan  # noqa: E402

main.add_command(scan)
main.add_command(review)


if __name__ == "__main__":
    main()
