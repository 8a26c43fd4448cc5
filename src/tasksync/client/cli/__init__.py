"""Command-line interface for tasksync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- config: Show or change the remote address and batch size
- add, list, show, edit, complete, delete: Manage local tasks
- sync: Send queued changes to the server
- status: Show pending changes and server reachability
- server: Reference server commands
"""

from __future__ import annotations

import logging
import sys

import click

from tasksync.client.cli.config import (
    build_sync_config,
    get_config_dir,
    get_config_file,
    get_database_path,
    load_config,
    save_config,
)
from tasksync.client.cli.server import server
from tasksync.client.cli.sync import status, sync
from tasksync.client.cli.tasks import add, complete, delete, edit, list_tasks, show


def setup_logging(verbose: bool) -> None:
    """Send tasksync logs to stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    tasksync_logger = logging.getLogger("tasksync")
    tasksync_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not tasksync_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        tasksync_logger.addHandler(handler)


@click.group()
@click.version_option(package_name="tasksync")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """tasksync - offline-first tasks with queued sync."""
    setup_logging(verbose)


@click.command("config")
@click.option("--server", "server_url", default=None, help="Remote base URL.")
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Queue entries sent per batch.",
)
def config_cmd(server_url: str | None, batch_size: int | None) -> None:
    """Show or change sync configuration."""
    try:
        config = load_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if server_url is not None:
        config["server_url"] = server_url.rstrip("/")
    if batch_size is not None:
        config["batch_size"] = batch_size
    if server_url is not None or batch_size is not None:
        save_config(config)

    try:
        effective = build_sync_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Server:     {effective.server_url}")
    click.echo(f"Batch size: {effective.batch_size}")
    click.echo(f"Database:   {get_database_path()}")


cli.add_command(config_cmd)

# Task commands
cli.add_command(add)
cli.add_command(list_tasks)
cli.add_command(show)
cli.add_command(edit)
cli.add_command(complete)
cli.add_command(delete)

# Sync commands
cli.add_command(sync)
cli.add_command(status)

# Reference server commands
cli.add_command(server)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "build_sync_config",
    "get_config_dir",
    "get_config_file",
    "get_database_path",
    "load_config",
    "save_config",
]
