"""Sync commands for tasksync CLI.

Commands:
- sync: Reconcile the local queue with the remote
- status: Show sync status
"""

from __future__ import annotations

import json
import logging
import sys
import time

import click

from tasksync.client.api import HTTPClient
from tasksync.client.cli.config import build_sync_config
from tasksync.client.cli.tasks import open_store
from tasksync.client.status import get_sync_status
from tasksync.client.sync import ConnectivityProbe, SyncEngine, SyncOutcome, SyncResult

logger = logging.getLogger(__name__)


def _print_result(result: SyncResult) -> None:
    if result.outcome is SyncOutcome.SERVER_UNREACHABLE:
        click.echo("Server unreachable, nothing was synced.", err=True)
        return

    if result.errors:
        click.echo(click.style("Errors:", fg="red"))
        for error in result.errors:
            click.echo(f"  ✗ {error.task_id} ({error.operation.value}): {error.error}")

    if result.synced_items == 0 and result.failed_items == 0:
        click.echo("Everything is up to date.")
    else:
        click.echo(f"Synced {result.synced_items}, failed {result.failed_items}.")


@click.command()
@click.option("--watch", "-w", is_flag=True, help="Keep syncing periodically.")
@click.option(
    "--interval",
    "-i",
    type=click.IntRange(min=1),
    default=60,
    show_default=True,
    help="Seconds between runs in watch mode.",
)
@click.option("--json", "as_json", is_flag=True, help="Output the run summary as JSON.")
def sync(watch: bool, interval: int, as_json: bool) -> None:
    """Send queued changes to the server."""
    try:
        config = build_sync_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with HTTPClient(config) as client, open_store() as store:
        engine = SyncEngine(store, client, batch_size=config.batch_size)
        if not watch:
            if not as_json:
                click.echo(f"Syncing with {config.server_url}...")
            result = engine.sync()
            if as_json:
                click.echo(json.dumps(result.to_dict(), indent=2))
            else:
                _print_result(result)
            if not result.success:
                sys.exit(1)
            return

        click.echo(f"Syncing with {config.server_url} every {interval}s... (Ctrl+C to stop)")
        try:
            while True:
                _print_result(engine.sync())
                time.sleep(interval)
        except KeyboardInterrupt:
            click.echo("\nStopping...")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output JSON.")
def status(as_json: bool) -> None:
    """Show pending changes and server reachability."""
    try:
        config = build_sync_config()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with HTTPClient(config) as client, open_store() as store:
        report = get_sync_status(store, ConnectivityProbe(client, config.probe_timeout))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    last = report.last_sync_timestamp.isoformat() if report.last_sync_timestamp else "never"
    click.echo(f"Server:        {config.server_url} ({'online' if report.is_online else 'offline'})")
    click.echo(f"Pending tasks: {report.pending_sync_count}")
    click.echo(f"Queue size:    {report.sync_queue_size}")
    click.echo(f"Last sync:     {last}")
