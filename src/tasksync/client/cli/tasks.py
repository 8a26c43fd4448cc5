"""Task commands for tasksync CLI.

Commands:
- add: Create a task
- list: List active tasks
- show: Show one task
- edit: Update a task
- complete: Mark a task completed
- delete: Soft-delete a task
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import click

from tasksync.client.cli.config import get_database_path
from tasksync.client.database import LocalDatabase
from tasksync.client.models import Task
from tasksync.client.store import LocalTaskStore
from tasksync.core.errors import TaskNotFoundError, ValidationError


@contextmanager
def open_store() -> Iterator[LocalTaskStore]:
    """Open the local task store for the duration of a command."""
    db = LocalDatabase(get_database_path())
    try:
        yield LocalTaskStore(db)
    finally:
        db.close()


def format_task(task: Task) -> str:
    """One-line summary of a task."""
    mark = "x" if task.completed else " "
    return f"[{mark}] {task.id}  {task.title}  ({task.sync_status.value})"


@click.command()
@click.argument("title")
@click.option("--description", "-d", default=None, help="Task description.")
@click.option("--completed", is_flag=True, help="Create the task as completed.")
def add(title: str, description: str | None, completed: bool) -> None:
    """Create a task."""
    with open_store() as store:
        try:
            task = store.create(title, description=description, completed=completed)
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    click.echo(f"Created task {task.id}")


@click.command("list")
@click.option("--needing-sync", is_flag=True, help="Only tasks pending or in error.")
@click.option("--json", "as_json", is_flag=True, help="Output JSON.")
def list_tasks(needing_sync: bool, as_json: bool) -> None:
    """List active tasks."""
    with open_store() as store:
        tasks = store.list_needing_sync() if needing_sync else store.list_active()

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return
    if not tasks:
        click.echo("No tasks.")
        return
    for task in tasks:
        click.echo(format_task(task))


@click.command()
@click.argument("task_id")
def show(task_id: str) -> None:
    """Show one task."""
    with open_store() as store:
        task = store.get(task_id)
    if task is None:
        click.echo(f"Error: Task not found: {task_id}", err=True)
        sys.exit(1)
    click.echo(json.dumps(task.to_dict(), indent=2))


@click.command()
@click.argument("task_id")
@click.option("--title", "-t", default=None, help="New title.")
@click.option("--description", "-d", default=None, help="New description.")
@click.option(
    "--completed/--not-completed",
    default=None,
    help="Mark the task completed or not completed.",
)
def edit(
    task_id: str,
    title: str | None,
    description: str | None,
    completed: bool | None,
) -> None:
    """Update a task."""
    with open_store() as store:
        try:
            task = store.update(
                task_id, title=title, description=description, completed=completed
            )
        except (TaskNotFoundError, ValidationError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    click.echo(format_task(task))


@click.command()
@click.argument("task_id")
def delete(task_id: str) -> None:
    """Soft-delete a task (the deletion is synced on the next run)."""
    with open_store() as store:
        deleted = store.soft_delete(task_id)
    if not deleted:
        click.echo(f"Error: Task not found: {task_id}", err=True)
        sys.exit(1)
    click.echo(f"Deleted task {task_id}")


@click.command()
@click.argument("task_id")
def complete(task_id: str) -> None:
    """Mark a task completed."""
    with open_store() as store:
        try:
            task = store.update(task_id, completed=True)
        except TaskNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    click.echo(format_task(task))
