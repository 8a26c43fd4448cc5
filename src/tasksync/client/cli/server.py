"""Reference server commands for tasksync CLI.

Commands:
- server run: Serve the reference remote authority with uvicorn
"""

from __future__ import annotations

import click


@click.group()
def server() -> None:
    """Reference remote server commands.

    These commands run the bundled /health + /batch server for local
    development.
    """


@server.command("run")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", type=int, default=8000, show_default=True, help="Bind port.")
@click.option(
    "--db-path",
    type=click.Path(),
    default=None,
    help="Path to database file (default: TASKSYNC_SERVER_DB_PATH or ./tasksync-server.db).",
)
@click.option(
    "--log-path",
    type=click.Path(),
    default=None,
    help="Path to log file (default: TASKSYNC_SERVER_LOG_PATH or ./tasksync-server.log).",
)
def run_cmd(host: str, port: int, db_path: str | None, log_path: str | None) -> None:
    """Run the reference remote authority."""
    from pathlib import Path

    import uvicorn

    from tasksync.server.app import DB_PATH, LOG_PATH, create_app, setup_logging
    from tasksync.server.database import Database

    setup_logging(Path(log_path) if log_path else LOG_PATH)
    database = Database(db_path or DB_PATH)
    click.echo(f"Serving on http://{host}:{port} (database: {database.path})")
    try:
        uvicorn.run(create_app(database), host=host, port=port)
    finally:
        database.close()
