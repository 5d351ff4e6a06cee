"""CLI for reflex-user-table -- serve, inspect and view a users file.

Usage::

    # Serve GET /api/users from a JSON array of users
    reflex-user-table serve users.json --port 8000

    # Summarise validation problems, optionally exporting them
    reflex-user-table report users.json --output problems.csv

    # Open the scroll-loading table in the browser
    reflex-user-table view users.json
"""

import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Annotated, Optional

import typer
import uvicorn

from reflex_user_table.backend import UserStore, create_api
from reflex_user_table.config import get_settings
from reflex_user_table.report import error_counts, validation_report, write_report

app = typer.Typer(
    name="reflex-user-table",
    help="Serve and browse a paginated collection of user records.",
    no_args_is_help=True,
)


@app.callback()
def configure(
    log_level: Annotated[str, typer.Option("--log-level", "-l", help="Logging level (DEBUG, INFO, WARNING, ...)")] = "INFO",
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_store(users_file: Path) -> UserStore:
    """Load *users_file*, exiting with code 1 and a message on failure."""
    try:
        return UserStore.from_path(users_file)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def serve(
    users_file: Annotated[Optional[Path], typer.Argument(help="JSON array of user objects (default: USER_TABLE_USERS_FILE)")] = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Interface to bind")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port to listen on")] = None,
) -> None:
    """Serve the paginated ``GET /api/users`` endpoint."""
    settings = get_settings()
    store = _load_store(users_file or settings.users_file)
    api = create_api(store, cors_origins=settings.cors_origins)

    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"Serving {store.total} users at http://{bind_host}:{bind_port}/api/users")
    uvicorn.run(api, host=bind_host, port=bind_port)


@app.command()
def report(
    users_file: Annotated[Optional[Path], typer.Argument(help="JSON array of user objects (default: USER_TABLE_USERS_FILE)")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the full report to .csv or .parquet")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Rows of the report to print")] = 20,
) -> None:
    """Print validation problems found in a users file."""
    settings = get_settings()
    store = _load_store(users_file or settings.users_file)
    problems = validation_report(store.records)

    invalid = problems["index"].n_unique() if problems.height else 0
    typer.echo(f"{store.total} users, {invalid} with validation problems, {problems.height} problems total")
    if problems.height:
        typer.echo(str(error_counts(problems)))
        typer.echo(str(problems.head(limit)))

    if output is not None:
        try:
            written = write_report(problems, output)
        except ValueError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Report written to {written}")


def _build_app_code(users_file: Path, title: str) -> str:
    """Generate the Reflex app module source code for :func:`view`."""
    abs_path = str(users_file.resolve())
    # Escape backslashes and quotes for embedding in Python string literal
    safe_path = abs_path.replace("\\", "\\\\").replace('"', '\\"')

    template = _APP_TEMPLATE
    template = template.replace("__FILENAME__", users_file.name)
    template = template.replace("__SAFE_PATH__", safe_path)
    template = template.replace("__TITLE__", title.replace('"', '\\"'))
    return template


# ---------------------------------------------------------------------------
# App template -- uses __PLACEHOLDER__ tokens for dynamic parts.
# ---------------------------------------------------------------------------

_APP_TEMPLATE = '''"""Auto-generated user table app for: __FILENAME__"""

from pathlib import Path

import reflex as rx

from reflex_user_table import (
    UserStore,
    UserTableMixin,
    create_api,
    user_table,
    user_table_stats_bar,
)


class UsersState(UserTableMixin, rx.State):
    """Viewer state using UserTableMixin for scroll-loading."""


def index() -> rx.Component:
    return rx.box(
        rx.heading("__TITLE__", size="6", margin_bottom="0.5em"),
        user_table_stats_bar(UsersState),
        user_table(UsersState),
        padding="2em",
        max_width="1200px",
        margin="0 auto",
    )


app = rx.App(api_transformer=create_api(UserStore.from_path(Path("__SAFE_PATH__"))))
app.add_page(index)
'''


@app.command()
def view(
    users_file: Annotated[Path, typer.Argument(help="JSON array of user objects")],
    frontend_port: Annotated[int, typer.Option("--frontend-port", help="Port for the Reflex frontend")] = 3000,
    backend_port: Annotated[int, typer.Option("--backend-port", help="Port for the Reflex backend and /api/users")] = 8000,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Page title")] = None,
) -> None:
    """Browse a users file in the virtualised, scroll-loading table."""
    users_file = users_file.resolve()
    _load_store(users_file)

    if title is None:
        title = f"{users_file.name} -- User Table"

    app_code = _build_app_code(users_file, title)

    # Create a temporary Reflex app directory.
    tmp_dir = Path(tempfile.mkdtemp(prefix="user_table_viewer_"))
    app_name = "viewer_app"
    app_pkg = tmp_dir / app_name
    app_pkg.mkdir()
    (app_pkg / "__init__.py").write_text("")
    (app_pkg / f"{app_name}.py").write_text(app_code)

    rxconfig_code = f"""import reflex as rx
config = rx.Config(app_name="{app_name}", frontend_port={frontend_port}, backend_port={backend_port})
"""
    (tmp_dir / "rxconfig.py").write_text(rxconfig_code)

    # The table's client calls the API mounted on the Reflex backend.
    os.environ["USER_TABLE_BACKEND_URL"] = f"http://localhost:{backend_port}"

    typer.echo(f"Launching user table for: {users_file}")
    os.chdir(tmp_dir)

    # reflex's CLI calls sys.exit() on completion, so init runs in a subprocess.
    typer.echo("Initializing Reflex project...")
    subprocess.run(
        [sys.executable, "-m", "reflex", "init"],
        cwd=str(tmp_dir),
        check=True,
    )

    typer.echo("Starting viewer...")
    os.execvp(sys.executable, [sys.executable, "-m", "reflex", "run"])


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
