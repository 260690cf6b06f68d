"""
CLI interface for the directory database.

Usage:
    burrow add /path/to/dir
    burrow query foo bar
    burrow query --list --score
    burrow remove /path/to/dir
"""

import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from .config import StoreConfig, get_data_dir, load_or_create_config
from .errors import BurrowError, log_exception
from .logging_config import configure_quiet_mode, enable_debug_mode
from .store import Database

logger = logging.getLogger(__name__)


# Configure quiet mode by default
# Set BURROW_VERBOSE=1 to enable debug mode via environment
if os.environ.get("BURROW_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        typer.echo(f"burrow {version('burrow')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_data_dir_override: Optional[Path] = None


def _data_dir_callback(value: Optional[Path]):
    global _data_dir_override
    _data_dir_override = value


def _get_data_dir() -> Path:
    return _data_dir_override if _data_dir_override is not None else get_data_dir()


app = typer.Typer(
    name="burrow",
    help="Jump to frequently used directories.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    data_dir: Annotated[Optional[Path], typer.Option(
        "--data-dir", "-d",
        envvar="BURROW_DATA_DIR",
        help="Directory holding the database (default: ~/.local/share/burrow/)",
        callback=_data_dir_callback,
        is_eager=True,
    )] = None,
):
    """Jump to frequently used directories."""


def _fail(message: str, exc: Optional[Exception] = None, context: str = "") -> typer.Exit:
    """Report an error on stderr and return the Exit to raise."""
    typer.echo(f"Error: {message}", err=True)
    if exc is not None:
        log_path = log_exception(exc, context, data_dir=_get_data_dir())
        logger.debug("Traceback written to %s", log_path)
    return typer.Exit(1)


def _get_config() -> StoreConfig:
    """Load config, handling errors gracefully."""
    try:
        return load_or_create_config(_get_data_dir())
    except (OSError, ValueError) as e:
        raise _fail(str(e), e, "config")


@contextmanager
def _open_database(context: str) -> Iterator[Database]:
    """Open the database for one command, saving it when the command ends."""
    try:
        db = Database.open(_get_data_dir())
    except BurrowError as e:
        raise _fail(str(e), e, context)
    with db:
        yield db


def _now() -> int:
    return int(time.time())


def _format_entry(entry, now: int, with_score: bool) -> str:
    return entry.display_score(now) if with_score else entry.display()


@app.command()
def add(
    path: Annotated[Path, typer.Argument(help="Directory that was visited")],
):
    """Record a visit to a directory."""
    config = _get_config()
    resolved = path.expanduser()
    resolved = resolved.resolve() if config.resolve_symlinks else Path(os.path.abspath(resolved))

    if not resolved.is_dir():
        raise _fail(f"not a directory: {resolved}")

    path_str = str(resolved)
    if config.is_excluded(path_str):
        logger.debug("Skipping excluded directory %s", path_str)
        return

    with _open_database("add") as db:
        db.add(path_str, _now())
        db.age(config.max_age)
        try:
            db.save()
        except BurrowError as e:
            raise _fail(str(e), e, "add")


@app.command()
def query(
    keywords: Annotated[Optional[list[str]], typer.Argument(
        help="Keywords to match, in path order")] = None,
    list_all: Annotated[bool, typer.Option(
        "--list", "-l",
        help="List all matches instead of the best one",
    )] = False,
    score: Annotated[bool, typer.Option(
        "--score", "-s",
        help="Print the score next to each directory",
    )] = False,
):
    """Find the highest-ranked directory matching KEYWORDS."""
    now = _now()
    with _open_database("query") as db:
        results = db.matches(now, keywords or [])
        if list_all:
            for entry in results:
                typer.echo(_format_entry(entry, now, score))
            return

        best = next(results, None)
        if best is None:
            raise _fail("no match found")
        typer.echo(_format_entry(best, now, score))


@app.command()
def remove(
    path: Annotated[str, typer.Argument(help="Directory to forget")],
):
    """Remove a directory from the database."""
    with _open_database("remove") as db:
        # Accept a relative spelling of a tracked absolute path
        removed = db.remove(path) or db.remove(os.path.abspath(os.path.expanduser(path)))
        if not removed:
            raise _fail(f"path not found in database: {path}")
        try:
            db.save()
        except BurrowError as e:
            raise _fail(str(e), e, "remove")


def main():
    app()


if __name__ == "__main__":
    main()
